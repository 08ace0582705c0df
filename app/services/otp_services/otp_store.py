import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional
from redis.asyncio import Redis
from app.schemas.otp import OtpRecord

logger = logging.getLogger(__name__)

OTP_KEY_PREFIX = "otp:"


class OtpStore(ABC):
    """Key-value storage for OTP records, keyed by identifier. Expiry is the verifier's job."""

    @abstractmethod
    async def get(self, identifier: str) -> Optional[OtpRecord]:
        ...

    @abstractmethod
    async def put(self, record: OtpRecord) -> None:
        ...

    @abstractmethod
    async def delete(self, identifier: str) -> None:
        ...


class InMemoryOtpStore(OtpStore):

    def __init__(self):
        self._records: Dict[str, OtpRecord] = {}

    async def get(self, identifier: str) -> Optional[OtpRecord]:
        record = self._records.get(identifier)
        # Hand out copies so callers mutate only through put()
        return record.model_copy() if record else None

    async def put(self, record: OtpRecord) -> None:
        self._records[record.identifier] = record.model_copy()

    async def delete(self, identifier: str) -> None:
        self._records.pop(identifier, None)


class RedisOtpStore(OtpStore):
    """
    Stores each record as JSON under `otp:<identifier>`.

    The key outlives `expires_at` by `retention_seconds` so that verified and
    expired records can still be reported as such before Redis evicts them.
    """

    def __init__(self, client: Redis, retention_seconds: int = 3600):
        self.client = client
        self.retention_seconds = retention_seconds

    @staticmethod
    def _key(identifier: str) -> str:
        return f"{OTP_KEY_PREFIX}{identifier}"

    async def get(self, identifier: str) -> Optional[OtpRecord]:
        raw = await self.client.get(self._key(identifier))
        if raw is None:
            return None
        return OtpRecord.model_validate_json(raw)

    async def put(self, record: OtpRecord) -> None:
        remaining = (record.expires_at - datetime.now(timezone.utc)).total_seconds()
        ttl = max(int(remaining), 0) + self.retention_seconds
        await self.client.set(self._key(record.identifier), record.model_dump_json(), ex=max(ttl, 1))
        logger.debug(f"Stored OTP record for {record.identifier} (ttl={ttl}s)")

    async def delete(self, identifier: str) -> None:
        await self.client.delete(self._key(identifier))
