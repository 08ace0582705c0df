from abc import ABC, abstractmethod
from typing import Dict, Optional
from redis.asyncio import Redis
from app.schemas.sms_message import DeliveryRecord

DELIVERY_KEY_PREFIX = "sms:delivery:"


class DeliveryStore(ABC):
    """Audit trail of submitted messages, keyed by the provider's message id. Never deletes."""

    @abstractmethod
    async def get(self, provider_message_id: str) -> Optional[DeliveryRecord]:
        ...

    @abstractmethod
    async def save(self, record: DeliveryRecord) -> None:
        ...


class InMemoryDeliveryStore(DeliveryStore):

    def __init__(self):
        self._records: Dict[str, DeliveryRecord] = {}

    async def get(self, provider_message_id: str) -> Optional[DeliveryRecord]:
        record = self._records.get(provider_message_id)
        return record.model_copy() if record else None

    async def save(self, record: DeliveryRecord) -> None:
        self._records[record.provider_message_id] = record.model_copy()

    def __len__(self):
        return len(self._records)


class RedisDeliveryStore(DeliveryStore):

    def __init__(self, client: Redis):
        self.client = client

    async def get(self, provider_message_id: str) -> Optional[DeliveryRecord]:
        raw = await self.client.get(f"{DELIVERY_KEY_PREFIX}{provider_message_id}")
        if raw is None:
            return None
        return DeliveryRecord.model_validate_json(raw)

    async def save(self, record: DeliveryRecord) -> None:
        await self.client.set(f"{DELIVERY_KEY_PREFIX}{record.provider_message_id}", record.model_dump_json())
