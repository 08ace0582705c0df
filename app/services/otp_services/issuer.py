import logging
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from app.core.exceptions import ValidationError
from app.schemas.otp import IssuedOtp, OtpRecord
from app.services.otp_services.otp_store import OtpStore

logger = logging.getLogger(__name__)


def generate_otp(length: int = 6) -> str:
    """Draw `length` independent, uniformly random decimal digits."""
    if length < 1:
        raise ValueError("OTP length must be positive")
    return "".join(secrets.choice(string.digits) for _ in range(length))


class OtpIssuer:

    def __init__(
        self,
        store: OtpStore,
        length: int = 6,
        ttl: timedelta = timedelta(minutes=10),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.length = length
        self.ttl = ttl
        self.clock = clock

    async def issue(self, identifier: str, ttl: Optional[timedelta] = None,
                    user_id: Optional[str] = None) -> IssuedOtp:
        if not isinstance(identifier, str) or not identifier.strip():
            raise ValidationError("Identifier is required")

        now = self.clock()
        record = OtpRecord(
            identifier=identifier,
            code=generate_otp(self.length),
            created_at=now,
            expires_at=now + (ttl or self.ttl),
            user_id=user_id,
        )
        # Replaces any earlier record, which invalidates its code
        await self.store.put(record)
        logger.info(f"Issued OTP for {identifier}, expires at {record.expires_at.isoformat()}")

        return IssuedOtp(code=record.code, expires_at=record.expires_at)
