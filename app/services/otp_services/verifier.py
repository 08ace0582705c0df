import asyncio
import hmac
import logging
import weakref
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional
from pydantic import BaseModel
from app.core.config import Settings
from app.services.otp_services.otp_store import OtpStore
from app.utils.token_utils import create_reset_token

logger = logging.getLogger(__name__)


class VerificationFailure(str, Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    ALREADY_USED = "already_used"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    INCORRECT_CODE = "incorrect_code"


FAILURE_MESSAGES = {
    VerificationFailure.NOT_FOUND: "OTP not found or expired. Please request a new one.",
    VerificationFailure.EXPIRED: "OTP has expired",
    VerificationFailure.ALREADY_USED: "OTP has already been used",
    VerificationFailure.TOO_MANY_ATTEMPTS: "Too many attempts. Please request a new OTP.",
    VerificationFailure.INCORRECT_CODE: "Invalid OTP",
}


class VerificationResult(BaseModel):
    valid: bool
    reason: Optional[VerificationFailure] = None
    credential_token: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def message(self) -> str:
        if self.valid:
            return "OTP verified successfully"
        return FAILURE_MESSAGES[self.reason]


class OtpVerifier:
    """
    Checks submitted codes against the store.

    Check order is expiry, then verified flag, then attempt cap, then the code,
    so an expired record never consumes an attempt. Verification of a single
    identifier is serialised with a per-identifier lock.
    """

    def __init__(
        self,
        store: OtpStore,
        settings: Settings,
        max_attempts: int = 3,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.settings = settings
        self.max_attempts = max_attempts
        self.clock = clock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, identifier: str) -> asyncio.Lock:
        lock = self._locks.get(identifier)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[identifier] = lock
        return lock

    async def verify(self, identifier: str, submitted_code: str) -> VerificationResult:
        async with self._lock_for(identifier):
            return await self._verify(identifier, submitted_code)

    async def _verify(self, identifier: str, submitted_code: str) -> VerificationResult:
        record = await self.store.get(identifier)
        if record is None:
            return VerificationResult(valid=False, reason=VerificationFailure.NOT_FOUND)

        now = self.clock()
        if record.is_expired(now):
            logger.info(f"Expired OTP submitted for {identifier}")
            await self.store.delete(identifier)
            return VerificationResult(valid=False, reason=VerificationFailure.EXPIRED)

        if record.verified:
            return VerificationResult(valid=False, reason=VerificationFailure.ALREADY_USED)

        if record.attempts >= self.max_attempts:
            logger.warning(f"OTP attempt limit reached for {identifier}")
            return VerificationResult(valid=False, reason=VerificationFailure.TOO_MANY_ATTEMPTS)

        if hmac.compare_digest(record.code.encode(), str(submitted_code or "").encode()):
            record.verified = True
            await self.store.put(record)
            token = create_reset_token(identifier, self.settings, user_id=record.user_id, now=now)
            logger.info(f"OTP verified for {identifier}")
            return VerificationResult(valid=True, credential_token=token, user_id=record.user_id)

        record.attempts += 1
        await self.store.put(record)
        logger.info(f"Incorrect OTP for {identifier} (attempt {record.attempts}/{self.max_attempts})")
        return VerificationResult(valid=False, reason=VerificationFailure.INCORRECT_CODE)

    async def release(self, identifier: str) -> None:
        """Clear the verified flag so the same code can be submitted again."""
        async with self._lock_for(identifier):
            record = await self.store.get(identifier)
            if record is None or not record.verified:
                return
            record.verified = False
            await self.store.put(record)
            logger.info(f"OTP verification released for {identifier}")
