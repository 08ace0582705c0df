from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OtpRecord(BaseModel):
    identifier: str
    code: str
    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime
    attempts: int = 0
    verified: bool = False
    user_id: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class IssuedOtp(BaseModel):
    code: str
    expires_at: datetime
