from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, Field
from app.schemas.otp import utc_now


class DeliveryStatus(str, Enum):
    PENDING = "PENDING"       # submitted, no delivery report yet
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"


def map_provider_status(status: str) -> DeliveryStatus:
    """Map an EgoSMS report status ("Success", "Failed", ...) to a DeliveryStatus."""
    value = (status or "").strip().lower()
    if value == "success":
        return DeliveryStatus.DELIVERED
    if value in ("failed", "failure"):
        return DeliveryStatus.FAILED
    return DeliveryStatus.UNKNOWN


class DeliveryRecord(BaseModel):
    provider_message_id: str
    recipient: str
    body_snapshot: str
    status: DeliveryStatus = DeliveryStatus.PENDING
    reference: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    delivered_at: Optional[datetime] = None


class DeliveryReport(BaseModel):
    provider_message_id: str
    recipient_number: str
    status: str
    received_at: datetime = Field(default_factory=utc_now)


class DeliveryResult(BaseModel):
    status: Literal["success", "error"]
    message: str
    provider_message_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"
