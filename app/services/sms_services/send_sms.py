import logging
from typing import Optional
from app.schemas.sms_message import DeliveryRecord, DeliveryResult
from app.services.sms_services.delivery_store import DeliveryStore
from app.services.sms_services.egosms_gateway import EgoSmsGateway
from app.utils.phone import format_phone_number

logger = logging.getLogger(__name__)


async def send_tracked_sms(
    gateway: EgoSmsGateway,
    delivery_store: DeliveryStore,
    phone_number: str,
    message: str,
    reference: Optional[str] = None,
    priority: Optional[str] = None,
) -> DeliveryResult:
    """Send an SMS and, when the provider returns a message id, record it for reconciliation."""
    result = await gateway.send(phone_number, message, priority)

    if result.ok and result.provider_message_id:
        record = DeliveryRecord(
            provider_message_id=result.provider_message_id,
            recipient=format_phone_number(phone_number, gateway.config.country_code),
            body_snapshot=message,
            reference=reference,
        )
        await delivery_store.save(record)
        logger.info(f"Tracking SMS {record.provider_message_id} to {record.recipient}")

    return result
