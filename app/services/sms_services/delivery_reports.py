import logging
from typing import Optional
from app.schemas.otp import utc_now
from app.schemas.sms_message import DeliveryRecord, DeliveryReport, DeliveryStatus, map_provider_status
from app.services.sms_services.delivery_store import DeliveryStore

logger = logging.getLogger(__name__)


async def process_delivery_report(store: DeliveryStore, report: DeliveryReport) -> Optional[DeliveryRecord]:
    """
    Apply a provider delivery report to the matching DeliveryRecord.

    Returns the (possibly unchanged) record, or None when no record matches.
    A repeated report carrying the same status leaves the record untouched.
    """
    record = await store.get(report.provider_message_id)
    if record is None:
        logger.info(f"No matching message found for ID: {report.provider_message_id}")
        return None

    status = map_provider_status(report.status)
    if record.status == status:
        logger.debug(f"Duplicate delivery report for {report.provider_message_id} ({status.value})")
        return record

    now = utc_now()
    record.status = status
    record.updated_at = now
    if status == DeliveryStatus.DELIVERED:
        record.delivered_at = now
    await store.save(record)

    logger.info(f"Updated message {report.provider_message_id} status to {status.value}")
    return record
