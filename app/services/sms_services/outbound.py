import logging
from fastapi.responses import JSONResponse
from app.core.dependencies import AppServices
from app.core.exceptions import ValidationError
from app.models.allModel import BulkSmsRequest, SendSmsRequest
from app.schemas.sms_message import DeliveryResult
from app.services.sms_services.send_sms import send_tracked_sms

logger = logging.getLogger(__name__)


async def send_sms(request_model: SendSmsRequest, services: AppServices):
    result = await send_tracked_sms(
        services.sms_gateway,
        services.delivery_store,
        request_model.phone_number,
        request_model.message,
        priority=request_model.priority,
    )

    return JSONResponse(
        status_code=200 if result.ok else 500,
        content={
            "status": result.status,
            "message": result.message,
            "messageId": result.provider_message_id
        }
    )


async def send_bulk_sms(request_model: BulkSmsRequest, services: AppServices):
    results = []
    for item in request_model.messages:
        try:
            result = await send_tracked_sms(
                services.sms_gateway,
                services.delivery_store,
                item.phone_number,
                item.message,
                priority=item.priority,
            )
        except ValidationError as e:
            logger.warning(f"Skipping invalid phone number: {item.phone_number}")
            result = DeliveryResult(status="error", message=e.message)
        results.append({
            "phoneNumber": item.phone_number,
            "status": result.status,
            "message": result.message,
            "messageId": result.provider_message_id
        })

    sent = sum(1 for r in results if r["status"] == "success")
    return JSONResponse(
        status_code=200,
        content={
            "success": sent == len(results),
            "message": f"{sent} of {len(results)} messages sent",
            "data": results
        }
    )
