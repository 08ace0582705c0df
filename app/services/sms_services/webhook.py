import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from app.core.dependencies import AppServices
from app.models.allModel import SmsDeliveryReportRequest
from app.schemas.sms_message import DeliveryReport
from app.services.sms_services.delivery_reports import process_delivery_report

logger = logging.getLogger(__name__)


async def handle_sms_delivery_report(request: Request, services: AppServices):
    """
    Receives EgoSMS delivery reports such as
    {"MsgFollowUpUniqueCode": "ApiJsonSubmit64b8dd8aab0d05.55176607", "number": "+256777071434", "Status": "Success"}

    Every outcome is acknowledged with 200 so the provider never retries.
    """
    try:
        data = await request.json()
        logger.info(f"SMS Delivery Report: {data}")

        report_model = SmsDeliveryReportRequest.model_validate(data)
        if not report_model.MsgFollowUpUniqueCode or not report_model.number or not report_model.Status:
            logger.warning("Delivery report is missing required fields")
            return JSONResponse(
                status_code=200,
                content={"message": "Received, but missing required fields in delivery report"}
            )

        report = DeliveryReport(
            provider_message_id=report_model.MsgFollowUpUniqueCode,
            recipient_number=report_model.number,
            status=report_model.Status,
        )
        await process_delivery_report(services.delivery_store, report)

        return JSONResponse(status_code=200, content={"message": "ok, msg delivered"})

    except Exception:
        logger.exception("Error processing SMS delivery report")
        return JSONResponse(status_code=200, content={"message": "Received, but processing failed"})
