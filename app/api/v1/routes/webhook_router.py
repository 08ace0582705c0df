from fastapi import APIRouter, Depends, Request
from app.core.dependencies import AppServices, get_services
from app.services.sms_services.webhook import handle_sms_delivery_report

router = APIRouter()


@router.post("/sms-delivery")
async def sms_delivery_webhook(
    request: Request,
    services: AppServices = Depends(get_services)
):
    return await handle_sms_delivery_report(request, services)
