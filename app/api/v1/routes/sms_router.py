from fastapi import APIRouter, Depends
from app.core.dependencies import AppServices, get_services
from app.services.sms_services.outbound import send_sms, send_bulk_sms

# --- Pydantic Imports
from app.models.allModel import SendSmsRequest, BulkSmsRequest

router = APIRouter()


@router.post("/send")
async def send_sms_route(
    request_model: SendSmsRequest,
    services: AppServices = Depends(get_services)
):
    return await send_sms(request_model, services)


@router.post("/bulk")
async def send_bulk_sms_route(
    request_model: BulkSmsRequest,
    services: AppServices = Depends(get_services)
):
    return await send_bulk_sms(request_model, services)
