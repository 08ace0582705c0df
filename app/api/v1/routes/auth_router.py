from fastapi import APIRouter, Depends, Request
from app.core.dependencies import AppServices, get_services
from app.services.auth_services.password_reset import request_password_reset_otp, confirm_password_reset
from app.services.auth_services.otp_reset import forgot_password, verify_otp, reset_password
from app.services.auth_services.send_otp import send_otp

# --- Pydantics Model Import -----
from app.models.allModel import (
    PasswordResetRequest,
    PasswordResetVerifyRequest,
    ForgotPasswordRequest,
    VerifyOtpRequest,
    ResetPasswordRequest,
    SendOtpRequest
)

router = APIRouter()


@router.post("/password-reset")
async def password_reset_request_route(
    request_model: PasswordResetRequest,
    services: AppServices = Depends(get_services)
):
    return await request_password_reset_otp(request_model, services)


@router.put("/password-reset")
async def password_reset_confirm_route(
    request_model: PasswordResetVerifyRequest,
    services: AppServices = Depends(get_services)
):
    return await confirm_password_reset(request_model, services)


@router.post("/forgot-password")
async def forgot_password_route(
    request_model: ForgotPasswordRequest,
    services: AppServices = Depends(get_services)
):
    return await forgot_password(request_model, services)


@router.post("/verify-otp")
async def verify_otp_route(
    request_model: VerifyOtpRequest,
    services: AppServices = Depends(get_services)
):
    return await verify_otp(request_model, services)


@router.post("/reset-password")
async def reset_password_route(
    request_model: ResetPasswordRequest,
    request: Request,
    services: AppServices = Depends(get_services)
):
    return await reset_password(request_model, request, services)


@router.post("/send-otp")
async def send_otp_route(
    request_model: SendOtpRequest,
    services: AppServices = Depends(get_services)
):
    return await send_otp(request_model, services)
