import hmac
import logging
import time
from datetime import timedelta
from typing import Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from jose import JWTError
from app.core.dependencies import AppServices
from app.core.exceptions import BackendError, ValidationError
from app.models.allModel import ForgotPasswordRequest, ResetPasswordRequest, VerifyOtpRequest
from app.services.sms_services.send_sms import send_tracked_sms
from app.utils.phone import is_email, is_valid_otp_code, normalize_identifier
from app.utils.send_email import render_otp_email
from app.utils.token_utils import decode_reset_token

logger = logging.getLogger(__name__)

RESET_TOKEN_COOKIE = "resetToken"
RESET_USER_ID_COOKIE = "resetUserId"
MIN_RESET_PASSWORD_LENGTH = 4


def status_response(return_code: str, return_message: str, status_code: int = 200,
                    data: Optional[dict] = None) -> JSONResponse:
    content = {
        "status": {
            "returnCode": return_code,
            "returnMessage": return_message
        }
    }
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=content)


async def forgot_password(request_model: ForgotPasswordRequest, services: AppServices):
    settings = services.settings
    if not request_model.identifier:
        return status_response("03", "Identifier (email or phone) is required", 400)

    try:
        identifier = normalize_identifier(request_model.identifier, settings.SMS_COUNTRY_CODE)
    except ValidationError:
        return status_response("03", "Invalid phone number", 400)

    try:
        lookup = await services.backend.verify_user(identifier)
    except BackendError as e:
        return status_response("05", e.message, 500)

    if not lookup.exists:
        return status_response("04", "User not found. Please check your information and try again.", 404)

    by_email = is_email(identifier)
    if by_email and services.email_gateway is None:
        return status_response("02", "Email OTP delivery is not configured", 501)

    expiry_minutes = settings.FORGOT_PASSWORD_OTP_EXPIRE_MINUTES
    issued = await services.issuer.issue(
        identifier,
        ttl=timedelta(minutes=expiry_minutes),
        user_id=lookup.user_id,
    )

    if by_email:
        result = await services.email_gateway.send(identifier, render_otp_email(issued.code, expiry_minutes))
    else:
        message = f"Your OTP code for password reset is: {issued.code}. Valid for {expiry_minutes} minutes."
        result = await send_tracked_sms(
            services.sms_gateway,
            services.delivery_store,
            identifier,
            message,
            reference=f"OTP_{int(time.time() * 1000)}",
        )

    if not result.ok:
        channel = "email" if by_email else "SMS"
        logger.error(f"Forgot-password OTP delivery to {identifier} failed: {result.message}")
        return status_response("01", f"Failed to send OTP via {channel}", 500)

    data = {"messageId": result.provider_message_id}
    if settings.is_development:
        data["otp"] = issued.code

    return status_response("00", "OTP sent successfully", data=data)


async def verify_otp(request_model: VerifyOtpRequest, services: AppServices):
    settings = services.settings
    if not request_model.identifier or not request_model.otp:
        return status_response("03", "Identifier and OTP are required", 400)

    if not is_valid_otp_code(request_model.otp):
        return status_response("03", "Invalid OTP format", 400)

    try:
        identifier = normalize_identifier(request_model.identifier, settings.SMS_COUNTRY_CODE)
    except ValidationError:
        return status_response("03", "Invalid identifier", 400)

    result = await services.verifier.verify(identifier, request_model.otp)
    if not result.valid:
        logger.info(f"OTP verification failed for {identifier}: {result.reason.value}")
        return status_response("06", result.message, 400)

    response = status_response(
        "00",
        "OTP verified successfully",
        data={
            "resetToken": result.credential_token,
            "userId": result.user_id
        }
    )

    max_age = settings.RESET_TOKEN_EXPIRE_MINUTES * 60
    response.set_cookie(
        RESET_TOKEN_COOKIE,
        result.credential_token,
        max_age=max_age,
        httponly=True,
        secure=settings.is_production,
        path="/",
    )
    if result.user_id:
        response.set_cookie(
            RESET_USER_ID_COOKIE,
            result.user_id,
            max_age=max_age,
            httponly=True,
            secure=settings.is_production,
            path="/",
        )
    return response


async def reset_password(request_model: ResetPasswordRequest, request: Request, services: AppServices):
    token = request_model.token
    new_password = request_model.new_password

    if not token or not new_password:
        return status_response("03", "Token and new password are required", 400)

    if len(new_password) < MIN_RESET_PASSWORD_LENGTH:
        return status_response("04", f"Password must be at least {MIN_RESET_PASSWORD_LENGTH} characters long", 400)

    stored_token = request.cookies.get(RESET_TOKEN_COOKIE)
    if not stored_token or not hmac.compare_digest(stored_token.encode(), token.encode()):
        return status_response("08", "Invalid or expired reset token", 400)

    try:
        payload = decode_reset_token(token, services.settings)
    except JWTError:
        return status_response("08", "Invalid or expired reset token", 400)

    identifier = payload["sub"]
    # The verified OTP record is the one-time half of the credential
    record = await services.otp_store.get(identifier)
    if record is None or not record.verified:
        return status_response("08", "Invalid or expired reset token", 400)

    user_id = payload.get("uid") or request.cookies.get(RESET_USER_ID_COOKIE)
    try:
        updated, message = await services.backend.update_password(
            new_password,
            user_id=user_id,
            phone_number=None if user_id or is_email(identifier) else identifier,
        )
    except BackendError:
        return status_response("09", "Error resetting password", 500)

    if not updated:
        return status_response("08", message, 400)

    await services.otp_store.delete(identifier)

    response = status_response("00", "Password has been reset successfully")
    response.delete_cookie(RESET_TOKEN_COOKIE, path="/")
    response.delete_cookie(RESET_USER_ID_COOKIE, path="/")
    return response
