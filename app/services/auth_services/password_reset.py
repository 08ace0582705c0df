import logging
import time
from fastapi.responses import JSONResponse
from app.core.dependencies import AppServices
from app.core.exceptions import (
    AttemptsExceededError,
    BackendError,
    ExpiredError,
    InvalidOtpError,
    NotFoundError,
    TransportError,
)
from app.models.allModel import PasswordResetRequest, PasswordResetVerifyRequest
from app.services.otp_services.verifier import VerificationFailure, VerificationResult
from app.services.sms_services.send_sms import send_tracked_sms
from app.utils.phone import format_phone_number, is_valid_otp_code, is_valid_phone_number

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

FAILURE_ERRORS = {
    VerificationFailure.NOT_FOUND: NotFoundError,
    VerificationFailure.EXPIRED: ExpiredError,
    VerificationFailure.TOO_MANY_ATTEMPTS: AttemptsExceededError,
}


def raise_for_failure(result: VerificationResult) -> None:
    if result.valid:
        return
    logger.info(f"OTP verification failed: {result.reason.value}")
    raise FAILURE_ERRORS.get(result.reason, InvalidOtpError)()


def _fail(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message
        }
    )


async def request_password_reset_otp(request_model: PasswordResetRequest, services: AppServices):
    phone_number = request_model.phone_number
    if not phone_number or not is_valid_phone_number(phone_number):
        return _fail("Invalid phone number")

    settings = services.settings
    identifier = format_phone_number(phone_number, settings.SMS_COUNTRY_CODE)
    issued = await services.issuer.issue(identifier)

    expiry_minutes = settings.PASSWORD_RESET_OTP_EXPIRE_MINUTES
    greeting = f"Hello {request_model.username}" if request_model.username else "Hello"
    message = (
        f"{greeting}, your password reset code is: {issued.code}. "
        f"Valid for {expiry_minutes} minutes. Do not share this code with anyone."
    )

    result = await send_tracked_sms(
        services.sms_gateway,
        services.delivery_store,
        identifier,
        message,
        reference=f"OTP_{int(time.time() * 1000)}",
    )
    if not result.ok:
        # The issued record stays valid so a resend or side-channel can still use it
        logger.error(f"Password reset OTP delivery to {identifier} failed: {result.message}")
        raise TransportError()

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "OTP sent successfully"
        }
    )


async def confirm_password_reset(request_model: PasswordResetVerifyRequest, services: AppServices):
    phone_number = request_model.phone_number
    otp_code = request_model.otp_code
    new_password = request_model.new_password

    if not phone_number or not otp_code or not new_password:
        return _fail("Missing required fields")

    if not is_valid_phone_number(phone_number):
        return _fail("Invalid phone number")

    if len(new_password) < MIN_PASSWORD_LENGTH:
        return _fail(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    identifier = format_phone_number(phone_number, services.settings.SMS_COUNTRY_CODE)
    if not is_valid_otp_code(otp_code):
        raise InvalidOtpError()

    result = await services.verifier.verify(identifier, otp_code)
    raise_for_failure(result)

    # Password unchanged, so the same code may be retried
    try:
        updated, message = await services.backend.update_password(
            new_password,
            user_id=result.user_id,
            phone_number=None if result.user_id else identifier,
        )
    except BackendError:
        await services.verifier.release(identifier)
        raise
    if not updated:
        await services.verifier.release(identifier)
        return _fail(message)

    await services.otp_store.delete(identifier)

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "Password reset successful"
        }
    )
