import logging
import time
from datetime import timedelta
from fastapi.responses import JSONResponse
from app.core.dependencies import AppServices
from app.models.allModel import SendOtpRequest
from app.services.sms_services.send_sms import send_tracked_sms
from app.utils.phone import E164_UG_PATTERN, is_valid_email
from app.utils.send_email import VERIFICATION_EMAIL_SUBJECT, render_verification_email

logger = logging.getLogger(__name__)

OTP_TYPES = ("email", "phone")


def _error(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "error",
            "message": message
        }
    )


def _validate(request_model: SendOtpRequest):
    """Return (identifier, error message) for a send-otp request."""
    if request_model.type not in OTP_TYPES:
        return None, 'Invalid OTP type. Must be "email" or "phone"'

    if request_model.type == "email":
        email = (request_model.email or "").strip()
        if not email:
            return None, "Email is required for email OTP"
        if not is_valid_email(email):
            return None, "Please enter a valid email address"
        return email.lower(), None

    phone = (request_model.phone or "").strip()
    if not phone:
        return None, "Phone number is required for phone OTP"
    if not E164_UG_PATTERN.fullmatch(phone):
        return None, "Please enter a valid phone number starting with 256 (e.g., 2567XXXXXXXX)"
    return phone, None


async def send_otp(request_model: SendOtpRequest, services: AppServices):
    """
    Issue a verification code to an email address or a 256-prefixed phone number.

    The code is stored under the normalised identifier, so /auth/verify-otp accepts it.
    No account lookup happens here.
    """
    identifier, error = _validate(request_model)
    if error:
        return _error(error)

    by_email = request_model.type == "email"
    if by_email and services.email_gateway is None:
        return _error("Email OTP delivery is not configured", 501)

    settings = services.settings
    expiry_minutes = settings.VERIFICATION_OTP_EXPIRE_MINUTES
    issued = await services.issuer.issue(identifier, ttl=timedelta(minutes=expiry_minutes))

    if by_email:
        result = await services.email_gateway.send(
            identifier,
            render_verification_email(issued.code, expiry_minutes),
            subject=VERIFICATION_EMAIL_SUBJECT,
        )
    else:
        message = f"Your verification code is: {issued.code}. This code expires in {expiry_minutes} minutes."
        result = await send_tracked_sms(
            services.sms_gateway,
            services.delivery_store,
            identifier,
            message,
            reference=f"OTP_{int(time.time() * 1000)}",
        )

    if not result.ok:
        logger.error(f"Verification OTP delivery to {identifier} failed: {result.message}")
        return _error("Failed to send OTP", 500)

    content = {
        "status": "success",
        "message": "OTP sent successfully"
    }
    if settings.is_development:
        content["otp"] = issued.code
    return JSONResponse(status_code=200, content=content)
