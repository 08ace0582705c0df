import logging
from fastapi_mail import FastMail, MessageSchema, ConnectionConfig
from fastapi_mail.errors import ConnectionErrors
from app.schemas.sms_message import DeliveryResult

logger = logging.getLogger(__name__)

OTP_EMAIL_SUBJECT = "Your Password Reset OTP"


def render_otp_email(otp: str, expires_minutes: int) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2>Password Reset Request</h2>
      <p>Your password reset OTP is: <strong>{otp}</strong></p>
      <p>This code expires in {expires_minutes} minutes.</p>
      <p>If you didn't request this, please ignore this email.</p>
      <hr>
      <p style="color: #666; font-size: 12px;">This is an automated message, please do not reply.</p>
    </div>
    """


VERIFICATION_EMAIL_SUBJECT = "Your Verification Code"


def render_verification_email(otp: str, expires_minutes: int) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2>Verification Code</h2>
      <p>Your verification code is: <strong>{otp}</strong></p>
      <p>This code expires in {expires_minutes} minutes.</p>
      <hr>
      <p style="color: #666; font-size: 12px;">This is an automated message, please do not reply.</p>
    </div>
    """


class EmailGateway:
    """SMTP delivery with the same send contract as the SMS gateway."""

    def __init__(self, conf: ConnectionConfig, mailer: FastMail = None):
        self.mailer = mailer or FastMail(conf)

    async def send(self, identifier: str, message: str, subject: str = OTP_EMAIL_SUBJECT) -> DeliveryResult:
        email = MessageSchema(
            subject=subject,
            recipients=[identifier],
            body=message,
            subtype="html"
        )
        try:
            await self.mailer.send_message(email)
        except ConnectionErrors as e:
            logger.error(f"Failed to send email to {identifier}: {e}")
            return DeliveryResult(status="error", message="Failed to send email")

        logger.info(f"Email sent to: {identifier}")
        return DeliveryResult(status="success", message="Email sent successfully")
