from .otp import OtpRecord, IssuedOtp
from .sms_message import DeliveryRecord, DeliveryReport, DeliveryResult, DeliveryStatus
