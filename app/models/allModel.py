from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Presence and format checks happen in the services so that
# they come back as 400s with a specific message.

class PasswordResetRequest(CamelModel):
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    username: Optional[str] = None

class PasswordResetVerifyRequest(CamelModel):
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    otp_code: Optional[str] = Field(None, alias="otpCode")
    new_password: Optional[str] = Field(None, alias="newPassword")

class ForgotPasswordRequest(CamelModel):
    identifier: Optional[str] = None

class VerifyOtpRequest(CamelModel):
    identifier: Optional[str] = None
    otp: Optional[str] = None

class ResetPasswordRequest(CamelModel):
    token: Optional[str] = None
    new_password: Optional[str] = Field(None, alias="newPassword")


class SmsDeliveryReportRequest(BaseModel):
    MsgFollowUpUniqueCode: Optional[str] = None
    number: Optional[str] = None
    Status: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class SendSmsRequest(CamelModel):
    phone_number: str = Field(..., alias="phoneNumber", min_length=1)
    message: str = Field(..., min_length=1)
    priority: Optional[str] = Field(None, pattern=r"^[0-4]$")

class BulkSmsRequest(BaseModel):
    messages: List[SendSmsRequest] = Field(..., min_length=1)

class SendOtpRequest(CamelModel):
    type: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
