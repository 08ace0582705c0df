import logging
from dataclasses import dataclass
from typing import Optional
import httpx
from app.core.config import Settings
from app.schemas.sms_message import DeliveryResult
from app.utils.phone import format_phone_number

logger = logging.getLogger(__name__)

SINGLE_SEGMENT_LIMIT = 160

EGOSMS_URLS = {
    ("json", True): "http://sandbox.egosms.co/api/v1/json/",
    ("json", False): "https://www.egosms.co/api/v1/json/",
    ("plain", True): "http://sandbox.egosms.co/api/v1/plain/",
    ("plain", False): "https://www.egosms.co/api/v1/plain/",
}


@dataclass(frozen=True)
class EgoSmsConfig:
    username: str
    password: str
    sender: str = "SmartSch"
    api_mode: str = "json"
    sandbox: bool = True
    priority: str = "0"
    country_code: str = "256"
    timeout_seconds: float = 15.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "EgoSmsConfig":
        return cls(
            username=settings.EGOSMS_USERNAME,
            password=settings.EGOSMS_PASSWORD,
            sender=settings.EGOSMS_SENDER,
            api_mode=settings.EGOSMS_API_MODE,
            sandbox=settings.EGOSMS_SANDBOX,
            priority=settings.EGOSMS_PRIORITY,
            country_code=settings.SMS_COUNTRY_CODE,
            timeout_seconds=settings.SMS_TIMEOUT_SECONDS,
        )

    @property
    def base_url(self) -> str:
        return EGOSMS_URLS[(self.api_mode, self.sandbox)]

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password)


class EgoSmsGateway:
    """Submits SMS messages to EgoSMS. One request per message, never retried."""

    def __init__(self, config: EgoSmsConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.http_client = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def send(self, identifier: str, message: str, priority: Optional[str] = None) -> DeliveryResult:
        number = format_phone_number(identifier, self.config.country_code)

        if not self.config.is_configured:
            logger.error("EgoSMS credentials are not configured")
            return DeliveryResult(status="error", message="SMS service is not properly configured")

        if len(message) > SINGLE_SEGMENT_LIMIT:
            logger.warning(
                f"SMS to {number} is {len(message)} characters and may be split into multiple messages"
            )

        priority = priority or self.config.priority
        logger.info(f"Sending SMS to {number} via EgoSMS ({self.config.api_mode})")
        try:
            if self.config.api_mode == "plain":
                return await self._send_plain(number, message, priority)
            return await self._send_json(number, message, priority)
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach EgoSMS: {e}")
            return DeliveryResult(status="error", message="Failed to connect to SMS service")

    async def _send_json(self, number: str, message: str, priority: str) -> DeliveryResult:
        payload = {
            "method": "SendSms",
            "userdata": {
                "username": self.config.username,
                "password": self.config.password,
            },
            "msgdata": [
                {
                    "number": number,
                    "message": message,
                    "senderid": self.config.sender,
                    "priority": priority,
                }
            ],
        }
        response = await self.http_client.post(self.config.base_url, json=payload)
        if response.status_code >= 400:
            logger.error(f"EgoSMS returned HTTP {response.status_code}: {response.text}")
            return DeliveryResult(status="error", message=f"EgoSMS HTTP error {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.error(f"EgoSMS returned an unexpected body: {response.text}")
            return DeliveryResult(status="error", message="Invalid response from SMS service")

        logger.debug(f"EgoSMS API response: {data}")
        if str(data.get("Status", "")).strip().upper() != "OK":
            return DeliveryResult(
                status="error",
                message=f"EgoSMS Error: {data.get('Message') or data.get('Status') or 'unknown error'}",
            )

        return DeliveryResult(
            status="success",
            message="Message sent successfully",
            provider_message_id=data.get("MsgFollowUpUniqueCode"),
        )

    async def _send_plain(self, number: str, message: str, priority: str) -> DeliveryResult:
        params = {
            "username": self.config.username,
            "password": self.config.password,
            "number": number,
            "message": message,
            "sender": self.config.sender,
            "priority": priority,
        }
        response = await self.http_client.get(self.config.base_url, params=params)
        text = response.text.strip()
        if response.status_code < 400 and text.upper() == "OK":
            return DeliveryResult(status="success", message="Message sent successfully")

        logger.error(f"EgoSMS rejected message to {number}: HTTP {response.status_code} {text}")
        return DeliveryResult(status="error", message=f"EgoSMS Error: {text}")
