from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
import httpx
from fastapi import Request
from redis.asyncio import Redis
from app.core.config import Settings
from app.core.mail_config import build_mail_config
from app.core.redis import get_redis_client
from app.services.backend_client import BackendClient
from app.services.otp_services.issuer import OtpIssuer
from app.services.otp_services.otp_store import InMemoryOtpStore, OtpStore, RedisOtpStore
from app.services.otp_services.verifier import OtpVerifier
from app.services.sms_services.delivery_store import DeliveryStore, InMemoryDeliveryStore, RedisDeliveryStore
from app.services.sms_services.egosms_gateway import EgoSmsConfig, EgoSmsGateway
from app.utils.imagekit_uploader import ImageKitUploader
from app.utils.send_email import EmailGateway


@dataclass
class AppServices:
    """Everything a request handler needs, built once at startup."""

    settings: Settings
    otp_store: OtpStore
    issuer: OtpIssuer
    verifier: OtpVerifier
    sms_gateway: EgoSmsGateway
    delivery_store: DeliveryStore
    backend: BackendClient
    email_gateway: Optional[EmailGateway] = None
    uploader: Optional[ImageKitUploader] = None
    redis: Optional[Redis] = None

    async def aclose(self) -> None:
        await self.sms_gateway.aclose()
        await self.backend.aclose()
        if self.redis is not None:
            await self.redis.aclose()


def build_otp_services(settings: Settings, store: OtpStore):
    issuer = OtpIssuer(
        store,
        length=settings.OTP_LENGTH,
        ttl=timedelta(minutes=settings.PASSWORD_RESET_OTP_EXPIRE_MINUTES),
    )
    verifier = OtpVerifier(store, settings, max_attempts=settings.OTP_MAX_ATTEMPTS)
    return issuer, verifier


async def build_services(settings: Settings) -> AppServices:
    redis_client = None
    if settings.OTP_STORE_BACKEND == "redis":
        redis_client = await get_redis_client(settings)
        otp_store = RedisOtpStore(redis_client, settings.OTP_RECORD_RETENTION_SECONDS)
        delivery_store = RedisDeliveryStore(redis_client)
    else:
        otp_store = InMemoryOtpStore()
        delivery_store = InMemoryDeliveryStore()

    issuer, verifier = build_otp_services(settings, otp_store)
    mail_conf = build_mail_config(settings)

    return AppServices(
        settings=settings,
        otp_store=otp_store,
        issuer=issuer,
        verifier=verifier,
        sms_gateway=EgoSmsGateway(EgoSmsConfig.from_settings(settings)),
        delivery_store=delivery_store,
        backend=BackendClient(httpx.AsyncClient(
            base_url=settings.BACKEND_API_URL,
            timeout=settings.BACKEND_TIMEOUT_SECONDS,
        )),
        email_gateway=EmailGateway(mail_conf) if mail_conf else None,
        uploader=ImageKitUploader.from_settings(settings),
        redis=redis_client,
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services
