from typing import Optional
from fastapi_mail import ConnectionConfig
from app.core.config import Settings


def build_mail_config(settings: Settings) -> Optional[ConnectionConfig]:
    if not settings.MAIL_SERVER:
        return None

    return ConnectionConfig(
        MAIL_USERNAME = settings.MAIL_USERNAME,
        MAIL_PASSWORD = settings.MAIL_PASSWORD,
        MAIL_FROM = settings.MAIL_FROM,
        MAIL_FROM_NAME = settings.MAIL_FROM_NAME,
        MAIL_PORT = settings.MAIL_PORT,
        MAIL_SERVER = settings.MAIL_SERVER,
        MAIL_STARTTLS = True,
        MAIL_SSL_TLS = False,
        USE_CREDENTIALS = True,
        VALIDATE_CERTS = True
    )
