from typing import List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # JWT settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # Redis settings
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379

    # OTP settings
    OTP_STORE_BACKEND: Literal["redis", "memory"] = "redis"
    OTP_LENGTH: int = 6
    OTP_MAX_ATTEMPTS: int = 3
    PASSWORD_RESET_OTP_EXPIRE_MINUTES: int = 10
    FORGOT_PASSWORD_OTP_EXPIRE_MINUTES: int = 2
    VERIFICATION_OTP_EXPIRE_MINUTES: int = 10
    OTP_RECORD_RETENTION_SECONDS: int = 3600

    # EgoSMS settings
    EGOSMS_USERNAME: str = ""
    EGOSMS_PASSWORD: str = ""
    EGOSMS_SENDER: str = "SmartSch"
    EGOSMS_SANDBOX: bool = True
    EGOSMS_API_MODE: Literal["json", "plain"] = "json"
    EGOSMS_PRIORITY: str = "0"
    SMS_COUNTRY_CODE: str = "256"
    SMS_TIMEOUT_SECONDS: float = 15.0

    # Mail settings (email OTP delivery is disabled while MAIL_SERVER is empty)
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "noreply@example.com"
    MAIL_FROM_NAME: str = "SchoolDesk"
    MAIL_PORT: int = 587
    MAIL_SERVER: str = ""

    #ImageKitIO Settings
    IMAGEKIT_PUBLIC_KEY: str = ""
    IMAGEKIT_PRIVATE_KEY: str = ""
    IMAGEKIT_URL_ENDPOINT: str = ""

    # Backend business API
    BACKEND_API_URL: str = "http://localhost:4120"
    BACKEND_TIMEOUT_SECONDS: float = 10.0

    # Project settings
    PROJECT_NAME: str = "SchoolDesk API"
    API_V1_STR: str = "/api/v1"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    # Environment (development, production, testing)
    ENVIRONMENT: str = "development"

    # Load environment variables from .env file
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


# Instantiate settings
settings = Settings()
