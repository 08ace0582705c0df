import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from app.core.config import Settings

RESET_TOKEN_TYPE = "password_reset"


def create_reset_token(identifier: str, settings: Settings, user_id: Optional[str] = None,
                       now: Optional[datetime] = None) -> str:
    """
    Generates a signed, short-lived JWT proving that `identifier` passed OTP verification.
    """
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": identifier,
        "uid": user_id,
        "iat": int(issued_at.timestamp()),
        "exp": expire,
        "jti": secrets.token_urlsafe(16),
        "type": RESET_TOKEN_TYPE,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_reset_token(token: str, settings: Settings) -> dict:
    """
    Decodes a reset JWT and returns its payload.
    Raises JWTError if invalid, expired or not a reset token.
    """
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != RESET_TOKEN_TYPE or not payload.get("sub"):
        raise JWTError("Invalid token payload")
    return payload
