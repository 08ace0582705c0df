import time
from typing import Optional
from app.core.exceptions import ValidationError

ALLOWED_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")
ALLOWED_IMAGE_MIME_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")


def image_extension(filename: Optional[str], content_type: Optional[str]) -> str:
    """Return the lower-cased extension of an allowed image upload, or raise ValidationError."""
    if not filename or "." not in filename:
        raise ValidationError("Invalid file extension")

    ext = filename.rsplit(".", 1)[-1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Invalid file extension")

    if (content_type or "").lower() not in ALLOWED_IMAGE_MIME_TYPES:
        raise ValidationError("Invalid file type. Only images are allowed.")

    return ext


def generate_file_name(prefix: str, ext: str, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{prefix}_{timestamp_ms}.{ext}"
