import re
from app.core.exceptions import ValidationError

# ASCII-only: \d would also accept other Unicode digit sets
PHONE_NUMBER_PATTERN = re.compile(r"\+?[0-9]{10,15}")
OTP_CODE_PATTERN = re.compile(r"[0-9]{6}")
E164_UG_PATTERN = re.compile(r"256[0-9]{9}")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_valid_phone_number(phone: str) -> bool:
    return isinstance(phone, str) and PHONE_NUMBER_PATTERN.fullmatch(phone) is not None


def is_valid_otp_code(code: str) -> bool:
    return isinstance(code, str) and OTP_CODE_PATTERN.fullmatch(code) is not None


def is_valid_email(email: str) -> bool:
    return isinstance(email, str) and EMAIL_PATTERN.fullmatch(email) is not None


def is_email(identifier: str) -> bool:
    return "@" in (identifier or "")


def format_phone_number(phone_number: str, country_code: str = "256") -> str:
    """
    Normalise a phone number into the international form the SMS provider expects.

    0772611854   -> 256772611854
    772611854    -> 256772611854
    256772611854 -> 256772611854 (unchanged)
    """
    cleaned = re.sub(r"[^0-9]", "", phone_number or "")
    if not cleaned:
        raise ValidationError("Invalid phone number")

    if cleaned.startswith(country_code):
        return cleaned
    if cleaned.startswith("0"):
        return country_code + cleaned[1:]
    if cleaned.startswith("7") and len(cleaned) == 9:
        return country_code + cleaned
    if len(cleaned) == 10:
        return country_code + cleaned
    return cleaned


def normalize_identifier(identifier: str, country_code: str = "256") -> str:
    """Key OTP records by lower-cased email or by normalised phone number."""
    identifier = (identifier or "").strip()
    if is_email(identifier):
        return identifier.lower()
    return format_phone_number(identifier, country_code)
