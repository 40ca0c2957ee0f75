"""Field-level checks shared by the request builders."""

import math
import re
from decimal import Decimal, InvalidOperation
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email

from payfluid.exceptions import ValidationError


MIN_PHONE_DIGITS = 10

_PHONE_PATTERN = re.compile(r"^[0-9]+$")
_HEX_COLOUR_PATTERN = re.compile(r"^#([a-fA-F0-9]{6}|[a-fA-F0-9]{3})$")


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_url(url: str) -> bool:
    """Absolute http(s) URL with a host."""
    if not url or any(ch.isspace() for ch in url):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_hex_colour(value: str) -> bool:
    return bool(_HEX_COLOUR_PATTERN.match(value))


def check_phone(phone: str, owner: str, field_name: str = "phone") -> str:
    """Trim ``phone`` and make sure it is at least 10 digits, digits only."""
    phone = phone.strip()
    if not _PHONE_PATTERN.match(phone):
        raise ValidationError(f"{owner}: '{phone}' is not a valid {field_name}: only digits allowed")
    digits = len(phone)
    if digits < MIN_PHONE_DIGITS:
        raise ValidationError(
            f"{owner}: {field_name} cannot be less than {MIN_PHONE_DIGITS} digits; "
            f"the supplied number is {digits} digits long"
        )
    return phone


def check_amount(amount, owner: str, field_name: str = "amount") -> float:
    """Coerce ``amount`` to a strictly positive finite float."""
    if isinstance(amount, bool):
        raise ValidationError(f"{owner}: {field_name} must be a number, got a bool")
    try:
        value = float(Decimal(str(amount).strip()))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{owner}: '{amount}' {field_name} is not a valid float or decimal")
    if not math.isfinite(value):
        raise ValidationError(f"{owner}: {field_name} must be finite")
    if value <= 0:
        raise ValidationError(f"{owner}: {field_name} must be greater than zero")
    return value
