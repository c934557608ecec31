"""
Phone number normalization.
"""

import re

# E.164: + followed by 8-15 digits, no leading zero in the country code
E164_PATTERN = re.compile(r"^\+[1-9]\d{7,14}$")

_FORMATTING = re.compile(r"[\s\-\.\(\)]")


def normalize_phone_number(phone: str | None) -> str | None:
    """Normalize a phone number to E.164 format.

    Bare 10-digit numbers are read as North American and get a ``+1``
    prefix; 11-digit numbers starting with ``1`` get a ``+``.

    Args:
        phone: Raw phone number string.

    Returns:
        Normalized phone number or None if invalid.
    """
    if not phone:
        return None

    cleaned = _FORMATTING.sub("", phone.strip())

    if cleaned.startswith("00"):
        cleaned = "+" + cleaned[2:]

    if cleaned.startswith("+"):
        return cleaned if E164_PATTERN.match(cleaned) else None

    if not cleaned.isdigit():
        return None

    if len(cleaned) == 10:
        return f"+1{cleaned}"
    if len(cleaned) == 11 and cleaned.startswith("1"):
        return f"+{cleaned}"

    return None


def is_valid_phone_number(phone: str | None) -> bool:
    return normalize_phone_number(phone) is not None
