"""Reusable validators for contact details typed into storefront forms."""

import re

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_REGEX = re.compile(r"^\+?[1-9]\d{0,15}$")


def blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_email(value: str) -> str:
    """Validate an email address and return it trimmed.

    Raises:
        ValueError: If the address is empty or malformed
    """
    if not value or not value.strip():
        raise ValueError("Email is required")

    value = value.strip()

    if len(value) > 254:  # RFC 5321
        raise ValueError("Email address too long")

    if not EMAIL_REGEX.match(value):
        raise ValueError("Invalid email address format")

    return value


def validate_phone(value: str) -> str:
    """Validate a phone number, ignoring spaces and dashes."""
    if not value:
        raise ValueError("Phone number is required")

    value = value.replace(" ", "").replace("-", "")

    if not PHONE_REGEX.match(value):
        raise ValueError("Invalid phone number format")

    return value


def optional_phone(value: str | None) -> str | None:
    value = blank_to_none(value)
    return validate_phone(value) if value else None
