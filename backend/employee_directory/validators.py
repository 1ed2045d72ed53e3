"""
Employee Directory Backend - Field Validation Rules
=====================================================

What:  The one definition of the employee field rules (email shape, phone
       shape, non-empty text) and of the write-time normalization.
Who:   Pydantic request schemas call the checks; the service calls
       `normalize_fields` before handing values to the repository.

The Angular client applies the same literal patterns, so any change here
must be mirrored there and in tests/test_validators.py.
"""

import re
from typing import Any, Dict, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Optional leading +, then 1-16 ASCII digits without a leading zero
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$", re.ASCII)
PHONE_STRIP_PATTERN = re.compile(r"[\s\-()]")
PHONE_MIN_LENGTH = 10

MUTABLE_FIELDS = ("name", "email", "position", "phone")


def is_not_empty(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email.strip()))


def clean_phone(phone: str) -> str:
    """Drop spaces, dashes and parentheses: '(555) 123-4567' -> '5551234567'."""
    return PHONE_STRIP_PATTERN.sub("", phone)


def is_valid_phone(phone: str) -> bool:
    cleaned = clean_phone(phone)
    return bool(PHONE_PATTERN.match(cleaned)) and len(cleaned) >= PHONE_MIN_LENGTH


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_fields(fields: Dict[str, Optional[str]]) -> Dict[str, str]:
    """
    Trim every provided field and lowercase the email.

    Fields that are absent or None are left out, so the result can be used
    directly as a partial update.
    """
    normalized: Dict[str, str] = {}
    for key in MUTABLE_FIELDS:
        value = fields.get(key)
        if value is None:
            continue
        normalized[key] = normalize_email(value) if key == "email" else value.strip()
    return normalized


def normalize_search_term(value: Optional[str]) -> Optional[str]:
    """Whitespace-only search input means "no filter", not "match empty"."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
