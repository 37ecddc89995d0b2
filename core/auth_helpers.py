# core/auth_helpers.py

import re

from core.errors import ValidationError


PHONE_PATTERN = re.compile(r"^[+]?[\d\s-]{10,}$")
PASSWORD_MIN_LENGTH = 8


# ============================================================
# Identifier helpers
# ============================================================
def looks_like_phone(identifier: str) -> bool:
    """True when a login identifier is a phone number rather than an email."""
    return bool(PHONE_PATTERN.match(re.sub(r"\s", "", identifier or "")))


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


# ============================================================
# Password policy
# ============================================================
def validate_password_strength(password: str) -> None:
    """
    Raise ValidationError unless the password has at least 8 characters
    with one lowercase letter, one uppercase letter and one digit.
    """
    if (
        not password
        or len(password) < PASSWORD_MIN_LENGTH
        or not re.search(r"[a-z]", password)
        or not re.search(r"[A-Z]", password)
        or not re.search(r"\d", password)
    ):
        raise ValidationError(
            "Password must be at least 8 characters long and contain at least "
            "one uppercase letter, one lowercase letter, and one number"
        )
