"""Signup data validation shared by patient and mentor registration."""

from __future__ import annotations

import re
from typing import List, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DISPOSABLE_EMAIL_DOMAINS = frozenset(
    {
        "tempmail.com",
        "throwawaymail.com",
        "mailinator.com",
        "guerrillamail.com",
        "10minutemail.com",
        "yopmail.com",
    }
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email.strip()))


def is_disposable_email(email: str) -> bool:
    domain = normalize_email(email).rsplit("@", 1)[-1]
    return domain in DISPOSABLE_EMAIL_DOMAINS


def validate_signup(
    email: str,
    first_name: Optional[str],
    last_name: Optional[str],
    country: Optional[str],
    role: Optional[str],
) -> List[str]:
    """Return every problem found with the signup data (empty when valid)."""
    errors: List[str] = []
    if not is_valid_email(email):
        errors.append("Invalid email format")
    elif is_disposable_email(email):
        errors.append("Disposable email addresses are not allowed")
    if not (first_name or "").strip():
        errors.append("First name is required")
    if not (last_name or "").strip():
        errors.append("Last name is required")
    if not (country or "").strip():
        errors.append("Country is required")
    if not (role or "").strip():
        errors.append("Role is required")
    return errors
