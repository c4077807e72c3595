"""Server-side checks on a submitted enquiry."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

REQUIRED_FIELDS = ("name", "email", "phone", "product", "message")

MISSING_FIELDS = "Missing required fields"
INVALID_EMAIL = "Invalid email address"

# Syntactic sanity check only: something@something.something, no spaces
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value) is not None


def _present(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def validate_enquiry(data: Mapping[str, Any]) -> Optional[str]:
    """Return None when the enquiry is acceptable, else the rejection reason.

    Missing fields are reported before a malformed email; only the first
    failing check is reported.
    """
    if not all(_present(data.get(f)) for f in REQUIRED_FIELDS):
        return MISSING_FIELDS
    if not is_valid_email(data["email"]):
        return INVALID_EMAIL
    return None
