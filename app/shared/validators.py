"""Shared validation utilities"""

import re
from typing import Optional

# Same loose check the booking form has always used: something@something.tld
EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


def is_valid_email(email: Optional[str]) -> bool:
    """True when ``email`` contains a basic address shape"""
    if not email:
        return False
    return EMAIL_PATTERN.search(email) is not None


def is_one_of(value: Optional[str], choices: tuple[str, ...]) -> bool:
    """Exact, case-sensitive membership check used for enumerated fields"""
    return value is not None and value in choices
