from __future__ import annotations

import re
from datetime import date, datetime
from typing import Union

from ..core.exceptions import ValidationError

DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def is_date_key(value: object) -> bool:
    """True if *value* is a real calendar date written as YYYY-MM-DD."""
    if not isinstance(value, str) or not DATE_KEY_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def to_date_key(value: Union[date, datetime, str]) -> str:
    """Normalize a date-like value into the YYYY-MM-DD document key."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return parse_iso_date(str(value).strip()).isoformat()
