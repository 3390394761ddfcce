from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from ..attendance.model import parse_status_code
from ..common.datetime_utils import is_date_key
from ..core.constants import MAX_MOBILE_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import MissingFieldError, ValidationError
from ..students.model import dedup_key

# Normalized header -> canonical field.
FIELD_ALIASES = {
    "name": "name",
    "studentname": "name",
    "class": "class",
    "mobile": "mobile",
    "mobileno": "mobile",
    "quizpoints": "quizPoints",
}


def normalize_header(name: Any) -> str:
    """Case/space/underscore/dot-insensitive column key."""
    return str(name).strip().lower().replace(" ", "").replace("_", "").replace(".", "")


def _header_text(key: Any) -> str:
    if isinstance(key, datetime):
        return key.date().isoformat()
    if isinstance(key, date):
        return key.isoformat()
    return str(key).strip()


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _cell_points(value: Any) -> int:
    text = _cell_text(value)
    if not text:
        return 0
    try:
        number = float(text)
    except ValueError:
        raise ValidationError(f"quizPoints must be a whole number, got {text!r}")
    if not number.is_integer() or number < 0:
        raise ValidationError(f"quizPoints must be a whole non-negative number, got {text!r}")
    return int(number)


@dataclass(frozen=True)
class ImportRow:
    """One validated spreadsheet row.

    Date-named columns (``YYYY-MM-DD``) become ``statuses``: ``P`` is Present,
    ``L`` is Late, any other value is left out.
    """

    name: str
    class_label: str
    mobile: str = ""
    quiz_points: int = 0
    statuses: Mapping[str, AttendanceStatus] = field(default_factory=dict)

    @property
    def dedup_key(self) -> str:
        return dedup_key(self.name, self.mobile)

    @classmethod
    def from_fields(cls, fields: Mapping[Any, Any]) -> "ImportRow":
        values: Dict[str, Any] = {}
        statuses: Dict[str, AttendanceStatus] = {}
        for raw_key, value in fields.items():
            key = _header_text(raw_key)
            if is_date_key(key):
                status = parse_status_code(value)
                if status is not None:
                    statuses[key] = status
                continue
            canonical = FIELD_ALIASES.get(normalize_header(key))
            if canonical and canonical not in values:
                values[canonical] = value

        name = _cell_text(values.get("name"))
        class_label = _cell_text(values.get("class"))
        missing: List[str] = [f for f, v in (("name", name), ("class", class_label)) if not v]
        if missing:
            raise MissingFieldError(f"Missing required field(s): {', '.join(missing)}")

        mobile = _cell_text(values.get("mobile"))
        if len(mobile) > MAX_MOBILE_LENGTH:
            raise ValidationError(f"Mobile number must be at most {MAX_MOBILE_LENGTH} characters")

        return cls(
            name=name,
            class_label=class_label,
            mobile=mobile,
            quiz_points=_cell_points(values.get("quizPoints")),
            statuses=statuses,
        )


@dataclass
class ImportResult:
    """Tallies of one import run plus how far the commits got."""

    total_rows: int = 0
    created: int = 0
    duplicates: int = 0
    failed: int = 0
    student_batches_total: int = 0
    student_batches_committed: int = 0
    date_batches_total: int = 0
    date_batches_committed: int = 0
    cancelled: bool = False
    error: Optional[str] = None
    row_errors: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return (
            not self.cancelled
            and self.error is None
            and self.student_batches_committed == self.student_batches_total
            and self.date_batches_committed == self.date_batches_total
        )

    def to_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "created": self.created,
            "duplicates": self.duplicates,
            "failed": self.failed,
            "student_batches": f"{self.student_batches_committed} of {self.student_batches_total}",
            "date_batches": f"{self.date_batches_committed} of {self.date_batches_total}",
            "cancelled": self.cancelled,
            "complete": self.complete,
            "error": self.error,
            "row_errors": list(self.row_errors),
        }
