from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_STATUS_BY_NAME = {s.value.lower(): s for s in AttendanceStatus}
_STATUS_BY_CODE = {"p": AttendanceStatus.PRESENT, "l": AttendanceStatus.LATE}


def parse_status(value: Any) -> AttendanceStatus:
    """Accept ``Present``/``Late``/``Absent`` in any case."""
    if isinstance(value, AttendanceStatus):
        return value
    status = _STATUS_BY_NAME.get(str(value or "").strip().lower())
    if status is None:
        raise ValidationError(f"Unknown attendance status: {value!r}")
    return status


def parse_status_code(value: Any) -> Optional[AttendanceStatus]:
    """Spreadsheet cell code: ``P`` -> Present, ``L`` -> Late, anything else -> None."""
    return _STATUS_BY_CODE.get(str(value or "").strip().lower())


@dataclass(frozen=True)
class AttendanceDay:
    """Domain entity: one date's student -> status map (sparse, no ABSENT values)."""

    date_key: str
    statuses: Mapping[str, AttendanceStatus] = field(default_factory=dict)

    def status_of(self, student_id: str) -> AttendanceStatus:
        return self.statuses.get(student_id, AttendanceStatus.ABSENT)

    def attended_ids(self) -> list[str]:
        return [sid for sid, status in self.statuses.items() if status.attended]

    def to_document(self) -> Dict[str, str]:
        return {sid: status.value for sid, status in self.statuses.items() if status.attended}

    @classmethod
    def from_document(cls, date_key: str, data: Optional[Mapping[str, Any]]) -> "AttendanceDay":
        statuses: Dict[str, AttendanceStatus] = {}
        for sid, raw in (data or {}).items():
            status = _STATUS_BY_NAME.get(str(raw).strip().lower())
            if status is None or not status.attended:
                logger.warning("Ignoring attendance value %r for %s on %s", raw, sid, date_key)
                continue
            statuses[str(sid)] = status
        return cls(date_key=date_key, statuses=statuses)


@dataclass(frozen=True)
class AttendanceSummary:
    """Read-model: head counts for one date."""

    date_key: str
    present: int
    late: int
    absent: int

    @property
    def attended(self) -> int:
        return self.present + self.late

    @property
    def total(self) -> int:
        return self.present + self.late + self.absent
