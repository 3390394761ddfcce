from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceDay


class AttendanceRepository(Protocol):
    def get_day(self, date_key: str) -> AttendanceDay:
        """Stored day, or an empty day when nothing was recorded."""

        raise NotImplementedError

    def list_days(self) -> Sequence[AttendanceDay]:
        raise NotImplementedError

    def set_status(self, date_key: str, student_id: str, status: AttendanceStatus) -> None:
        raise NotImplementedError

    def merge_statuses(self, date_key: str, statuses: Mapping[str, AttendanceStatus]) -> None:
        """Atomically write *statuses* into the day, leaving other students untouched."""

        raise NotImplementedError

    def reset_day(self, date_key: str) -> None:
        raise NotImplementedError
