from __future__ import annotations

import logging
from typing import Any, List

from ..common.datetime_utils import to_date_key
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import AttendanceDay, AttendanceSummary, parse_status
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: mark, reset and read daily attendance."""

    def __init__(self, attendance: AttendanceRepository, students: StudentRepository):
        self._attendance = attendance
        self._students = students

    def set_status(self, date: Any, student_id: str, status: Any) -> AttendanceStatus:
        date_key = to_date_key(date)
        parsed = parse_status(status)
        if not self._students.get_by_id(str(student_id)):
            raise NotFoundError(f"Student {student_id} does not exist")

        self._attendance.set_status(date_key, str(student_id), parsed)
        logger.info("Attendance %s: %s -> %s", date_key, student_id, parsed.value)
        return parsed

    def reset_day(self, date: Any) -> None:
        """Mark everybody absent for *date*. Irreversible; callers confirm first."""
        date_key = to_date_key(date)
        self._attendance.reset_day(date_key)
        logger.info("Attendance %s reset", date_key)

    def get_day(self, date: Any) -> AttendanceDay:
        return self._attendance.get_day(to_date_key(date))

    def roster(self) -> List[Student]:
        return self._students.list_all()

    def daily_summary(self, date: Any) -> AttendanceSummary:
        day = self.get_day(date)
        roster_ids = {s.student_id for s in self._students.list_all()}
        present = sum(1 for sid, st in day.statuses.items() if sid in roster_ids and st is AttendanceStatus.PRESENT)
        late = sum(1 for sid, st in day.statuses.items() if sid in roster_ids and st is AttendanceStatus.LATE)
        return AttendanceSummary(
            date_key=day.date_key,
            present=present,
            late=late,
            absent=len(roster_ids) - present - late,
        )
