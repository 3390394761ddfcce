from __future__ import annotations

from typing import Any, List, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import to_date_key
from ..core.exceptions import NotFoundError, ValidationError
from ..points.ledger import LedgerChange, PointLedger, ResetSummary
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import QuizPlacements
from .repository import QuizResultRepository


class QuizService:
    """Use case: log a day's quiz podium and award points.

    Only students marked Present or Late on the quiz date may be placed.
    """

    def __init__(
        self,
        ledger: PointLedger,
        quizzes: QuizResultRepository,
        attendance: AttendanceRepository,
        students: StudentRepository,
    ):
        self._ledger = ledger
        self._quizzes = quizzes
        self._attendance = attendance
        self._students = students

    def eligible_students(self, date: Any) -> List[Student]:
        day = self._attendance.get_day(to_date_key(date))
        roster = {s.student_id: s for s in self._students.list_all()}
        out = [roster[sid] for sid in day.attended_ids() if sid in roster]
        return sorted(out, key=lambda s: (s.name.lower(), s.student_id))

    def get_day_result(self, date: Any) -> QuizPlacements:
        return self._quizzes.get_day_result(to_date_key(date))

    def log_quiz_result(
        self,
        date: Any,
        *,
        first: Optional[str] = None,
        second: Optional[str] = None,
        third: Optional[str] = None,
    ) -> LedgerChange:
        date_key = to_date_key(date)
        placements = QuizPlacements.of(first, second, third).validate()

        day = self._attendance.get_day(date_key)
        for placement, sid in placements.items():
            if not self._students.get_by_id(sid):
                raise NotFoundError(f"Student {sid} does not exist")
            if not day.status_of(sid).attended:
                raise ValidationError(
                    f"Student {sid} was not present on {date_key} and cannot take {placement.value} place"
                )

        return self._ledger.apply_quiz_result(date_key, placements)

    def reset_day(self, date: Any) -> LedgerChange:
        return self._ledger.reset_day_quiz_points(date)

    def reset_all(self) -> ResetSummary:
        return self._ledger.reset_all_quiz_points()
