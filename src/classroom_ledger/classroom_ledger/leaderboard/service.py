from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..attendance.model import AttendanceDay
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import to_date_key
from ..core.enums import LeaderboardMode
from ..core.exceptions import ValidationError
from ..points.repository import PointTotalRepository
from ..points.rules import status_points
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import LeaderboardRow


def daily_attendance_points(day: AttendanceDay) -> Dict[str, int]:
    return {sid: status_points(status) for sid, status in day.statuses.items()}


def overall_attendance_points(days: Iterable[AttendanceDay]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for day in days:
        for sid, pts in daily_attendance_points(day).items():
            totals[sid] = totals.get(sid, 0) + pts
    return totals


def build_leaderboard(
    students: Sequence[Student],
    attendance_points: Mapping[str, int],
    quiz_totals: Mapping[str, int],
) -> List[LeaderboardRow]:
    """Rank the roster by attendance + quiz points.

    Ties are broken by quiz points (descending), then name, then student id.
    Entries for ids that are not on the roster are ignored.
    """

    unranked = [
        LeaderboardRow(
            rank=0,
            student_id=s.student_id,
            name=s.name,
            class_label=s.class_label,
            attendance_points=int(attendance_points.get(s.student_id, 0)),
            quiz_points=int(quiz_totals.get(s.student_id, 0)) + int(s.opening_quiz_points),
        )
        for s in students
    ]
    unranked.sort(key=lambda r: (-r.total, -r.quiz_points, r.name.lower(), r.student_id))
    return [
        LeaderboardRow(
            rank=i,
            student_id=r.student_id,
            name=r.name,
            class_label=r.class_label,
            attendance_points=r.attendance_points,
            quiz_points=r.quiz_points,
        )
        for i, r in enumerate(unranked, start=1)
    ]


class LeaderboardService:
    """Read side: daily and all-time points tables. Never mutates anything."""

    def __init__(
        self,
        students: StudentRepository,
        attendance: AttendanceRepository,
        points: PointTotalRepository,
    ):
        self._students = students
        self._attendance = attendance
        self._points = points

    def daily_leaderboard(self, date: Any) -> List[LeaderboardRow]:
        # Quiz points are the running total, not just the ones earned on this date.
        day = self._attendance.get_day(to_date_key(date))
        return build_leaderboard(self._students.list_all(), daily_attendance_points(day), self._points.list_totals())

    def overall_leaderboard(self) -> List[LeaderboardRow]:
        days = self._attendance.list_days()
        return build_leaderboard(self._students.list_all(), overall_attendance_points(days), self._points.list_totals())

    def leaderboard(self, mode: Any, date: Optional[Any] = None) -> List[LeaderboardRow]:
        if not isinstance(mode, LeaderboardMode):
            try:
                mode = LeaderboardMode(str(mode).strip().lower())
            except ValueError:
                raise ValidationError(f"Unknown leaderboard mode: {mode!r}")
        if mode is LeaderboardMode.DAILY:
            if date is None:
                raise ValidationError("A date is required for the daily leaderboard")
            return self.daily_leaderboard(date)
        return self.overall_leaderboard()
