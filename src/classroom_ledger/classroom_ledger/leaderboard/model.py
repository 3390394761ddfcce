from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LeaderboardRow:
    """Read-model: one ranked line of the points table."""

    rank: int
    student_id: str
    name: str
    class_label: str
    attendance_points: int
    quiz_points: int

    @property
    def total(self) -> int:
        return self.attendance_points + self.quiz_points

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "student_id": self.student_id,
            "name": self.name,
            "class": self.class_label,
            "attendance_points": self.attendance_points,
            "quiz_points": self.quiz_points,
            "total": self.total,
        }
