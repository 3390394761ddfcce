"""Point values for quiz placements and attendance."""

from __future__ import annotations

from typing import Dict

from ..core.constants import (
    FIRST_PLACE_POINTS,
    LATE_POINTS,
    PRESENT_POINTS,
    SECOND_PLACE_POINTS,
    THIRD_PLACE_POINTS,
)
from ..core.enums import AttendanceStatus, Placement
from ..quizzes.model import QuizPlacements

PLACEMENT_POINTS: Dict[Placement, int] = {
    Placement.FIRST: FIRST_PLACE_POINTS,
    Placement.SECOND: SECOND_PLACE_POINTS,
    Placement.THIRD: THIRD_PLACE_POINTS,
}

STATUS_POINTS: Dict[AttendanceStatus, int] = {
    AttendanceStatus.PRESENT: PRESENT_POINTS,
    AttendanceStatus.LATE: LATE_POINTS,
    AttendanceStatus.ABSENT: 0,
}


def placement_points(placement: Placement) -> int:
    return PLACEMENT_POINTS[placement]


def status_points(status: AttendanceStatus) -> int:
    return STATUS_POINTS[status]


def awarded_points(placements: QuizPlacements) -> Dict[str, int]:
    """student id -> points this day's podium pays out."""
    out: Dict[str, int] = {}
    for placement, sid in placements.items():
        out[sid] = out.get(sid, 0) + placement_points(placement)
    return out
