from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance of one student on one date.

    Storage is sparse: only PRESENT and LATE are ever written, ABSENT is what a
    missing entry means.
    """

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"

    @property
    def attended(self) -> bool:
        return self is not AttendanceStatus.ABSENT


class Placement(str, Enum):
    """Quiz podium slots for a single date."""

    FIRST = "first"
    SECOND = "second"
    THIRD = "third"


class LeaderboardMode(str, Enum):
    DAILY = "daily"
    OVERALL = "overall"


class StorageBackend(str, Enum):
    MYSQL = "mysql"
    MEMORY = "memory"
