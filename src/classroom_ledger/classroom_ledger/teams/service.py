from __future__ import annotations

import logging
import random
from typing import Any, List, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import to_date_key
from ..common.validators import require_range
from ..core.constants import MAX_TEAMS, MIN_TEAMS
from ..core.exceptions import ValidationError
from ..students.repository import StudentRepository
from .model import Team

logger = logging.getLogger(__name__)


class TeamShuffleService:
    """Use case: split the students who showed up on a date into random teams."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        rng: Optional[random.Random] = None,
    ):
        self._attendance = attendance
        self._students = students
        self._rng = rng or random.Random()

    def shuffle_teams(self, date: Any, team_count: int) -> List[Team]:
        date_key = to_date_key(date)
        team_count = require_range(int(team_count), "Number of teams", MIN_TEAMS, MAX_TEAMS)

        day = self._attendance.get_day(date_key)
        roster = {s.student_id: s for s in self._students.list_all()}
        available = sorted(
            (roster[sid] for sid in day.attended_ids() if sid in roster),
            key=lambda s: s.student_id,
        )
        if not available:
            raise ValidationError(f"No present or late students on {date_key}")
        if len(available) < team_count:
            raise ValidationError(f"Not enough students ({len(available)}) to form {team_count} teams")

        self._rng.shuffle(available)
        buckets: List[list] = [[] for _ in range(team_count)]
        for i, student in enumerate(available):
            buckets[i % team_count].append(student)

        logger.info("Shuffled %s students into %s teams for %s", len(available), team_count, date_key)
        return [Team(number=i, members=tuple(members)) for i, members in enumerate(buckets, start=1)]
