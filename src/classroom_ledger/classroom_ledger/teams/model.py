from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..students.model import Student


@dataclass(frozen=True)
class Team:
    number: int
    members: Tuple[Student, ...]

    def to_dict(self) -> dict:
        return {
            "team": self.number,
            "members": [{"student_id": s.student_id, "name": s.name, "class": s.class_label} for s in self.members],
        }
