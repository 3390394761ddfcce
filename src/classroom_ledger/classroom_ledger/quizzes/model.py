from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.enums import Placement
from ..core.exceptions import DuplicatePlacement


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class QuizPlacements:
    """Up to three podium slots for one date, as student ids."""

    first: Optional[str] = None
    second: Optional[str] = None
    third: Optional[str] = None

    @classmethod
    def of(cls, first: Any = None, second: Any = None, third: Any = None) -> "QuizPlacements":
        return cls(first=_clean(first), second=_clean(second), third=_clean(third))

    def items(self) -> List[Tuple[Placement, str]]:
        slots = ((Placement.FIRST, self.first), (Placement.SECOND, self.second), (Placement.THIRD, self.third))
        return [(placement, sid) for placement, sid in slots if sid]

    def student_ids(self) -> List[str]:
        return [sid for _, sid in self.items()]

    def is_empty(self) -> bool:
        return not self.items()

    def validate(self) -> "QuizPlacements":
        seen: Dict[str, Placement] = {}
        for placement, sid in self.items():
            if sid in seen:
                raise DuplicatePlacement(
                    f"Student {sid} cannot take both {seen[sid].value} and {placement.value} place"
                )
            seen[sid] = placement
        return self

    def to_document(self) -> Dict[str, str]:
        return {placement.value: sid for placement, sid in self.items()}

    @classmethod
    def from_document(cls, data: Optional[Mapping[str, Any]]) -> "QuizPlacements":
        data = data or {}
        return cls.of(
            first=data.get(Placement.FIRST.value),
            second=data.get(Placement.SECOND.value),
            third=data.get(Placement.THIRD.value),
        )


@dataclass(frozen=True)
class QuizDay:
    """Domain entity: the quiz result logged for one date."""

    date_key: str
    placements: QuizPlacements
