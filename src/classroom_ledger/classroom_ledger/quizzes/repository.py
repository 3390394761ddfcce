from __future__ import annotations

from typing import Protocol, Sequence

from .model import QuizDay, QuizPlacements


class QuizResultRepository(Protocol):
    def get_day_result(self, date_key: str) -> QuizPlacements:
        """Stored placements, or all-empty placements when nothing was logged."""

        raise NotImplementedError

    def set_day_result(self, date_key: str, placements: QuizPlacements) -> None:
        """Overwrite the date's placements wholesale (rejects duplicate placements)."""

        raise NotImplementedError

    def clear_day_result(self, date_key: str) -> None:
        raise NotImplementedError

    def list_days(self) -> Sequence[QuizDay]:
        raise NotImplementedError
