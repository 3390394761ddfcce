from __future__ import annotations

from typing import Dict, Protocol


class PointTotalRepository(Protocol):
    """Read access to cached cumulative quiz totals.

    Writes happen only inside ``PointLedger`` transactions.
    """

    def get_total(self, student_id: str) -> int:
        raise NotImplementedError

    def list_totals(self) -> Dict[str, int]:
        raise NotImplementedError
