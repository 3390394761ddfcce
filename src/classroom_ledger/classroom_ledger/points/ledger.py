from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from ..common.datetime_utils import to_date_key
from ..core.constants import POINT_TOTALS_COLLECTION, QUIZZES_COLLECTION, STUDENTS_COLLECTION
from ..database.document_store import DocumentStore, Transaction
from ..quizzes.document_quiz_repository import quiz_day_path
from ..quizzes.model import QuizPlacements
from ..students.document_student_repository import student_path
from .document_point_repository import point_total_path, total_of
from .rules import awarded_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerChange:
    """Outcome of one quiz-result application."""

    date_key: str
    previous: QuizPlacements
    current: QuizPlacements
    deltas: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ResetSummary:
    quiz_days_cleared: int
    totals_cleared: int
    opening_balances_cleared: int


def _net_deltas(previous: QuizPlacements, current: QuizPlacements) -> Dict[str, int]:
    deltas: Dict[str, int] = {}
    for sid, pts in awarded_points(previous).items():
        deltas[sid] = deltas.get(sid, 0) - pts
    for sid, pts in awarded_points(current).items():
        deltas[sid] = deltas.get(sid, 0) + pts
    return {sid: d for sid, d in deltas.items() if d}


class PointLedger:
    """Keeps cumulative quiz totals consistent with the quiz-day history.

    For every student s: ``total[s] == sum of points the stored quiz days award s``.
    Every mutation reads the date's previous placements, undoes them, applies the
    new ones and rewrites the quiz day inside one store transaction, so re-logging
    a date never double counts and a failure leaves nothing half-applied.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    @staticmethod
    def _apply_in(tx: Transaction, date_key: str, placements: QuizPlacements) -> LedgerChange:
        previous = QuizPlacements.from_document(tx.get(quiz_day_path(date_key)))
        deltas = _net_deltas(previous, placements)
        for sid, delta in deltas.items():
            path = point_total_path(sid)
            tx.set(path, {"total": total_of(tx.get(path)) + delta})
        tx.set(quiz_day_path(date_key), placements.to_document())
        return LedgerChange(date_key=date_key, previous=previous, current=placements, deltas=deltas)

    def apply_quiz_result(self, date: Any, placements: QuizPlacements) -> LedgerChange:
        date_key = to_date_key(date)
        placements.validate()

        change = self._store.run_transaction(lambda tx: self._apply_in(tx, date_key, placements))
        logger.info("Quiz %s logged %s, point deltas %s", date_key, placements.to_document(), change.deltas)
        return change

    def reset_day_quiz_points(self, date: Any) -> LedgerChange:
        date_key = to_date_key(date)

        def _reset(tx: Transaction) -> LedgerChange:
            change = self._apply_in(tx, date_key, QuizPlacements())
            tx.delete(quiz_day_path(date_key))
            return change

        change = self._store.run_transaction(_reset)
        logger.info("Quiz %s reset, point deltas %s", date_key, change.deltas)
        return change

    def reset_all_quiz_points(self) -> ResetSummary:
        """Zero every total and opening balance, and drop every quiz day with them.

        Quiz days go together with the totals: zero totals must match an empty
        quiz history. The collections are listed inside the transaction, so a
        quiz day logged concurrently either lands before the reset and is
        cleared with it, or forces the reset to retry.
        """

        def _reset_all(tx: Transaction) -> ResetSummary:
            quiz_keys = list(tx.list_collection(QUIZZES_COLLECTION))
            total_ids = list(tx.list_collection(POINT_TOTALS_COLLECTION))
            students = tx.list_collection(STUDENTS_COLLECTION)
            opening_ids = [sid for sid, data in students.items() if int(data.get("quizPoints") or 0)]
            for date_key in quiz_keys:
                tx.delete(quiz_day_path(date_key))
            for sid in total_ids:
                tx.delete(point_total_path(sid))
            for sid in opening_ids:
                tx.merge(student_path(sid), {"quizPoints": 0})
            return ResetSummary(len(quiz_keys), len(total_ids), len(opening_ids))

        summary = self._store.run_transaction(_reset_all)
        logger.info("All quiz points reset: %s", summary)
        return summary

    def expected_totals(self) -> Dict[str, int]:
        """Totals recomputed from the quiz-day history alone."""
        expected: Dict[str, int] = {}
        for data in self._store.list_collection(QUIZZES_COLLECTION).values():
            for sid, pts in awarded_points(QuizPlacements.from_document(data)).items():
                expected[sid] = expected.get(sid, 0) + pts
        return expected

    def find_inconsistencies(self) -> Dict[str, Tuple[int, int]]:
        """student id -> (stored total, expected total) wherever the two disagree."""
        stored = {
            sid: total_of(data) for sid, data in self._store.list_collection(POINT_TOTALS_COLLECTION).items()
        }
        expected = self.expected_totals()
        out: Dict[str, Tuple[int, int]] = {}
        for sid in sorted(set(stored) | set(expected)):
            if stored.get(sid, 0) != expected.get(sid, 0):
                out[sid] = (stored.get(sid, 0), expected.get(sid, 0))
        return out
