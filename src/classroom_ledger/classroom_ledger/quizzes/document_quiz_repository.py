from __future__ import annotations

from typing import Sequence

from ..core.constants import QUIZZES_COLLECTION
from ..database.document_store import DocumentStore, doc_path
from .model import QuizDay, QuizPlacements
from .repository import QuizResultRepository


def quiz_day_path(date_key: str) -> str:
    return doc_path(QUIZZES_COLLECTION, date_key)


class DocumentQuizResultRepository(QuizResultRepository):
    """Plain storage of quiz days.

    Note: this does not touch point totals. Logging a result for scoring goes
    through ``PointLedger.apply_quiz_result``.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def get_day_result(self, date_key: str) -> QuizPlacements:
        return QuizPlacements.from_document(self._store.get(quiz_day_path(date_key)))

    def set_day_result(self, date_key: str, placements: QuizPlacements) -> None:
        placements.validate()
        self._store.set(quiz_day_path(date_key), placements.to_document())

    def clear_day_result(self, date_key: str) -> None:
        self._store.delete(quiz_day_path(date_key))

    def list_days(self) -> Sequence[QuizDay]:
        docs = self._store.list_collection(QUIZZES_COLLECTION)
        return [QuizDay(date_key=k, placements=QuizPlacements.from_document(v)) for k, v in docs.items()]
