from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..core.constants import POINT_TOTALS_COLLECTION
from ..database.document_store import DocumentStore, doc_path
from .repository import PointTotalRepository


def point_total_path(student_id: str) -> str:
    return doc_path(POINT_TOTALS_COLLECTION, student_id)


def total_of(data: Optional[Mapping[str, Any]]) -> int:
    return int((data or {}).get("total") or 0)


class DocumentPointTotalRepository(PointTotalRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_total(self, student_id: str) -> int:
        return total_of(self._store.get(point_total_path(student_id)))

    def list_totals(self) -> Dict[str, int]:
        docs = self._store.list_collection(POINT_TOTALS_COLLECTION)
        return {sid: total_of(data) for sid, data in docs.items()}
