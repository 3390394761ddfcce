from __future__ import annotations

from typing import Mapping, Sequence

from ..core.constants import ATTENDANCE_COLLECTION
from ..core.enums import AttendanceStatus
from ..database.document_store import DELETE_FIELD, DocumentStore, Write, doc_path
from .model import AttendanceDay
from .repository import AttendanceRepository


def attendance_path(date_key: str) -> str:
    return doc_path(ATTENDANCE_COLLECTION, date_key)


def _field_value(status: AttendanceStatus):
    return status.value if status.attended else DELETE_FIELD


class DocumentAttendanceRepository(AttendanceRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_day(self, date_key: str) -> AttendanceDay:
        return AttendanceDay.from_document(date_key, self._store.get(attendance_path(date_key)))

    def list_days(self) -> Sequence[AttendanceDay]:
        docs = self._store.list_collection(ATTENDANCE_COLLECTION)
        return [AttendanceDay.from_document(date_key, data) for date_key, data in docs.items()]

    def set_status(self, date_key: str, student_id: str, status: AttendanceStatus) -> None:
        self.merge_statuses(date_key, {student_id: status})

    def merge_statuses(self, date_key: str, statuses: Mapping[str, AttendanceStatus]) -> None:
        if not statuses:
            return
        fields = {str(sid): _field_value(status) for sid, status in statuses.items()}
        self._store.batch_commit([Write.merge(attendance_path(date_key), fields)])

    def reset_day(self, date_key: str) -> None:
        self._store.set(attendance_path(date_key), {})
