from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..core.constants import STUDENTS_COLLECTION
from ..database.document_store import DocumentStore, Write, doc_path
from .model import Student
from .repository import StudentRepository


def student_path(student_id: str) -> str:
    return doc_path(STUDENTS_COLLECTION, student_id)


class DocumentStudentRepository(StudentRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def new_id(self) -> str:
        return uuid.uuid4().hex[:20]

    def get_by_id(self, student_id: str) -> Optional[Student]:
        data = self._store.get(student_path(student_id))
        if data is None:
            return None
        return Student.from_document(student_id, data)

    def list_all(self) -> Sequence[Student]:
        docs = self._store.list_collection(STUDENTS_COLLECTION)
        return [Student.from_document(sid, data) for sid, data in docs.items()]

    def save(self, student: Student) -> None:
        self._store.set(student_path(student.student_id), student.to_document())

    def create_many(self, students: Sequence[Student]) -> None:
        if not students:
            return
        self._store.batch_commit([Write.set(student_path(s.student_id), s.to_document()) for s in students])

    def delete_by_id(self, student_id: str) -> bool:
        path = student_path(student_id)
        if self._store.get(path) is None:
            return False
        self._store.delete(path)
        return True
