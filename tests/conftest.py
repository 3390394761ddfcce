from __future__ import annotations

import pytest

from classroom_ledger.container import build_container
from classroom_ledger.database.memory_store import InMemoryDocumentStore
from classroom_ledger.students.model import Student


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def container(store):
    return build_container(store=store)


@pytest.fixture
def add_student(container):
    """Put a student on the roster with a readable id (``add_student("alice", "Alice")``)."""

    def _add(student_id: str, name: str, class_label: str = "5A", mobile: str = "", opening: int = 0) -> Student:
        student = Student(
            student_id=student_id,
            name=name,
            class_label=class_label,
            mobile=mobile,
            opening_quiz_points=opening,
        )
        container.students_repo.save(student)
        return student

    return _add
