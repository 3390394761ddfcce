from __future__ import annotations

import random

import pytest

from classroom_ledger.core.exceptions import NotFoundError, ValidationError
from classroom_ledger.students.seeding import seed_students


def test_add_trims_and_validates(container):
    student = container.student_service.add_student(name="  Ann  ", class_label=" 5A", mobile=" 0901 ")

    assert (student.name, student.class_label, student.mobile) == ("Ann", "5A", "0901")
    assert container.student_service.get_student(student.student_id) == student

    with pytest.raises(ValidationError):
        container.student_service.add_student(name="", class_label="5A")
    with pytest.raises(ValidationError):
        container.student_service.add_student(name="Ben", class_label="  ")
    with pytest.raises(ValidationError):
        container.student_service.add_student(name="Ben", class_label="5A", mobile="1" * 16)


def test_update_keeps_opening_balance(container, add_student):
    add_student("a", "Ann", opening=40)

    updated = container.student_service.update_student("a", name="Anne", class_label="6A", mobile="")

    assert (updated.name, updated.class_label, updated.opening_quiz_points) == ("Anne", "6A", 40)
    with pytest.raises(NotFoundError):
        container.student_service.update_student("ghost", name="X", class_label="1")


def test_delete(container, add_student):
    add_student("a", "Ann")
    container.student_service.delete_student("a")

    with pytest.raises(NotFoundError):
        container.student_service.get_student("a")
    with pytest.raises(NotFoundError):
        container.student_service.delete_student("a")


def test_list_is_sorted_by_class_then_name_and_search_filters(container, add_student):
    add_student("1", "Zoe", "5A")
    add_student("2", "amy", "5B")
    add_student("3", "Bob", "5A")

    assert [s.name for s in container.student_service.list_students()] == ["Bob", "Zoe", "amy"]
    assert [s.name for s in container.student_service.search_students("O")] == ["Bob", "Zoe"]
    assert len(container.student_service.search_students("  ")) == 3


def test_seed_creates_random_students_in_batches(container):
    created = seed_students(container.students_repo, 7, batch_size=3, rng=random.Random(1))

    students = container.students_repo.list_all()
    assert created == len(students) == 7
    assert all(s.name and s.class_label and len(s.mobile) <= 15 for s in students)
