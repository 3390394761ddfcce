from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

from ..common.validators import require_max_length, require_non_empty
from ..core.constants import MAX_MOBILE_LENGTH
from ..core.exceptions import NotFoundError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentService:
    """Use case: manage the roster (add, edit, remove, list)."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def get_student(self, student_id: str) -> Student:
        student = self._students.get_by_id(str(student_id))
        if not student:
            raise NotFoundError(f"Student {student_id} does not exist")
        return student

    def add_student(self, *, name: str, class_label: str, mobile: Optional[str] = None) -> Student:
        student = Student(
            student_id=self._students.new_id(),
            name=require_non_empty(name, "Name"),
            class_label=require_non_empty(class_label, "Class"),
            mobile=require_max_length(mobile, "Mobile number", MAX_MOBILE_LENGTH),
        )
        self._students.save(student)
        logger.info("Added student %s (%s)", student.student_id, student.class_label)
        return student

    def update_student(
        self,
        student_id: str,
        *,
        name: str,
        class_label: str,
        mobile: Optional[str] = None,
    ) -> Student:
        current = self.get_student(student_id)
        updated = replace(
            current,
            name=require_non_empty(name, "Name"),
            class_label=require_non_empty(class_label, "Class"),
            mobile=require_max_length(mobile, "Mobile number", MAX_MOBILE_LENGTH),
        )
        self._students.save(updated)
        return updated

    def delete_student(self, student_id: str) -> None:
        # Attendance and quiz history written under this id stays behind;
        # read models skip ids that are no longer on the roster.
        if not self._students.delete_by_id(str(student_id)):
            raise NotFoundError(f"Student {student_id} does not exist")
        logger.info("Deleted student %s", student_id)

    def list_students(self) -> List[Student]:
        return sorted(self._students.list_all(), key=lambda s: (s.class_label.lower(), s.name.lower(), s.student_id))

    def search_students(self, term: str) -> List[Student]:
        needle = (term or "").strip().lower()
        students = self.list_students()
        if not needle:
            return students
        return [s for s in students if needle in s.name.lower()]
