from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..core.constants import DEFAULT_MAX_BATCH_WRITES
from ..core.enums import AttendanceStatus
from ..core.exceptions import StorageError, ValidationError
from ..database.document_store import chunked
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import ImportResult, ImportRow

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]
CancelCheck = Callable[[], bool]


class ImportService:
    """Use case: merge spreadsheet rows into the roster and attendance.

    Students are matched on ``lower(name) + "_" + mobile``. Known students are
    never re-created, but their rows still contribute attendance. Attendance is
    committed one date per batch and merged into what the date already holds.
    """

    def __init__(
        self,
        students: StudentRepository,
        attendance: AttendanceRepository,
        *,
        max_batch_writes: int = DEFAULT_MAX_BATCH_WRITES,
    ):
        self._students = students
        self._attendance = attendance
        self._max_batch_writes = int(max_batch_writes)

    def import_rows(
        self,
        rows: Iterable[Mapping[Any, Any]],
        *,
        on_progress: Optional[ProgressCallback] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> ImportResult:
        rows = list(rows)
        result = ImportResult(total_rows=len(rows))

        # Loaded once so every row of the run is checked against the same roster.
        known: Dict[str, str] = {}
        for s in self._students.list_all():
            known.setdefault(s.dedup_key, s.student_id)

        pending: List[Student] = []
        staged: Dict[str, Dict[str, AttendanceStatus]] = {}

        for index, fields in enumerate(rows, start=1):
            try:
                if not isinstance(fields, Mapping):
                    raise ValidationError(f"Expected a field map, got {type(fields).__name__}")
                row = ImportRow.from_fields(fields)
            except ValidationError as e:
                result.failed += 1
                result.row_errors.append(f"Row {index}: {e}")
                logger.warning("Import row %s rejected: %s", index, e)
            else:
                student_id = known.get(row.dedup_key)
                if student_id is not None:
                    result.duplicates += 1
                else:
                    student_id = self._students.new_id()
                    pending.append(
                        Student(
                            student_id=student_id,
                            name=row.name,
                            class_label=row.class_label,
                            mobile=row.mobile,
                            opening_quiz_points=row.quiz_points,
                        )
                    )
                    known[row.dedup_key] = student_id
                    result.created += 1

                for date_key, status in row.statuses.items():
                    staged.setdefault(date_key, {})[student_id] = status

            if on_progress:
                on_progress(index / len(rows))

        if not rows and on_progress:
            on_progress(1.0)

        student_batches = list(chunked(pending, self._max_batch_writes))
        result.student_batches_total = len(student_batches)
        result.date_batches_total = len(staged)

        if self._commit_students(student_batches, result, should_cancel):
            self._commit_dates(staged, result, should_cancel)

        logger.info(
            "Import finished: %s created, %s duplicates, %s failed, %s/%s date batches%s",
            result.created,
            result.duplicates,
            result.failed,
            result.date_batches_committed,
            result.date_batches_total,
            "" if result.complete else " (incomplete)",
        )
        return result

    def _commit_students(
        self,
        batches: Sequence[Sequence[Student]],
        result: ImportResult,
        should_cancel: Optional[CancelCheck],
    ) -> bool:
        for batch in batches:
            if should_cancel and should_cancel():
                result.cancelled = True
                return False
            try:
                self._students.create_many(batch)
            except StorageError as e:
                # Attendance for students that were never created must not be written.
                result.error = f"Student batch {result.student_batches_committed + 1} failed: {e}"
                logger.error(result.error)
                return False
            result.student_batches_committed += 1
        return True

    def _commit_dates(
        self,
        staged: Mapping[str, Mapping[str, AttendanceStatus]],
        result: ImportResult,
        should_cancel: Optional[CancelCheck],
    ) -> None:
        for date_key in sorted(staged):
            if should_cancel and should_cancel():
                result.cancelled = True
                return
            try:
                self._attendance.merge_statuses(date_key, staged[date_key])
            except StorageError as e:
                result.error = f"Attendance batch for {date_key} failed: {e}"
                logger.error(result.error)
                return
            result.date_batches_committed += 1
