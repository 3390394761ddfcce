from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.document_attendance_repository import DocumentAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_MAX_BATCH_WRITES, DEFAULT_TRANSACTION_ATTEMPTS
from .core.enums import StorageBackend
from .database.connection import DBConfig, DatabaseConnection
from .database.document_store import DocumentStore
from .database.memory_store import InMemoryDocumentStore
from .database.mysql_document_store import MySQLDocumentStore
from .imports.service import ImportService
from .leaderboard.service import LeaderboardService
from .points.document_point_repository import DocumentPointTotalRepository
from .points.ledger import PointLedger
from .quizzes.document_quiz_repository import DocumentQuizResultRepository
from .quizzes.service import QuizService
from .students.document_student_repository import DocumentStudentRepository
from .students.service import StudentService
from .teams.service import TeamShuffleService


@dataclass(frozen=True)
class Container:
    store: DocumentStore

    students_repo: DocumentStudentRepository
    attendance_repo: DocumentAttendanceRepository
    quizzes_repo: DocumentQuizResultRepository
    points_repo: DocumentPointTotalRepository

    ledger: PointLedger
    student_service: StudentService
    attendance_service: AttendanceService
    quiz_service: QuizService
    leaderboard_service: LeaderboardService
    import_service: ImportService
    team_service: TeamShuffleService


def build_store(
    backend: StorageBackend | str,
    *,
    db_config: Optional[dict] = None,
    max_batch_writes: int = DEFAULT_MAX_BATCH_WRITES,
    max_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
) -> DocumentStore:
    if not isinstance(backend, StorageBackend):
        backend = StorageBackend(str(backend).strip().lower())
    if backend is StorageBackend.MEMORY:
        return InMemoryDocumentStore(max_batch_writes=max_batch_writes, max_attempts=max_attempts)

    if not db_config:
        raise ValueError("DB_CONFIG is required for the mysql storage backend")
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return MySQLDocumentStore(conn, max_batch_writes=max_batch_writes, max_attempts=max_attempts)


def build_container(*, store: DocumentStore) -> Container:
    students_repo = DocumentStudentRepository(store)
    attendance_repo = DocumentAttendanceRepository(store)
    quizzes_repo = DocumentQuizResultRepository(store)
    points_repo = DocumentPointTotalRepository(store)

    ledger = PointLedger(store)
    student_service = StudentService(students_repo)
    attendance_service = AttendanceService(attendance_repo, students_repo)
    quiz_service = QuizService(ledger, quizzes_repo, attendance_repo, students_repo)
    leaderboard_service = LeaderboardService(students_repo, attendance_repo, points_repo)
    import_service = ImportService(students_repo, attendance_repo, max_batch_writes=store.max_batch_writes)
    team_service = TeamShuffleService(attendance_repo, students_repo)

    return Container(
        store=store,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        quizzes_repo=quizzes_repo,
        points_repo=points_repo,
        ledger=ledger,
        student_service=student_service,
        attendance_service=attendance_service,
        quiz_service=quiz_service,
        leaderboard_service=leaderboard_service,
        import_service=import_service,
        team_service=team_service,
    )
