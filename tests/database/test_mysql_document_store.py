from __future__ import annotations

import json

import mysql.connector
import pytest
from mysql.connector import errorcode

from classroom_ledger.core.exceptions import ConflictError, StorageError
from classroom_ledger.database.document_store import DELETE_FIELD, Write
from classroom_ledger.database.mysql_document_store import MySQLDocumentStore
from classroom_ledger.points.ledger import PointLedger
from classroom_ledger.quizzes.model import QuizPlacements


class FakeDatabase:
    """In-process stand-in for the ``documents`` table behind DatabaseConnection."""

    def __init__(self):
        self.rows = {}
        self.errors = []
        self.fail_inserts_with = None
        self.statements = []
        self.connections = 0

    def connect(self, *, with_database=True):
        self.connections += 1
        return FakeConnection(self)


class FakeConnection:
    def __init__(self, db):
        self.db = db
        self.pending = {}
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return FakeCursor(self)

    def view(self):
        rows = dict(self.db.rows)
        for key, body in self.pending.items():
            if body is None:
                rows.pop(key, None)
            else:
                rows[key] = body
        return rows

    def commit(self):
        for key, body in self.pending.items():
            if body is None:
                self.db.rows.pop(key, None)
            else:
                self.db.rows[key] = body
        self.pending = {}
        self.committed = True

    def rollback(self):
        self.pending = {}
        self.rolled_back = True

    def close(self):
        pass


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.result = []

    def execute(self, sql, params=()):
        db = self.conn.db
        statement = " ".join(sql.split())
        db.statements.append(statement)
        if db.errors:
            raise db.errors.pop(0)
        rows = self.conn.view()
        if statement.startswith("SELECT body"):
            body = rows.get((params[0], params[1]))
            self.result = [{"body": body}] if body is not None else []
        elif statement.startswith("SELECT doc_id, body"):
            self.result = [
                {"doc_id": doc_id, "body": body}
                for (collection, doc_id), body in sorted(rows.items())
                if collection == params[0]
            ]
        elif statement.startswith("INSERT"):
            if db.fail_inserts_with is not None:
                raise db.fail_inserts_with
            self.conn.pending[(params[0], params[1])] = params[2]
        elif statement.startswith("DELETE"):
            self.conn.pending[(params[0], params[1])] = None
        else:
            raise AssertionError(f"unexpected statement {statement}")

    def fetchone(self):
        return self.result[0] if self.result else None

    def fetchall(self):
        return list(self.result)

    def close(self):
        pass


def _deadlock():
    return mysql.connector.Error(msg="Deadlock found", errno=errorcode.ER_LOCK_DEADLOCK)


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def mysql_store(db):
    return MySQLDocumentStore(db, max_attempts=3)


def _increment(tx):
    current = tx.get("quiz_points/a") or {"total": 0}
    tx.set("quiz_points/a", {"total": current["total"] + 10})
    return current["total"] + 10


def test_transaction_retries_after_a_deadlock(db, mysql_store):
    db.errors.append(_deadlock())

    assert mysql_store.run_transaction(_increment) == 10

    assert json.loads(db.rows[("quiz_points", "a")]) == {"total": 10}
    assert db.connections == 2


def test_transaction_reads_lock_their_rows(db, mysql_store):
    mysql_store.run_transaction(_increment)
    assert db.statements[0].endswith("FOR UPDATE")


def test_transaction_gives_up_with_conflict_after_max_attempts(db, mysql_store):
    db.errors.extend(_deadlock() for _ in range(3))

    with pytest.raises(ConflictError):
        mysql_store.run_transaction(_increment)

    assert db.rows == {}
    assert db.connections == 3


def test_lock_wait_timeout_is_retried(db, mysql_store):
    db.errors.append(mysql.connector.Error(msg="Lock wait timeout", errno=errorcode.ER_LOCK_WAIT_TIMEOUT))
    assert mysql_store.run_transaction(_increment) == 10


def test_other_driver_errors_become_storage_errors_without_retry(db, mysql_store):
    db.errors.append(mysql.connector.Error(msg="Table doesn't exist", errno=errorcode.ER_NO_SUCH_TABLE))

    with pytest.raises(StorageError):
        mysql_store.run_transaction(_increment)

    assert db.connections == 1
    assert db.rows == {}


def test_failed_write_rolls_back_the_whole_transaction(db, mysql_store):
    mysql_store.set("quiz_points/a", {"total": 5})
    before = dict(db.rows)
    db.fail_inserts_with = mysql.connector.Error(msg="Disk full", errno=errorcode.ER_DISK_FULL)

    def _two_writes(tx):
        tx.delete("quiz_points/a")
        tx.set("quizzes/2024-07-01", {"first": "a"})

    with pytest.raises(StorageError):
        mysql_store.run_transaction(_two_writes)

    assert db.rows == before


def test_single_document_conflict_surfaces_as_conflict_error(db, mysql_store):
    db.errors.append(_deadlock())
    with pytest.raises(ConflictError):
        mysql_store.set("students/s1", {"name": "Alice"})


def test_batch_commit_merges_and_drops_fields(db, mysql_store):
    mysql_store.set("attendance/2024-07-01", {"s1": "Present", "s2": "Late"})

    mysql_store.batch_commit(
        [
            Write.merge("attendance/2024-07-01", {"s2": DELETE_FIELD, "s3": "Present"}),
            Write.merge("attendance/2024-07-02", {"s1": "Late"}),
            Write.delete("students/gone"),
        ]
    )

    assert mysql_store.get("attendance/2024-07-01") == {"s1": "Present", "s3": "Present"}
    assert mysql_store.get("attendance/2024-07-02") == {"s1": "Late"}
    assert mysql_store.list_collection("attendance") == {
        "2024-07-01": {"s1": "Present", "s3": "Present"},
        "2024-07-02": {"s1": "Late"},
    }


def test_ledger_runs_over_mysql_store(db, mysql_store):
    ledger = PointLedger(mysql_store)
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("a", "b", "c"))
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("b", "a"))

    assert ledger.find_inconsistencies() == {}
    assert mysql_store.list_collection("quiz_points") == {
        "a": {"total": 50},
        "b": {"total": 100},
        "c": {"total": 0},
    }

    summary = ledger.reset_all_quiz_points()
    assert summary.quiz_days_cleared == 1
    assert mysql_store.list_collection("quizzes") == {}
    assert any(s.startswith("SELECT doc_id, body") and s.endswith("FOR UPDATE") for s in db.statements)
