from __future__ import annotations

import pytest

from classroom_ledger.core.exceptions import ConflictError, ValidationError
from classroom_ledger.database.document_store import DELETE_FIELD, Write, chunked, doc_path
from classroom_ledger.database.memory_store import InMemoryDocumentStore


def test_merge_keeps_other_fields_and_delete_field_drops_one():
    store = InMemoryDocumentStore()
    store.set("attendance/2024-07-01", {"s1": "Present", "s2": "Late"})

    store.batch_commit([Write.merge("attendance/2024-07-01", {"s2": DELETE_FIELD, "s3": "Present"})])

    assert store.get("attendance/2024-07-01") == {"s1": "Present", "s3": "Present"}


def test_transaction_merge_drops_fields_marked_for_deletion():
    store = InMemoryDocumentStore()
    store.set("attendance/2024-07-01", {"s1": "Present", "s2": "Late"})

    store.run_transaction(lambda tx: tx.merge("attendance/2024-07-01", {"s1": DELETE_FIELD, "s3": "Late"}))

    assert store.get("attendance/2024-07-01") == {"s2": "Late", "s3": "Late"}


def test_merge_creates_missing_document():
    store = InMemoryDocumentStore()
    store.batch_commit([Write.merge("attendance/2024-07-02", {"s1": "Late"})])
    assert store.get("attendance/2024-07-02") == {"s1": "Late"}


def test_batch_over_limit_is_rejected_without_writing():
    store = InMemoryDocumentStore(max_batch_writes=2)
    writes = [Write.set(f"students/s{i}", {"name": str(i)}) for i in range(3)]

    with pytest.raises(ValidationError):
        store.batch_commit(writes)

    assert store.list_collection("students") == {}


def test_batch_is_all_or_nothing():
    store = InMemoryDocumentStore()
    writes = [
        Write.set("students/a", {"name": "A"}),
        Write.set("students/b", {"name": DELETE_FIELD}),
    ]

    with pytest.raises(ValidationError):
        store.batch_commit(writes)

    assert store.get("students/a") is None


def test_reads_return_copies():
    store = InMemoryDocumentStore()
    store.set("quiz_points/a", {"total": 100})

    store.get("quiz_points/a")["total"] = 0
    store.list_collection("quiz_points")["a"]["total"] = 0

    assert store.get("quiz_points/a") == {"total": 100}


def test_transaction_reads_its_own_writes():
    store = InMemoryDocumentStore()

    def _fn(tx):
        tx.set("quiz_points/a", {"total": 50})
        tx.merge("quiz_points/a", {"note": "x"})
        return tx.get("quiz_points/a")

    assert store.run_transaction(_fn) == {"total": 50, "note": "x"}
    assert store.get("quiz_points/a") == {"total": 50, "note": "x"}


def test_transaction_retries_after_concurrent_write():
    store = InMemoryDocumentStore()
    store.set("quiz_points/a", {"total": 0})
    attempts = []

    def _increment(tx):
        attempts.append(1)
        current = tx.get("quiz_points/a")["total"]
        if len(attempts) == 1:
            # Another writer lands between our read and our commit.
            store.set("quiz_points/a", {"total": 10})
        tx.set("quiz_points/a", {"total": current + 1})

    store.run_transaction(_increment)

    assert len(attempts) == 2
    assert store.get("quiz_points/a") == {"total": 11}


def test_transaction_listing_sees_staged_writes():
    store = InMemoryDocumentStore()
    store.set("quizzes/2024-07-01", {"first": "a"})
    store.set("quizzes/2024-07-02", {"first": "b"})

    def _fn(tx):
        tx.delete("quizzes/2024-07-01")
        tx.set("quizzes/2024-07-03", {"first": "c"})
        return tx.list_collection("quizzes")

    assert store.run_transaction(_fn) == {"2024-07-02": {"first": "b"}, "2024-07-03": {"first": "c"}}


def test_transaction_retries_when_its_listed_collection_gains_a_document():
    store = InMemoryDocumentStore()
    store.set("quizzes/2024-07-01", {"first": "a"})
    attempts = []

    def _clear(tx):
        attempts.append(1)
        keys = list(tx.list_collection("quizzes"))
        if len(attempts) == 1:
            store.set("quizzes/2024-07-02", {"first": "b"})
        for key in keys:
            tx.delete(f"quizzes/{key}")
        return keys

    assert store.run_transaction(_clear) == ["2024-07-01", "2024-07-02"]
    assert len(attempts) == 2
    assert store.list_collection("quizzes") == {}


def test_transaction_gives_up_with_conflict_error_and_writes_nothing():
    store = InMemoryDocumentStore(max_attempts=3)
    store.set("quiz_points/a", {"total": 0})
    attempts = []

    def _always_raced(tx):
        attempts.append(1)
        tx.get("quiz_points/a")
        store.set("quiz_points/a", {"total": len(attempts) * 100})
        tx.set("quiz_points/b", {"total": 25})

    with pytest.raises(ConflictError):
        store.run_transaction(_always_raced)

    assert len(attempts) == 3
    assert store.get("quiz_points/b") is None


def test_error_inside_transaction_commits_nothing():
    store = InMemoryDocumentStore()

    def _fails(tx):
        tx.set("quiz_points/a", {"total": 100})
        raise ValidationError("boom")

    with pytest.raises(ValidationError):
        store.run_transaction(_fails)

    assert store.get("quiz_points/a") is None


def test_transaction_helper_updates_and_deletes():
    store = InMemoryDocumentStore()

    store.transaction("quiz_points/a", lambda cur: {"total": (cur or {}).get("total", 0) + 25})
    store.transaction("quiz_points/a", lambda cur: {"total": cur["total"] + 25})
    assert store.get("quiz_points/a") == {"total": 50}

    store.transaction("quiz_points/a", lambda cur: None)
    assert store.get("quiz_points/a") is None


def test_invalid_paths_are_rejected():
    store = InMemoryDocumentStore()
    with pytest.raises(ValidationError):
        store.get("no-collection")
    with pytest.raises(ValidationError):
        doc_path("students", "a/b")


def test_chunked_splits_in_order():
    assert [list(c) for c in chunked([1, 2, 3, 4, 5], 2)] == [[1, 2], [3, 4], [5]]
    assert list(chunked([], 500)) == []
