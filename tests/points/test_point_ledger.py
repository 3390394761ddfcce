from __future__ import annotations

import threading

import pytest

from classroom_ledger.core.exceptions import DuplicatePlacement, StorageError, ValidationError
from classroom_ledger.database.memory_store import InMemoryDocumentStore
from classroom_ledger.points.document_point_repository import DocumentPointTotalRepository
from classroom_ledger.points.ledger import PointLedger
from classroom_ledger.quizzes.document_quiz_repository import DocumentQuizResultRepository
from classroom_ledger.quizzes.model import QuizPlacements
from classroom_ledger.students.document_student_repository import DocumentStudentRepository
from classroom_ledger.students.model import Student


class FlakyStore(InMemoryDocumentStore):
    """Memory store whose next commit can be made to fail."""

    def __init__(self):
        super().__init__()
        self.fail_next_commit = False

    def _commit(self, writes):
        if self.fail_next_commit:
            self.fail_next_commit = False
            raise StorageError("disk full")
        super()._commit(writes)


class InterleavingStore(InMemoryDocumentStore):
    """Memory store that runs a callback right after its first students listing."""

    def __init__(self):
        super().__init__()
        self.on_students_listed = None

    def _list_snapshot(self, collection):
        snapshot = super()._list_snapshot(collection)
        if collection == "students" and self.on_students_listed is not None:
            callback, self.on_students_listed = self.on_students_listed, None
            callback()
        return snapshot


def _totals(store):
    return {sid: t for sid, t in DocumentPointTotalRepository(store).list_totals().items() if t}


def test_first_result_awards_podium_points():
    store = InMemoryDocumentStore()
    ledger = PointLedger(store)

    change = ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("a", "b", "c"))

    assert change.deltas == {"a": 100, "b": 50, "c": 25}
    assert _totals(store) == {"a": 100, "b": 50, "c": 25}
    assert DocumentQuizResultRepository(store).get_day_result("2024-07-01") == QuizPlacements.of("a", "b", "c")


def test_relogging_a_date_replaces_its_contribution():
    store = InMemoryDocumentStore()
    ledger = PointLedger(store)
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("a", "b", "c"))

    change = ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("b", "a", "c"))

    assert change.previous == QuizPlacements.of("a", "b", "c")
    assert change.deltas == {"a": -50, "b": 50}
    assert _totals(store) == {"a": 50, "b": 100, "c": 25}


def test_same_result_twice_is_idempotent():
    store = InMemoryDocumentStore()
    ledger = PointLedger(store)
    placements = QuizPlacements.of("a", None, "c")

    ledger.apply_quiz_result("2024-07-01", placements)
    once = _totals(store)
    change = ledger.apply_quiz_result("2024-07-01", placements)

    assert change.deltas == {}
    assert _totals(store) == once == {"a": 100, "c": 25}


def test_reedit_does_not_double_count():
    store = InMemoryDocumentStore()
    ledger = PointLedger(store)
    ledger.apply_quiz_result("2024-06-30", QuizPlacements.of("a"))
    before = _totals(store)

    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of(first="a"))
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of(first="b"))

    assert _totals(store)["a"] == before["a"]
    assert _totals(store)["b"] == before.get("b", 0) + 100


def test_totals_match_history_after_many_edits():
    store = InMemoryDocumentStore()
    ledger = PointLedger(store)
    edits = [
        ("2024-07-01", ("a", "b", "c")),
        ("2024-07-02", ("c", None, "a")),
        ("2024-07-01", ("b", "c", None)),
        ("2024-07-03", ("d", "a", "b")),
        ("2024-07-02", (None, None, None)),
        ("2024-07-03", ("a", "d", "b")),
        ("2024-07-01", ("b", "c", None)),
    ]
    for date_key, (first, second, third) in edits:
        ledger.apply_quiz_result(date_key, QuizPlacements.of(first, second, third))
        assert ledger.find_inconsistencies() == {}

    assert _totals(store) == {"a": 100, "b": 125, "c": 50, "d": 50}
    assert ledger.expected_totals() == {"a": 100, "b": 125, "c": 50, "d": 50}


def test_duplicate_placement_leaves_state_unchanged():
    store = InMemoryDocumentStore()
    ledger = PointLedger(store)
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("a", "b"))
    before = (store.list_collection("quiz_points"), store.list_collection("quizzes"))

    with pytest.raises(DuplicatePlacement):
        ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("b", "b"))

    assert (store.list_collection("quiz_points"), store.list_collection("quizzes")) == before


def test_duplicate_placement_is_a_validation_error():
    with pytest.raises(ValidationError):
        QuizPlacements.of("a", "b", "a").validate()


def test_storage_failure_applies_nothing():
    store = FlakyStore()
    ledger = PointLedger(store)
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("a", "b"))

    store.fail_next_commit = True
    with pytest.raises(StorageError):
        ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("c", "a"))

    assert _totals(store) == {"a": 100, "b": 50}
    assert DocumentQuizResultRepository(store).get_day_result("2024-07-01") == QuizPlacements.of("a", "b")


def test_reset_day_removes_its_points_and_record():
    store = InMemoryDocumentStore()
    ledger = PointLedger(store)
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("a", "b", "c"))
    ledger.apply_quiz_result("2024-07-02", QuizPlacements.of("c"))

    change = ledger.reset_day_quiz_points("2024-07-01")

    assert change.deltas == {"a": -100, "b": -50, "c": -25}
    assert _totals(store) == {"c": 100}
    assert store.get("quizzes/2024-07-01") is None
    assert ledger.find_inconsistencies() == {}


def test_reset_day_without_a_record_is_a_no_op():
    store = InMemoryDocumentStore()
    change = PointLedger(store).reset_day_quiz_points("2024-07-05")
    assert change.deltas == {}
    assert store.list_collection("quiz_points") == {}


def test_reset_all_clears_totals_history_and_opening_balances():
    store = InMemoryDocumentStore()
    students = DocumentStudentRepository(store)
    students.save(Student("a", "Alice", "5A", opening_quiz_points=40))
    students.save(Student("b", "Bob", "5A"))
    ledger = PointLedger(store)
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("a", "b"))
    ledger.apply_quiz_result("2024-07-02", QuizPlacements.of("b"))

    summary = ledger.reset_all_quiz_points()

    assert summary.quiz_days_cleared == 2
    assert summary.totals_cleared == 2
    assert summary.opening_balances_cleared == 1
    assert store.list_collection("quiz_points") == {}
    assert store.list_collection("quizzes") == {}
    assert students.get_by_id("a").opening_quiz_points == 0
    assert students.get_by_id("a").name == "Alice"

    # Editing an old date afterwards must not resurrect stale totals.
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("b"))
    assert _totals(store) == {"b": 100}


def test_find_inconsistencies_reports_drift():
    store = InMemoryDocumentStore()
    ledger = PointLedger(store)
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("a"))
    store.set("quiz_points/a", {"total": 75})
    store.set("quiz_points/z", {"total": 5})

    assert ledger.find_inconsistencies() == {"a": (75, 100), "z": (5, 0)}


def test_reset_all_clears_a_quiz_day_logged_while_it_runs():
    store = InterleavingStore()
    ledger = PointLedger(store)
    ledger.apply_quiz_result("2024-07-01", QuizPlacements.of("b"))
    store.on_students_listed = lambda: ledger.apply_quiz_result("2024-07-02", QuizPlacements.of(first="a"))

    summary = ledger.reset_all_quiz_points()

    assert store.on_students_listed is None
    assert summary.quiz_days_cleared == 2
    assert store.list_collection("quizzes") == {}
    assert store.list_collection("quiz_points") == {}
    assert ledger.find_inconsistencies() == {}


def test_concurrent_relogs_of_one_date_keep_totals_consistent():
    store = InMemoryDocumentStore(max_attempts=1000)
    ledger = PointLedger(store)
    podiums = [("a", "b", "c"), ("b", "c", "d"), ("d", None, "a"), (None, "a", "b")]
    errors = []

    def relog(offset):
        try:
            for i in range(50):
                ledger.apply_quiz_result("2024-07-01", QuizPlacements.of(*podiums[(offset + i) % len(podiums)]))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=relog, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert ledger.find_inconsistencies() == {}
    final = DocumentQuizResultRepository(store).get_day_result("2024-07-01")
    assert _totals(store) == {sid: pts for sid, pts in ledger.expected_totals().items() if pts}
    assert final in {QuizPlacements.of(*p) for p in podiums}
