from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_MAX_BATCH_WRITES, DEFAULT_TRANSACTION_ATTEMPTS
from ..core.exceptions import ConflictError
from .document_store import (
    Document,
    DocumentStore,
    StagedTransaction,
    Transaction,
    Write,
    apply_write,
    check_batch_size,
    split_path,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


class _MemoryTransaction(StagedTransaction):
    def __init__(self, store: "InMemoryDocumentStore"):
        super().__init__()
        self._store = store
        self.read_versions: Dict[str, int] = {}
        self.collection_versions: Dict[str, int] = {}

    def _read(self, path: str) -> Optional[Document]:
        version, doc = self._store._snapshot(path)
        self.read_versions.setdefault(path, version)
        return doc

    def _read_collection(self, collection: str) -> Dict[str, Document]:
        version, docs = self._store._list_snapshot(collection)
        self.collection_versions.setdefault(collection, version)
        return docs


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe, versioned document store kept in process memory.

    Transactions are optimistic: every document and collection read is
    remembered with its version and the commit is refused if any of them
    changed meanwhile. The callback is then re-run, up to ``max_attempts``
    times.
    """

    def __init__(
        self,
        *,
        max_batch_writes: int = DEFAULT_MAX_BATCH_WRITES,
        max_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
    ):
        self._docs: Dict[str, Document] = {}
        self._versions: Dict[str, int] = {}
        # Bumped on every write into the collection.
        self._collection_versions: Dict[str, int] = {}
        self._lock = threading.RLock()
        self._max_batch_writes = int(max_batch_writes)
        self._max_attempts = max(1, int(max_attempts))

    @property
    def max_batch_writes(self) -> int:
        return self._max_batch_writes

    def _snapshot(self, path: str):
        split_path(path)
        with self._lock:
            doc = self._docs.get(path)
            return self._versions.get(path, 0), (copy.deepcopy(doc) if doc is not None else None)

    def _apply(self, writes: Sequence[Write]) -> None:
        # Caller holds the lock.
        for w in writes:
            updated = apply_write(self._docs.get(w.path), w)
            if updated is None:
                self._docs.pop(w.path, None)
            else:
                self._docs[w.path] = updated
            self._versions[w.path] = self._versions.get(w.path, 0) + 1
            collection = split_path(w.path)[0]
            self._collection_versions[collection] = self._collection_versions.get(collection, 0) + 1

    def _commit(self, writes: Sequence[Write]) -> None:
        self._apply(writes)

    def get(self, path: str) -> Optional[Document]:
        return self._snapshot(path)[1]

    def set(self, path: str, data: Mapping[str, Any]) -> None:
        split_path(path)
        with self._lock:
            self._commit([Write.set(path, data)])

    def delete(self, path: str) -> None:
        split_path(path)
        with self._lock:
            self._commit([Write.delete(path)])

    def _list_snapshot(self, collection: str):
        prefix = f"{collection}/"
        with self._lock:
            docs = {
                path[len(prefix):]: copy.deepcopy(doc)
                for path, doc in sorted(self._docs.items())
                if path.startswith(prefix)
            }
            return self._collection_versions.get(collection, 0), docs

    def list_collection(self, collection: str) -> Dict[str, Document]:
        return self._list_snapshot(collection)[1]

    def batch_commit(self, writes: Sequence[Write]) -> None:
        writes = list(writes)
        check_batch_size(writes, self._max_batch_writes)
        for w in writes:
            split_path(w.path)
        with self._lock:
            # Validate every write before touching state so the batch stays all-or-nothing.
            staged: Dict[str, Optional[Document]] = {}
            for w in writes:
                base = staged[w.path] if w.path in staged else self._docs.get(w.path)
                staged[w.path] = apply_write(base, w)
            self._commit(writes)

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        for attempt in range(1, self._max_attempts + 1):
            tx = _MemoryTransaction(self)
            result = fn(tx)
            with self._lock:
                stale = [p for p, v in tx.read_versions.items() if self._versions.get(p, 0) != v]
                stale += [
                    f"{c}/*" for c, v in tx.collection_versions.items() if self._collection_versions.get(c, 0) != v
                ]
                if not stale:
                    self._commit(tx.writes)
                    return result
            logger.info("Transaction attempt %s/%s hit concurrent writes on %s", attempt, self._max_attempts, stale)
        raise ConflictError(f"Transaction aborted after {self._max_attempts} attempts due to concurrent writes")
