from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence, Tuple, TypeVar

from ..core.exceptions import ValidationError

T = TypeVar("T")
Document = Dict[str, Any]


# Merge-write value that removes the field. Compared by identity.
DELETE_FIELD = object()


class WriteKind(str, Enum):
    SET = "set"
    MERGE = "merge"
    DELETE = "delete"


@dataclass(frozen=True)
class Write:
    """One staged mutation of a document addressed as ``collection/doc_id``."""

    kind: WriteKind
    path: str
    data: Optional[Mapping[str, Any]] = None

    @classmethod
    def set(cls, path: str, data: Mapping[str, Any]) -> "Write":
        return cls(WriteKind.SET, path, dict(data))

    @classmethod
    def merge(cls, path: str, data: Mapping[str, Any]) -> "Write":
        return cls(WriteKind.MERGE, path, dict(data))

    @classmethod
    def delete(cls, path: str) -> "Write":
        return cls(WriteKind.DELETE, path)


def doc_path(collection: str, doc_id: str) -> str:
    if not collection or "/" in collection:
        raise ValidationError(f"Invalid collection name: {collection!r}")
    if not doc_id or "/" in str(doc_id):
        raise ValidationError(f"Invalid document id: {doc_id!r}")
    return f"{collection}/{doc_id}"


def split_path(path: str) -> Tuple[str, str]:
    parts = str(path).split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValidationError(f"Invalid document path: {path!r}")
    return parts[0], parts[1]


def apply_merge(existing: Optional[Mapping[str, Any]], fields: Mapping[str, Any]) -> Document:
    """Shallow-merge *fields* into *existing*; DELETE_FIELD values drop the key."""
    merged: Document = copy.deepcopy(dict(existing or {}))
    for key, value in fields.items():
        if value is DELETE_FIELD:
            merged.pop(key, None)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def apply_write(existing: Optional[Mapping[str, Any]], write: Write) -> Optional[Document]:
    """Resulting document after *write*, or None when the document is gone."""
    if write.kind is WriteKind.DELETE:
        return None
    if write.kind is WriteKind.MERGE:
        return apply_merge(existing, write.data or {})
    if any(v is DELETE_FIELD for v in (write.data or {}).values()):
        raise ValidationError("DELETE_FIELD is only allowed in merge writes")
    return copy.deepcopy(dict(write.data or {}))


def check_batch_size(writes: Sequence[Write], limit: int) -> None:
    if len(writes) > limit:
        raise ValidationError(f"Batch of {len(writes)} writes exceeds the limit of {limit}")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), max(1, int(size))):
        yield items[start:start + size]


class Transaction(Protocol):
    """Read/write view handed to ``DocumentStore.run_transaction`` callbacks.

    Reads see the transaction's own staged writes. Nothing is visible to other
    readers until the callback returns and the store commits.
    """

    def get(self, path: str) -> Optional[Document]:
        raise NotImplementedError

    def list_collection(self, collection: str) -> Dict[str, Document]:
        """Every document of *collection*; later inserts or deletes in it abort the commit."""
        raise NotImplementedError

    def set(self, path: str, data: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def merge(self, path: str, data: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError


@dataclass
class StagedTransaction:
    """Write-staging half of a transaction; stores supply ``_read`` and ``_read_collection``."""

    _staged: Dict[str, Optional[Document]] = field(default_factory=dict)
    _order: List[str] = field(default_factory=list)

    def _read(self, path: str) -> Optional[Document]:
        raise NotImplementedError

    def _read_collection(self, collection: str) -> Dict[str, Document]:
        raise NotImplementedError

    def get(self, path: str) -> Optional[Document]:
        split_path(path)
        if path in self._staged:
            staged = self._staged[path]
            return copy.deepcopy(staged) if staged is not None else None
        return self._read(path)

    def list_collection(self, collection: str) -> Dict[str, Document]:
        docs = self._read_collection(collection)
        for path in self._order:
            staged_collection, doc_id = split_path(path)
            if staged_collection != collection:
                continue
            staged = self._staged[path]
            if staged is None:
                docs.pop(doc_id, None)
            else:
                docs[doc_id] = copy.deepcopy(staged)
        return dict(sorted(docs.items()))

    def _stage(self, path: str, value: Optional[Document]) -> None:
        if path not in self._staged:
            self._order.append(path)
        self._staged[path] = value

    def set(self, path: str, data: Mapping[str, Any]) -> None:
        split_path(path)
        self._stage(path, apply_write(None, Write.set(path, data)))

    def merge(self, path: str, data: Mapping[str, Any]) -> None:
        self._stage(path, apply_merge(self.get(path), data))

    def delete(self, path: str) -> None:
        split_path(path)
        self._stage(path, None)

    @property
    def writes(self) -> List[Write]:
        out: List[Write] = []
        for path in self._order:
            value = self._staged[path]
            out.append(Write.delete(path) if value is None else Write.set(path, value))
        return out


class DocumentStore(Protocol):
    """Narrow persistence contract the ledger is written against.

    Each document (``collection/doc_id``) is an independently addressable unit.
    ``batch_commit`` is atomic per call; ``run_transaction`` is atomic across
    every document the callback touches.
    """

    def get(self, path: str) -> Optional[Document]:
        raise NotImplementedError

    def set(self, path: str, data: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError

    def list_collection(self, collection: str) -> Dict[str, Document]:
        raise NotImplementedError

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        raise NotImplementedError

    def batch_commit(self, writes: Sequence[Write]) -> None:
        raise NotImplementedError

    @property
    def max_batch_writes(self) -> int:
        raise NotImplementedError

    def transaction(
        self,
        path: str,
        update_fn: Callable[[Optional[Document]], Optional[Document]],
    ) -> Optional[Document]:
        """Atomically replace one document with ``update_fn(current)``.

        Returning None from ``update_fn`` deletes the document.
        """

        def _update(tx: Transaction) -> Optional[Document]:
            updated = update_fn(tx.get(path))
            if updated is None:
                tx.delete(path)
            else:
                tx.set(path, updated)
            return updated

        return self.run_transaction(_update)
