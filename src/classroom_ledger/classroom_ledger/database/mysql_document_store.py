from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, TypeVar

import mysql.connector
from mysql.connector import errorcode

from ..core.constants import DEFAULT_MAX_BATCH_WRITES, DEFAULT_TRANSACTION_ATTEMPTS
from ..core.exceptions import ConflictError, StorageError
from .connection import DatabaseConnection
from .document_store import (
    Document,
    DocumentStore,
    StagedTransaction,
    Transaction,
    Write,
    WriteKind,
    apply_write,
    check_batch_size,
    split_path,
)
from .mysql_base import db_cursor, decode_json_body, encode_json_body, fetchall, fetchone

T = TypeVar("T")

logger = logging.getLogger(__name__)

_CONFLICT_ERRNOS = {errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT}


class _RetryableConflict(Exception):
    pass


@contextmanager
def _storage_errors(action: str):
    try:
        yield
    except mysql.connector.Error as e:
        if getattr(e, "errno", None) in _CONFLICT_ERRNOS:
            raise _RetryableConflict(str(e)) from e
        logger.error("MySQL error during %s: %s", action, e)
        raise StorageError(f"Storage unavailable during {action}") from e


def _select_body(cur, path: str, *, for_update: bool) -> Optional[Document]:
    collection, doc_id = split_path(path)
    cur.execute(
        "SELECT body FROM documents WHERE collection=%s AND doc_id=%s" + (" FOR UPDATE" if for_update else ""),
        (collection, doc_id),
    )
    row = fetchone(cur)
    return decode_json_body(row["body"]) if row else None


def _select_collection(cur, collection: str, *, for_update: bool) -> Dict[str, Document]:
    # FOR UPDATE takes next-key locks over the whole (collection, doc_id) range,
    # so inserts into the collection wait for the transaction.
    cur.execute(
        "SELECT doc_id, body FROM documents WHERE collection=%s ORDER BY doc_id"
        + (" FOR UPDATE" if for_update else ""),
        (collection,),
    )
    return {str(r["doc_id"]): decode_json_body(r["body"]) for r in fetchall(cur)}


def _execute_write(cur, path: str, body: Optional[Document]) -> None:
    collection, doc_id = split_path(path)
    if body is None:
        cur.execute("DELETE FROM documents WHERE collection=%s AND doc_id=%s", (collection, doc_id))
        return
    cur.execute(
        """
        INSERT INTO documents(collection, doc_id, body, version)
        VALUES(%s,%s,%s,1)
        ON DUPLICATE KEY UPDATE body=VALUES(body), version=version+1
        """,
        (collection, doc_id, encode_json_body(body)),
    )


class _MySQLTransaction(StagedTransaction):
    def __init__(self, cur):
        super().__init__()
        self._cur = cur

    def _read(self, path: str) -> Optional[Document]:
        return _select_body(self._cur, path, for_update=True)

    def _read_collection(self, collection: str) -> Dict[str, Document]:
        return _select_collection(self._cur, collection, for_update=True)


class MySQLDocumentStore(DocumentStore):
    """Document store over a single ``documents`` table (see database/schema.sql).

    Transactions lock every row they read (``SELECT ... FOR UPDATE``) inside one
    MySQL transaction; deadlocks and lock-wait timeouts are retried and surface
    as ConflictError once the attempts are used up.
    """

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        max_batch_writes: int = DEFAULT_MAX_BATCH_WRITES,
        max_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
    ):
        self._conn_factory = conn_factory
        self._max_batch_writes = int(max_batch_writes)
        self._max_attempts = max(1, int(max_attempts))

    @property
    def max_batch_writes(self) -> int:
        return self._max_batch_writes

    def _once(self, action: str, fn: Callable[[Any], T]) -> T:
        try:
            with _storage_errors(action):
                with db_cursor(self._conn_factory) as (_, cur):
                    return fn(cur)
        except _RetryableConflict as e:
            raise ConflictError(f"Concurrent write during {action}") from e

    def get(self, path: str) -> Optional[Document]:
        return self._once("get", lambda cur: _select_body(cur, path, for_update=False))

    def set(self, path: str, data: Mapping[str, Any]) -> None:
        body = apply_write(None, Write.set(path, data))
        self._once("set", lambda cur: _execute_write(cur, path, body))

    def delete(self, path: str) -> None:
        self._once("delete", lambda cur: _execute_write(cur, path, None))

    def list_collection(self, collection: str) -> Dict[str, Document]:
        return self._once("list", lambda cur: _select_collection(cur, collection, for_update=False))

    def batch_commit(self, writes: Sequence[Write]) -> None:
        writes = list(writes)
        check_batch_size(writes, self._max_batch_writes)

        def _commit(cur) -> None:
            tx = _MySQLTransaction(cur)
            for w in writes:
                if w.kind is WriteKind.DELETE:
                    tx.delete(w.path)
                elif w.kind is WriteKind.MERGE:
                    tx.merge(w.path, w.data or {})
                else:
                    tx.set(w.path, w.data or {})
            for w in tx.writes:
                _execute_write(cur, w.path, w.data)

        self._once("batch commit", _commit)

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        for attempt in range(1, self._max_attempts + 1):
            try:
                with _storage_errors("transaction"):
                    with db_cursor(self._conn_factory) as (_, cur):
                        tx = _MySQLTransaction(cur)
                        result = fn(tx)
                        for w in tx.writes:
                            _execute_write(cur, w.path, w.data)
                        return result
            except _RetryableConflict as e:
                logger.info("Transaction attempt %s/%s rolled back: %s", attempt, self._max_attempts, e)
        raise ConflictError(f"Transaction aborted after {self._max_attempts} attempts due to concurrent writes")
