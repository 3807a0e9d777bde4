"""SQLite-backed key/value store shared by every process using the same file."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Mapping

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the shared store cannot be read or written."""


class SQLiteStore:
    """Key/value records with optional expiry and an atomic compute-if-absent.

    Every operation opens its own connection so the store can be shared by
    threads and by independent processes pointing at the same file. The
    SQLite reserved lock taken by ``BEGIN IMMEDIATE`` serialises
    :meth:`entry` callers across processes; writes issued through this
    store while a compute function runs join the enclosing transaction.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        timeout: float = 30.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        self._path = os.fspath(path)
        self._timeout = timeout
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._local = threading.local()
        self._initialise()

    @property
    def path(self) -> str:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(
            self._path,
            timeout=self._timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        connection.execute("PRAGMA journal_mode=WAL")
        connection.execute("PRAGMA synchronous=NORMAL")
        return connection

    def _initialise(self) -> None:
        with self._guard("initialise"), self._session() as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at REAL
                )
                """
            )

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as exc:
            raise StorageError(
                f"Shared store {operation} failed for {self._path}: {exc}"
            ) from exc

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Yield the active transaction's connection or a short-lived one."""

        active = getattr(self._local, "connection", None)
        if active is not None:
            yield active
            return

        connection = self._connect()
        try:
            yield connection
        finally:
            connection.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Hold the database write lock for the duration of the block."""

        active = getattr(self._local, "connection", None)
        if active is not None:
            yield active
            return

        connection = self._connect()
        try:
            connection.execute("BEGIN IMMEDIATE")
            self._local.connection = connection
            self._local.now = self._clock()
            try:
                yield connection
            except BaseException:
                if connection.in_transaction:
                    connection.execute("ROLLBACK")
                raise
            connection.execute("COMMIT")
        finally:
            self._local.connection = None
            self._local.now = None
            connection.close()

    def _now(self) -> datetime:
        # Writes inside one transaction share a single timestamp so that
        # records stored together also expire together.
        pinned = getattr(self._local, "now", None)
        return pinned if pinned is not None else self._clock()

    @staticmethod
    def _expires_at(now: datetime, ttl: int | None) -> float | None:
        if not ttl:
            return None
        return now.timestamp() + ttl

    @staticmethod
    def _select(
        connection: sqlite3.Connection, key: str, now: datetime
    ) -> tuple[bool, Any]:
        row = connection.execute(
            "SELECT value FROM cache_entries"
            " WHERE key = ? AND (expires_at IS NULL OR expires_at > ?)",
            (key, now.timestamp()),
        ).fetchone()
        if row is None:
            return False, None
        return True, json.loads(row[0])

    def _upsert(
        self,
        connection: sqlite3.Connection,
        items: Mapping[str, Any],
        ttl: int | None,
    ) -> None:
        expires_at = self._expires_at(self._now(), ttl)
        connection.executemany(
            "INSERT INTO cache_entries (key, value, expires_at) VALUES (?, ?, ?)"
            " ON CONFLICT(key) DO UPDATE SET"
            " value = excluded.value, expires_at = excluded.expires_at",
            [
                (key, json.dumps(value, ensure_ascii=False), expires_at)
                for key, value in items.items()
            ],
        )

    def fetch(self, key: str) -> tuple[bool, Any]:
        """Return ``(found, value)`` for an unexpired record."""

        with self._guard("fetch"), self._session() as connection:
            return self._select(connection, key, self._now())

    def exists(self, key: str) -> bool:
        """Report whether an unexpired record is stored under ``key``."""

        found, _ = self.fetch(key)
        return found

    def store(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Write ``value`` under ``key``, replacing any previous record."""

        self.store_many({key: value}, ttl)

    def store_many(self, items: Mapping[str, Any], ttl: int | None = None) -> None:
        """Write every record of ``items`` in a single transaction."""

        if not items:
            return
        with self._guard("store"), self._transaction() as connection:
            self._upsert(connection, items, ttl)

    def entry(
        self,
        key: str,
        compute: Callable[[], Any],
        ttl: int | None = None,
    ) -> Any:
        """Return the value under ``key``, computing and storing it when absent.

        Only one caller at a time, across threads and processes, evaluates
        ``compute`` for the store. Contenders wait for the lock and then
        observe the stored result. When ``compute`` raises, nothing it wrote
        is kept and the exception propagates.
        """

        with self._guard("entry"), self._transaction() as connection:
            found, value = self._select(connection, key, self._now())
            if found:
                return value
            value = compute()
            self._upsert(connection, {key: value}, ttl)
            return value

    def delete(self, key: str) -> bool:
        """Remove ``key`` and return whether a record was present."""

        with self._guard("delete"), self._transaction() as connection:
            cursor = connection.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def delete_prefix(self, prefix: str) -> int:
        """Remove every record whose key starts with ``prefix``."""

        with self._guard("delete"), self._transaction() as connection:
            cursor = connection.execute(
                "DELETE FROM cache_entries WHERE substr(key, 1, ?) = ?",
                (len(prefix), prefix),
            )
            return cursor.rowcount

    def keys(self, prefix: str = "") -> list[str]:
        """Return the unexpired keys starting with ``prefix`` in sorted order."""

        with self._guard("keys"), self._session() as connection:
            rows = connection.execute(
                "SELECT key FROM cache_entries"
                " WHERE substr(key, 1, ?) = ?"
                " AND (expires_at IS NULL OR expires_at > ?)"
                " ORDER BY key",
                (len(prefix), prefix, self._now().timestamp()),
            ).fetchall()
        return [row[0] for row in rows]

    def purge_expired(self) -> int:
        """Delete expired records and return how many were removed."""

        with self._guard("purge"), self._transaction() as connection:
            cursor = connection.execute(
                "DELETE FROM cache_entries WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (self._now().timestamp(),),
            )
            removed = cursor.rowcount
        if removed:
            logger.debug("Purged %d expired records from %s", removed, self._path)
        return removed


__all__ = ["SQLiteStore", "StorageError"]
