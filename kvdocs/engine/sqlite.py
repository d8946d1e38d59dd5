"""
SQLiteConnection - durable ordered key-value store in a single SQLite file.
"""

import asyncio
import os
import sqlite3
from collections import deque
from collections.abc import AsyncIterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable

from kvdocs.interfaces.kv_connection import KVConnection

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS kv ("
    "key BLOB PRIMARY KEY, "
    "value BLOB NOT NULL"
    ") WITHOUT ROWID"
)


class SQLiteConnection(KVConnection):
    """
    Ordered key-value store backed by one SQLite table.

    BLOB keys compare bytewise, which gives the ordering range scans rely on.
    All sqlite3 calls run on a single-worker thread pool, so the event loop
    never blocks on disk I/O and statements execute one at a time.
    """

    # Rows fetched per scan round trip
    DEFAULT_SCAN_BATCH_SIZE = 256

    MAX_SCAN_BATCH_SIZE = 100_000

    # Seconds to wait on a locked database before failing
    DEFAULT_TIMEOUT = 5.0

    def __init__(
        self,
        path: str,
        scan_batch_size: int = DEFAULT_SCAN_BATCH_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize the connection. Call open() before use.

        Args:
            path: Path of the SQLite database file.
            scan_batch_size: Number of rows fetched per scan round trip.
            timeout: Seconds to wait for a database lock.
        """
        if not isinstance(path, str):
            raise TypeError(f"path must be a string, got {type(path).__name__}")
        if not path.strip():
            raise ValueError("path cannot be empty")

        if scan_batch_size <= 0:
            raise ValueError(f"scan_batch_size must be positive, got {scan_batch_size}")
        if scan_batch_size > self.MAX_SCAN_BATCH_SIZE:
            raise ValueError(
                f"scan_batch_size cannot exceed {self.MAX_SCAN_BATCH_SIZE}, "
                f"got {scan_batch_size}"
            )

        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        self._path = os.path.abspath(path)
        self._scan_batch_size = scan_batch_size
        self._timeout = timeout
        self._db: sqlite3.Connection | None = None
        self._executor: ThreadPoolExecutor | None = None

    @property
    def path(self) -> str:
        return self._path

    @classmethod
    async def create(
        cls,
        path: str,
        scan_batch_size: int = DEFAULT_SCAN_BATCH_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> "SQLiteConnection":
        """
        Async factory method to create and open a connection.

        Args:
            path: Path of the SQLite database file.
            scan_batch_size: Number of rows fetched per scan round trip.
            timeout: Seconds to wait for a database lock.

        Returns:
            Opened SQLiteConnection.
        """
        conn = cls(path, scan_batch_size, timeout)
        await conn.open()
        return conn

    async def open(self) -> None:
        """Open the database file, creating it and its schema if needed."""
        if self._db is not None:
            return

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="kvdocs-sqlite")
        try:
            self._db = await self._run(self._open_sync)
        except BaseException:
            self._executor.shutdown(wait=False)
            self._executor = None
            raise

    def _open_sync(self) -> sqlite3.Connection:
        Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        db = sqlite3.connect(
            self._path,
            timeout=self._timeout,
            isolation_level=None,  # autocommit: each statement is its own transaction
            check_same_thread=False,
        )
        try:
            db.execute("PRAGMA journal_mode=WAL")
            db.execute("PRAGMA synchronous=NORMAL")
            db.execute(_SCHEMA)
        except sqlite3.Error:
            db.close()
            raise
        return db

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        if self._executor is None:
            raise RuntimeError("SQLiteConnection is not open")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn, *args)

    def _conn(self) -> sqlite3.Connection:
        if self._db is None:
            raise RuntimeError("SQLiteConnection is not open")
        return self._db

    async def put(self, key: bytes, value: bytes) -> None:
        await self._run(self._put_sync, key, value)

    def _put_sync(self, key: bytes, value: bytes) -> None:
        self._conn().execute(
            "INSERT INTO kv (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    async def get(self, key: bytes) -> bytes | None:
        return await self._run(self._get_sync, key)

    def _get_sync(self, key: bytes) -> bytes | None:
        row = self._conn().execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return None if row is None else bytes(row[0])

    async def delete(self, key: bytes) -> None:
        await self._run(self._delete_sync, key)

    def _delete_sync(self, key: bytes) -> None:
        self._conn().execute("DELETE FROM kv WHERE key = ?", (key,))

    def scan(self, start: bytes, end: bytes) -> AsyncIterator[tuple[bytes, bytes]]:
        self._conn()
        return _SQLiteScanIterator(self, start, end)

    def _fetch_batch_sync(
        self, lower: bytes, inclusive: bool, end: bytes
    ) -> list[tuple[bytes, bytes]]:
        """Fetch the next batch of a range scan (runs in thread pool)."""
        op = ">=" if inclusive else ">"
        cursor = self._conn().execute(
            f"SELECT key, value FROM kv WHERE key {op} ? AND key < ? ORDER BY key LIMIT ?",
            (lower, end, self._scan_batch_size),
        )
        try:
            return [(bytes(k), bytes(v)) for k, v in cursor.fetchall()]
        finally:
            cursor.close()

    async def close(self) -> None:
        """Close the database handle and stop the worker thread."""
        if self._executor is None:
            return

        executor = self._executor
        try:
            if self._db is not None:
                await self._run(self._db.close)
        finally:
            self._db = None
            self._executor = None
            executor.shutdown(wait=True)


class _SQLiteScanIterator(AsyncIterator[tuple[bytes, bytes]]):
    """
    Async iterator for range scans on SQLiteConnection.

    Uses keyset pagination: each batch is a separate statement resuming
    after the last key seen, and its cursor is closed before the batch is
    returned. No cursor stays open between batches, so abandoning the scan
    holds nothing on the database.
    """

    def __init__(self, conn: SQLiteConnection, start: bytes, end: bytes) -> None:
        self._conn = conn
        self._start = start
        self._end = end
        self._last: bytes | None = None
        self._buffer: deque[tuple[bytes, bytes]] = deque()
        self._exhausted = False

    def __aiter__(self) -> "_SQLiteScanIterator":
        return self

    async def __anext__(self) -> tuple[bytes, bytes]:
        if not self._buffer:
            if self._exhausted:
                raise StopAsyncIteration
            await self._fill()
            if not self._buffer:
                raise StopAsyncIteration

        key, value = self._buffer.popleft()
        self._last = key
        return (key, value)

    async def _fill(self) -> None:
        if self._last is None:
            lower, inclusive = self._start, True
        else:
            lower, inclusive = self._last, False

        rows = await self._conn._run(self._conn._fetch_batch_sync, lower, inclusive, self._end)
        if len(rows) < self._conn._scan_batch_size:
            self._exhausted = True
        self._buffer.extend(rows)

    async def aclose(self) -> None:
        self._exhausted = True
        self._buffer.clear()
