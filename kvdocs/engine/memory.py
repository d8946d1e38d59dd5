"""
MemoryConnection - in-process ordered key-value store.
"""

import bisect
from collections.abc import AsyncIterator

from kvdocs.interfaces.kv_connection import KVConnection

MEMORY_LOCATOR = ":memory:"


class MemoryConnection(KVConnection):
    """
    Ordered key-value store held in process memory.

    Structure:
    - _data: key -> value mapping for O(1) point lookups
    - _sorted_keys: all live keys kept sorted for range scans

    Not durable: contents are dropped on close().
    """

    def __init__(self) -> None:
        self._data: dict[bytes, bytes] = {}
        self._sorted_keys: list[bytes] = []
        self._closed = False

    @classmethod
    async def open(cls) -> "MemoryConnection":
        return cls()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("MemoryConnection is closed")

    async def put(self, key: bytes, value: bytes) -> None:
        self._check_open()
        if key not in self._data:
            bisect.insort(self._sorted_keys, key)
        self._data[key] = value

    async def get(self, key: bytes) -> bytes | None:
        self._check_open()
        return self._data.get(key)

    async def delete(self, key: bytes) -> None:
        self._check_open()
        if self._data.pop(key, None) is None:
            return
        idx = bisect.bisect_left(self._sorted_keys, key)
        del self._sorted_keys[idx]

    def scan(self, start: bytes, end: bytes) -> AsyncIterator[tuple[bytes, bytes]]:
        self._check_open()
        return _MemoryScanIterator(self, start, end)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._data.clear()
        self._sorted_keys.clear()

    def __len__(self) -> int:
        return len(self._data)


class _MemoryScanIterator(AsyncIterator[tuple[bytes, bytes]]):
    """
    Async iterator for range scans on MemoryConnection.

    Position is tracked by the last key returned rather than a list index,
    so puts and deletes made while the scan is suspended do not skip or
    repeat entries that were already present.
    """

    def __init__(self, conn: MemoryConnection, start: bytes, end: bytes) -> None:
        self._conn = conn
        self._start = start
        self._end = end
        self._last: bytes | None = None
        self._done = False

    def __aiter__(self) -> "_MemoryScanIterator":
        return self

    async def __anext__(self) -> tuple[bytes, bytes]:
        if self._done:
            raise StopAsyncIteration
        self._conn._check_open()

        keys = self._conn._sorted_keys
        if self._last is None:
            idx = bisect.bisect_left(keys, self._start)
        else:
            idx = bisect.bisect_right(keys, self._last)

        if idx >= len(keys) or keys[idx] >= self._end:
            self._done = True
            raise StopAsyncIteration

        key = keys[idx]
        self._last = key
        return (key, self._conn._data[key])

    async def aclose(self) -> None:
        self._done = True
