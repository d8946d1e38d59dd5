"""
StoreAdapter - failure translation and closed-state tracking over a KVConnection.
"""

import logging
from collections.abc import AsyncIterator

from kvdocs.interfaces.kv_connection import KVConnection
from kvdocs.models.exceptions import StorageFailure, StoreClosedError
from kvdocs.models.key import KeyPrefix

logger = logging.getLogger(__name__)


class StoreAdapter:
    """
    Thin layer between collections and the key-value connection.

    Provides:
    - put/get/delete: point operations on encoded keys
    - scan(prefix): ordered lazy scan bounded to one collection's range
    - close(): releases the connection exactly once

    Every connection error surfaces as StorageFailure with the original
    exception chained. After close(), every operation raises
    StoreClosedError instead of reaching the connection.
    """

    def __init__(self, connection: KVConnection) -> None:
        self._connection = connection
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def check_open(self, operation: str) -> None:
        """Raise StoreClosedError if the store has been closed."""
        if self._closed:
            raise StoreClosedError(operation)

    async def put(self, key: bytes, value: bytes) -> None:
        self.check_open("put")
        try:
            await self._connection.put(key, value)
        except Exception as e:
            raise StorageFailure("put", str(e)) from e

    async def get(self, key: bytes) -> bytes | None:
        self.check_open("get")
        try:
            return await self._connection.get(key)
        except Exception as e:
            raise StorageFailure("get", str(e)) from e

    async def delete(self, key: bytes) -> None:
        self.check_open("delete")
        try:
            await self._connection.delete(key)
        except Exception as e:
            raise StorageFailure("delete", str(e)) from e

    async def scan(self, prefix: KeyPrefix) -> AsyncIterator[tuple[bytes, bytes]]:
        """
        Scan every entry under prefix in ascending key order.

        Callers should consume this under contextlib.aclosing() so the
        connection's iterator is released when they stop early.

        Args:
            prefix: Key range of one collection.

        Yields:
            (key, value) tuples in sorted order.

        Raises:
            StoreClosedError: If the store is closed before or during the scan.
            StorageFailure: If the connection fails while scanning.
        """
        self.check_open("scan")
        try:
            entries = self._connection.scan(prefix.start, prefix.end)
        except Exception as e:
            raise StorageFailure("scan", str(e)) from e

        try:
            while True:
                self.check_open("scan")
                try:
                    key, value = await entries.__anext__()
                except StopAsyncIteration:
                    return
                except Exception as e:
                    raise StorageFailure("scan", str(e)) from e
                yield key, value
        finally:
            aclose = getattr(entries, "aclose", None)
            if aclose is not None:
                await aclose()

    async def close(self) -> None:
        """Close the underlying connection. Subsequent calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Closing connection {type(self._connection).__name__}")
        try:
            await self._connection.close()
        except Exception as e:
            raise StorageFailure("close", str(e)) from e
