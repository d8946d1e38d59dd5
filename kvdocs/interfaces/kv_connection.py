"""
KVConnection abstract base class for ordered key-value stores.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class KVConnection(ABC):
    """
    Connection to an ordered key-value store with bytes keys and values.

    Keys are ordered bytewise. Implementations must support:
    - Point put/get/delete
    - Range-bounded ordered scans via scan(start, end)
    - close() releasing every store-side resource

    Implementations:
    - MemoryConnection: in-process sorted map, not durable
    - SQLiteConnection: single-file durable store
    """

    @abstractmethod
    async def put(self, key: bytes, value: bytes) -> None:
        """
        Insert or overwrite the value stored at key.

        Args:
            key: The key to write.
            value: The value to associate with the key.
        """
        pass

    @abstractmethod
    async def get(self, key: bytes) -> bytes | None:
        """
        Retrieve the value stored at key.

        Args:
            key: The key to look up.

        Returns:
            The value if found, None otherwise.
        """
        pass

    @abstractmethod
    async def delete(self, key: bytes) -> None:
        """
        Remove key if present. Removing a missing key is a no-op.

        Args:
            key: The key to remove.
        """
        pass

    @abstractmethod
    def scan(self, start: bytes, end: bytes) -> AsyncIterator[tuple[bytes, bytes]]:
        """
        Return an async iterator over entries in the range [start, end).

        Entries are produced incrementally in ascending key order and
        reflect the store's state at consumption time. Closing the
        iterator early (aclose()) must release any cursor it holds.

        Args:
            start: Start key (inclusive).
            end: End key (exclusive).

        Returns:
            AsyncIterator yielding (key, value) tuples in sorted order.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the connection. Calling close() twice is a no-op."""
        pass
