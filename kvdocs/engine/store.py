"""
Store - owns the key-value connection and hands out collections.
"""

import logging
from typing import Any

from kvdocs.engine.adapter import StoreAdapter
from kvdocs.engine.collection import Collection
from kvdocs.engine.memory import MEMORY_LOCATOR, MemoryConnection
from kvdocs.engine.sqlite import SQLiteConnection
from kvdocs.interfaces.kv_connection import KVConnection
from kvdocs.models.exceptions import StorageFailure

logger = logging.getLogger(__name__)


class Store:
    """
    Document store facade.

    Provides:
    - collection(name): a Collection view bound to name
    - close(): release the underlying connection

    The store exclusively owns its connection. Collections only reference
    it, and fail with StoreClosedError once the store is closed.

    Usage:
        async with await Store.open("data/app.sqlite") as store:
            users = store.collection("users")
            user_id = await users.add({"name": "John", "age": 30})
    """

    # Default database file, relative to the working directory
    DEFAULT_LOCATOR = "db.sqlite"

    def __init__(self, connection: KVConnection) -> None:
        """
        Wrap an already opened connection.

        Args:
            connection: Connection to the ordered key-value store. The store
                takes ownership and closes it in close().
        """
        self._adapter = StoreAdapter(connection)

    @classmethod
    async def open(
        cls,
        locator: str = DEFAULT_LOCATOR,
        *,
        scan_batch_size: int = SQLiteConnection.DEFAULT_SCAN_BATCH_SIZE,
        timeout: float = SQLiteConnection.DEFAULT_TIMEOUT,
    ) -> "Store":
        """
        Async factory method to open a store.

        Args:
            locator: ":memory:" for a non-durable in-process store, otherwise
                the path of a SQLite database file (created if missing).
            scan_batch_size: Rows fetched per scan round trip (SQLite only).
            timeout: Seconds to wait for a database lock (SQLite only).

        Returns:
            Opened Store.
        """
        if not isinstance(locator, str):
            raise TypeError(f"locator must be a string, got {type(locator).__name__}")
        if not locator.strip():
            raise ValueError("locator cannot be empty")

        connection: KVConnection
        if locator == MEMORY_LOCATOR:
            connection = MemoryConnection()
        else:
            sqlite_conn = SQLiteConnection(locator, scan_batch_size, timeout)
            try:
                await sqlite_conn.open()
            except Exception as e:
                raise StorageFailure("open", f"cannot open {locator!r}: {e}") from e
            connection = sqlite_conn

        logger.debug(f"Opened store at {locator!r} using {type(connection).__name__}")
        return cls(connection)

    @property
    def closed(self) -> bool:
        return self._adapter.closed

    def collection(self, name: str) -> Collection[dict[str, Any]]:
        """
        Return a view over the collection called name.

        Collections are created implicitly by their first write, so this
        never touches the store.
        """
        return Collection(self._adapter, name)

    async def close(self) -> None:
        """Close the store. Subsequent calls are no-ops."""
        if self._adapter.closed:
            return
        await self._adapter.close()
        logger.debug("Store closed")

    async def __aenter__(self) -> "Store":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def open_store(
    locator: str = Store.DEFAULT_LOCATOR,
    *,
    scan_batch_size: int = SQLiteConnection.DEFAULT_SCAN_BATCH_SIZE,
    timeout: float = SQLiteConnection.DEFAULT_TIMEOUT,
) -> Store:
    """Open a Store. See Store.open() for arguments."""
    return await Store.open(locator, scan_batch_size=scan_batch_size, timeout=timeout)
