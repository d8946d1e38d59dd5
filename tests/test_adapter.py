"""
Tests for StoreAdapter failure translation and closed-state handling.
"""

from contextlib import aclosing

import pytest

from kvdocs.engine.adapter import StoreAdapter
from kvdocs.engine.memory import MemoryConnection
from kvdocs.interfaces.kv_connection import KVConnection
from kvdocs.models.exceptions import StorageFailure, StoreClosedError
from kvdocs.models.key import KeyCodec


class FailingConnection(KVConnection):
    """Connection whose every operation raises OSError."""

    def __init__(self, fail_close: bool = False) -> None:
        self.fail_close = fail_close

    async def put(self, key, value):
        raise OSError("disk full")

    async def get(self, key):
        raise OSError("disk unreadable")

    async def delete(self, key):
        raise OSError("disk unreadable")

    def scan(self, start, end):
        raise OSError("cursor failed")

    async def close(self):
        if self.fail_close:
            raise OSError("close failed")


class FailMidScanConnection(MemoryConnection):
    """Memory connection whose scans fail after the first entry."""

    def scan(self, start, end):
        inner = super().scan(start, end)
        outer = self

        class _Iter:
            def __init__(self):
                self.count = 0
                self.closed = False

            def __aiter__(self):
                return self

            async def __anext__(self):
                self.count += 1
                if self.count > 1:
                    raise OSError("read error")
                return await inner.__anext__()

            async def aclose(self):
                self.closed = True
                outer.last_iter_closed = True

        return _Iter()


class TestFailureTranslation:
    """Connection errors surface as StorageFailure."""

    async def test_point_operations(self):
        """Test put/get/delete failures."""
        adapter = StoreAdapter(FailingConnection())

        with pytest.raises(StorageFailure) as exc_info:
            await adapter.put(b"k", b"v")
        assert exc_info.value.operation == "put"
        assert isinstance(exc_info.value.__cause__, OSError)

        with pytest.raises(StorageFailure):
            await adapter.get(b"k")
        with pytest.raises(StorageFailure):
            await adapter.delete(b"k")

    async def test_scan_open_failure(self):
        """Test failure when the connection cannot start a scan."""
        adapter = StoreAdapter(FailingConnection())
        with pytest.raises(StorageFailure) as exc_info:
            async for _ in adapter.scan(KeyCodec.prefix("c")):
                pass
        assert exc_info.value.operation == "scan"

    async def test_scan_mid_stream_failure_closes_cursor(self):
        """Test failure during iteration, and that the cursor is released."""
        conn = FailMidScanConnection()
        conn.last_iter_closed = False
        await conn.put(KeyCodec.encode("c", "1"), b"{}")
        await conn.put(KeyCodec.encode("c", "2"), b"{}")
        adapter = StoreAdapter(conn)

        seen = []
        with pytest.raises(StorageFailure):
            async with aclosing(adapter.scan(KeyCodec.prefix("c"))) as entries:
                async for entry in entries:
                    seen.append(entry)

        assert len(seen) == 1
        assert conn.last_iter_closed is True

    async def test_close_failure(self):
        """Test that close errors surface and the adapter still counts as closed."""
        adapter = StoreAdapter(FailingConnection(fail_close=True))
        with pytest.raises(StorageFailure):
            await adapter.close()
        assert adapter.closed


class TestClosedAdapter:
    """Operations after close raise StoreClosedError."""

    async def test_operations_after_close(self):
        """Test every operation on a closed adapter."""
        adapter = StoreAdapter(await MemoryConnection.open())
        await adapter.close()
        await adapter.close()

        with pytest.raises(StoreClosedError):
            await adapter.put(b"k", b"v")
        with pytest.raises(StoreClosedError):
            await adapter.get(b"k")
        with pytest.raises(StoreClosedError):
            await adapter.delete(b"k")
        with pytest.raises(StoreClosedError):
            async for _ in adapter.scan(KeyCodec.prefix("c")):
                pass

    async def test_close_during_scan(self):
        """Test that a scan in progress fails at its next step after close."""
        conn = await MemoryConnection.open()
        for i in range(3):
            await conn.put(KeyCodec.encode("c", str(i)), b"{}")
        adapter = StoreAdapter(conn)

        with pytest.raises(StoreClosedError):
            async with aclosing(adapter.scan(KeyCodec.prefix("c"))) as entries:
                async for _ in entries:
                    await adapter.close()

    async def test_store_closed_is_storage_failure(self):
        assert issubclass(StoreClosedError, StorageFailure)
