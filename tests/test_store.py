"""
Tests for the Store facade: opening, closing and ownership of the connection.
"""

import os

import pytest

from kvdocs import open_store
from kvdocs.engine.memory import MemoryConnection
from kvdocs.engine.sqlite import SQLiteConnection
from kvdocs.engine.store import Store
from kvdocs.models.exceptions import StorageFailure, StoreClosedError


class TestOpen:
    """Store.open() and open_store()."""

    async def test_memory_locator(self):
        """Test that ':memory:' opens an in-process store."""
        store = await open_store(":memory:")
        assert isinstance(store._adapter._connection, MemoryConnection)
        await store.close()

    async def test_sqlite_locator(self, db_path):
        """Test that a path opens a SQLite file."""
        store = await open_store(db_path)
        assert isinstance(store._adapter._connection, SQLiteConnection)
        await store.close()
        assert os.path.exists(db_path)

    async def test_default_locator(self, temp_dir, monkeypatch):
        """Test that the default locator is db.sqlite in the working directory."""
        monkeypatch.chdir(temp_dir)
        async with await Store.open() as store:
            await store.collection("c").add({"a": 1})
        assert os.path.exists(os.path.join(temp_dir, Store.DEFAULT_LOCATOR))

    async def test_empty_locator(self):
        with pytest.raises(ValueError):
            await open_store("")
        with pytest.raises(ValueError):
            await open_store("  ")

    async def test_unopenable_path_is_storage_failure(self, temp_dir):
        """Test that a database file that cannot be opened raises StorageFailure."""
        with pytest.raises(StorageFailure) as exc_info:
            await open_store(temp_dir)
        assert exc_info.value.operation == "open"
        assert exc_info.value.__cause__ is not None

    async def test_non_string_locator(self):
        with pytest.raises(TypeError):
            await open_store(None)
        with pytest.raises(TypeError):
            await Store.open(42)

    async def test_invalid_sqlite_options(self, db_path):
        with pytest.raises(ValueError):
            await open_store(db_path, scan_batch_size=0)
        with pytest.raises(ValueError):
            await open_store(db_path, timeout=-1)

    async def test_wraps_existing_connection(self):
        """Test handing the store an already opened connection."""
        conn = await MemoryConnection.open()
        store = Store(conn)
        await store.collection("c").set("id", {"a": 1})
        assert len(conn) == 1
        await store.close()
        with pytest.raises(RuntimeError):
            await conn.get(b"x")


class TestPersistence:
    """Documents survive reopening a SQLite store."""

    async def test_reopen(self, db_path):
        async with await open_store(db_path) as store:
            users = store.collection("users")
            doc_id = await users.add({"name": "John", "age": 30})
            await users.set("fixed", {"name": "Jane"})

        async with await open_store(db_path) as store:
            users = store.collection("users")
            assert await users.get(doc_id) == {"name": "John", "age": 30}
            assert await users.count() == 2

    async def test_deleted_collection_leaves_no_trace(self, db_path):
        """Test that removing every document empties the collection's range."""
        async with await open_store(db_path) as store:
            users = store.collection("users")
            ids = [await users.add({"i": i}) for i in range(3)]
            for doc_id in ids:
                await users.delete(doc_id)

        async with await open_store(db_path) as store:
            assert await store.collection("users").get_all() == []


class TestClose:
    """Behavior after close()."""

    async def test_operations_fail_after_close(self, any_store):
        """Test that every collection operation raises StoreClosedError."""
        users = any_store.collection("users")
        doc_id = await users.add({"name": "John"})
        await any_store.close()

        assert any_store.closed
        with pytest.raises(StoreClosedError):
            await users.add({"name": "Jane"})
        with pytest.raises(StoreClosedError):
            await users.set(doc_id, {"name": "Jane"})
        with pytest.raises(StoreClosedError):
            await users.get(doc_id)
        with pytest.raises(StoreClosedError):
            await users.delete(doc_id)
        with pytest.raises(StoreClosedError):
            await users.query("name", "==", "John")
        with pytest.raises(StoreClosedError):
            await users.get_all()
        with pytest.raises(StoreClosedError):
            await users.paginate(1, 0)
        with pytest.raises(StoreClosedError):
            await users.query("age", "~", 1)
        with pytest.raises(StoreClosedError):
            await users.paginate(0, 0)

    async def test_collections_obtained_after_close_fail(self, store):
        await store.close()
        with pytest.raises(StoreClosedError):
            await store.collection("late").get("x")

    async def test_close_is_idempotent(self, store):
        await store.close()
        await store.close()
        assert store.closed

    async def test_context_manager_closes_on_error(self):
        """Test that leaving the async with block via an exception closes the store."""
        with pytest.raises(KeyError):
            async with await open_store(":memory:") as store:
                await store.collection("c").add({"a": 1})
                raise KeyError("boom")
        assert store.closed

    async def test_close_while_paginating(self, store):
        """Test that a scan cut short by close fails instead of returning stale data."""
        users = store.collection("users")
        for i in range(5):
            await users.set(f"id{i}", {"i": i})

        stream = users.stream()
        assert await stream.__anext__() == ("id0", {"i": 0})
        await store.close()
        with pytest.raises(StoreClosedError):
            await stream.__anext__()
        await stream.aclose()
