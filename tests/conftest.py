"""
Shared pytest fixtures for async document store tests.
"""

import os
import tempfile

import pytest
import pytest_asyncio

from kvdocs.engine.memory import MemoryConnection
from kvdocs.engine.sqlite import SQLiteConnection
from kvdocs.engine.store import Store


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def db_path(temp_dir):
    """Provide a path for a SQLite database file."""
    return os.path.join(temp_dir, "test.sqlite")


@pytest_asyncio.fixture
async def store():
    """Provide an in-memory Store."""
    async with await Store.open(":memory:") as st:
        yield st


@pytest_asyncio.fixture
async def sqlite_store(db_path):
    """Provide a SQLite-backed Store with a small scan batch size."""
    async with await Store.open(db_path, scan_batch_size=2) as st:
        yield st


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def any_store(request, db_path):
    """Provide a Store over each shipped connection type."""
    locator = ":memory:" if request.param == "memory" else db_path
    async with await Store.open(locator, scan_batch_size=2) as st:
        yield st


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def connection(request, db_path):
    """Provide an opened connection of each shipped type."""
    if request.param == "memory":
        conn = await MemoryConnection.open()
    else:
        conn = await SQLiteConnection.create(db_path, scan_batch_size=2)
    try:
        yield conn
    finally:
        await conn.close()


@pytest.fixture
def people():
    """Provide sample documents for query tests."""
    return [
        {"name": "John", "age": 30},
        {"name": "Jane", "age": 25},
        {"name": "Bob", "age": 40},
    ]
