"""
Document collections on top of an ordered key-value store.

This package provides an embedded asyncio document layer with:
- add(doc) / set(id, doc) - Insert with generated or chosen id
- get(id) / delete(id) - Point operations, missing ids are not errors
- query(field, op, value) - Single-field filtered scan
- get_all() / paginate(limit, offset) - Ordered range scans
"""

from kvdocs.engine.collection import Collection
from kvdocs.engine.memory import MEMORY_LOCATOR, MemoryConnection
from kvdocs.engine.sqlite import SQLiteConnection
from kvdocs.engine.store import Store, open_store
from kvdocs.interfaces.kv_connection import KVConnection
from kvdocs.models.exceptions import (
    DecodeFailure,
    KVDocsError,
    StorageFailure,
    StoreClosedError,
)
from kvdocs.models.key import KeyCodec, KeyPrefix
from kvdocs.models.operator import Operator

__all__ = [
    "Collection",
    "MEMORY_LOCATOR",
    "MemoryConnection",
    "SQLiteConnection",
    "Store",
    "open_store",
    "KVConnection",
    "DecodeFailure",
    "KVDocsError",
    "StorageFailure",
    "StoreClosedError",
    "KeyCodec",
    "KeyPrefix",
    "Operator",
]
