from kvdocs.engine.adapter import StoreAdapter
from kvdocs.engine.collection import Collection
from kvdocs.engine.matcher import MISSING, QueryMatcher
from kvdocs.engine.memory import MEMORY_LOCATOR, MemoryConnection
from kvdocs.engine.sqlite import SQLiteConnection
from kvdocs.engine.store import Store, open_store

__all__ = [
    "StoreAdapter",
    "Collection",
    "MISSING",
    "QueryMatcher",
    "MEMORY_LOCATOR",
    "MemoryConnection",
    "SQLiteConnection",
    "Store",
    "open_store",
]
