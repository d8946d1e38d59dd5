"""
Data models for the document layer.
"""

from kvdocs.models.document import Document, DocumentCodec
from kvdocs.models.exceptions import (
    DecodeFailure,
    KVDocsError,
    StorageFailure,
    StoreClosedError,
)
from kvdocs.models.key import KeyCodec, KeyPrefix
from kvdocs.models.operator import Operator

__all__ = [
    "Document",
    "DocumentCodec",
    "DecodeFailure",
    "KVDocsError",
    "StorageFailure",
    "StoreClosedError",
    "KeyCodec",
    "KeyPrefix",
    "Operator",
]
