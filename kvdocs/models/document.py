"""
DocumentCodec - serialization of documents to stored bytes.
"""

import json
from collections.abc import Mapping
from typing import Any

from kvdocs.models.exceptions import DecodeFailure

Document = dict[str, Any]


class DocumentCodec:
    """
    Serializes documents as compact UTF-8 JSON.

    Documents are mappings from field name to JSON-compatible values
    (str, int, float, bool, None, nested dicts and lists).
    """

    @staticmethod
    def to_bytes(document: Mapping[str, Any]) -> bytes:
        """
        Serialize a document for storage.

        Args:
            document: The document to serialize.

        Returns:
            UTF-8 encoded JSON bytes.

        Raises:
            TypeError: If the document is not a mapping or holds a value
                that has no JSON representation.
        """
        if not isinstance(document, Mapping):
            raise TypeError(
                f"document must be a mapping, got {type(document).__name__}"
            )
        try:
            text = json.dumps(
                dict(document), ensure_ascii=False, separators=(",", ":"), allow_nan=False
            )
        except ValueError as e:
            raise TypeError(f"document is not JSON serializable: {e}") from e
        return text.encode("utf-8")

    @staticmethod
    def from_bytes(data: bytes, key: bytes | None = None) -> Document:
        """
        Deserialize stored bytes back into a document.

        Args:
            data: Bytes previously produced by to_bytes().
            key: Storage key the bytes were read from, for error reporting.

        Returns:
            The decoded document.

        Raises:
            DecodeFailure: If the bytes are not a JSON object.
        """
        try:
            document = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeFailure(f"Stored value is not a valid document: {e}", key=key) from e

        if not isinstance(document, dict):
            raise DecodeFailure(
                f"Stored value is a JSON {type(document).__name__}, expected an object",
                key=key,
            )
        return document
