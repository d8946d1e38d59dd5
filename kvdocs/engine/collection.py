"""
Collection - named set of documents stored under one key prefix.
"""

import logging
import uuid
from collections.abc import AsyncIterator, Mapping
from contextlib import aclosing
from typing import Any, Generic, TypeVar, cast

from kvdocs.engine.adapter import StoreAdapter
from kvdocs.engine.matcher import QueryMatcher
from kvdocs.models.document import DocumentCodec
from kvdocs.models.exceptions import DecodeFailure
from kvdocs.models.key import KeyCodec
from kvdocs.models.operator import Operator

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Mapping[str, Any])


def _check_id(doc_id: str) -> None:
    if not isinstance(doc_id, str) or not doc_id:
        raise ValueError(f"document id must be a non-empty string, got {doc_id!r}")


class Collection(Generic[T]):
    """
    View over the documents of one collection.

    Provides:
    - add(doc): Insert with a generated id
    - set(id, doc): Insert or overwrite at a caller-chosen id
    - get(id): Point lookup, None when absent
    - delete(id): Remove, no-op when absent
    - query(field, op, value): Filtered scan
    - get_all(): Unfiltered scan
    - paginate(limit, offset): Sliced scan

    Architecture:
    - Every document lives at KeyCodec.encode(name, id)
    - Scans cover KeyCodec.prefix(name), in ascending id order
    - There is no index: query, get_all and paginate are O(collection size)

    Collections are cheap and hold no state besides their name; two
    instances with the same name over the same store are interchangeable.
    """

    def __init__(self, adapter: StoreAdapter, name: str) -> None:
        """
        Initialize a collection view.

        Args:
            adapter: Adapter of the owning store (not owned by the collection).
            name: Collection name.
        """
        if not isinstance(name, str) or not name:
            raise ValueError(f"collection name must be a non-empty string, got {name!r}")

        self._adapter = adapter
        self._name = name
        self._prefix = KeyCodec.prefix(name)

    @property
    def name(self) -> str:
        return self._name

    def _key(self, doc_id: str) -> bytes:
        _check_id(doc_id)
        return KeyCodec.encode(self._name, doc_id)

    def _decode_id(self, key: bytes) -> str:
        try:
            return KeyCodec.decode(key)[1]
        except DecodeFailure as e:
            logger.error(f"Undecodable key in collection {self._name!r}: {e}")
            raise

    def _decode(self, key: bytes, data: bytes) -> T:
        try:
            return cast(T, DocumentCodec.from_bytes(data, key=key))
        except DecodeFailure as e:
            logger.error(f"Undecodable document in collection {self._name!r}: {e}")
            raise

    async def add(self, document: T) -> str:
        """
        Insert a document under a freshly generated id.

        Args:
            document: The document to store.

        Returns:
            The new document id (a random UUID4 string).
        """
        doc_id = str(uuid.uuid4())
        await self.set(doc_id, document)
        return doc_id

    async def set(self, doc_id: str, document: T) -> None:
        """
        Insert or overwrite the document stored at doc_id.

        Args:
            doc_id: Caller-chosen document id.
            document: The document to store.
        """
        key = self._key(doc_id)
        data = DocumentCodec.to_bytes(document)
        await self._adapter.put(key, data)

    async def get(self, doc_id: str) -> T | None:
        """
        Retrieve a document by id.

        Args:
            doc_id: The id to look up.

        Returns:
            The last written document, or None if there is none.
        """
        key = self._key(doc_id)
        data = await self._adapter.get(key)
        if data is None:
            return None
        return self._decode(key, data)

    async def delete(self, doc_id: str) -> None:
        await self._adapter.delete(self._key(doc_id))

    async def stream(self) -> AsyncIterator[tuple[str, T]]:
        """
        Lazily iterate (id, document) pairs in ascending id order.

        The scan is not a snapshot: writes made while it is suspended may
        or may not be observed. Stopping early releases the store cursor.

        Yields:
            (id, document) tuples.
        """
        async with aclosing(self._adapter.scan(self._prefix)) as entries:
            async for key, data in entries:
                doc_id = self._decode_id(key)
                yield doc_id, self._decode(key, data)

    async def query(self, field: str, operator: Operator | str, value: Any) -> list[T]:
        """
        Return every document whose field satisfies the comparison.

        Args:
            field: Name of the field to compare.
            operator: An Operator or one of "==", "!=", ">", ">=", "<", "<=".
            value: Right-hand side of the comparison.

        Returns:
            Matching documents in store order. An unrecognized operator
            matches nothing, but the collection is still scanned so storage
            and decode failures surface.
        """
        op = Operator.parse(operator)
        if op is None:
            logger.warning(
                f"Unrecognized query operator {operator!r} on collection "
                f"{self._name!r}; no documents match"
            )

        results: list[T] = []
        async with aclosing(self.stream()) as docs:
            async for _, document in docs:
                if op is not None and QueryMatcher.matches(document, field, op, value):
                    results.append(document)
        return results

    async def get_all(self) -> list[T]:
        results: list[T] = []
        async with aclosing(self.stream()) as docs:
            async for _, document in docs:
                results.append(document)
        return results

    async def paginate(self, limit: int, offset: int = 0) -> list[T]:
        """
        Return one page of documents in ascending id order.

        The scan skips the first `offset` documents and stops as soon as
        `limit` documents have been collected.

        Args:
            limit: Maximum number of documents to return.
            offset: Number of documents to skip.

        Returns:
            Up to `limit` documents. Empty if offset is past the end.
        """
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")

        results: list[T] = []
        if limit == 0:
            self._adapter.check_open("paginate")
            return results

        skipped = 0
        async with aclosing(self.stream()) as docs:
            async for _, document in docs:
                if skipped < offset:
                    skipped += 1
                    continue
                results.append(document)
                if len(results) >= limit:
                    break
        return results

    async def count(self) -> int:
        total = 0
        async with aclosing(self._adapter.scan(self._prefix)) as entries:
            async for _ in entries:
                total += 1
        return total

    def __repr__(self) -> str:
        return f"Collection({self._name!r})"
