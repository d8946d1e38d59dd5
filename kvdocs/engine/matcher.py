"""
QueryMatcher - single-field predicate evaluation against documents.
"""

from collections.abc import Mapping
from typing import Any

from kvdocs.models.operator import Operator


class _Missing:
    """Sentinel for a field absent from a document."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def _kind(value: Any) -> str:
    # bool is checked before int since bool subclasses int
    if value is MISSING:
        return "missing"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _strict_equal(left: Any, right: Any) -> bool:
    """Equality that never coerces across kinds (True != 1, None != MISSING)."""
    if _kind(left) != _kind(right):
        return False
    return left == right


def _orderable(left: Any, right: Any) -> bool:
    kind = _kind(left)
    return kind == _kind(right) and kind in ("number", "string")


class QueryMatcher:
    """
    Evaluates `document[field] <operator> value`.

    Semantics:
    - A missing field reads as MISSING and never raises.
    - == and != use strict equality: values of different kinds
      (bool, number, string, null, object, array, missing) are unequal.
    - Ordering operators compare numbers with numbers and strings with
      strings; any other pairing does not match.
    - An unrecognized operator matches nothing.
    """

    @staticmethod
    def field(document: Mapping[str, Any], name: str) -> Any:
        return document.get(name, MISSING)

    @classmethod
    def matches(
        cls,
        document: Mapping[str, Any],
        field: str,
        operator: Operator | str,
        value: Any,
    ) -> bool:
        """
        Check whether a document satisfies a single-field comparison.

        Args:
            document: The document to test.
            field: Name of the field to compare.
            operator: An Operator or its symbol.
            value: Right-hand side of the comparison.

        Returns:
            True if the document matches, False otherwise.
        """
        op = Operator.parse(operator)
        if op is None:
            return False

        actual = cls.field(document, field)

        if op is Operator.EQ:
            return _strict_equal(actual, value)
        if op is Operator.NEQ:
            return not _strict_equal(actual, value)

        if not _orderable(actual, value):
            return False

        if op is Operator.GT:
            return actual > value
        if op is Operator.GTE:
            return actual >= value
        if op is Operator.LT:
            return actual < value
        if op is Operator.LTE:
            return actual <= value

        return False
