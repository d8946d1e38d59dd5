"""
Operator for single-field query predicates.
"""

from enum import Enum


class Operator(Enum):
    """Comparison operator applied by Collection.query()."""

    EQ = "=="
    NEQ = "!="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="

    @classmethod
    def parse(cls, symbol: "Operator | str") -> "Operator | None":
        """
        Resolve an operator from a member or its symbol.

        Args:
            symbol: An Operator, or one of "==", "!=", ">", ">=", "<", "<=".

        Returns:
            The matching Operator, or None if the symbol is not recognized.
        """
        if isinstance(symbol, cls):
            return symbol
        try:
            return cls(symbol)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value
