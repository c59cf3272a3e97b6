from __future__ import annotations

from enum import Enum


class FilterOperator(str, Enum):
    """Operator keys accepted in a filter expression's operator map."""

    # Standard comparison
    EQUALS = "equals"
    NOT = "not"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"

    # Set membership
    IN = "in"
    NOT_IN = "notIn"

    # String matching
    LIKE = "like"
    ILIKE = "ilike"

    # Soft-delete visibility only; not a filter DSL key
    IS_NULL = "isNull"

    @classmethod
    def from_key(cls, key: str) -> FilterOperator | None:
        """Return the DSL operator named *key*, or ``None`` if unknown."""
        if key not in _DSL_KEYS:
            return None
        return cls(key)


# Logical keys reserved at any level of a filter expression
AND_KEY = "AND"
OR_KEY = "OR"

_DSL_KEYS: frozenset[str] = frozenset(
    op.value for op in FilterOperator if op is not FilterOperator.IS_NULL
)
