"""Binary comparisons: equals, not, gt, gte, lt, lte."""

from __future__ import annotations

import operator
from typing import TYPE_CHECKING, Any, cast

from .enum import FilterOperator
from .strategy import PredicateOperator

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy import ColumnElement

_COMPARISONS: dict[FilterOperator, Callable[[Any, Any], Any]] = {
    FilterOperator.EQUALS: operator.eq,
    FilterOperator.NOT: operator.ne,
    FilterOperator.GT: operator.gt,
    FilterOperator.GTE: operator.ge,
    FilterOperator.LT: operator.lt,
    FilterOperator.LTE: operator.le,
}


class ComparisonOperator(PredicateOperator):
    """``column <op> value`` for one of the comparison keys."""

    def __init__(self, name: FilterOperator) -> None:
        if name not in _COMPARISONS:
            raise ValueError(f"{name.value!r} is not a comparison operator")
        self.name = name
        self._compare = _COMPARISONS[name]

    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", self._compare(column, value))


def comparison_operators() -> list[ComparisonOperator]:
    return [ComparisonOperator(name) for name in _COMPARISONS]
