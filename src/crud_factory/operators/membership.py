"""Set membership: in, notIn."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from .enum import FilterOperator
from .strategy import PredicateOperator

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement


class MembershipOperator(PredicateOperator):
    """
    ``column IN (...)``, or ``NOT IN`` when *negated*.

    A scalar value is treated as a one-element list; strings are never
    split into characters.
    """

    def __init__(self, *, negated: bool = False) -> None:
        self.negated = negated
        self.name = FilterOperator.NOT_IN if negated else FilterOperator.IN

    def normalize(self, value: Any) -> list[Any]:
        if isinstance(value, list | tuple | set | frozenset):
            return list(value)
        return [value]

    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        if self.negated:
            return cast("ColumnElement[bool]", column.not_in(value))
        return cast("ColumnElement[bool]", column.in_(value))
