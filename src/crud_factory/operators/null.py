"""``IS NULL``, used for soft-delete visibility; not reachable from the filter DSL."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from .enum import FilterOperator
from .strategy import PredicateOperator

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement


class IsNullOperator(PredicateOperator):
    name = FilterOperator.IS_NULL

    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.is_(None))
