"""LIKE patterns: like, ilike.

The value is a raw SQL pattern; ``%`` and ``_`` keep their wildcard meaning.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from .enum import FilterOperator
from .strategy import PredicateOperator

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement


class PatternOperator(PredicateOperator):
    def __init__(self, *, case_sensitive: bool = True) -> None:
        self.case_sensitive = case_sensitive
        self.name = FilterOperator.LIKE if case_sensitive else FilterOperator.ILIKE

    def normalize(self, value: Any) -> str:
        return str(value)

    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        if self.case_sensitive:
            return cast("ColumnElement[bool]", column.like(value))
        return cast("ColumnElement[bool]", column.ilike(value))
