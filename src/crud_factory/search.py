"""SearchComposer — free-text search across configured columns."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from .predicates import disjunction

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement

    from .entity import EntityDescriptor


class SearchComposer:
    """
    Appends ``field LIKE %term%`` for each search field, OR-joined.

    ``%`` and ``_`` inside the term match literally. Matching is as
    case-sensitive as the database's ``LIKE`` (case-insensitive for ASCII on
    SQLite and MySQL, case-sensitive on PostgreSQL).
    """

    def __init__(
        self,
        entity: EntityDescriptor,
        search_fields: Sequence[str] | None = None,
    ) -> None:
        fields = list(search_fields or [])
        entity.require_columns(fields, purpose="search")
        self._columns: list[Any] = [entity.columns[f] for f in fields]

    def apply(
        self,
        predicates: list[ColumnElement[bool]],
        search: str | None,
    ) -> list[ColumnElement[bool]]:
        if not self._columns or not search or not search.strip():
            return predicates

        clause = disjunction(
            [
                cast("ColumnElement[bool]", column.contains(search, autoescape=True))
                for column in self._columns
            ]
        )
        if clause is not None:
            predicates.append(clause)
        return predicates
