"""
Predicate composition helpers.

A predicate is a SQLAlchemy ``ColumnElement[bool]``. Composers append
predicates to a plain list; these helpers fold such a list into a single
clause for a ``WHERE``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import and_, or_

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement


def conjunction(
    predicates: Sequence[ColumnElement[bool] | None],
) -> ColumnElement[bool] | None:
    """AND the given predicates.

    Returns ``None`` for an empty sequence and the predicate itself when
    there is exactly one, so that rendered SQL stays free of redundant
    grouping.
    """
    present = [p for p in predicates if p is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return and_(*present)


def disjunction(
    predicates: Sequence[ColumnElement[bool] | None],
) -> ColumnElement[bool] | None:
    """OR the given predicates; same shape rules as :func:`conjunction`."""
    present = [p for p in predicates if p is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return or_(*present)
