"""ScopeComposer — per-key row restriction driven by the caller's context.

Scope filters enforce multi-tenancy or role-based visibility transparently::

    scope_filters = {
        "tenant_id": lambda value, actor: (
            users.c.tenant_id == value if value is not None else None
        ),
    }

A function returning ``None`` applies no restriction for that call.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import ColumnElement

    from .context import OperationContext

ScopeFilterFunction = Callable[[Any, Any], Any]
"""``(scope_value, actor) -> predicate | None``."""


class ScopeComposer:
    """Appends the predicates returned by the configured scope functions."""

    def __init__(self, scope_filters: Mapping[str, ScopeFilterFunction] | None = None):
        self._scope_filters: dict[str, ScopeFilterFunction] = dict(scope_filters or {})

    @property
    def keys(self) -> list[str]:
        return list(self._scope_filters)

    def apply(
        self,
        predicates: list[ColumnElement[bool]],
        context: OperationContext,
    ) -> list[ColumnElement[bool]]:
        """Invoke every scope function with the context's value and actor."""
        for key, filter_fn in self._scope_filters.items():
            condition = filter_fn(context.scope_value(key), context.actor)
            if condition is not None:
                predicates.append(condition)
        return predicates
