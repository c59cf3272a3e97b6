"""
Compile a declarative filter expression into SQLAlchemy predicates.

A filter expression maps field names to either a literal value (implicit
``equals``) or an operator map::

    {
        "role": "admin",
        "age": {"gte": 18, "lt": 65},
        "status": {"in": ["active", "pending"]},
        "OR": [{"name": {"like": "A%"}}, {"name": {"like": "B%"}}],
    }

The reserved ``AND`` / ``OR`` keys hold lists of nested expressions.
Compilation never raises: unknown operators, fields outside the allow-list,
fields the table does not have and ``None`` values contribute nothing.
Leaf operators are compiled through a :class:`PredicateOperatorRegistry`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .operators import DEFAULT_PREDICATE_REGISTRY, FilterOperator
from .operators.enum import AND_KEY, OR_KEY
from .predicates import conjunction, disjunction

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement

    from .entity import EntityDescriptor
    from .operators import PredicateOperatorRegistry

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compile_filters(
    entity: EntityDescriptor,
    expression: Mapping[str, Any] | None,
    allowed_fields: Sequence[str] | None = None,
    *,
    registry: PredicateOperatorRegistry | None = None,
) -> list[ColumnElement[bool]]:
    """
    Expand *expression* into an ordered list of predicates.

    Args:
        entity: Descriptor of the table being filtered.
        expression: The filter expression (may be ``None``).
        allowed_fields: Filterable field names. Empty or ``None`` allows
            every column of the table.
        registry: Optional custom operator registry. Falls back to
            ``DEFAULT_PREDICATE_REGISTRY``.

    Returns:
        Predicates meant to be AND-joined, in field-then-operator order.
    """
    if not isinstance(expression, Mapping) or not expression:
        return []

    reg = registry or DEFAULT_PREDICATE_REGISTRY
    allowed = frozenset(allowed_fields or ())

    if AND_KEY not in expression and OR_KEY not in expression:
        return _compile_group(entity, expression, allowed, reg)

    predicates: list[ColumnElement[bool]] = []

    and_clause = conjunction(
        _compile_logical_entries(entity, expression.get(AND_KEY), allowed, reg)
    )
    if and_clause is not None:
        predicates.append(and_clause)

    or_clause = disjunction(
        _compile_logical_entries(entity, expression.get(OR_KEY), allowed, reg)
    )
    if or_clause is not None:
        predicates.append(or_clause)

    remaining = {k: v for k, v in expression.items() if k not in (AND_KEY, OR_KEY)}
    predicates.extend(_compile_group(entity, remaining, allowed, reg))
    return predicates


def filters_to_where(
    entity: EntityDescriptor,
    expression: Mapping[str, Any] | None,
    allowed_fields: Sequence[str] | None = None,
    *,
    registry: PredicateOperatorRegistry | None = None,
) -> ColumnElement[bool] | None:
    """Compile *expression* into a single ``WHERE`` clause, or ``None``."""
    return conjunction(
        compile_filters(entity, expression, allowed_fields, registry=registry)
    )


# ---------------------------------------------------------------------------
# Internal compilation
# ---------------------------------------------------------------------------


def _compile_logical_entries(
    entity: EntityDescriptor,
    entries: Any,
    allowed: frozenset[str],
    registry: PredicateOperatorRegistry,
) -> list[ColumnElement[bool]]:
    """Compile each entry of an ``AND`` / ``OR`` list into one group clause."""
    if not isinstance(entries, list | tuple):
        return []

    groups: list[ColumnElement[bool]] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        group = conjunction(_compile_group(entity, entry, allowed, registry))
        if group is not None:
            groups.append(group)
    return groups


def _compile_group(
    entity: EntityDescriptor,
    group: Mapping[str, Any],
    allowed: frozenset[str],
    registry: PredicateOperatorRegistry,
) -> list[ColumnElement[bool]]:
    """Compile plain ``field -> value`` pairs."""
    predicates: list[ColumnElement[bool]] = []

    for field_name, value in group.items():
        if value is None:
            continue
        if allowed and field_name not in allowed:
            continue
        column = entity.column(field_name)
        if column is None:
            continue
        operators = _as_operator_map(value)
        predicates.extend(_compile_operator_map(column, operators, registry))

    return predicates


def _compile_operator_map(
    column: Any,
    operators: Mapping[str, Any],
    registry: PredicateOperatorRegistry,
) -> list[ColumnElement[bool]]:
    predicates: list[ColumnElement[bool]] = []
    for key, value in operators.items():
        clause = registry.compile(key, column, value)
        if clause is not None:
            predicates.append(clause)
    return predicates


def _as_operator_map(value: Any) -> Mapping[str, Any]:
    """A literal is shorthand for ``equals``; a collection for ``in``."""
    if isinstance(value, Mapping):
        return value
    if isinstance(value, list | tuple | set | frozenset):
        return {FilterOperator.IN.value: value}
    return {FilterOperator.EQUALS.value: value}
