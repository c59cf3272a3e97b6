"""
Operator strategies and the registry the filter compiler resolves them from.

A strategy turns ``(column, value)`` into one boolean clause. The registry
maps the operator-map keys of a filter expression (``"gte"``, ``"notIn"``,
...) to strategies and decides whether an entry contributes a predicate at
all: unknown keys, unregistered operators and ``None`` values contribute
nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..exceptions import ConfigurationError
from .enum import FilterOperator

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import ColumnElement


class PredicateOperator(ABC):
    """
    One filter operator.

    Subclasses set :attr:`name` and implement :meth:`build`. Override
    :meth:`normalize` to reshape the literal before it reaches the column
    (``in`` wraps a scalar in a list, pattern operators stringify).
    """

    name: FilterOperator

    def normalize(self, value: Any) -> Any:
        return value

    @abstractmethod
    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        """Return the clause for *column* against the normalized *value*."""
        ...

    def __call__(self, column: Any, value: Any) -> ColumnElement[bool]:
        return self.build(column, self.normalize(value))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name.value!r}>"


class PredicateOperatorRegistry:
    """
    Strategies keyed by :class:`FilterOperator`.

    Registries are plain mutable objects; build your own with
    :func:`~crud_factory.operators.build_default_registry` before
    overriding operators so the shared default stays untouched.
    """

    def __init__(self, operators: Iterable[PredicateOperator] = ()) -> None:
        self._operators: dict[FilterOperator, PredicateOperator] = {}
        for operator in operators:
            self.register(operator)

    def register(self, operator: PredicateOperator) -> None:
        """Add *operator*, replacing any strategy with the same name."""
        self._operators[operator.name] = operator

    def unregister(self, name: FilterOperator) -> None:
        self._operators.pop(name, None)

    def get(self, name: FilterOperator) -> PredicateOperator | None:
        return self._operators.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._operators

    @property
    def supported_operators(self) -> frozenset[FilterOperator]:
        return frozenset(self._operators)

    def compile(
        self,
        key: Any,
        column: Any,
        value: Any,
    ) -> ColumnElement[bool] | None:
        """
        Compile one ``key: value`` entry of a filter operator map.

        Returns ``None`` when *key* is not a filter DSL operator, when no
        strategy is registered for it, or when *value* is ``None``.
        """
        if value is None or not isinstance(key, str):
            return None
        name = FilterOperator.from_key(key)
        operator = self._operators.get(name) if name is not None else None
        if operator is None:
            return None
        return operator(column, value)

    def build(
        self,
        name: FilterOperator,
        column: Any,
        value: Any,
    ) -> ColumnElement[bool]:
        """
        Build a predicate the pipeline itself relies on: identity lookups,
        implicit ``equals`` / ``in`` and soft-delete visibility.

        Raises:
            ConfigurationError: If no strategy is registered for *name*.
        """
        operator = self._operators.get(name)
        if operator is None:
            raise ConfigurationError(
                f"No predicate operator registered for {name.value!r}"
            )
        return operator(column, value)
