"""
Soft delete: configuration and the visibility predicate composer.

A soft-deleted row keeps living in the table with a marker field set to
``deleted_value``. Every read that does not ask for deleted rows gets a
visibility predicate requiring the marker to equal ``not_deleted_value``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .exceptions import ConfigurationError
from .operators import DEFAULT_PREDICATE_REGISTRY, FilterOperator

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from .entity import EntityDescriptor
    from .operators import PredicateOperatorRegistry


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SoftDeleteConfig:
    """
    Marker field and its deleted / not-deleted values.

    Attributes:
        field: Column used as the deletion marker, e.g. ``"deleted_at"``
            or ``"is_deleted"``.
        deleted_value: Value written on delete. A zero-argument callable is
            evaluated on every delete; defaults to the current UTC time.
        not_deleted_value: Value that marks a live row; ``None`` by default.
    """

    field: str
    deleted_value: Any = utc_now
    not_deleted_value: Any = None

    def __post_init__(self) -> None:
        if not self.field or not isinstance(self.field, str):
            raise ConfigurationError("Soft delete configuration requires a 'field'")

    def resolve_deleted_value(self) -> Any:
        if callable(self.deleted_value):
            return self.deleted_value()
        return self.deleted_value


class SoftDeleteComposer:
    """Visibility predicates and write values for one entity.

    Constructed with ``config=None`` for entities without soft delete, in
    which case :meth:`apply` is a no-op and :attr:`enabled` is ``False``.
    """

    def __init__(
        self,
        entity: EntityDescriptor,
        config: SoftDeleteConfig | None,
        *,
        registry: PredicateOperatorRegistry | None = None,
    ) -> None:
        if config is not None and not entity.has_column(config.field):
            raise ConfigurationError(
                f"Soft delete field '{config.field}' is not a column "
                f"of '{entity.name}'"
            )
        self._entity = entity
        self._config = config
        self._registry = registry or DEFAULT_PREDICATE_REGISTRY

    @property
    def enabled(self) -> bool:
        return self._config is not None

    @property
    def config(self) -> SoftDeleteConfig:
        if self._config is None:
            raise ConfigurationError(
                f"Soft delete is not configured for '{self._entity.name}'"
            )
        return self._config

    def apply(
        self,
        predicates: list[ColumnElement[bool]],
        include_deleted: bool = False,
    ) -> list[ColumnElement[bool]]:
        """Append the "not deleted" predicate unless deleted rows are wanted."""
        if self._config is None or include_deleted:
            return predicates

        column = self._entity.columns[self._config.field]
        not_deleted = self._config.not_deleted_value
        if not_deleted is None:
            predicates.append(self._registry.build(FilterOperator.IS_NULL, column, None))
        else:
            predicates.append(
                self._registry.build(FilterOperator.EQUALS, column, not_deleted)
            )
        return predicates

    def deleted_values(self) -> dict[str, Any]:
        """Column values that mark a row deleted, resolved for this call."""
        config = self.config
        return {config.field: config.resolve_deleted_value()}

    def restored_values(self) -> dict[str, Any]:
        """Column values that mark a row live again."""
        config = self.config
        return {config.field: config.not_deleted_value}
