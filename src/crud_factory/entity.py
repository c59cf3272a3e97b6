"""EntityDescriptor — explicit identity of the table a pipeline operates on."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import Table

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Column


@dataclass(frozen=True)
class EntityDescriptor:
    """
    Name, id column and column map of one entity.

    Attributes:
        name: Human-readable entity name used in logs and errors.
        table: The SQLAlchemy ``Table`` holding the rows.
        id_field: Key of the identifying column.
        columns: Column objects keyed by column key.
    """

    name: str
    table: Table
    id_field: str = "id"
    columns: dict[str, Column[Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.columns:
            object.__setattr__(self, "columns", dict(self.table.c.items()))
        if self.id_field not in self.columns:
            raise ConfigurationError(
                f"Entity '{self.name}' has no id column '{self.id_field}'"
            )

    @classmethod
    def from_table(
        cls,
        table: Any,
        *,
        name: str | None = None,
        id_field: str = "id",
    ) -> EntityDescriptor:
        """
        Build a descriptor from a ``Table`` or a declarative model class.

        Raises:
            ConfigurationError: If *table* is missing or not a table.
        """
        if table is None:
            raise ConfigurationError("A table is required to build a CRUD pipeline")
        resolved = getattr(table, "__table__", table)
        if not isinstance(resolved, Table):
            raise ConfigurationError(
                f"Expected a SQLAlchemy Table or mapped class, "
                f"got {type(table).__name__}"
            )
        return cls(name=name or resolved.name, table=resolved, id_field=id_field)

    @property
    def id_column(self) -> Column[Any]:
        return self.columns[self.id_field]

    def column(self, key: str) -> Column[Any] | None:
        """Return the column named *key*, or ``None`` if the table has none."""
        return self.columns.get(key)

    def has_column(self, key: str) -> bool:
        return key in self.columns

    def require_columns(self, keys: Iterable[str], *, purpose: str) -> None:
        """Raise if any of *keys* is not a column of this entity."""
        unknown = sorted(k for k in keys if k not in self.columns)
        if unknown:
            raise ConfigurationError(
                f"Unknown {purpose} field(s) on '{self.name}': {', '.join(unknown)}"
            )
