"""IStoreExecutor — protocol for the storage collaborator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy import ColumnElement


@runtime_checkable
class IStoreExecutor(Protocol):
    """Executes composed predicates against one table.

    Every method issues exactly one statement. Write methods return the
    affected rows as mappings where the backend supports ``RETURNING``.
    """

    async def select(
        self,
        where: ColumnElement[bool] | None,
        *,
        order_by: Sequence[Any] = (),
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return matching rows."""
        ...

    async def count(self, where: ColumnElement[bool] | None) -> int:
        """Return the number of matching rows."""
        ...

    async def insert(self, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Insert *rows* in one batch and return them as stored."""
        ...

    async def update(
        self,
        values: Mapping[str, Any],
        where: ColumnElement[bool] | None,
        *,
        returning: bool = False,
    ) -> tuple[int, list[dict[str, Any]]]:
        """Update matching rows; return ``(affected_count, rows)``.

        ``rows`` is empty unless *returning* is set.
        """
        ...

    async def delete(self, where: ColumnElement[bool] | None) -> int:
        """Delete matching rows and return the affected count."""
        ...
