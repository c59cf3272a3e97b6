"""
SQLAlchemy implementation of the storage executor.

Accepts any of the asyncio store handles:

1. **AsyncEngine** — every statement runs in its own ``engine.begin()``
   block and is committed on success.
2. **AsyncConnection** / **AsyncSession** — statements run inside the
   caller's transaction; the caller commits (unit-of-work style)::

       async with session_factory() as session:
           await users_crud.create({...}, OperationContext(store=session))
           await session.commit()
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping, Sequence

    from sqlalchemy import ColumnElement

    from .entity import EntityDescriptor

logger = logging.getLogger(__name__)

StoreHandle = AsyncEngine | AsyncConnection | AsyncSession


def is_store_handle(handle: Any) -> bool:
    return isinstance(handle, AsyncEngine | AsyncConnection | AsyncSession)


class SQLAlchemyStoreExecutor:
    """
    Executes one statement per call against the entity's table.

    Implements :class:`~crud_factory.ports.store.IStoreExecutor`.
    """

    def __init__(self, entity: EntityDescriptor, handle: StoreHandle) -> None:
        if not is_store_handle(handle):
            raise ConfigurationError(
                "Store must be an AsyncEngine, AsyncConnection or AsyncSession, "
                f"got {type(handle).__name__}"
            )
        self._entity = entity
        self._table = entity.table
        self._handle = handle

    @contextlib.asynccontextmanager
    async def _connection(self) -> AsyncIterator[AsyncConnection]:
        handle = self._handle
        if isinstance(handle, AsyncEngine):
            async with handle.begin() as conn:
                yield conn
        elif isinstance(handle, AsyncSession):
            yield await handle.connection()
        else:
            yield handle

    # -- reads --------------------------------------------------------------

    async def select(
        self,
        where: ColumnElement[bool] | None,
        *,
        order_by: Sequence[Any] = (),
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        stmt = select(self._table)
        if where is not None:
            stmt = stmt.where(where)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)

        async with self._connection() as conn:
            result = await conn.execute(stmt)
            return [dict(row._mapping) for row in result]

    async def count(self, where: ColumnElement[bool] | None) -> int:
        stmt = select(func.count()).select_from(self._table)
        if where is not None:
            stmt = stmt.where(where)

        async with self._connection() as conn:
            result = await conn.execute(stmt)
            return int(result.scalar_one())

    # -- writes -------------------------------------------------------------

    async def insert(self, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """
        Insert *rows* and return them as stored, in input order.

        Rows sharing the same column set go out as one executemany
        statement; a batch mixing column sets is split per column set so
        that omitted columns keep their table defaults.
        """
        if not rows:
            return []

        groups: dict[tuple[str, ...], list[int]] = {}
        for index, row in enumerate(rows):
            groups.setdefault(tuple(sorted(row)), []).append(index)

        stored: list[dict[str, Any] | None] = [None] * len(rows)
        async with self._connection() as conn:
            for keys, indexes in groups.items():
                stmt = insert(self._table).returning(
                    *self._table.c, sort_by_parameter_order=True
                )
                params = [dict(rows[i]) for i in indexes]
                if keys:
                    result = await conn.execute(stmt, params)
                    returned = [dict(r._mapping) for r in result]
                else:
                    returned = []
                    for _ in indexes:
                        result = await conn.execute(stmt)
                        returned.append(dict(result.one()._mapping))
                for i, row in zip(indexes, returned, strict=True):
                    stored[i] = row

        if len(groups) > 1:
            logger.debug(
                "Inserted %d %s rows in %d column groups",
                len(rows),
                self._entity.name,
                len(groups),
            )
        return [row for row in stored if row is not None]

    async def update(
        self,
        values: Mapping[str, Any],
        where: ColumnElement[bool] | None,
        *,
        returning: bool = False,
    ) -> tuple[int, list[dict[str, Any]]]:
        stmt = update(self._table).values(dict(values))
        if where is not None:
            stmt = stmt.where(where)

        async with self._connection() as conn:
            if returning:
                result = await conn.execute(stmt.returning(*self._table.c))
                rows = [dict(r._mapping) for r in result]
                return len(rows), rows
            result = await conn.execute(stmt)
            return result.rowcount, []

    async def delete(self, where: ColumnElement[bool] | None) -> int:
        stmt = delete(self._table)
        if where is not None:
            stmt = stmt.where(where)

        async with self._connection() as conn:
            result = await conn.execute(stmt)
            return result.rowcount
