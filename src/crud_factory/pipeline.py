"""
CrudPipeline — the per-entity operation set.

Every operation runs the same stages, terminal on success or on the first
failure:

1. resolve the store handle (``context.store`` or the pipeline default),
2. validate the input (hooks first, then the schema),
3. transform it with ``before_create`` / ``before_update``,
4. compose predicates: identity, then scope, then soft-delete visibility,
5. execute one statement through the store executor,
6. shape the result.

Pipelines hold no per-call state and may be shared by concurrent tasks.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar, cast

from pydantic import ValidationError as PydanticValidationError

from .config import CrudOptions, CrudSchemas
from .context import EMPTY_CONTEXT, ListParams
from .entity import EntityDescriptor
from .exceptions import EntityNotFoundError, UsageError, ValidationError
from .filters import compile_filters
from .hooks import CrudHooks, resolve
from .operators import DEFAULT_PREDICATE_REGISTRY, FilterOperator
from .pagination import build_page, paginate
from .ports import IStoreExecutor
from .predicates import conjunction
from .scope import ScopeComposer
from .search import SearchComposer
from .soft_delete import SoftDeleteComposer
from .store import SQLAlchemyStoreExecutor
from .validation import errors_from_pydantic

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from sqlalchemy import ColumnElement

    from .context import (
        BulkCreateResult,
        BulkResult,
        CrudOperation,
        DeleteResult,
        OperationContext,
        PaginatedResult,
    )
    from .operators import PredicateOperatorRegistry
    from .ports import ISchema

    ExecutorFactory = Callable[[EntityDescriptor, Any], IStoreExecutor]

logger = logging.getLogger(__name__)

F = TypeVar("F", bound="Callable[..., Awaitable[Any]]")


def logged_operation(operation: CrudOperation) -> Callable[[F], F]:
    """Log an operation's start, duration and failure at the pipeline level."""

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        async def wrapper(self: CrudPipeline, *args: Any, **kwargs: Any) -> Any:
            label = f"{self.entity.name}.{operation}"
            logger.debug("Handling %s", label)
            start = time.perf_counter()
            try:
                result = await fn(self, *args, **kwargs)
            except Exception:
                elapsed = (time.perf_counter() - start) * 1000
                logger.exception("%s failed after %.2fms", label, elapsed)
                raise
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug("%s completed in %.2fms", label, elapsed)
            return result

        return cast("F", wrapper)

    return decorator


def build_schemas(entity: EntityDescriptor, options: CrudOptions) -> CrudSchemas:
    """Explicit schemas win; otherwise derive them from the validation adapter."""
    if options.schemas is not None:
        return options.schemas
    adapter = options.validation
    if adapter is None:
        return CrudSchemas()
    return CrudSchemas(
        insert_schema=adapter.create_insert_schema(entity),
        update_schema=adapter.create_update_schema(entity),
        list_schema=adapter.create_list_schema(
            entity,
            search_fields=options.search_fields,
            allowed_filters=options.allowed_filters,
            default_page_size=options.default_page_size,
            max_page_size=options.max_page_size,
            allow_include_deleted=options.soft_delete is not None,
        ),
        id_schema=adapter.create_id_schema(entity),
    )


class CrudPipeline:
    """
    Create, read, update, delete, restore and bulk operations for one table.

    Args:
        store: Default store handle (``AsyncEngine``, ``AsyncConnection``,
            ``AsyncSession`` or any :class:`IStoreExecutor`). May be ``None``
            when every call supplies ``context.store``.
        table: SQLAlchemy ``Table`` or declarative model class.
        options: Entity configuration.
        executor_factory: Builds the store executor for a handle; defaults
            to :class:`SQLAlchemyStoreExecutor`.
        registry: Operator registry for filters and identity predicates.

    Raises:
        ConfigurationError: If the table, soft-delete, search or filter
            configuration does not match the table's columns.
    """

    def __init__(
        self,
        store: Any,
        table: Any,
        options: CrudOptions | None = None,
        *,
        executor_factory: ExecutorFactory | None = None,
        registry: PredicateOperatorRegistry | None = None,
    ) -> None:
        self.options = options or CrudOptions()
        self.entity = EntityDescriptor.from_table(
            table, name=self.options.name, id_field=self.options.id_field
        )
        self.entity.require_columns(self.options.allowed_filters, purpose="filter")

        self._store = store
        self._executor_factory: ExecutorFactory = (
            executor_factory or SQLAlchemyStoreExecutor
        )
        self._registry = registry or DEFAULT_PREDICATE_REGISTRY
        self._hooks = self.options.hooks or CrudHooks()
        self._search = SearchComposer(self.entity, self.options.search_fields)
        self._scope = ScopeComposer(self.options.scope_filters)
        self._soft_delete = SoftDeleteComposer(
            self.entity, self.options.soft_delete, registry=self._registry
        )
        self.schemas = build_schemas(self.entity, self.options)

    def __repr__(self) -> str:
        return f"<CrudPipeline entity={self.entity.name!r}>"

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    @logged_operation("find_one")
    async def find_one(
        self,
        conditions: Mapping[str, Any],
        context: OperationContext | None = None,
        *,
        include_deleted: bool = False,
    ) -> dict[str, Any] | None:
        """
        Return the first row matching every condition, or ``None``.

        Each key present in *conditions* is a condition; a ``None`` value
        matches ``IS NULL`` rather than being skipped.

        Raises:
            UsageError: If *conditions* is empty, or a condition names a
                field the table does not have.
        """
        ctx = context or EMPTY_CONTEXT
        if not conditions:
            raise UsageError(
                f"find_one on '{self.entity.name}' requires at least one condition"
            )
        self.entity.require_columns(conditions, purpose="condition")

        predicates = [
            self._condition_predicate(self.entity.columns[k], v)
            for k, v in conditions.items()
        ]
        self._scope.apply(predicates, ctx)
        self._soft_delete.apply(predicates, include_deleted)

        rows = await self._executor(ctx).select(conjunction(predicates), limit=1)
        return rows[0] if rows else None

    @logged_operation("list")
    async def list(
        self,
        params: ListParams | Mapping[str, Any] | None = None,
        context: OperationContext | None = None,
        *,
        where: ColumnElement[bool] | None = None,
    ) -> PaginatedResult[dict[str, Any]]:
        """
        Return one page of rows with pagination metadata.

        *where* is an extra caller-built predicate AND-ed with the filters.
        """
        ctx = context or EMPTY_CONTEXT
        if isinstance(params, ListParams):
            raw: Any = params.model_dump(exclude_unset=True)
        else:
            raw = dict(params or {})
        list_params = self._to_list_params(
            await self._validate("list", raw, self.schemas.list_schema, ctx)
        )

        predicates: list[ColumnElement[bool]] = []
        if where is not None:
            predicates.append(where)
        predicates.extend(
            compile_filters(
                self.entity,
                list_params.filters,
                self.options.allowed_filters,
                registry=self._registry,
            )
        )
        self._search.apply(predicates, list_params.search)
        self._scope.apply(predicates, ctx)
        self._soft_delete.apply(predicates, list_params.include_deleted)
        where_clause = conjunction(predicates)

        order_by = []
        for entry in list_params.order_by:
            column = self.entity.column(entry.field)
            if column is None:
                continue
            order_by.append(column.desc() if entry.direction == "desc" else column.asc())

        bounds = paginate(
            list_params.page,
            list_params.per_page,
            default_page_size=self.options.default_page_size,
            max_page_size=self.options.max_page_size,
        )
        executor = self._executor(ctx)
        rows = await executor.select(
            where_clause,
            order_by=order_by,
            limit=bounds.per_page,
            offset=bounds.offset,
        )
        total_items = await executor.count(where_clause)
        return build_page(rows, bounds, total_items)

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    @logged_operation("create")
    async def create(
        self,
        data: Mapping[str, Any],
        context: OperationContext | None = None,
    ) -> dict[str, Any]:
        """Insert one record and return the stored row."""
        ctx = context or EMPTY_CONTEXT
        record = await self._prepare_insert("create", data, ctx)
        rows = await self._executor(ctx).insert([record])
        return rows[0]

    @logged_operation("update")
    async def update(
        self,
        id: Any,
        data: Mapping[str, Any],
        context: OperationContext | None = None,
    ) -> dict[str, Any]:
        """
        Apply *data* to the row with *id* and return the updated row.

        Scope and soft-delete visibility restrict the matched row. A payload
        that is empty after validation and hooks writes nothing and returns
        the current row under the same restrictions.

        Raises:
            EntityNotFoundError: If no visible row has *id*.
        """
        ctx = context or EMPTY_CONTEXT
        id_value = self._coerce_id(id, ctx)
        validated = await self._validate(
            "update", data, self.schemas.update_schema, ctx
        )
        transformed = await resolve(self._hooks.before_update(validated))
        payload = validated if transformed is None else transformed

        predicates = [self._id_predicate(id_value)]
        self._scope.apply(predicates, ctx)
        self._soft_delete.apply(predicates)
        where_clause = conjunction(predicates)

        executor = self._executor(ctx)
        if not payload:
            logger.debug(
                "%s.update: nothing to change for id=%r",
                self.entity.name,
                id_value,
            )
            rows = await executor.select(where_clause, limit=1)
        else:
            _, rows = await executor.update(dict(payload), where_clause, returning=True)

        if not rows:
            raise EntityNotFoundError(self.entity.name, id_value)
        return rows[0]

    @logged_operation("delete_one")
    async def delete_one(
        self,
        id: Any,
        context: OperationContext | None = None,
    ) -> DeleteResult:
        """
        Delete the row with *id*: mark it when soft delete is configured,
        remove it otherwise.

        Marking an already-deleted row succeeds and re-marks it.
        """
        ctx = context or EMPTY_CONTEXT
        predicates = [self._id_predicate(self._coerce_id(id, ctx))]
        self._scope.apply(predicates, ctx)
        count = await self._remove(conjunction(predicates), ctx)
        return {"success": True, "count": count}

    @logged_operation("restore")
    async def restore(
        self,
        id: Any,
        context: OperationContext | None = None,
    ) -> DeleteResult:
        """
        Clear the soft-delete marker of the row with *id*.

        Raises:
            UsageError: If soft delete is not configured.
            EntityNotFoundError: If no row in scope has *id*.
        """
        self._require_soft_delete("restore")
        ctx = context or EMPTY_CONTEXT
        id_value = self._coerce_id(id, ctx)
        predicates = [self._id_predicate(id_value)]
        self._scope.apply(predicates, ctx)

        count, _ = await self._executor(ctx).update(
            self._soft_delete.restored_values(), conjunction(predicates)
        )
        if not count:
            raise EntityNotFoundError(self.entity.name, id_value)
        return {"success": True}

    @logged_operation("permanent_delete")
    async def permanent_delete(
        self,
        id: Any,
        context: OperationContext | None = None,
    ) -> DeleteResult:
        """
        Physically delete the row with *id*, soft delete or not.

        Existence is checked by id alone; the delete itself is scoped.

        Raises:
            EntityNotFoundError: If no row has *id*.
        """
        ctx = context or EMPTY_CONTEXT
        id_value = self._coerce_id(id, ctx)
        executor = self._executor(ctx)

        existing = await executor.select(self._id_predicate(id_value), limit=1)
        if not existing:
            raise EntityNotFoundError(self.entity.name, id_value)

        predicates = [self._id_predicate(id_value)]
        self._scope.apply(predicates, ctx)
        count = await executor.delete(conjunction(predicates))
        return {"success": True, "count": count}

    # -----------------------------------------------------------------------
    # Bulk
    # -----------------------------------------------------------------------

    @logged_operation("bulk_create")
    async def bulk_create(
        self,
        records: Sequence[Mapping[str, Any]],
        context: OperationContext | None = None,
    ) -> BulkCreateResult:
        """Validate and transform every record, then insert them in one batch."""
        if not records:
            logger.debug("%s.bulk_create: empty input", self.entity.name)
            return {"success": True, "count": 0, "items": []}

        ctx = context or EMPTY_CONTEXT
        prepared = [
            await self._prepare_insert("bulk_create", record, ctx) for record in records
        ]
        rows = await self._executor(ctx).insert(prepared)
        return {"success": True, "count": len(rows), "items": rows}

    @logged_operation("bulk_delete")
    async def bulk_delete(
        self,
        ids: Sequence[Any],
        context: OperationContext | None = None,
    ) -> BulkResult:
        """Delete every row in *ids* in one statement; count is rows affected."""
        if not ids:
            logger.debug("%s.bulk_delete: empty input", self.entity.name)
            return {"success": True, "count": 0}

        ctx = context or EMPTY_CONTEXT
        predicates = [self._ids_predicate(ids, ctx)]
        self._scope.apply(predicates, ctx)
        count = await self._remove(conjunction(predicates), ctx)
        return {"success": True, "count": count}

    @logged_operation("bulk_restore")
    async def bulk_restore(
        self,
        ids: Sequence[Any],
        context: OperationContext | None = None,
    ) -> BulkResult:
        """Clear the soft-delete marker of every row in *ids*.

        Raises:
            UsageError: If soft delete is not configured.
        """
        self._require_soft_delete("bulk_restore")
        if not ids:
            logger.debug("%s.bulk_restore: empty input", self.entity.name)
            return {"success": True, "count": 0}

        ctx = context or EMPTY_CONTEXT
        predicates = [self._ids_predicate(ids, ctx)]
        self._scope.apply(predicates, ctx)
        count, _ = await self._executor(ctx).update(
            self._soft_delete.restored_values(), conjunction(predicates)
        )
        return {"success": True, "count": count}

    # -----------------------------------------------------------------------
    # Stages
    # -----------------------------------------------------------------------

    def _executor(self, context: OperationContext) -> IStoreExecutor:
        handle = context.store if context.store is not None else self._store
        if handle is None:
            raise UsageError(
                f"No store handle for '{self.entity.name}': pass one to the "
                "pipeline or in OperationContext.store"
            )
        if isinstance(handle, IStoreExecutor):
            return handle
        return self._executor_factory(self.entity, handle)

    async def _validate(
        self,
        operation: CrudOperation,
        data: Any,
        schema: ISchema | None,
        context: OperationContext,
    ) -> Any:
        if context.skip_validation:
            return data
        should_validate = await resolve(
            self._hooks.validate(data=data, context=context, operation=operation)
        )
        if not should_validate or schema is None:
            return data
        return await resolve(schema.validate(data))

    async def _prepare_insert(
        self,
        operation: CrudOperation,
        data: Mapping[str, Any],
        context: OperationContext,
    ) -> dict[str, Any]:
        validated = await self._validate(
            operation, data, self.schemas.insert_schema, context
        )
        transformed = await resolve(self._hooks.before_create(validated))
        return dict(validated if transformed is None else transformed)

    def _coerce_id(self, id: Any, context: OperationContext) -> Any:
        schema = self.schemas.id_schema
        if context.skip_validation or schema is None:
            return id
        return schema.validate(id)

    def _condition_predicate(self, column: Any, value: Any) -> ColumnElement[bool]:
        if value is None:
            return self._registry.build(FilterOperator.IS_NULL, column, None)
        return self._registry.build(FilterOperator.EQUALS, column, value)

    def _id_predicate(self, id_value: Any) -> ColumnElement[bool]:
        return self._registry.build(
            FilterOperator.EQUALS, self.entity.id_column, id_value
        )

    def _ids_predicate(
        self, ids: Sequence[Any], context: OperationContext
    ) -> ColumnElement[bool]:
        values = [self._coerce_id(i, context) for i in ids]
        return self._registry.build(FilterOperator.IN, self.entity.id_column, values)

    async def _remove(
        self, where_clause: ColumnElement[bool] | None, context: OperationContext
    ) -> int:
        executor = self._executor(context)
        if self._soft_delete.enabled:
            count, _ = await executor.update(
                self._soft_delete.deleted_values(), where_clause
            )
            return count
        return await executor.delete(where_clause)

    def _require_soft_delete(self, operation: str) -> None:
        if not self._soft_delete.enabled:
            raise UsageError(
                f"{operation} requires soft delete to be configured "
                f"for '{self.entity.name}'"
            )

    @staticmethod
    def _to_list_params(data: Any) -> ListParams:
        if isinstance(data, ListParams):
            return data
        try:
            return ListParams.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError(errors_from_pydantic(exc)) from exc
