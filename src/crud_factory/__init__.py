"""crud-factory — declarative CRUD operations over SQLAlchemy tables.

Filters, scopes, soft delete, search and pagination are composed into
SQLAlchemy predicates; optional pydantic schemas validate the inputs.
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────
from .config import CrudOptions, CrudSchemas

# ── Context & results ───────────────────────────────────────────
from .context import (
    Actor,
    BulkCreateResult,
    BulkResult,
    CrudOperation,
    DeleteResult,
    ListParams,
    OperationContext,
    OrderBy,
    PaginatedResult,
)
from .entity import EntityDescriptor

# ── Exceptions ──────────────────────────────────────────────────
from .exceptions import (
    ConfigurationError,
    CrudError,
    EntityNotFoundError,
    NotFoundError,
    UsageError,
    ValidationError,
)

# ── Entry points ────────────────────────────────────────────────
from .factory import CrudFactory, crud_factory

# ── Query composition ───────────────────────────────────────────
from .filters import compile_filters, filters_to_where
from .hooks import CrudHooks
from .operators import (
    DEFAULT_PREDICATE_REGISTRY,
    FilterOperator,
    PredicateOperator,
    PredicateOperatorRegistry,
)
from .pagination import PageBounds, build_page, paginate
from .pipeline import CrudPipeline
from .ports import ISchema, IStoreExecutor, IValidationAdapter
from .scope import ScopeComposer, ScopeFilterFunction
from .search import SearchComposer
from .soft_delete import SoftDeleteComposer, SoftDeleteConfig
from .store import SQLAlchemyStoreExecutor
from .validation import PydanticSchema, PydanticValidationAdapter

__all__ = [
    # Entry points
    "CrudFactory",
    "CrudPipeline",
    "crud_factory",
    # Configuration
    "CrudHooks",
    "CrudOptions",
    "CrudSchemas",
    "EntityDescriptor",
    "SoftDeleteConfig",
    # Context & results
    "Actor",
    "BulkCreateResult",
    "BulkResult",
    "CrudOperation",
    "DeleteResult",
    "ListParams",
    "OperationContext",
    "OrderBy",
    "PaginatedResult",
    # Query composition
    "DEFAULT_PREDICATE_REGISTRY",
    "FilterOperator",
    "PageBounds",
    "PredicateOperator",
    "PredicateOperatorRegistry",
    "ScopeComposer",
    "ScopeFilterFunction",
    "SearchComposer",
    "SoftDeleteComposer",
    "build_page",
    "compile_filters",
    "filters_to_where",
    "paginate",
    # Ports & adapters
    "ISchema",
    "IStoreExecutor",
    "IValidationAdapter",
    "PydanticSchema",
    "PydanticValidationAdapter",
    "SQLAlchemyStoreExecutor",
    # Exceptions
    "ConfigurationError",
    "CrudError",
    "EntityNotFoundError",
    "NotFoundError",
    "UsageError",
    "ValidationError",
]
