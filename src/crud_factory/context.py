"""
Per-call context, list parameters and result envelopes.

``OperationContext`` lives for exactly one operation call and is never
persisted. ``ListParams`` and ``PaginatedResult`` accept and emit the
camelCase keys of the JSON interface (``perPage``, ``totalItems``, ...)
while exposing snake_case attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypedDict, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

CrudOperation = Literal[
    "create",
    "update",
    "find_one",
    "list",
    "delete_one",
    "restore",
    "permanent_delete",
    "bulk_create",
    "bulk_delete",
    "bulk_restore",
]


def default_properties_factory() -> dict[str, Any]:
    return {}


@dataclass(frozen=True)
class Actor:
    """Identity of the caller, handed to scope filter functions.

    Attributes:
        type: Kind of actor, e.g. ``"user"`` or ``"service"``.
        properties: Identity attributes (``{"user_id": 1, "role": "admin"}``).
        metadata: Optional free-form metadata.
    """

    type: str
    properties: dict[str, Any] = field(default_factory=default_properties_factory)
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class OperationContext:
    """
    Per-call options for a CRUD operation.

    Attributes:
        store: Store handle overriding the pipeline default for this call
            (``AsyncEngine``, ``AsyncConnection`` or ``AsyncSession``).
        actor: The caller, passed to scope filter functions.
        scope: Scope values keyed like the configured scope filters,
            e.g. ``{"tenant_id": "A"}``.
        skip_validation: Bypass hook and schema validation entirely.
    """

    store: Any = None
    actor: Actor | None = None
    scope: dict[str, Any] | None = None
    skip_validation: bool = False

    def scope_value(self, key: str) -> Any:
        return (self.scope or {}).get(key)


EMPTY_CONTEXT = OperationContext()


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class OrderBy(CamelModel):
    field: str
    direction: Literal["asc", "desc"] = "asc"


class ListParams(CamelModel):
    """Parameters of a ``list`` call."""

    page: int | None = None
    per_page: int | None = None
    search: str | None = None
    filters: dict[str, Any] | None = None
    order_by: list[OrderBy] = Field(default_factory=list)
    include_deleted: bool = False


class PaginatedResult(CamelModel, Generic[T]):
    """
    One page of results with its pagination metadata.

    ``model_dump(by_alias=True)`` yields the fixed response envelope
    ``{results, page, perPage, totalItems, totalPages, hasNextPage,
    hasPreviousPage}``.
    """

    results: list[T]
    page: int
    per_page: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class DeleteResult(TypedDict, total=False):
    success: bool
    count: int


class BulkResult(TypedDict):
    success: bool
    count: int


class BulkCreateResult(TypedDict):
    success: bool
    count: int
    items: list[dict[str, Any]]
