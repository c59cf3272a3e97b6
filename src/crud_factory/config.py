"""Per-entity pipeline configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from .exceptions import ConfigurationError
from .pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

if TYPE_CHECKING:
    from .hooks import CrudHooks
    from .ports import ISchema, IValidationAdapter
    from .scope import ScopeFilterFunction
    from .soft_delete import SoftDeleteConfig


@dataclass(frozen=True)
class CrudSchemas:
    """Ready-made validators that bypass the validation adapter.

    Any schema left as ``None`` means "no validation" for its input.
    """

    insert_schema: ISchema | None = None
    update_schema: ISchema | None = None
    list_schema: ISchema | None = None
    id_schema: ISchema | None = None


@dataclass
class CrudOptions:
    """
    Declarative configuration of one entity pipeline.

    Attributes:
        search_fields: Columns matched by the free-text ``search`` of ``list``.
        default_page_size: Page size when ``list`` is called without one.
        max_page_size: Upper bound applied to any requested page size.
        allowed_filters: Columns ``list`` filters may reference. Empty
            allows every column.
        soft_delete: Soft-delete marker configuration, or ``None`` for
            physical deletes.
        scope_filters: Scope functions keyed by scope key.
        hooks: Lifecycle hooks; defaults to :class:`CrudHooks`.
        validation: Adapter that derives schemas from the table.
        schemas: Explicit schemas, used instead of *validation*.
        id_field: Key of the identifying column.
        name: Entity name for logs and errors; defaults to the table name.
    """

    search_fields: list[str] = field(default_factory=list)
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE
    allowed_filters: list[str] = field(default_factory=list)
    soft_delete: SoftDeleteConfig | None = None
    scope_filters: dict[str, ScopeFilterFunction] = field(default_factory=dict)
    hooks: CrudHooks | None = None
    validation: IValidationAdapter | None = None
    schemas: CrudSchemas | None = None
    id_field: str = "id"
    name: str | None = None

    def __post_init__(self) -> None:
        if self.default_page_size < 1:
            raise ConfigurationError("default_page_size must be at least 1")
        if self.max_page_size < 1:
            raise ConfigurationError("max_page_size must be at least 1")
        if self.default_page_size > self.max_page_size:
            raise ConfigurationError(
                f"default_page_size ({self.default_page_size}) exceeds "
                f"max_page_size ({self.max_page_size})"
            )

    def with_defaults(self, **defaults: Any) -> CrudOptions:
        """Return a copy where unset (``None``) options take *defaults*."""
        values = {
            key: value
            for key, value in defaults.items()
            if getattr(self, key, None) is None
        }
        if not values:
            return self
        return replace(self, **values)
