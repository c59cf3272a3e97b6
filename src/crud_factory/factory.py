"""
Entry points that build :class:`CrudPipeline` instances.

One pipeline::

    users_crud = crud_factory(engine, users, CrudOptions(search_fields=["name"]))

Many pipelines sharing a store and a validation adapter::

    crud = CrudFactory(engine, validation=PydanticValidationAdapter())
    users_crud = crud(users, CrudOptions(soft_delete=SoftDeleteConfig("deleted_at")))
    posts_crud = crud(posts)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .config import CrudOptions
from .pipeline import CrudPipeline

if TYPE_CHECKING:
    from .operators import PredicateOperatorRegistry
    from .pipeline import ExecutorFactory
    from .ports import IValidationAdapter


def crud_factory(
    store: Any,
    table: Any,
    options: CrudOptions | None = None,
) -> CrudPipeline:
    """Build the operation pipeline for *table* on *store*."""
    return CrudPipeline(store, table, options)


class CrudFactory:
    """
    Shared defaults for pipelines built over the same store.

    Options passed per entity override the factory defaults; an entity
    without its own ``validation`` uses the factory's adapter.
    """

    def __init__(
        self,
        store: Any,
        validation: IValidationAdapter | None = None,
        *,
        executor_factory: ExecutorFactory | None = None,
        registry: PredicateOperatorRegistry | None = None,
    ) -> None:
        self.store = store
        self.validation = validation
        self._executor_factory = executor_factory
        self._registry = registry

    def __call__(self, table: Any, options: CrudOptions | None = None) -> CrudPipeline:
        resolved = (options or CrudOptions()).with_defaults(validation=self.validation)
        return CrudPipeline(
            self.store,
            table,
            resolved,
            executor_factory=self._executor_factory,
            registry=self._registry,
        )
