"""ISchema / IValidationAdapter — schema-validation collaborator protocols."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..entity import EntityDescriptor


@runtime_checkable
class ISchema(Protocol):
    """A validator for one kind of input."""

    def validate(self, data: Any) -> Any:
        """Return the validated (possibly transformed) data.

        Must raise :class:`~crud_factory.exceptions.ValidationError` when
        *data* is rejected.
        """
        ...


@runtime_checkable
class IValidationAdapter(Protocol):
    """Builds the schemas a pipeline validates its inputs with."""

    def create_insert_schema(self, entity: EntityDescriptor) -> ISchema:
        ...

    def create_update_schema(self, entity: EntityDescriptor) -> ISchema:
        ...

    def create_list_schema(
        self,
        entity: EntityDescriptor,
        *,
        search_fields: Sequence[str] = (),
        allowed_filters: Sequence[str] = (),
        allowed_order_fields: Sequence[str] = (),
        default_page_size: int = 20,
        max_page_size: int = 100,
        allow_include_deleted: bool = False,
    ) -> ISchema:
        ...

    def create_id_schema(self, entity: EntityDescriptor) -> ISchema:
        ...

    def create_filter_schema(
        self,
        entity: EntityDescriptor,
        allowed_filters: Sequence[str] = (),
    ) -> ISchema:
        ...
