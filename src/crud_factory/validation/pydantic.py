"""PydanticValidationAdapter — schemas derived from table column metadata."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    create_model,
)
from pydantic import ValidationError as PydanticValidationError

from ..context import CamelModel, OrderBy
from ..exceptions import ValidationError
from ..pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Column

    from ..entity import EntityDescriptor

_ROW_CONFIG = ConfigDict(
    extra="ignore",
    arbitrary_types_allowed=True,
    protected_namespaces=(),
)


def errors_from_pydantic(exc: PydanticValidationError) -> dict[str, list[str]]:
    """Flatten pydantic errors into ``{"dotted.loc": [messages]}``."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
        msg = error.get("msg", "validation error")
        errors.setdefault(loc, []).append(msg)
    return errors


def column_python_type(column: Column[Any]) -> Any:
    try:
        return column.type.python_type
    except NotImplementedError:
        return Any


def _needs_alias(key: str) -> bool:
    return key.startswith("_") or hasattr(BaseModel, key)


def column_fields(specs: dict[str, tuple[Any, Any]]) -> dict[str, Any]:
    """
    Turn ``{column_key: (annotation, default)}`` into ``create_model`` fields.

    Keys pydantic cannot use as field names (a leading underscore, or a name
    shadowing a ``BaseModel`` attribute such as ``json``) get a safe field
    name with the column key as alias; input and dumped output keep using
    the column key.
    """
    fields: dict[str, Any] = {}
    taken = set(specs)
    for key, (annotation, default) in specs.items():
        if not _needs_alias(key):
            fields[key] = (annotation, default)
            continue
        name = f"{key.lstrip('_') or 'column'}_"
        while name in taken or _needs_alias(name):
            name += "_"
        taken.add(name)
        fields[name] = (annotation, Field(default, alias=key))
    return fields


def _is_optional_on_insert(column: Column[Any]) -> bool:
    return bool(
        column.nullable
        or column.primary_key
        or column.default is not None
        or column.server_default is not None
    )


class PydanticSchema:
    """
    Wraps a pydantic model (or ``TypeAdapter``) as an
    :class:`~crud_factory.ports.validation.ISchema`.

    Models validate mappings and return a plain ``dict``; with
    ``exclude_unset`` only the keys the caller supplied are returned, so
    omitted columns keep their table defaults. Row models dump ``by_alias``
    so aliased columns come back under their column key.
    """

    def __init__(
        self,
        target: type[BaseModel] | TypeAdapter[Any],
        *,
        exclude_unset: bool = True,
        by_alias: bool = False,
    ) -> None:
        self.target = target
        self.exclude_unset = exclude_unset
        self.by_alias = by_alias

    def validate(self, data: Any) -> Any:
        try:
            if isinstance(self.target, TypeAdapter):
                return self.target.validate_python(data)
            instance = self.target.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError(errors_from_pydantic(exc)) from exc
        return self.dump(instance)

    def dump(self, instance: BaseModel) -> dict[str, Any]:
        return instance.model_dump(
            exclude_unset=self.exclude_unset, by_alias=self.by_alias
        )


class ListSchema(PydanticSchema):
    """List parameters keep every key; nested filters keep only supplied ones."""

    def __init__(self, target: type[BaseModel]) -> None:
        super().__init__(target, exclude_unset=False)

    def dump(self, instance: BaseModel) -> dict[str, Any]:
        data = instance.model_dump()
        filters = getattr(instance, "filters", None)
        if isinstance(filters, BaseModel):
            data["filters"] = filters.model_dump(
                exclude_unset=True, by_alias=True
            )
        return data


class PydanticValidationAdapter:
    """
    Builds pydantic models from a table's columns.

    * insert: non-nullable columns without a default are required; unknown
      keys are dropped.
    * update: every column except the id is optional.
    * list: page / per-page bounds, search, filters restricted to the
      allow-list, order-by restricted to known fields.

    Implements :class:`~crud_factory.ports.validation.IValidationAdapter`.
    """

    def create_insert_schema(self, entity: EntityDescriptor) -> PydanticSchema:
        specs: dict[str, tuple[Any, Any]] = {}
        for key, column in entity.columns.items():
            annotation = column_python_type(column)
            if column.nullable:
                annotation = annotation | None
            default = None if _is_optional_on_insert(column) else ...
            specs[key] = (annotation, default)
        model = create_model(
            f"{_model_prefix(entity)}Insert",
            __config__=_ROW_CONFIG,
            **column_fields(specs),
        )
        return PydanticSchema(model, by_alias=True)

    def create_update_schema(self, entity: EntityDescriptor) -> PydanticSchema:
        specs: dict[str, tuple[Any, Any]] = {}
        for key, column in entity.columns.items():
            if key == entity.id_field:
                continue
            annotation = column_python_type(column)
            if column.nullable:
                annotation = annotation | None
            specs[key] = (annotation, None)
        model = create_model(
            f"{_model_prefix(entity)}Update",
            __config__=_ROW_CONFIG,
            **column_fields(specs),
        )
        return PydanticSchema(model, by_alias=True)

    def create_id_schema(self, entity: EntityDescriptor) -> PydanticSchema:
        return PydanticSchema(TypeAdapter(column_python_type(entity.id_column)))

    def create_filter_schema(
        self,
        entity: EntityDescriptor,
        allowed_filters: Sequence[str] = (),
    ) -> PydanticSchema:
        model = self._filter_model(entity, allowed_filters)
        return PydanticSchema(model, by_alias=True)

    def create_pagination_schema(
        self,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> PydanticSchema:
        return PydanticSchema(
            self._pagination_model(default_page_size, max_page_size),
            exclude_unset=False,
        )

    def create_order_by_schema(
        self,
        entity: EntityDescriptor,
        allowed_fields: Sequence[str] = (),
    ) -> PydanticSchema:
        return PydanticSchema(self._order_by_model(entity, allowed_fields))

    def create_list_schema(
        self,
        entity: EntityDescriptor,
        *,
        search_fields: Sequence[str] = (),
        allowed_filters: Sequence[str] = (),
        allowed_order_fields: Sequence[str] = (),
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
        allow_include_deleted: bool = False,
    ) -> ListSchema:
        filter_model = self._filter_model(entity, allowed_filters)
        order_model = self._order_by_model(entity, allowed_order_fields)

        fields: dict[str, Any] = {
            "filters": (filter_model | None, None),
            "order_by": (list[order_model], Field(default_factory=list)),  # type: ignore[valid-type]
        }
        if search_fields:
            fields["search"] = (str | None, Field(default=None, max_length=255))
        if allow_include_deleted:
            fields["include_deleted"] = (bool, False)

        model = create_model(
            f"{_model_prefix(entity)}ListParams",
            __base__=self._pagination_model(default_page_size, max_page_size),
            **fields,
        )
        return ListSchema(model)

    # -- model builders ------------------------------------------------------

    @staticmethod
    def _pagination_model(default_page_size: int, max_page_size: int) -> type[BaseModel]:
        def cap(value: int) -> int:
            return min(value, max_page_size)

        return create_model(
            "PaginationParams",
            __base__=CamelModel,
            page=(int, Field(default=1, ge=1)),
            per_page=(
                Annotated[int, AfterValidator(cap)],
                Field(default=default_page_size, ge=1),
            ),
        )

    @staticmethod
    def _order_by_model(
        entity: EntityDescriptor,
        allowed_fields: Sequence[str],
    ) -> type[BaseModel]:
        allowed = frozenset(allowed_fields or entity.columns)

        def known_field(value: str) -> str:
            if value not in allowed:
                raise ValueError(f"cannot order by '{value}'")
            return value

        return create_model(
            f"{_model_prefix(entity)}OrderBy",
            __base__=OrderBy,
            field=(Annotated[str, AfterValidator(known_field)], ...),
        )

    @staticmethod
    def _filter_model(
        entity: EntityDescriptor,
        allowed_filters: Sequence[str],
    ) -> type[BaseModel]:
        keys = list(allowed_filters) or list(entity.columns)
        entity.require_columns(keys, purpose="filter")
        fields = column_fields({key: (Any, None) for key in keys})
        fields["AND"] = (list[dict[str, Any]] | None, None)
        fields["OR"] = (list[dict[str, Any]] | None, None)
        return create_model(
            f"{_model_prefix(entity)}Filters",
            __config__=_ROW_CONFIG,
            **fields,
        )


def _model_prefix(entity: EntityDescriptor) -> str:
    return "".join(part.capitalize() for part in entity.name.split("_")) or "Entity"
