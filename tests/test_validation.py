import pytest

from crud_factory import (
    ConfigurationError,
    PydanticValidationAdapter,
    ValidationError,
)

# --- Fixtures ---


@pytest.fixture
def adapter() -> PydanticValidationAdapter:
    return PydanticValidationAdapter()


# --- Insert / update ---


def test_insert_schema_requires_non_nullable_columns(adapter, users_entity):
    schema = adapter.create_insert_schema(users_entity)

    with pytest.raises(ValidationError) as exc_info:
        schema.validate({"age": 3})

    errors = exc_info.value.errors
    assert "name" in errors
    assert "email" in errors
    assert "role" not in errors  # has a default
    assert exc_info.value.to_dict()["error"] == "VALIDATION_ERROR"


def test_insert_schema_returns_only_supplied_known_keys(adapter, users_entity):
    schema = adapter.create_insert_schema(users_entity)

    data = schema.validate(
        {"name": "Ada", "email": "ada@example.com", "age": "36", "bogus": True}
    )

    assert data == {"name": "Ada", "email": "ada@example.com", "age": 36}


def test_insert_schema_rejects_wrong_types(adapter, users_entity):
    schema = adapter.create_insert_schema(users_entity)

    with pytest.raises(ValidationError) as exc_info:
        schema.validate({"name": "Ada", "email": "a@example.com", "age": "old"})

    assert list(exc_info.value.errors) == ["age"]


def test_insert_schema_rejects_non_mapping(adapter, users_entity):
    schema = adapter.create_insert_schema(users_entity)

    with pytest.raises(ValidationError) as exc_info:
        schema.validate("not a record")

    assert "__root__" in exc_info.value.errors


def test_update_schema_makes_every_field_optional(adapter, users_entity):
    schema = adapter.create_update_schema(users_entity)

    assert schema.validate({}) == {}
    assert schema.validate({"role": "admin"}) == {"role": "admin"}


def test_update_schema_drops_id(adapter, users_entity):
    schema = adapter.create_update_schema(users_entity)
    assert schema.validate({"id": 7, "age": 1}) == {"age": 1}


def test_update_schema_honours_nullability(adapter, users_entity):
    schema = adapter.create_update_schema(users_entity)

    assert schema.validate({"age": None}) == {"age": None}
    with pytest.raises(ValidationError):
        schema.validate({"name": None})


def test_id_schema_coerces(adapter, users_entity):
    schema = adapter.create_id_schema(users_entity)

    assert schema.validate("5") == 5
    with pytest.raises(ValidationError):
        schema.validate("five")


# --- List ---


def test_list_schema_defaults(adapter, users_entity):
    schema = adapter.create_list_schema(
        users_entity, search_fields=["name"], default_page_size=15
    )

    data = schema.validate({})

    assert data["page"] == 1
    assert data["per_page"] == 15
    assert data["search"] is None
    assert data["filters"] is None
    assert data["order_by"] == []
    assert "include_deleted" not in data


def test_list_schema_caps_page_size(adapter, users_entity):
    schema = adapter.create_list_schema(users_entity, max_page_size=50)
    assert schema.validate({"perPage": 500})["per_page"] == 50


def test_list_schema_rejects_page_below_one(adapter, users_entity):
    schema = adapter.create_list_schema(users_entity)

    with pytest.raises(ValidationError) as exc_info:
        schema.validate({"page": 0})

    assert "page" in exc_info.value.errors


def test_list_schema_strips_filters_outside_allow_list(adapter, users_entity):
    schema = adapter.create_list_schema(users_entity, allowed_filters=["role"])

    data = schema.validate(
        {"filters": {"role": {"in": ["a"]}, "email": "x", "OR": [{"role": "b"}]}}
    )

    assert data["filters"] == {"role": {"in": ["a"]}, "OR": [{"role": "b"}]}


def test_list_schema_rejects_unknown_order_field(adapter, users_entity):
    schema = adapter.create_list_schema(users_entity, allowed_order_fields=["name"])

    with pytest.raises(ValidationError) as exc_info:
        schema.validate({"orderBy": [{"field": "age", "direction": "asc"}]})

    assert any(key.endswith("field") for key in exc_info.value.errors)


def test_list_schema_rejects_bad_direction(adapter, users_entity):
    schema = adapter.create_list_schema(users_entity)

    with pytest.raises(ValidationError):
        schema.validate({"orderBy": [{"field": "age", "direction": "sideways"}]})


def test_list_schema_include_deleted_only_when_allowed(adapter, users_entity):
    allowed = adapter.create_list_schema(users_entity, allow_include_deleted=True)
    denied = adapter.create_list_schema(users_entity)

    assert allowed.validate({"includeDeleted": True})["include_deleted"] is True
    assert "include_deleted" not in denied.validate({"includeDeleted": True})


# --- Standalone builders ---


def test_filter_schema(adapter, users_entity):
    schema = adapter.create_filter_schema(users_entity, ["role", "age"])
    assert schema.validate({"age": {"gt": 1}, "name": "x"}) == {"age": {"gt": 1}}


def test_filter_schema_rejects_unknown_allowed_fields(adapter, users_entity):
    with pytest.raises(ConfigurationError):
        adapter.create_filter_schema(users_entity, ["nickname"])


def test_pagination_schema(adapter):
    schema = adapter.create_pagination_schema(default_page_size=10, max_page_size=25)

    assert schema.validate({}) == {"page": 1, "per_page": 10}
    assert schema.validate({"page": 3, "perPage": 99}) == {"page": 3, "per_page": 25}


def test_order_by_schema(adapter, users_entity):
    schema = adapter.create_order_by_schema(users_entity)

    assert schema.validate({"field": "age"}) == {"field": "age"}
    with pytest.raises(ValidationError):
        schema.validate({"field": "nickname"})


# --- Column keys that are not valid pydantic field names ---


def test_insert_schema_accepts_underscore_and_reserved_column_keys(
    adapter, documents_entity
):
    schema = adapter.create_insert_schema(documents_entity)

    assert schema.validate({"_version": "2", "json": "{}", "version_": "v1"}) == {
        "_version": 2,
        "json": "{}",
        "version_": "v1",
    }


def test_insert_schema_reports_errors_under_column_key(adapter, documents_entity):
    schema = adapter.create_insert_schema(documents_entity)

    with pytest.raises(ValidationError) as exc_info:
        schema.validate({"json": "{}"})

    assert list(exc_info.value.errors) == ["_version"]


def test_update_schema_keeps_column_keys(adapter, documents_entity):
    schema = adapter.create_update_schema(documents_entity)

    assert schema.validate({"json": "[]"}) == {"json": "[]"}
    assert schema.validate({"_version": 3}) == {"_version": 3}


def test_filter_schemas_keep_column_keys(adapter, documents_entity):
    filters = adapter.create_filter_schema(documents_entity, ["_version", "json"])
    assert filters.validate({"_version": {"gt": 1}, "json": None}) == {
        "_version": {"gt": 1},
        "json": None,
    }

    params = adapter.create_list_schema(documents_entity).validate(
        {"filters": {"_version": {"gte": 2}}}
    )
    assert params["filters"] == {"_version": {"gte": 2}}
