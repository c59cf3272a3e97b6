"""Scope, soft-delete and search composers."""

from __future__ import annotations

import pytest
from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from crud_factory import (
    Actor,
    ConfigurationError,
    EntityDescriptor,
    OperationContext,
    ScopeComposer,
    SearchComposer,
    SoftDeleteComposer,
    SoftDeleteConfig,
)


def sql(expr) -> str:
    return str(expr.compile(compile_kwargs={"literal_binds": True}))


# ---------------------------------------------------------------------------
# Scope
# ---------------------------------------------------------------------------


def tenant_scope(users_table):
    def scope(value, actor):
        if value is None:
            return None
        return users_table.c.tenant_id == value

    return scope


def test_scope_appends_predicate_for_present_value(users_table):
    composer = ScopeComposer({"tenant_id": tenant_scope(users_table)})

    predicates = composer.apply([], OperationContext(scope={"tenant_id": "A"}))

    assert [sql(p) for p in predicates] == ["users.tenant_id = 'A'"]


def test_scope_function_returning_none_adds_nothing(users_table):
    composer = ScopeComposer({"tenant_id": tenant_scope(users_table)})
    assert composer.apply([], OperationContext()) == []


def test_scope_receives_actor(users_table):
    seen = []

    def by_role(value, actor):
        seen.append((value, actor))
        if actor is not None and actor.properties.get("role") == "admin":
            return None
        return users_table.c.role != "admin"

    composer = ScopeComposer({"role": by_role})
    admin = Actor(type="user", properties={"role": "admin"})

    assert composer.apply([], OperationContext(actor=admin)) == []
    assert len(composer.apply([], OperationContext())) == 1
    assert seen == [(None, admin), (None, None)]


def test_scope_appends_in_place(users_table):
    composer = ScopeComposer({"tenant_id": tenant_scope(users_table)})
    existing = [users_table.c.id == 1]

    result = composer.apply(existing, OperationContext(scope={"tenant_id": "B"}))

    assert result is existing
    assert len(existing) == 2


def test_scope_keys(users_table):
    composer = ScopeComposer({"tenant_id": tenant_scope(users_table)})
    assert composer.keys == ["tenant_id"]


# ---------------------------------------------------------------------------
# Soft delete
# ---------------------------------------------------------------------------


def test_soft_delete_null_marker(users_entity):
    composer = SoftDeleteComposer(users_entity, SoftDeleteConfig(field="deleted_at"))

    predicates = composer.apply([])

    assert [sql(p) for p in predicates] == ["users.deleted_at IS NULL"]


def test_soft_delete_value_marker(posts_entity):
    composer = SoftDeleteComposer(
        posts_entity,
        SoftDeleteConfig(
            field="is_deleted", deleted_value=True, not_deleted_value=False
        ),
    )

    predicates = composer.apply([])

    assert len(predicates) == 1
    assert sql(predicates[0]).startswith("posts.is_deleted = ")
    assert composer.deleted_values() == {"is_deleted": True}
    assert composer.restored_values() == {"is_deleted": False}


def test_soft_delete_include_deleted_is_noop(users_entity):
    composer = SoftDeleteComposer(users_entity, SoftDeleteConfig(field="deleted_at"))
    assert composer.apply([], include_deleted=True) == []


def test_soft_delete_disabled_is_noop(users_entity):
    composer = SoftDeleteComposer(users_entity, None)

    assert not composer.enabled
    assert composer.apply([]) == []
    with pytest.raises(ConfigurationError):
        composer.deleted_values()


def test_soft_delete_default_value_is_evaluated_per_call(users_entity):
    composer = SoftDeleteComposer(users_entity, SoftDeleteConfig(field="deleted_at"))

    first = composer.deleted_values()["deleted_at"]
    second = composer.deleted_values()["deleted_at"]

    assert first.tzinfo is not None
    assert second >= first


def test_soft_delete_callable_value(posts_entity):
    calls = []

    def marker():
        calls.append(1)
        return True

    composer = SoftDeleteComposer(
        posts_entity,
        SoftDeleteConfig(field="is_deleted", deleted_value=marker, not_deleted_value=False),
    )
    composer.deleted_values()
    composer.deleted_values()

    assert len(calls) == 2


def test_soft_delete_field_must_exist(users_entity):
    with pytest.raises(ConfigurationError, match="removed_at"):
        SoftDeleteComposer(users_entity, SoftDeleteConfig(field="removed_at"))


def test_soft_delete_field_is_required():
    with pytest.raises(ConfigurationError):
        SoftDeleteConfig(field="")


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def test_search_ors_like_over_fields(users_entity):
    composer = SearchComposer(users_entity, ["name", "email"])

    predicates = composer.apply([], "ali")

    assert len(predicates) == 1
    rendered = sql(predicates[0])
    assert "users.name LIKE" in rendered
    assert "users.email LIKE" in rendered
    assert " OR " in rendered


@pytest.mark.parametrize("term", [None, "", "   "])
def test_blank_search_adds_nothing(users_entity, term):
    composer = SearchComposer(users_entity, ["name"])
    assert composer.apply([], term) == []


def test_search_without_fields_adds_nothing(users_entity):
    assert SearchComposer(users_entity, []).apply([], "x") == []


def test_search_escapes_wildcards(users_entity):
    predicates = SearchComposer(users_entity, ["name"]).apply([], "50%")
    assert "ESCAPE '/'" in sql(predicates[0])


def test_search_rejects_unknown_fields(users_entity):
    with pytest.raises(ConfigurationError, match="nickname"):
        SearchComposer(users_entity, ["nickname"])


# ---------------------------------------------------------------------------
# Entity descriptor
# ---------------------------------------------------------------------------


def test_descriptor_from_table(users_table):
    entity = EntityDescriptor.from_table(users_table)

    assert entity.name == "users"
    assert entity.id_field == "id"
    assert "deleted_at" in entity.columns


def test_descriptor_requires_table():
    with pytest.raises(ConfigurationError):
        EntityDescriptor.from_table(None)
    with pytest.raises(ConfigurationError):
        EntityDescriptor.from_table(object())


def test_descriptor_requires_id_column(users_table):
    with pytest.raises(ConfigurationError, match="uuid"):
        EntityDescriptor.from_table(users_table, id_field="uuid")


class Base(DeclarativeBase):
    pass


class Tag(Base):
    __tablename__ = "tags"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    label: Mapped[str] = mapped_column(String)


def test_descriptor_from_declarative_class():
    entity = EntityDescriptor.from_table(Tag, name="tag")

    assert entity.name == "tag"
    assert set(entity.columns) == {"id", "label"}
