"""Shared tables and fixtures for crud-factory tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from crud_factory import EntityDescriptor
from crud_factory.soft_delete import utc_now

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.ext.asyncio import AsyncEngine

# ---------------------------------------------------------------------------
# Test tables
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(255), nullable=False),
    Column("role", String(20), nullable=False, default="viewer"),
    Column("age", Integer, nullable=True),
    Column("tenant_id", String(20), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utc_now),
    Column("deleted_at", DateTime(timezone=True), nullable=True),
)

posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(200), nullable=False),
    Column("status", String(20), nullable=False, default="draft"),
    Column("author_id", Integer, nullable=True),
    Column("is_deleted", Boolean, nullable=False, default=False),
)

# Column keys pydantic cannot use as field names as-is
documents = Table(
    "documents",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("_version", Integer, nullable=False),
    Column("json", String(200), nullable=True),
    Column("version_", String(20), nullable=True),
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def users_entity() -> EntityDescriptor:
    return EntityDescriptor.from_table(users)


@pytest.fixture
def posts_entity() -> EntityDescriptor:
    return EntityDescriptor.from_table(posts)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    eng = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as sess:
        yield sess


@pytest.fixture
def users_table() -> Table:
    return users


@pytest.fixture
def posts_table() -> Table:
    return posts


@pytest.fixture
def documents_table() -> Table:
    return documents


@pytest.fixture
def documents_entity() -> EntityDescriptor:
    return EntityDescriptor.from_table(documents)
