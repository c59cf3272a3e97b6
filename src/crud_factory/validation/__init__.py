"""Schema validation backed by pydantic."""

from __future__ import annotations

from .pydantic import (
    ListSchema,
    PydanticSchema,
    PydanticValidationAdapter,
    errors_from_pydantic,
)

__all__ = [
    "ListSchema",
    "PydanticSchema",
    "PydanticValidationAdapter",
    "errors_from_pydantic",
]
