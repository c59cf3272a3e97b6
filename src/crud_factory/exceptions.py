"""
Exception hierarchy for crud-factory.

All exceptions inherit from ``CrudError`` and provide ``to_dict()`` for
API-friendly error responses. Errors raised by the storage driver
(``sqlalchemy.exc.*``) are never wrapped and reach the caller unchanged.
"""

from __future__ import annotations

from typing import Any


class CrudError(Exception):
    """Root exception for the entire crud-factory package."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class UsageError(CrudError):
    """Raised when an operation is called in a way it does not support.

    Examples: ``find_one`` without conditions, ``restore`` on an entity
    without soft delete.
    """

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "USAGE_ERROR",
            "message": str(self),
        }


class ConfigurationError(UsageError):
    """Raised when an entity pipeline is configured inconsistently."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "CONFIGURATION_ERROR",
            "message": str(self),
        }


class NotFoundError(CrudError):
    """Raised when a record is not found."""


class EntityNotFoundError(NotFoundError):
    """Raised when a specific record cannot be found by ID.

    A record excluded by a scope filter is reported the same way as a
    record that does not exist.
    """

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id={entity_id!r} not found")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "NOT_FOUND",
            "entity": self.entity_type,
            "id": self.entity_id,
            "message": str(self),
        }


class ValidationError(CrudError):
    """Raised when input data fails schema validation.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALIDATION_ERROR",
            "errors": self.errors,
        }


__all__: list[str] = [
    "ConfigurationError",
    "CrudError",
    "EntityNotFoundError",
    "NotFoundError",
    "UsageError",
    "ValidationError",
]
