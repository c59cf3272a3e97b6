"""Collaborator protocols: storage executor and schema validation."""

from __future__ import annotations

from crud_factory.ports.store import IStoreExecutor
from crud_factory.ports.validation import ISchema, IValidationAdapter

__all__ = [
    "ISchema",
    "IStoreExecutor",
    "IValidationAdapter",
]
