"""
CrudHooks — lifecycle hooks injected into a pipeline.

Subclass and override only what you need. Every hook may be a plain method
or a coroutine::

    class UserHooks(CrudHooks):
        async def before_create(self, data):
            return {**data, "email": data["email"].lower()}

        def validate(self, *, data, context, operation):
            # Trusted service callers bypass schema validation.
            return not (context.actor and context.actor.type == "service")
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .context import CrudOperation, OperationContext


class CrudHooks:
    """Default hooks: validate everything, transform nothing."""

    def validate(
        self,
        *,
        data: Any,
        context: OperationContext,
        operation: CrudOperation,
    ) -> Any:
        """Return ``False`` to skip schema validation for this call."""
        return True

    def before_create(self, data: dict[str, Any]) -> Any:
        """Transform a validated record before insert.

        The return value replaces *data*; ``None`` keeps *data* as is.
        """
        return data

    def before_update(self, data: dict[str, Any]) -> Any:
        """Transform a validated update payload.

        The return value replaces *data*; ``None`` keeps *data* as is. An
        empty mapping means "nothing to change".
        """
        return data


async def resolve(value: Any) -> Any:
    """Await *value* if a hook returned an awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value
