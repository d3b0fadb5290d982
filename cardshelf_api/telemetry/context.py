"""
Request Context and Correlation IDs

Request-scoped context kept in a ContextVar so that every telemetry event
emitted while handling a request carries its correlation id and caller.
"""

import uuid
from contextvars import ContextVar
from typing import Any

_request_context: ContextVar[dict[str, Any]] = ContextVar("request_context", default={})


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracing."""
    return str(uuid.uuid4())


def set_request_context(request_id: str, user_id: str | None = None, **kwargs: Any) -> None:
    """
    Set the request context for the current async context.

    Args:
        request_id: Correlation ID for request tracing
        user_id: Subject id of the caller, "anonymous" when unknown
        **kwargs: Additional context properties
    """
    _request_context.set(
        {
            "request_id": request_id,
            "user_id": user_id or "anonymous",
            **kwargs,
        }
    )


def bind_user(user_id: str) -> None:
    """Attach the authenticated caller to the current request context."""
    context = dict(_request_context.get())
    context["user_id"] = user_id
    _request_context.set(context)


def get_request_context() -> dict[str, Any]:
    """Get the current request context."""
    return _request_context.get()


def clear_request_context() -> None:
    """Clear the request context for the current async context."""
    _request_context.set({})
