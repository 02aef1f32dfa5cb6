"""Request and notification context binding for structured logging.

Usage:
    from infrastructure.logging import bind_notification_context

    with bind_notification_context(notification_id=record.id, notification_type="welcome"):
        logger.info("dispatch_started")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind request-scoped context to all logs within the context manager.

    Args:
        correlation_id: Unique request identifier. Auto-generated if not provided.
        request_path: HTTP request path (e.g., "/api/v1/notifications/logs").
        request_method: HTTP method (e.g., "GET", "POST").
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The correlation ID bound for the block.

    Example:
        @app.middleware("http")
        async def logging_middleware(request: Request, call_next):
            with bind_request_context(
                correlation_id=request.headers.get("X-Correlation-ID"),
                request_path=request.url.path,
                request_method=request.method,
            ):
                return await call_next(request)
    """
    context: dict[str, Any] = {}
    context["correlation_id"] = correlation_id or str(uuid.uuid4())

    if request_path is not None:
        context["request_path"] = request_path

    if request_method is not None:
        context["request_method"] = request_method

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


@contextmanager
def bind_notification_context(
    notification_id: str,
    notification_type: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind a notification id (and type) to every log emitted in the block.

    Channel workers run in pool threads; the dispatcher copies the current
    context into each worker so these keys follow the fan-out.
    """
    context: dict[str, Any] = {"notification_id": notification_id}
    if notification_type is not None:
        context["notification_type"] = notification_type
    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def clear_request_context() -> None:
    """Clear all request-scoped context from the logging context.

    Should be called at the end of request processing to prevent
    context leakage between requests.
    """
    structlog.contextvars.clear_contextvars()
