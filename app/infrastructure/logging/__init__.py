"""Structured logging infrastructure.

Centralized structlog configuration and helpers for the notification
service.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_logger(): Get a logger instance with a specific name
    - get_module_logger(): Get a logger for the calling module
    - bind_request_context(): Context manager for request-scoped logging
    - bind_notification_context(): Context manager binding a notification id
    - get_correlation_id(): Get current correlation ID from context
    - clear_request_context(): Clear all request context

Example:
    from infrastructure.logging import get_module_logger

    logger = get_module_logger()
    logger.info("module_initialized")
"""

# Core logging setup
from infrastructure.logging.setup import (
    configure_logging,
    get_logger,
    get_module_logger,
)

# Context binding
from infrastructure.logging.context import (
    bind_request_context,
    bind_notification_context,
    get_correlation_id,
    clear_request_context,
)

# Processors
from infrastructure.logging.formatters import (
    mask_sensitive_data,
    truncate_large_values,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_logger",
    "get_module_logger",
    # Context
    "bind_request_context",
    "bind_notification_context",
    "get_correlation_id",
    "clear_request_context",
    # Processors
    "mask_sensitive_data",
    "truncate_large_values",
]
