"""Operation status enumeration.

Classifies the outcome of infrastructure calls (DynamoDB, provider APIs)
so callers can decide between retrying, failing, or surfacing the error.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, throttling)
        PERMANENT_ERROR: Non-retryable error (validation, failed condition)
        UNAUTHORIZED: Authentication or authorization failure
        NOT_FOUND: Resource not found
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
