"""Structlog processors applied before rendering.

Notification logs carry recipient contact details and provider credentials
travel through the same call paths, so both are scrubbed here.
"""

from typing import Any

# Keys whose values are replaced entirely
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "apikey",
        "api_key",
        "authorization",
        "token",
        "credential",
    }
)

# Keys whose values are partially masked (last characters kept)
CONTACT_FIELDS = frozenset({"phone", "destination", "recipient_phone"})


def _mask_tail(value: str, keep: int = 4) -> str:
    if len(value) <= keep:
        return "*" * len(value)
    return "*" * (len(value) - keep) + value[-keep:]


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks credentials and contact numbers.

    Keys containing a sensitive pattern (case-insensitive) are fully
    redacted. Phone-like keys keep their last four digits so support staff
    can still correlate a failed WhatsApp send with a user.

    Args:
        mask_value: The string to replace sensitive values with.
        additional_patterns: Extra patterns to consider sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        masked_dict = {}
        for key, value in event_dict.items():
            key_lower = key.lower()
            if value is None:
                masked_dict[key] = value
            elif any(pattern in key_lower for pattern in patterns):
                masked_dict[key] = mask_value
            elif key_lower in CONTACT_FIELDS and isinstance(value, str):
                masked_dict[key] = _mask_tail(value)
            else:
                masked_dict[key] = value
        return masked_dict

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates overly large string values.

    Rendered email bodies and raw gateway responses can be large.

    Args:
        max_length: Maximum string length before truncation.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
