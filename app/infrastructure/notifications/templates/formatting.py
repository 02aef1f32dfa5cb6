"""Value formatting shared by email and WhatsApp templates.

Event data arrives as strings. These helpers parse what they can and fall
back to the raw value, so rendering never fails on malformed input.
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional

import pytz

DEFAULT_TIMEZONE = "Asia/Kolkata"

TRUE_VALUES = frozenset({"true", "1", "yes", "y", "on", "passed"})


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string (``Z`` suffix accepted). Naive values are UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed


def _localize(value: datetime, tz_name: str) -> datetime:
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        tz = pytz.timezone(DEFAULT_TIMEZONE)
    return value.astimezone(tz)


def _short_time(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "am" if value.hour < 12 else "pm"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_datetime(value: Optional[str], tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Medium date plus short time in the en-IN style: ``19 Oct 2026, 3:30 pm``."""
    parsed = parse_datetime(value)
    if parsed is None:
        return value or ""
    local = _localize(parsed, tz_name)
    return f"{local.day} {local.strftime('%b %Y')}, {_short_time(local)}"


def format_datetime_long(
    value: Optional[str], tz_name: str = DEFAULT_TIMEZONE
) -> str:
    """Long date plus short time: ``19 October 2026 at 3:30 pm``."""
    parsed = parse_datetime(value)
    if parsed is None:
        return value or ""
    local = _localize(parsed, tz_name)
    return f"{local.day} {local.strftime('%B %Y')} at {_short_time(local)}"


def format_percentage(value: Optional[str]) -> str:
    """``"85.5"`` -> ``"85.50%"``; unparseable values are returned as given."""
    if value is None or value == "":
        return ""
    try:
        return f"{float(value):.2f}%"
    except (TypeError, ValueError):
        return str(value)


def parse_bool(value: Optional[str]) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


def result_label(passed: bool) -> str:
    return "PASSED" if passed else "RECALIBRATION REQUIRED"


def parse_changes(data: Dict[str, str]) -> Dict[str, bool]:
    """Read session change flags from event data.

    Flags may be given flat (``topicChanged``) or as a JSON object under
    ``changes``.
    """
    raw: Dict[str, Any] = {}
    changes = data.get("changes")
    if changes:
        try:
            loaded = json.loads(changes)
        except ValueError:
            loaded = None
        if isinstance(loaded, dict):
            raw.update(loaded)
    for key in ("topicChanged", "timeChanged", "linkChanged"):
        if key in data:
            raw[key] = data[key]
    return {
        key: parse_bool(str(raw.get(key, "")).lower())
        for key in ("topicChanged", "timeChanged", "linkChanged")
    }
