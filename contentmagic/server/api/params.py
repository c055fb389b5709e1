"""Lenient query and body value parsing shared by the route modules."""

from datetime import datetime, timezone
from typing import Optional


def parse_datetime(value: object) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or date-time into naive UTC.

    Returns None when ``value`` is not a parsable date.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
