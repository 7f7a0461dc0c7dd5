"""
Core Utilities.

Shared utility functions used across the package.
All modules should import utilities from this module.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC. This keeps local timestamps comparable with
    the ones parsed from the remote store.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: str | None) -> datetime:
    """
    Parse an ISO-8601 timestamp from the wire into naive UTC.

    Missing values map to the current time, matching how rows with
    null timestamps are displayed.

    Args:
        value: ISO-8601 string (with or without offset) or None

    Returns:
        Naive UTC datetime
    """
    if not value:
        return utc_now()
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_wire_timestamp(value: datetime) -> str:
    """Format a naive UTC datetime as an ISO-8601 string with offset."""
    return value.replace(tzinfo=timezone.utc).isoformat()
