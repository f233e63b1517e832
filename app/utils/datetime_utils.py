"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def utc_now_iso() -> str:
    """ISO-8601 timestamp with millisecond precision and Z suffix."""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")
