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


def ensure_utc(value: datetime) -> datetime:
    """
    Attach UTC to naive datetimes, convert aware ones to UTC.

    SQLite returns stored timestamps without tzinfo; they were written as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_provider_timestamp(value: str) -> datetime:
    """
    Parse a provider timestamp into an aware UTC datetime.

    Accepts ISO-8601 with or without ``Z``/offset, and the
    ``YYYY-MM-DD HH:MM:SS[.fff]`` form used by SQL providers.

    Raises:
        ValueError: If the value is not a recognisable timestamp
    """
    text = value.strip()
    if text.endswith(" UTC"):
        text = text[:-4]
    return ensure_utc(datetime.fromisoformat(text))


def format_iso_utc(value: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and ``Z`` suffix."""
    value = ensure_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def format_sql_utc(value: datetime) -> str:
    """Format as ``YYYY-MM-DD HH:MM:SS.ffffff`` in UTC for SQL literals."""
    return ensure_utc(value).strftime("%Y-%m-%d %H:%M:%S.%f")
