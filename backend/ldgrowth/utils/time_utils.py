# backend/ldgrowth/utils/time_utils.py
"""
Pure time utilities shared by the database and scheduling layers.

All timestamps handled by the application are timezone-aware UTC. Store-local
conversions live in ``timezone_utils``.
"""

from datetime import date, datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Constant for UTC timezone to avoid hardcoded timezone.utc references
UTC_TIMEZONE = timezone.utc


def utc_now() -> datetime:
    """
    Get current UTC timestamp (timezone-aware).

    Every "now" in the scheduler goes through this function so tests can
    freeze time by patching it.
    """
    return datetime.now(UTC_TIMEZONE)


def ensure_utc(value: Optional[Union[datetime, date]]) -> Optional[datetime]:
    """
    Normalize a datetime or date to an aware UTC datetime.

    Naive datetimes are taken to already be UTC; a bare date becomes
    midnight UTC of that day.
    """
    if value is None:
        return None
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=UTC_TIMEZONE)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC_TIMEZONE)
    return value.astimezone(UTC_TIMEZONE)


def validate_timezone(timezone_str: str) -> bool:
    """True when ``timezone_str`` names a zone known to zoneinfo."""
    if not timezone_str or not isinstance(timezone_str, str):
        return False
    try:
        ZoneInfo(timezone_str)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def parse_iso_timestamp_safe(timestamp_str: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or datetime string into aware UTC.

    Returns:
        The parsed datetime, or None when the string is empty or malformed
    """
    if not timestamp_str or not isinstance(timestamp_str, str):
        return None
    try:
        return ensure_utc(datetime.fromisoformat(timestamp_str.replace("Z", "+00:00")))
    except ValueError:
        return None


def format_date_for_display(value: datetime, timezone_str: str) -> str:
    """Human readable local date used in notification and email bodies."""
    local = ensure_utc(value).astimezone(ZoneInfo(timezone_str))
    return local.strftime("%A, %B %d, %Y at %I:%M %p %Z")
