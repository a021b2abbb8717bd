# backend/ldgrowth/utils/timezone_utils.py
"""
Store-local time arithmetic.

Every function here is pure: it takes an instant (aware, or naive UTC unless
stated otherwise), a store's IANA timezone and optionally its business hours,
and returns an aware UTC datetime. Local wall-clock arithmetic is done on
zoneinfo-aware datetimes so that DST shifts are honoured.

Any failure (unknown zone, overflow, wrong type) surfaces as a
TimezoneOperationError carrying the offending date, timezone and function.
"""

from datetime import datetime, time, timedelta
from functools import wraps
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..enums import ErrorCategory
from ..exceptions import TimezoneOperationError
from ..models.scheduling_model import BusinessHoursWindow
from ..models.store_model import BusinessHours
from .time_utils import UTC_TIMEZONE, ensure_utc

SATURDAY = 5
SUNDAY = 6


def _timezone_operation(func):
    """Translate low-level failures into a categorized TimezoneOperationError."""

    @wraps(func)
    def wrapper(date, store_timezone, *args, **kwargs):
        try:
            return func(date, store_timezone, *args, **kwargs)
        except TimezoneOperationError:
            raise
        except (
            ZoneInfoNotFoundError,
            ValueError,
            TypeError,
            OverflowError,
            AttributeError,
        ) as e:
            raise TimezoneOperationError(
                f"Timezone operation failed: {e}",
                category=ErrorCategory.SYSTEM,
                context={
                    "date": str(date),
                    "store_timezone": store_timezone,
                    "function": func.__name__,
                },
            ) from e

    return wrapper


def get_zone(store_timezone: str) -> ZoneInfo:
    if not store_timezone or not isinstance(store_timezone, str):
        raise ValueError(f"Invalid timezone {store_timezone!r}")
    return ZoneInfo(store_timezone)


def _local(date: datetime, store_timezone: str) -> datetime:
    return ensure_utc(date).astimezone(get_zone(store_timezone))


def _at_hour(local: datetime, hour: int) -> datetime:
    return local.replace(hour=hour, minute=0, second=0, microsecond=0)


def _skip_weekend_forward(local: datetime) -> datetime:
    weekday = local.weekday()
    if weekday == SATURDAY:
        return local + timedelta(days=2)
    if weekday == SUNDAY:
        return local + timedelta(days=1)
    return local


def _skip_weekend_backward(local: datetime) -> datetime:
    weekday = local.weekday()
    if weekday == SATURDAY:
        return local - timedelta(days=1)
    if weekday == SUNDAY:
        return local - timedelta(days=2)
    return local


# ════════════════════════════════════════════════════════════════════════════════
#                                 CONVERSIONS
# ════════════════════════════════════════════════════════════════════════════════


@_timezone_operation
def to_store_local_time(date: datetime, store_timezone: str) -> datetime:
    """Express an instant in the store's local time. Naive input is UTC."""
    return _local(date, store_timezone)


@_timezone_operation
def to_utc(date: datetime, store_timezone: str) -> datetime:
    """
    Convert a store-local datetime to UTC.

    A naive input is read as local wall time in ``store_timezone``, so
    ``to_utc(to_store_local_time(d, tz), tz) == d`` for every instant.
    """
    if date.tzinfo is None:
        date = date.replace(tzinfo=get_zone(store_timezone))
    return date.astimezone(UTC_TIMEZONE)


@_timezone_operation
def get_start_of_day(date: datetime, store_timezone: str) -> datetime:
    """Local midnight of the date's local calendar day, in UTC."""
    local = _local(date, store_timezone)
    start = datetime.combine(local.date(), time.min, tzinfo=local.tzinfo)
    return start.astimezone(UTC_TIMEZONE)


@_timezone_operation
def get_end_of_day(date: datetime, store_timezone: str) -> datetime:
    """Last microsecond of the date's local calendar day, in UTC."""
    local = _local(date, store_timezone)
    end = datetime.combine(local.date(), time.max, tzinfo=local.tzinfo)
    return end.astimezone(UTC_TIMEZONE)


@_timezone_operation
def is_dst(date: datetime, store_timezone: str) -> bool:
    """
    Whether daylight saving is in effect at ``date`` in the store's zone.

    The standard offset is the smaller of the offsets on 1 January and
    1 July of the same year, which also covers southern-hemisphere zones.
    """
    zone = get_zone(store_timezone)
    local = _local(date, store_timezone)
    january = datetime(local.year, 1, 1, tzinfo=zone).utcoffset()
    july = datetime(local.year, 7, 1, tzinfo=zone).utcoffset()
    return local.utcoffset() > min(january, july)


# ════════════════════════════════════════════════════════════════════════════════
#                                BUSINESS HOURS
# ════════════════════════════════════════════════════════════════════════════════


@_timezone_operation
def get_store_business_hours(
    date: datetime, store_timezone: str, business_hours: Optional[BusinessHours] = None
) -> BusinessHoursWindow:
    """UTC start and end of business hours on the date's local calendar day."""
    hours = business_hours or BusinessHours()
    local = _local(date, store_timezone)
    return BusinessHoursWindow(
        start=_at_hour(local, hours.start).astimezone(UTC_TIMEZONE),
        end=_at_hour(local, hours.end).astimezone(UTC_TIMEZONE),
    )


@_timezone_operation
def adjust_to_business_day(date: datetime, store_timezone: str) -> datetime:
    """Move a Saturday or Sunday forward to Monday, keeping the local time."""
    return _skip_weekend_forward(_local(date, store_timezone)).astimezone(
        UTC_TIMEZONE
    )


@_timezone_operation
def is_within_business_hours(
    date: datetime, store_timezone: str, business_hours: Optional[BusinessHours] = None
) -> bool:
    hours = business_hours or BusinessHours()
    local = _local(date, store_timezone)
    if local.weekday() in (SATURDAY, SUNDAY):
        return False
    return _at_hour(local, hours.start) <= local <= _at_hour(local, hours.end)


@_timezone_operation
def adjust_to_business_hours(
    date: datetime, store_timezone: str, business_hours: Optional[BusinessHours] = None
) -> datetime:
    """
    Earliest business instant at or after ``date``.

    Weekends move to Monday; before opening clamps to opening the same day;
    after closing moves to opening on the next business day.
    """
    hours = business_hours or BusinessHours()
    local = _skip_weekend_forward(_local(date, store_timezone))
    opening = _at_hour(local, hours.start)
    closing = _at_hour(local, hours.end)

    if local < opening:
        local = opening
    elif local > closing:
        local = _skip_weekend_forward(opening + timedelta(days=1))

    return local.astimezone(UTC_TIMEZONE)


@_timezone_operation
def retreat_to_business_hours(
    date: datetime, store_timezone: str, business_hours: Optional[BusinessHours] = None
) -> datetime:
    """
    Latest business instant at or before ``date``.

    Weekends move back to Friday closing; after closing clamps to closing the
    same day; before opening moves to closing on the previous business day.
    """
    hours = business_hours or BusinessHours()
    local = _local(date, store_timezone)

    if local.weekday() in (SATURDAY, SUNDAY):
        return _at_hour(_skip_weekend_backward(local), hours.end).astimezone(
            UTC_TIMEZONE
        )

    opening = _at_hour(local, hours.start)
    closing = _at_hour(local, hours.end)

    if local > closing:
        local = closing
    elif local < opening:
        local = _skip_weekend_backward(closing - timedelta(days=1))

    return local.astimezone(UTC_TIMEZONE)
