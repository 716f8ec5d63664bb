"""Time helpers shared across quietly."""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ValidationError


def utc_now() -> datetime:
    """Return the current time in UTC, truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to UTC.

    Naive datetimes are assumed to already be UTC.

    Args:
        value: The datetime to normalize

    Returns:
        An aware datetime in UTC
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Format a datetime as a fixed-width UTC ISO-8601 string.

    Every stored timestamp goes through this function so that string
    comparison in range filters matches chronological order.

    Args:
        value: The datetime to format

    Returns:
        The timestamp as ``YYYY-MM-DDTHH:MM:SS+00:00``

    Example:
        >>> to_iso(datetime(2024, 3, 15, 10, 0, 0, 999, tzinfo=timezone.utc))
        '2024-03-15T10:00:00+00:00'
    """
    return ensure_utc(value).isoformat(timespec="seconds")


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO-8601 timestamp back into an aware UTC datetime."""
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value))


def get_timezone(name: str) -> tzinfo:
    """
    Resolve a timezone name.

    Args:
        name: IANA timezone name such as ``UTC`` or ``Europe/Berlin``

    Returns:
        The matching tzinfo

    Raises:
        ValidationError: If the name is not a known timezone
    """
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {name}") from e


def local_date(value: datetime, tz: tzinfo) -> date:
    """Calendar date of a timestamp in the given timezone."""
    return ensure_utc(value).astimezone(tz).date()


def start_of_day(day: date, tz: tzinfo) -> datetime:
    """Midnight of ``day`` in ``tz``, as an aware UTC datetime."""
    return datetime(day.year, day.month, day.day, tzinfo=tz).astimezone(timezone.utc)


# ============================================================================
# Calendar periods
# ============================================================================


def day_bounds(now: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """[start of today, start of tomorrow) in ``tz``, as UTC datetimes."""
    today = local_date(now, tz)
    return start_of_day(today, tz), start_of_day(today + timedelta(days=1), tz)


def week_bounds(now: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """[Monday of this week, Monday of next week) in ``tz``."""
    today = local_date(now, tz)
    monday = today - timedelta(days=today.weekday())
    return start_of_day(monday, tz), start_of_day(monday + timedelta(days=7), tz)


def month_bounds(now: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """[1st of this month, 1st of next month) in ``tz``."""
    today = local_date(now, tz)
    first = today.replace(day=1)
    if first.month == 12:
        next_first = date(first.year + 1, 1, 1)
    else:
        next_first = date(first.year, first.month + 1, 1)
    return start_of_day(first, tz), start_of_day(next_first, tz)


def year_bounds(now: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """[Jan 1 of this year, Jan 1 of next year) in ``tz``."""
    year = local_date(now, tz).year
    return start_of_day(date(year, 1, 1), tz), start_of_day(date(year + 1, 1, 1), tz)
