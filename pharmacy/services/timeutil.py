"""Clock and calendar-window helpers.

Timestamps are stored as naive UTC. Calendar windows are computed in a local
timezone and converted back to naive UTC bounds for querying.
"""
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pharmacy.config import settings
from pharmacy.exceptions import InvalidInputError


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are assumed UTC already."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def get_zone(name: str | None = None) -> ZoneInfo:
    try:
        return ZoneInfo(name or settings.BUSINESS_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidInputError(f"Unknown timezone '{name}'")


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid date '{value}', expected YYYY-MM-DD")


def parse_month(value: str) -> tuple[int, int]:
    try:
        year_s, month_s = value.split("-")
        year, month = int(year_s), int(month_s)
    except (AttributeError, ValueError):
        raise InvalidInputError(f"Invalid month '{value}', expected YYYY-MM")
    if not 1 <= month <= 12:
        raise InvalidInputError(f"Invalid month '{value}', expected YYYY-MM")
    return year, month


def _local_to_utc(local_dt: datetime, tz: ZoneInfo) -> datetime:
    return to_naive_utc(local_dt.replace(tzinfo=tz))


def day_bounds(day: date, tz_name: str | None = None) -> tuple[datetime, datetime]:
    """[start, end) of a calendar day in ``tz_name``, as naive UTC."""
    tz = get_zone(tz_name)
    start = datetime.combine(day, time.min)
    return _local_to_utc(start, tz), _local_to_utc(start + timedelta(days=1), tz)


def month_bounds(year: int, month: int, tz_name: str | None = None) -> tuple[datetime, datetime]:
    """[start, end) of a calendar month in ``tz_name``, as naive UTC."""
    tz = get_zone(tz_name)
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return _local_to_utc(start, tz), _local_to_utc(end, tz)


def today_bounds(tz_name: str | None = None) -> tuple[datetime, datetime]:
    tz = get_zone(tz_name)
    local_today = utcnow().replace(tzinfo=timezone.utc).astimezone(tz).date()
    return day_bounds(local_today, tz_name)


def range_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """Inclusive UTC date range: ``start`` at 00:00:00, ``end`` at 23:59:59.999."""
    lo = datetime.combine(start, time.min) if start else None
    hi = datetime.combine(end, time(23, 59, 59, 999000)) if end else None
    return lo, hi
