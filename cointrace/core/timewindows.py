"""
Calendar windows in shop-local time.

Shops keep a fixed UTC+05:30 calendar (IST, no daylight saving) whatever the
server timezone is. Entries are stored with naive UTC timestamps, so every
boundary returned here is a naive UTC datetime as well. Inputs may be naive
(read as UTC) or timezone-aware.
"""
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

IST_OFFSET = timedelta(hours=5, minutes=30)
IST = timezone(IST_OFFSET, "IST")

_LOCAL_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def utcnow() -> datetime:
    """Current instant as naive UTC, the storage convention."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
    return instant


def _local_midnight_to_utc(local_day: date) -> datetime:
    return datetime.combine(local_day, time.min) - IST_OFFSET


def local_date(instant: datetime) -> date:
    """Local calendar date containing the instant."""
    return (_as_utc(instant) + IST_OFFSET).date()


def start_of_day(now: datetime) -> datetime:
    """UTC instant of local 00:00 on the local day containing ``now``."""
    return _local_midnight_to_utc(local_date(now))


def start_of_week(now: datetime) -> datetime:
    """UTC instant of local Sunday 00:00 of the week containing ``now``."""
    today = local_date(now)
    # date.weekday(): Monday == 0 ... Sunday == 6
    days_since_sunday = (today.weekday() + 1) % 7
    return _local_midnight_to_utc(today - timedelta(days=days_since_sunday))


def start_of_month(now: datetime) -> datetime:
    """UTC instant of local 00:00 on day 1 of the month containing ``now``."""
    return _local_midnight_to_utc(local_date(now).replace(day=1))


def next_day(start: datetime) -> datetime:
    """Exclusive end of the one-day window starting at ``start``.

    Plain 24h arithmetic is exact under a fixed offset. Do not recompute it
    from the local calendar: ``start`` is already shifted.
    """
    return _as_utc(start) + timedelta(days=1)


def parse_local_date(value: Any) -> Optional[datetime]:
    """``YYYY-MM-DD`` as a local calendar date -> UTC instant of its local midnight.

    Returns None for missing, non-string, malformed or non-existent dates;
    e.g. "2024-01-15" -> 2024-01-14 18:30:00.
    """
    if not value or not isinstance(value, str):
        return None
    if not _LOCAL_DATE_RE.fullmatch(value):
        return None
    year, month, day = (int(part) for part in value.split("-"))
    try:
        parsed = date(year, month, day)
    except ValueError:
        return None
    return _local_midnight_to_utc(parsed)
