"""
Shop totals over local-calendar windows.

Callers must have passed ``authorize_analytics`` for the shop; nothing here
re-checks access.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cointrace.core.errors import ValidationError
from cointrace.core.timewindows import (
    next_day,
    parse_local_date,
    start_of_day,
    start_of_month,
    start_of_week,
)
from cointrace.models import Bill, BillEntry

RANGE_BOUNDS_REQUIRED = "Please provide both From and To dates in YYYY-MM-DD format."
RANGE_ORDER = "From date must be on or before To date."


@dataclass
class Overview:
    today: Decimal
    week_to_date: Decimal
    month_to_date: Decimal
    as_of: datetime


@dataclass
class DateTotal:
    date: str
    total: Decimal
    entries: Optional[List[Decimal]] = None

    @property
    def count(self) -> Optional[int]:
        return None if self.entries is None else len(self.entries)


@dataclass
class RangeTotal:
    date_from: str
    date_to: str
    total: Decimal


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _shop_entries(shop_id: str):
    return BillEntry.bill_id.in_(select(Bill.id).where(Bill.shop_id == shop_id))


def _sum_since(start: datetime):
    return func.coalesce(
        func.sum(case((BillEntry.created_at >= start, BillEntry.amount), else_=0)),
        0,
    )


async def sum_window(
    db: AsyncSession, shop_id: str, start: datetime, end: Optional[datetime] = None
) -> Decimal:
    """Sum of entry amounts in [start, end); open-ended when end is None."""
    q = select(func.coalesce(func.sum(BillEntry.amount), 0)).where(
        _shop_entries(shop_id),
        BillEntry.created_at >= start,
    )
    if end is not None:
        q = q.where(BillEntry.created_at < end)
    total = (await db.execute(q)).scalar_one()
    return _money(total)


async def list_window_amounts(
    db: AsyncSession, shop_id: str, start: datetime, end: datetime
) -> List[Decimal]:
    q = (
        select(BillEntry.amount)
        .where(
            _shop_entries(shop_id),
            BillEntry.created_at >= start,
            BillEntry.created_at < end,
        )
        .order_by(BillEntry.created_at, BillEntry.id)
    )
    return [_money(a) for a in (await db.execute(q)).scalars().all()]


async def compute_overview(db: AsyncSession, shop_id: str, now: datetime) -> Overview:
    """Today, week-to-date (from Sunday) and month-to-date totals as of ``now``.

    All three windows come from the same ``now`` and one aggregate statement.
    """
    start_today = start_of_day(now)
    start_week = start_of_week(now)
    start_month = start_of_month(now)
    # The week may begin in the previous month.
    earliest = min(start_week, start_month)

    q = select(
        _sum_since(start_today).label("today"),
        _sum_since(start_week).label("week"),
        _sum_since(start_month).label("month"),
    ).where(_shop_entries(shop_id), BillEntry.created_at >= earliest)
    row = (await db.execute(q)).one()
    return Overview(
        today=_money(row.today),
        week_to_date=_money(row.week),
        month_to_date=_money(row.month),
        as_of=now,
    )


async def compute_specific_date(
    db: AsyncSession,
    shop_id: str,
    date_string: Optional[str],
    include_entries: bool = False,
) -> Optional[DateTotal]:
    """Total for one local day, or None when no valid date was given."""
    start = parse_local_date(date_string)
    if start is None:
        return None
    end = next_day(start)
    total = await sum_window(db, shop_id, start, end)
    entries = None
    if include_entries:
        entries = await list_window_amounts(db, shop_id, start, end)
    return DateTotal(date=date_string, total=total, entries=entries)


async def compute_range(
    db: AsyncSession,
    shop_id: str,
    from_string: Optional[str],
    to_string: Optional[str],
) -> Optional[RangeTotal]:
    """Total over whole local days from..to inclusive; None when neither bound is given."""
    if not from_string and not to_string:
        return None
    start = parse_local_date(from_string)
    last_day = parse_local_date(to_string)
    if start is None or last_day is None:
        raise ValidationError(RANGE_BOUNDS_REQUIRED)
    if start > last_day:
        raise ValidationError(RANGE_ORDER)
    total = await sum_window(db, shop_id, start, next_day(last_day))
    return RangeTotal(date_from=from_string, date_to=to_string, total=total)
