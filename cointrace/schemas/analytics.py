from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class OverviewResponse(BaseModel):
    today: Decimal
    week_to_date: Decimal
    month_to_date: Decimal
    as_of: datetime


class DateTotalResponse(BaseModel):
    selected: bool
    """False when the date was missing or not a valid YYYY-MM-DD."""
    date: Optional[str] = None
    total: Optional[Decimal] = None
    entries: Optional[List[Decimal]] = None
    count: Optional[int] = None


class RangeTotalResponse(BaseModel):
    selected: bool
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    total: Optional[Decimal] = None
