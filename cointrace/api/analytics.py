from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cointrace.api.auth import RequireIdentity
from cointrace.core.database import get_db
from cointrace.core.permissions import authorize_analytics
from cointrace.core.timewindows import utcnow
from cointrace.schemas.analytics import (
    DateTotalResponse,
    OverviewResponse,
    RangeTotalResponse,
)
from cointrace.services import analytics_service
from cointrace.services.auth_service import Identity

router = APIRouter(prefix="/shops/{shop_id}/analytics", tags=["analytics"])


@router.get("/overview", response_model=OverviewResponse)
async def analytics_overview(
    shop_id: str,
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
):
    """Today / this week (Sun -> today) / this month, IST."""
    await authorize_analytics(db, identity.id, shop_id)
    overview = await analytics_service.compute_overview(db, shop_id, utcnow())
    return OverviewResponse(
        today=overview.today,
        week_to_date=overview.week_to_date,
        month_to_date=overview.month_to_date,
        as_of=overview.as_of,
    )


@router.get("/date", response_model=DateTotalResponse)
async def analytics_date(
    shop_id: str,
    date: Optional[str] = Query(None, description="Local date (YYYY-MM-DD)"),
    show_entries: bool = Query(False, description="Also list the day's amounts"),
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
):
    await authorize_analytics(db, identity.id, shop_id)
    result = await analytics_service.compute_specific_date(db, shop_id, date, show_entries)
    # A malformed date is treated like no date at all
    if result is None:
        return DateTotalResponse(selected=False)
    return DateTotalResponse(
        selected=True,
        date=result.date,
        total=result.total,
        entries=result.entries,
        count=result.count,
    )


@router.get("/range", response_model=RangeTotalResponse)
async def analytics_range(
    shop_id: str,
    date_from: Optional[str] = Query(None, alias="from", description="First local date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, alias="to", description="Last local date (YYYY-MM-DD), inclusive"),
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
):
    await authorize_analytics(db, identity.id, shop_id)
    result = await analytics_service.compute_range(db, shop_id, date_from, date_to)
    if result is None:
        return RangeTotalResponse(selected=False)
    return RangeTotalResponse(
        selected=True,
        date_from=result.date_from,
        date_to=result.date_to,
        total=result.total,
    )
