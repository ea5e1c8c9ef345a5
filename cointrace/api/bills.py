from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cointrace.api.auth import RequireIdentity
from cointrace.core.database import get_db
from cointrace.core.errors import ParseError
from cointrace.core.expression import parse_expression
from cointrace.schemas.bill import BillCreate, BillCreated, ExpressionPreview
from cointrace.services.auth_service import Identity
from cointrace.services.billing_service import create_bill
from cointrace.services.invalidation import ViewInvalidator, get_invalidator

router = APIRouter(tags=["bills"])


@router.post(
    "/shops/{shop_id}/bills",
    response_model=BillCreated,
    status_code=status.HTTP_201_CREATED,
)
async def add_bill(
    shop_id: str,
    data: BillCreate,
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
    invalidator: ViewInvalidator = Depends(get_invalidator),
):
    """Owner or staff records a bill from an amount expression."""
    bill = await create_bill(db, shop_id, data.expression, identity.id, invalidator)
    return BillCreated(
        id=bill.id,
        shop_id=bill.shop_id,
        count=len(bill.entries),
        created_at=bill.created_at,
    )


@router.post("/bills/preview", response_model=ExpressionPreview)
async def preview_bill(
    data: BillCreate,
    _identity: Identity = Depends(RequireIdentity),
):
    """Live check of an expression with the same rules as the write path."""
    try:
        amounts = parse_expression(data.expression)
    except ParseError as e:
        return ExpressionPreview(valid=False, error=e.message, token=e.token)
    return ExpressionPreview(valid=True, amounts=amounts, count=len(amounts))
