from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cointrace.core.errors import ValidationError
from cointrace.core.expression import EMPTY_EXPRESSION_MESSAGE, parse_expression
from cointrace.core.logging_config import get_logger
from cointrace.core.permissions import authorize_write
from cointrace.core.timewindows import utcnow
from cointrace.models import Bill, BillEntry
from cointrace.services.invalidation import ViewInvalidator

logger = get_logger(__name__)


def _entries_for(bill: Bill, amounts: List[Decimal]) -> List[BillEntry]:
    return [
        BillEntry(amount=amount, created_at=bill.created_at)
        for amount in amounts
    ]


async def create_bill(
    db: AsyncSession,
    shop_id: str,
    raw_expression: str,
    acting_user_id: str,
    invalidator: Optional[ViewInvalidator] = None,
    now: Optional[datetime] = None,
) -> Bill:
    """
    Record one bill with an entry per amount of the expression.

    The bill and all of its entries are committed together or not at all;
    database errors roll the attempt back and propagate unchanged.
    """
    shop_id = (shop_id or "").strip()
    expression = (raw_expression or "").strip()
    if not shop_id:
        raise ValidationError("Missing shopId")
    if not expression:
        raise ValidationError(EMPTY_EXPRESSION_MESSAGE)

    await authorize_write(db, acting_user_id, shop_id)

    amounts = parse_expression(expression)
    if not amounts:
        raise ValidationError("No valid amounts provided")

    bill = Bill(shop_id=shop_id, staff_id=acting_user_id, created_at=now or utcnow())
    bill.entries = _entries_for(bill, amounts)
    try:
        db.add(bill)
        await db.flush()
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Bill for shop %s was not saved", shop_id)
        raise

    logger.info(
        "Bill %s saved for shop %s by %s: %s entries, total %s",
        bill.id, shop_id, acting_user_id, len(amounts), sum(amounts),
    )
    if invalidator is not None:
        await invalidator.shop_view_stale(shop_id)
    return bill
