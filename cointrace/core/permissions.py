"""
Shop-level access: owner or staff.

Bill writing is allowed to the owner and staff; analytics and staff
management are owner-only. Checked against the store on every request.
"""
from enum import Enum

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cointrace.core.errors import NotAuthorized, NotFound
from cointrace.core.logging_config import get_logger
from cointrace.models import Shop, StaffMembership

logger = get_logger(__name__)


class ShopRole(str, Enum):
    OWNER = "OWNER"
    STAFF = "STAFF"


class Action(str, Enum):
    WRITE_BILLS = "WRITE_BILLS"
    ANALYTICS = "ANALYTICS"
    MANAGE_STAFF = "MANAGE_STAFF"


# Action -> roles allowed to perform it
ACTION_ROLES = {
    Action.WRITE_BILLS: [ShopRole.OWNER, ShopRole.STAFF],
    Action.ANALYTICS: [ShopRole.OWNER],
    Action.MANAGE_STAFF: [ShopRole.OWNER],
}


def can_perform(role: ShopRole, action: Action) -> bool:
    return role in ACTION_ROLES.get(action, [])


async def get_shop_or_404(db: AsyncSession, shop_id: str) -> Shop:
    result = await db.execute(select(Shop).where(Shop.id == shop_id))
    shop = result.scalar_one_or_none()
    if shop is None:
        raise NotFound("Shop not found")
    return shop


async def is_staff_member(db: AsyncSession, shop_id: str, user_id: str) -> bool:
    result = await db.execute(
        select(StaffMembership.id).where(
            StaffMembership.shop_id == shop_id,
            StaffMembership.user_id == user_id,
        )
    )
    return result.first() is not None


async def resolve_role(db: AsyncSession, user_id: str, shop: Shop) -> ShopRole:
    """Owner if the caller owns the shop, Staff if a membership exists."""
    if shop.owner_id == user_id:
        return ShopRole.OWNER
    if await is_staff_member(db, shop.id, user_id):
        return ShopRole.STAFF
    logger.warning("User %s has no access to shop %s", user_id, shop.id)
    raise NotAuthorized("Not authorized to access this shop")


async def authorize(db: AsyncSession, user_id: str, shop_id: str, action: Action) -> ShopRole:
    shop = await get_shop_or_404(db, shop_id)
    role = await resolve_role(db, user_id, shop)
    if not can_perform(role, action):
        logger.warning("User %s (%s) denied %s on shop %s", user_id, role.value, action.value, shop_id)
        raise NotAuthorized("Only the shop owner can do this")
    return role


async def authorize_write(db: AsyncSession, user_id: str, shop_id: str) -> ShopRole:
    """Owner or staff may record bills."""
    return await authorize(db, user_id, shop_id, Action.WRITE_BILLS)


async def authorize_analytics(db: AsyncSession, user_id: str, shop_id: str) -> ShopRole:
    """Owner only."""
    return await authorize(db, user_id, shop_id, Action.ANALYTICS)


async def authorize_staff_management(db: AsyncSession, user_id: str, shop_id: str) -> ShopRole:
    return await authorize(db, user_id, shop_id, Action.MANAGE_STAFF)
