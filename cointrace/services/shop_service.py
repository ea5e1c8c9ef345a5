"""Shops and their staff."""
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cointrace.core.errors import (
    AlreadyExists,
    NotFound,
    SelfReferenceError,
    ValidationError,
)
from cointrace.core.logging_config import get_logger
from cointrace.core.permissions import (
    ShopRole,
    authorize_staff_management,
    get_shop_or_404,
    resolve_role,
)
from cointrace.models import Shop, StaffMembership, User
from cointrace.services.invalidation import ViewInvalidator
from cointrace.services.user_service import get_user_by_email

logger = get_logger(__name__)


@dataclass
class UserShops:
    owned: List[Shop] = field(default_factory=list)
    staff: List[Shop] = field(default_factory=list)


@dataclass
class ShopDetail:
    shop: Shop
    owner_email: str
    role: ShopRole
    staff: List[User] = field(default_factory=list)

    @property
    def is_owner(self) -> bool:
        return self.role == ShopRole.OWNER


async def create_shop(
    db: AsyncSession,
    name: str,
    owner_id: str,
    invalidator: Optional[ViewInvalidator] = None,
) -> Shop:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Shop name is required.")
    owner = (await db.execute(select(User).where(User.id == owner_id))).scalar_one_or_none()
    if owner is None:
        # The user sync has not run for this identity yet
        raise NotFound("User not found in database. Please sign out and sign in again.")
    shop = Shop(name=name, owner_id=owner.id)
    db.add(shop)
    await db.commit()
    await db.refresh(shop)
    logger.info("Shop %s (%s) created by %s", shop.id, shop.name, owner_id)
    if invalidator is not None:
        await invalidator.shop_view_stale(shop.id)
    return shop


async def list_shops_for_user(db: AsyncSession, user_id: str) -> UserShops:
    owned = await db.execute(
        select(Shop).where(Shop.owner_id == user_id).order_by(Shop.created_at.desc())
    )
    staff = await db.execute(
        select(Shop)
        .join(StaffMembership, StaffMembership.shop_id == Shop.id)
        .where(StaffMembership.user_id == user_id)
        .order_by(Shop.created_at.desc())
    )
    return UserShops(owned=list(owned.scalars().all()), staff=list(staff.scalars().all()))


async def list_staff(db: AsyncSession, shop_id: str) -> List[User]:
    result = await db.execute(
        select(User)
        .join(StaffMembership, StaffMembership.user_id == User.id)
        .where(StaffMembership.shop_id == shop_id)
        .order_by(StaffMembership.created_at)
    )
    return list(result.scalars().all())


async def get_shop_detail(db: AsyncSession, shop_id: str, user_id: str) -> ShopDetail:
    """Shop page data; the staff list is only filled in for the owner."""
    shop = await get_shop_or_404(db, shop_id)
    role = await resolve_role(db, user_id, shop)
    owner = await db.get(User, shop.owner_id)
    staff = await list_staff(db, shop.id) if role == ShopRole.OWNER else []
    return ShopDetail(shop=shop, owner_email=owner.email if owner else "", role=role, staff=staff)


async def add_staff(
    db: AsyncSession,
    shop_id: str,
    staff_email: str,
    acting_user_id: str,
    invalidator: Optional[ViewInvalidator] = None,
) -> StaffMembership:
    shop_id = (shop_id or "").strip()
    staff_email = (staff_email or "").strip()
    if not shop_id or not staff_email:
        raise ValidationError("Shop ID and staff email are required.")

    await authorize_staff_management(db, acting_user_id, shop_id)
    shop = await get_shop_or_404(db, shop_id)

    staff_user = await get_user_by_email(db, staff_email)
    if staff_user is None:
        raise NotFound("User with that email does not exist in the system.")
    if staff_user.id == shop.owner_id:
        raise SelfReferenceError("The shop owner cannot be added as staff.")

    existing = await db.execute(
        select(StaffMembership.id).where(
            StaffMembership.shop_id == shop.id,
            StaffMembership.user_id == staff_user.id,
        )
    )
    if existing.first() is not None:
        raise AlreadyExists("This user is already a staff member of this shop.")

    membership = StaffMembership(shop_id=shop.id, user_id=staff_user.id)
    db.add(membership)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent add of the same user
        await db.rollback()
        raise AlreadyExists("This user is already a staff member of this shop.")
    await db.refresh(membership)
    logger.info("User %s added as staff to shop %s", staff_user.id, shop.id)
    if invalidator is not None:
        await invalidator.shop_view_stale(shop.id)
    return membership


async def remove_staff(
    db: AsyncSession,
    shop_id: str,
    target_user_id: str,
    acting_user_id: str,
    invalidator: Optional[ViewInvalidator] = None,
) -> int:
    """Returns the number of memberships removed (0 if the user was not staff)."""
    await authorize_staff_management(db, acting_user_id, shop_id)
    shop = await get_shop_or_404(db, shop_id)
    if target_user_id == shop.owner_id:
        raise SelfReferenceError("The shop owner cannot be removed from their own shop.")

    result = await db.execute(
        delete(StaffMembership).where(
            StaffMembership.shop_id == shop.id,
            StaffMembership.user_id == target_user_id,
        )
    )
    await db.commit()
    removed = result.rowcount or 0
    if removed:
        logger.info("User %s removed from staff of shop %s", target_user_id, shop.id)
        if invalidator is not None:
            await invalidator.shop_view_stale(shop.id)
    return removed
