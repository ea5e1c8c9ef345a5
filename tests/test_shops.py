"""Shops, staff membership and user sync."""
import pytest
from sqlalchemy import func, select

from cointrace.core.errors import (
    AlreadyExists,
    NotAuthorized,
    NotFound,
    SelfReferenceError,
    ValidationError,
)
from cointrace.core.permissions import (
    ShopRole,
    authorize_analytics,
    authorize_write,
)
from cointrace.models import StaffMembership, User, UserRole
from cointrace.services import shop_service
from cointrace.services.auth_service import Identity
from cointrace.services.user_service import sync_user


async def _memberships(db) -> int:
    return (await db.execute(select(func.count()).select_from(StaffMembership))).scalar_one()


async def test_guard_roles(db, staffed_shop, owner, staff_user, outsider):
    assert await authorize_write(db, owner.id, staffed_shop.id) == ShopRole.OWNER
    assert await authorize_write(db, staff_user.id, staffed_shop.id) == ShopRole.STAFF
    assert await authorize_analytics(db, owner.id, staffed_shop.id) == ShopRole.OWNER
    with pytest.raises(NotAuthorized):
        await authorize_analytics(db, staff_user.id, staffed_shop.id)
    with pytest.raises(NotAuthorized):
        await authorize_write(db, outsider.id, staffed_shop.id)
    with pytest.raises(NotFound):
        await authorize_write(db, owner.id, "missing")


async def test_create_shop(db, owner, invalidator):
    shop = await shop_service.create_shop(db, "  Tea Stall ", owner.id, invalidator)
    assert shop.name == "Tea Stall"
    assert shop.owner_id == owner.id
    assert invalidator.stale_shop_ids == [shop.id]


async def test_create_shop_requires_name(db, owner):
    with pytest.raises(ValidationError):
        await shop_service.create_shop(db, "   ", owner.id)


async def test_create_shop_requires_synced_user(db):
    with pytest.raises(NotFound):
        await shop_service.create_shop(db, "Tea Stall", "never-synced")


async def test_list_shops_for_user(db, staffed_shop, owner, staff_user, outsider):
    owned = await shop_service.list_shops_for_user(db, owner.id)
    assert [s.id for s in owned.owned] == [staffed_shop.id]
    assert owned.staff == []

    as_staff = await shop_service.list_shops_for_user(db, staff_user.id)
    assert as_staff.owned == []
    assert [s.id for s in as_staff.staff] == [staffed_shop.id]

    nothing = await shop_service.list_shops_for_user(db, outsider.id)
    assert nothing.owned == [] and nothing.staff == []


async def test_shop_detail(db, staffed_shop, owner, staff_user, outsider):
    detail = await shop_service.get_shop_detail(db, staffed_shop.id, owner.id)
    assert detail.is_owner
    assert detail.owner_email == "owner@example.com"
    assert [u.id for u in detail.staff] == [staff_user.id]

    staff_view = await shop_service.get_shop_detail(db, staffed_shop.id, staff_user.id)
    assert staff_view.role == ShopRole.STAFF
    assert staff_view.staff == []

    with pytest.raises(NotAuthorized):
        await shop_service.get_shop_detail(db, staffed_shop.id, outsider.id)


async def test_add_staff(db, shop, owner, staff_user, invalidator):
    membership = await shop_service.add_staff(db, shop.id, "staff@example.com", owner.id, invalidator)
    assert membership.user_id == staff_user.id
    assert membership.shop_id == shop.id
    assert invalidator.stale_shop_ids == [shop.id]


async def test_add_staff_twice(db, shop, owner, staff_user):
    await shop_service.add_staff(db, shop.id, "staff@example.com", owner.id)
    with pytest.raises(AlreadyExists):
        await shop_service.add_staff(db, shop.id, "staff@example.com", owner.id)
    assert await _memberships(db) == 1


async def test_owner_cannot_add_self(db, shop, owner):
    with pytest.raises(SelfReferenceError):
        await shop_service.add_staff(db, shop.id, "owner@example.com", owner.id)
    assert await _memberships(db) == 0


async def test_add_unknown_email(db, shop, owner):
    with pytest.raises(NotFound):
        await shop_service.add_staff(db, shop.id, "nobody@example.com", owner.id)


async def test_only_owner_adds_staff(db, staffed_shop, staff_user, outsider):
    with pytest.raises(NotAuthorized):
        await shop_service.add_staff(db, staffed_shop.id, "outsider@example.com", staff_user.id)


async def test_add_staff_requires_inputs(db, shop, owner):
    with pytest.raises(ValidationError):
        await shop_service.add_staff(db, shop.id, "  ", owner.id)


async def test_remove_staff(db, staffed_shop, owner, staff_user, invalidator):
    removed = await shop_service.remove_staff(db, staffed_shop.id, staff_user.id, owner.id, invalidator)
    assert removed == 1
    assert await _memberships(db) == 0
    assert invalidator.stale_shop_ids == [staffed_shop.id]
    with pytest.raises(NotAuthorized):
        await authorize_write(db, staff_user.id, staffed_shop.id)


async def test_remove_non_member_is_zero(db, shop, owner, outsider, invalidator):
    assert await shop_service.remove_staff(db, shop.id, outsider.id, owner.id, invalidator) == 0
    assert invalidator.stale_shop_ids == []


async def test_remove_owner_is_self_reference(db, shop, owner):
    with pytest.raises(SelfReferenceError):
        await shop_service.remove_staff(db, shop.id, owner.id, owner.id)


async def test_remove_staff_checks_owner_and_shop(db, staffed_shop, owner, staff_user):
    with pytest.raises(NotAuthorized):
        await shop_service.remove_staff(db, staffed_shop.id, staff_user.id, staff_user.id)
    with pytest.raises(NotFound):
        await shop_service.remove_staff(db, "missing", staff_user.id, owner.id)


async def test_sync_user_creates_then_updates(db):
    user = await sync_user(db, Identity(id="idp_42", email="new@example.com", name="New"))
    assert user.role == UserRole.STAFF

    await sync_user(db, Identity(id="idp_42", email="renamed@example.com", name="Renamed"))
    users = (await db.execute(select(User).where(User.id == "idp_42"))).scalars().all()
    assert len(users) == 1
    assert users[0].email == "renamed@example.com"
    assert users[0].name == "Renamed"
