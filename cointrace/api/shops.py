from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cointrace.api.auth import RequireIdentity
from cointrace.core.database import get_db
from cointrace.models import Shop
from cointrace.schemas.shop import (
    ShopCreate,
    ShopDetailResponse,
    ShopResponse,
    StaffAdd,
    StaffMember,
    StaffMembershipResponse,
    StaffRemoveResponse,
    UserShopsResponse,
)
from cointrace.services import shop_service
from cointrace.services.auth_service import Identity
from cointrace.services.invalidation import ViewInvalidator, get_invalidator

router = APIRouter(prefix="/shops", tags=["shops"])


def _shop_to_response(s: Shop) -> ShopResponse:
    return ShopResponse(id=s.id, name=s.name, owner_id=s.owner_id, created_at=s.created_at)


@router.post("", response_model=ShopResponse, status_code=status.HTTP_201_CREATED)
async def create_shop(
    data: ShopCreate,
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
    invalidator: ViewInvalidator = Depends(get_invalidator),
):
    shop = await shop_service.create_shop(db, data.name, identity.id, invalidator)
    return _shop_to_response(shop)


@router.get("", response_model=UserShopsResponse)
async def list_my_shops(
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
):
    """Shops the caller owns and shops where they are staff."""
    shops = await shop_service.list_shops_for_user(db, identity.id)
    return UserShopsResponse(
        owned=[_shop_to_response(s) for s in shops.owned],
        staff=[_shop_to_response(s) for s in shops.staff],
    )


@router.get("/{shop_id}", response_model=ShopDetailResponse)
async def get_shop(
    shop_id: str,
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
):
    detail = await shop_service.get_shop_detail(db, shop_id, identity.id)
    return ShopDetailResponse(
        shop=_shop_to_response(detail.shop),
        owner_email=detail.owner_email,
        role=detail.role.value,
        is_owner=detail.is_owner,
        staff=[StaffMember(id=u.id, email=u.email, name=u.name) for u in detail.staff],
    )


@router.post(
    "/{shop_id}/staff",
    response_model=StaffMembershipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_staff(
    shop_id: str,
    data: StaffAdd,
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
    invalidator: ViewInvalidator = Depends(get_invalidator),
):
    membership = await shop_service.add_staff(db, shop_id, data.email, identity.id, invalidator)
    return StaffMembershipResponse.model_validate(membership)


@router.delete("/{shop_id}/staff/{user_id}", response_model=StaffRemoveResponse)
async def remove_staff(
    shop_id: str,
    user_id: str,
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
    invalidator: ViewInvalidator = Depends(get_invalidator),
):
    removed = await shop_service.remove_staff(db, shop_id, user_id, identity.id, invalidator)
    return StaffRemoveResponse(removed=removed)
