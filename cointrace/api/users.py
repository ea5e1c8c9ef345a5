from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cointrace.api.auth import RequireIdentity
from cointrace.core.database import get_db
from cointrace.models import User
from cointrace.schemas.user import UserResponse
from cointrace.services.auth_service import Identity
from cointrace.services.user_service import sync_user

router = APIRouter(prefix="/users", tags=["users"])


def _user_to_response(u: User) -> UserResponse:
    return UserResponse(
        id=u.id,
        email=u.email,
        name=u.name,
        role=u.role.value,
        created_at=u.created_at,
        updated_at=u.updated_at,
    )


@router.post("/sync", response_model=UserResponse)
async def sync_current_user(
    identity: Identity = Depends(RequireIdentity),
    db: AsyncSession = Depends(get_db),
):
    """Copy the signed-in identity into the local users table."""
    user = await sync_user(db, identity)
    return _user_to_response(user)
