from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cointrace.core.logging_config import get_logger
from cointrace.core.timewindows import utcnow
from cointrace.models import User, UserRole
from cointrace.services.auth_service import Identity

logger = get_logger(__name__)


async def sync_user(db: AsyncSession, identity: Identity) -> User:
    """Create or refresh the local copy of the signed-in user."""
    result = await db.execute(select(User).where(User.id == identity.id))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(
            id=identity.id,
            email=identity.email,
            name=identity.name,
            role=UserRole.STAFF,
        )
        db.add(user)
        logger.info("User %s created from identity provider", identity.id)
    else:
        user.email = identity.email
        user.name = identity.name
        user.updated_at = utcnow()
    await db.commit()
    await db.refresh(user)
    return user


async def get_user_by_email(db: AsyncSession, email: str):
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()
