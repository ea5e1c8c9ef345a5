"""Current identity from the provider's bearer token."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from cointrace.core.logging_config import get_logger
from cointrace.services.auth_service import Identity, identity_from_token

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)
logger = get_logger(__name__)


class IdentityInfo(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Identity]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    identity = identity_from_token(credentials.credentials)
    if identity is None:
        logger.warning("Bearer token rejected (invalid or expired)")
    return identity


async def RequireIdentity(
    identity: Optional[Identity] = Depends(get_current_identity),
) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


@router.get("/me", response_model=IdentityInfo)
async def me(identity: Identity = Depends(RequireIdentity)):
    return IdentityInfo(id=identity.id, email=identity.email, name=identity.name)
