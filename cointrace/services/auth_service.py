"""Bearer tokens from the identity provider."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from cointrace.config import settings


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    name: Optional[str] = None


def create_identity_token(
    subject: str,
    email: str,
    name: Optional[str] = None,
    expires_minutes: int = 60,
) -> str:
    """Issue a token the way the provider does. Used by tests and local tooling."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "email": email,
        "name": name,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    if settings.identity_jwt_audience:
        payload["aud"] = settings.identity_jwt_audience
    return jwt.encode(
        payload,
        settings.identity_jwt_secret,
        algorithm=settings.identity_jwt_algorithm,
    )


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(
            token,
            settings.identity_jwt_secret,
            algorithms=[settings.identity_jwt_algorithm],
            audience=settings.identity_jwt_audience,
            options={"verify_aud": settings.identity_jwt_audience is not None},
        )
    except jwt.PyJWTError:
        return None


def identity_from_token(token: str) -> Optional[Identity]:
    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        return None
    return Identity(
        id=str(payload["sub"]),
        email=payload.get("email") or "",
        name=payload.get("name"),
    )
