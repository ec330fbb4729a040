"""Bearer token handling.

Tokens are issued by the identity provider; this service only needs the
actor id (``sub``) and role claims from them.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from encore.config import settings

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


@dataclass(frozen=True)
class Actor:
    """Authenticated caller."""
    id: str
    role: str = ROLE_MEMBER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def create_token(actor_id: str, role: str = ROLE_MEMBER, expires_hours: Optional[int] = None) -> str:
    """Create a JWT for an actor (development tooling and tests)."""
    now = datetime.now(timezone.utc)
    expire = now + timedelta(hours=expires_hours or settings.jwt_expiry_hours)
    payload = {
        "sub": str(actor_id),
        "role": role,
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[Actor]:
    """Decode a JWT and return the actor, or None if invalid."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    actor_id = payload.get("sub")
    if not actor_id:
        return None
    return Actor(id=str(actor_id), role=payload.get("role") or ROLE_MEMBER)
