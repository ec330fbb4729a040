"""FastAPI dependencies for authentication and shared clients."""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from encore.integrations.spotify import SpotifyClient, get_spotify_client
from encore.services.auth import Actor, decode_token
from encore.services.cache import CacheBackend, get_cache

security = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Actor:
    """Get the authenticated actor from the bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication",
            headers={"WWW-Authenticate": "Bearer"},
        )

    actor = decode_token(credentials.credentials)
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return actor


async def get_current_admin(
    actor: Actor = Depends(get_current_actor),
) -> Actor:
    """Get current actor and require admin role."""
    if not actor.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return actor


def get_cache_backend() -> CacheBackend:
    """Shared cache backend (overridden in tests)."""
    return get_cache()


def get_spotify() -> SpotifyClient:
    """Shared Spotify client (overridden in tests)."""
    return get_spotify_client()
