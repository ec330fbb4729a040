"""Health check endpoints for monitoring and load balancers."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text

from encore.database import get_db
from encore.dependencies import get_cache_backend
from encore.services.cache import CacheBackend, RedisCache
from encore import __version__


router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache_backend),
):
    """
    Health check endpoint for load balancers and monitoring.

    Returns status of all critical dependencies.
    """
    status = {
        "status": "healthy",
        "version": __version__,
        "checks": {}
    }

    # Database check
    try:
        db.execute(text("SELECT 1"))
        status["checks"]["database"] = "ok"
    except Exception as e:
        status["checks"]["database"] = f"error: {str(e)}"
        status["status"] = "unhealthy"

    # Cache check (drafts and playlists live here)
    try:
        cache.ping()
        status["checks"]["cache"] = "redis" if isinstance(cache, RedisCache) else "memory"
    except Exception as e:
        status["checks"]["cache"] = f"error: {str(e)}"
        status["status"] = "unhealthy"

    return status


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness check - is the service ready to handle requests?
    """
    try:
        db.execute(text("SELECT 1"))
        return {"ready": True}
    except Exception:
        return {"ready": False}


@router.get("/live")
def liveness_check():
    """Liveness check - is the process alive?"""
    return {"alive": True, "version": __version__}
