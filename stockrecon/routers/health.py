# stockrecon/routers/health.py

from fastapi import APIRouter

from stockrecon.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "stockrecon",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check - the engine has no external dependencies to wait for."""
    settings = get_settings()
    return {
        "status": "ready",
        "checks": {
            "engine": "ok",
        },
        "config": {
            "dedup_keep": settings.dedup_keep,
            "uncomparable_as_match": settings.uncomparable_as_match,
            "max_workers": settings.max_workers,
        },
    }
