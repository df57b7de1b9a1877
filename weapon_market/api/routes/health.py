from fastapi import APIRouter, Depends
from sqlalchemy import text

from weapon_market.api.dependencies import get_cache_store
from weapon_market.application.interfaces.cache_store import CacheStore
from weapon_market.config import settings
from weapon_market.infrastructure.database.connection import AsyncSessionLocal

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    cache_store: CacheStore | None = Depends(get_cache_store),
) -> dict:  # type: ignore[type-arg]
    """Liveness + dependency health check."""
    db_status = "connected"
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        db_status = f"error: {type(exc).__name__}"

    # The cache is optional; without one searches simply always hit the database
    cache_status = settings.cache_backend if cache_store is not None else "disabled"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "cache": cache_status,
    }
