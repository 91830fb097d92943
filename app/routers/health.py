from fastapi import APIRouter, Depends
from structlog import get_logger
from redis.asyncio import Redis

from app.config import settings
from app.dependencies.storage import get_storage
from app.storage import Storage

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["health"])

@router.get("/health")
async def health():
    return {"status": "ok"}

@router.get("/health/ready")
async def readiness(store: Storage = Depends(get_storage)):
    details = {"status": "ok", "checks": {}}

    # Redis only backs the rate limiter
    if settings.RATE_LIMIT_ENABLED:
        try:
            redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
            pong = await redis.ping()
            await redis.aclose()
            details["checks"]["redis"] = "ok" if pong else "fail"
        except Exception as e:
            logger.warning("health redis fail", error=str(e))
            details["checks"]["redis"] = f"fail: {str(e)}"
            details["status"] = "degraded"

    try:
        await store.ping()
        details["checks"]["storage"] = "ok"
    except Exception as e:
        logger.warning("health storage fail", backend=settings.STORAGE_BACKEND, error=str(e))
        details["checks"]["storage"] = f"fail: {str(e)}"
        details["status"] = "degraded"

    return details
