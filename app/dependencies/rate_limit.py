from fastapi_limiter.depends import RateLimiter

from app.config import settings


async def _unlimited():
    return None


def rate_limit(times: int, seconds: int):
    """RateLimiter dependency, or a no-op when limiting is switched off."""
    if not settings.RATE_LIMIT_ENABLED:
        return _unlimited
    return RateLimiter(times=times, seconds=seconds)
