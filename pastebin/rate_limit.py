"""
Fixed-window rate limiting per client IP.

    rl:{scope}:{ip}:{window index} -> INCR (+ EXPIRE window on first hit)
"""
import logging
import time

from fastapi import Depends, HTTPException, Request

from pastebin.config import settings
from pastebin.database import PasteStore, get_store

logger = logging.getLogger(__name__)


def rate_limit_key(scope: str, ip: str, window_index: int) -> str:
    return f"rl:{scope}:{ip}:{window_index}"


class RateLimiter:
    """FastAPI dependency rejecting clients over `limit` requests per window."""

    def __init__(self, scope: str, limit_setting: str, window_setting: str, message: str):
        # Limits are read from settings on every request
        self.scope = scope
        self.limit_setting = limit_setting
        self.window_setting = window_setting
        self.message = message

    async def __call__(self, request: Request, store: PasteStore = Depends(get_store)) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return

        limit = getattr(settings, self.limit_setting)
        window = getattr(settings, self.window_setting)

        # Behind a proxy this is the proxy address
        ip = request.client.host if request.client else "unknown"
        key = rate_limit_key(self.scope, ip, int(time.time() // window))

        current = store.hit(key, window)
        if current > limit:
            logger.warning(f"Rate limit '{self.scope}' exceeded by {ip} ({current}/{limit})")
            raise HTTPException(
                status_code=429,
                detail=self.message,
                headers={"Retry-After": str(window)},
            )


api_limiter = RateLimiter(
    scope="api",
    limit_setting="RATE_LIMIT_MAX_REQUESTS",
    window_setting="RATE_LIMIT_WINDOW_SECONDS",
    message="Too many requests, please try again later",
)

create_paste_limiter = RateLimiter(
    scope="create",
    limit_setting="CREATE_RATE_LIMIT_MAX_REQUESTS",
    window_setting="CREATE_RATE_LIMIT_WINDOW_SECONDS",
    message="Too many pastes created. Please wait before creating more.",
)
