"""
Fixed-Window Rate Limiter.

Limits how often a client may call sensitive endpoints (login, registration,
password recovery, guest booking, contact form). Counters live in process
memory and are keyed by client IP and request path.
"""

import math
import time
from typing import Callable, Dict, NamedTuple, Optional

from fastapi import Request, Response

from diligence_labs.core.errors import RateLimitError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.server.core.config import settings

from .fraud_prevention import get_client_ip

logger = get_logger(__name__)


class RateLimitResult(NamedTuple):
    allowed: bool
    limit: int
    remaining: int
    reset_at: float

    def headers(self, now: float) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(self.reset_at)),
        }
        if not self.allowed:
            headers["Retry-After"] = str(max(1, math.ceil(self.reset_at - now)))
        return headers


class RateLimiter:
    """In-memory fixed window counter."""

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.time):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # key -> (count, window reset timestamp)
        self._windows: Dict[str, tuple[int, float]] = {}

    def hit(self, key: str) -> RateLimitResult:
        now = self._clock()
        self._purge(now)

        count, reset_at = self._windows.get(key, (0, now + self.window_seconds))
        if count >= self.max_requests:
            return RateLimitResult(False, self.max_requests, 0, reset_at)

        count += 1
        self._windows[key] = (count, reset_at)
        return RateLimitResult(True, self.max_requests, self.max_requests - count, reset_at)

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)

    def _purge(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._windows.items() if reset_at <= now]
        for key in expired:
            del self._windows[key]


_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    global _limiter
    if _limiter is None:
        config = settings.rate_limit
        _limiter = RateLimiter(config.max_requests, config.window_seconds)
    return _limiter


async def rate_limit(request: Request, response: Response) -> None:
    """
    Route dependency enforcing the limiter for the calling client.

    Allowed responses carry the ``X-RateLimit-*`` headers; rejected calls
    raise ``RateLimitError`` with ``Retry-After`` set.
    """
    if not settings.rate_limit_enabled:
        return

    limiter = get_rate_limiter()
    key = f"{get_client_ip(request)}:{request.url.path}"
    result = limiter.hit(key)
    headers = result.headers(time.time())

    if not result.allowed:
        logger.warning(f"Rate limit exceeded for {key}")
        raise RateLimitError(
            "Too many requests. Please try again later.",
            details={"retryAfter": int(headers["Retry-After"])},
            headers=headers,
        )

    for name, value in headers.items():
        response.headers[name] = value
