"""
Rate limiting for the quote submission endpoint.

Counters live in process memory, keyed by client address: a restart
clears them and separate instances do not share them.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

RATE_LIMITED_CODE = "RATE_LIMITED"
RATE_LIMITED_MESSAGE = "요청이 너무 많습니다. 잠시 후 다시 시도해주세요."


@dataclass
class RateLimitRecord:
    count: int
    reset_time: float


class RateLimiter:
    """
    Fixed-ceiling counter per key.  The first request opens a window;
    once the window has passed the next request starts a fresh one.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}

    def hit(self, key: str) -> bool:
        """Count one request for key. Returns False when it must be rejected."""
        now = self._clock()
        record = self._records.get(key)

        if record is None or now > record.reset_time:
            self._records[key] = RateLimitRecord(count=1, reset_time=now + self.window_seconds)
            return True

        record.count += 1
        if record.count > self.max_requests:
            logger.warning(f"[RateLimit] {key} exceeded limit: {record.count} requests")
            return False
        return True

    def sweep(self) -> int:
        """Drop records whose window has passed. Returns how many were removed."""
        now = self._clock()
        expired = [key for key, record in self._records.items() if now > record.reset_time]
        for key in expired:
            del self._records[key]
        if expired:
            logger.debug(f"[RateLimit] swept {len(expired)} expired entries")
        return len(expired)

    def get(self, key: str) -> RateLimitRecord | None:
        return self._records.get(key)

    def __len__(self) -> int:
        return len(self._records)


async def sweep_periodically(limiter: RateLimiter, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        limiter.sweep()


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Gate POST requests to the listed paths; everything else passes through."""

    def __init__(self, app: ASGIApp, limiter: RateLimiter, paths: list[str]) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.paths = tuple(paths)

    async def dispatch(self, request: Request, call_next):
        if request.method == "POST" and request.url.path.startswith(self.paths):
            if not self.limiter.hit(client_address(request)):
                return JSONResponse(
                    status_code=429,
                    content={
                        "success": False,
                        "error": RATE_LIMITED_MESSAGE,
                        "code": RATE_LIMITED_CODE,
                    },
                )
        return await call_next(request)
