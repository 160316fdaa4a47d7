"""
Sliding-window rate limiting for write requests.

The limiter lives on ``app.state`` and is handed to each request through a
FastAPI dependency, so there is no module-level mutable state.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)


class RateLimiter:
    """Allow at most max_requests per client within window_seconds."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_sweep = clock()

    def allow(self, client_id: str) -> bool:
        """Record a request for client_id. False if it is over the limit."""
        now = self.clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        hits = self._hits[client_id]
        self._prune(hits, now)

        if len(hits) >= self.max_requests:
            return False

        hits.append(now)
        return True

    def _prune(self, hits: Deque[float], now: float):
        # Drop timestamps that have left the window
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float):
        """Forget clients with no requests left in the window."""
        for client_id in list(self._hits):
            hits = self._hits[client_id]
            self._prune(hits, now)
            if not hits:
                del self._hits[client_id]
        self._last_sweep = now

    def tracked_clients(self) -> int:
        return len(self._hits)

    def reset(self):
        self._hits.clear()


def get_client_id(request: Request) -> str:
    """Identify the caller by remote address."""
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def enforce_rate_limit(request: Request):
    """Dependency rejecting requests beyond the configured rate limit."""
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return

    client_id = get_client_id(request)
    if not limiter.allow(client_id):
        logger.warning(f"Rate limit exceeded for {client_id}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please wait a moment before trying again.",
        )
