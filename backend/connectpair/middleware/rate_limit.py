"""
ConnectPair Backend: Rate Limiting Middleware
==============================================

What:  Per-IP request ceiling applied to every form and API route.
How:   `SlidingWindowCounter` keeps a deque of hit times per client. A hit
       is refused once the client already has `limit` hits younger than
       `window` seconds; the refusal carries how long until the oldest one
       expires.
When:  Outermost middleware, so a refused request costs no other work.

Default ceiling: 100 requests per 15 minutes per IP.

Counters live in process memory. Several uvicorn workers each keep their
own, so the effective ceiling is per worker.
"""

import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from connectpair.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class SlidingWindowCounter:
    """
    Hit counter over a moving time window, keyed by client.

    hit() returns None when the hit is accepted (and records it), or the
    number of seconds the client has to wait when it is refused. Every
    `prune_every` accepted hits, clients with nothing left in the window are
    dropped, so the scan cost is spread over that many requests.
    """

    def __init__(
        self,
        limit: int,
        window: float,
        clock: Callable[[], float] = time.monotonic,
        prune_every: int = 1000,
    ):
        self.limit = limit
        self.window = window
        self.clock = clock
        self.prune_every = prune_every
        self._hits: Dict[str, Deque[float]] = {}
        self._accepted = 0

    def hit(self, key: str) -> Optional[int]:
        now = self.clock()
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= now - self.window:
            hits.popleft()

        if len(hits) >= self.limit:
            return max(1, math.ceil(hits[0] + self.window - now))

        hits.append(now)
        self._accepted += 1
        if self._accepted % self.prune_every == 0:
            self.prune()
        return None

    def prune(self) -> int:
        """Forget clients with no hit left in the window. Returns how many."""
        horizon = self.clock() - self.window
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= horizon]
        for key in idle:
            del self._hits[key]
        if idle:
            logger.debug("Pruned %d idle rate limit entries", len(idle))
        return len(idle)

    def __len__(self) -> int:
        return len(self._hits)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Refuses requests over the per-IP ceiling with HTTP 429.

    Not counted:
        /health for uptime probes, and the API documentation pages.

    Response when refused:
        429, `Retry-After: <seconds>`,
        {"success": false, "message": "Too many requests from this IP, ..."}
    """

    EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})

    def __init__(self, app, max_requests: int = 100, window_seconds: int = 900, **kwargs):
        super().__init__(app, **kwargs)
        self.counter = SlidingWindowCounter(limit=max_requests, window=window_seconds)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        retry_after = self.counter.hit(client_ip)

        if retry_after is not None:
            exc = RateLimitExceededError(
                retry_after=retry_after,
                context={"client_ip": client_ip, "path": request.url.path},
            )
            logger.warning(
                "Refusing %s %s from %s: more than %d requests in %ds (retry in %ds)",
                request.method,
                request.url.path,
                client_ip,
                self.counter.limit,
                self.counter.window,
                retry_after,
            )
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": exc.message},
                headers={"Retry-After": str(exc.retry_after)},
            )

        return await call_next(request)
