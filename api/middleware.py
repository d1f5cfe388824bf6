"""Perimeter middleware: rate limiting, response caching, request logging, security headers."""

import time
from collections import defaultdict, deque
from dataclasses import dataclass

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from core.protocols import RequestLogger
from core.redact import Redactor


def client_ip(request: Request) -> str:
    """Best-effort client address used as the rate-limit key."""
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window limiter keyed by client IP, scoped to a path prefix."""

    def __init__(
        self,
        app: ASGIApp,
        prefix: str,
        limit: int,
        window_seconds: int,
        message: str = "Too many requests from this IP, please try again later.",
    ) -> None:
        super().__init__(app)
        self.prefix = prefix
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message
        self.store: dict[str, deque[float]] = defaultdict(deque)
        self._last_sweep = time.monotonic()

    async def dispatch(self, request: Request, call_next) -> Response:
        if not request.url.path.startswith(self.prefix):
            return await call_next(request)

        now = time.monotonic()
        self._sweep(now)
        key = client_ip(request)
        dq = self.store[key]
        while dq and now - dq[0] >= self.window_seconds:
            dq.popleft()
        if len(dq) >= self.limit:
            retry_after = max(1, int(self.window_seconds - (now - dq[0])))
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": self.message},
                headers={
                    "Retry-After": str(retry_after),
                    "RateLimit-Limit": str(self.limit),
                    "RateLimit-Remaining": "0",
                },
            )
        dq.append(now)
        remaining = self.limit - len(dq)

        response = await call_next(request)
        response.headers.setdefault("RateLimit-Limit", str(self.limit))
        response.headers.setdefault("RateLimit-Remaining", str(remaining))
        return response

    def _sweep(self, now: float) -> None:
        """Forget clients with no request inside the window, at most once per window."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        idle = [key for key, dq in self.store.items() if not dq or now - dq[-1] >= self.window_seconds]
        for key in idle:
            del self.store[key]


@dataclass
class CacheEntry:
    """Cached response entry."""

    body: bytes
    status_code: int
    media_type: str
    created_at: float


class ResponseCacheMiddleware(BaseHTTPMiddleware):
    """Fixed-TTL cache of successful GET responses for selected paths."""

    def __init__(self, app: ASGIApp, paths: tuple[str, ...], ttl_seconds: int) -> None:
        super().__init__(app)
        self.paths = paths
        self.ttl_seconds = ttl_seconds
        self._cache: dict[str, CacheEntry] = {}

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method != "GET" or request.url.path not in self.paths or self.ttl_seconds <= 0:
            return await call_next(request)

        key = request.url.path
        entry = self._cache.get(key)
        if entry is not None:
            if self._fresh(entry):
                return Response(
                    content=entry.body,
                    status_code=entry.status_code,
                    media_type=entry.media_type,
                    headers={"X-Cache": "HIT"},
                )
            del self._cache[key]

        response = await call_next(request)
        if response.status_code != 200:
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        media_type = response.headers.get("content-type", "application/json")
        self._prune()
        self._cache[key] = CacheEntry(body, response.status_code, media_type, time.monotonic())
        headers = {
            k: v for k, v in response.headers.items() if k.lower() not in ("content-length", "content-type")
        }
        headers["X-Cache"] = "MISS"
        return Response(
            content=body,
            status_code=response.status_code,
            media_type=media_type,
            headers=headers,
        )

    def _fresh(self, entry: CacheEntry) -> bool:
        return time.monotonic() - entry.created_at < self.ttl_seconds

    def _prune(self) -> None:
        for key in [key for key, entry in self._cache.items() if not self._fresh(entry)]:
            del self._cache[key]


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP and user agent for every request."""

    def __init__(self, app: ASGIApp, logger: RequestLogger, redactor: Redactor) -> None:
        super().__init__(app)
        self._logger = logger
        self._redactor = redactor

    async def dispatch(self, request: Request, call_next) -> Response:
        self._logger.log_request(
            request.method,
            self._redactor.redact(request.url.path),
            client_ip(request),
            self._redactor.redact(request.headers.get("user-agent", "Unknown")),
        )
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Conservative security headers for an API surface."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; style-src 'self' 'unsafe-inline'; script-src 'self'; img-src 'self' data: https:",
        )
        return response
