import logging
import math
import threading
import time
from typing import Callable, Dict

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logger import logs


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed window rate limiting per client IP for every path under `prefix`.

    A client's window opens on its first request and lasts `window_ms`; once
    `max_requests` have been seen inside it, further requests get a 429 until
    the window closes.
    """

    def __init__(
        self,
        app,
        window_ms: int,
        max_requests: int,
        prefix: str = "/api",
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.window_seconds = window_ms / 1000.0
        self.max_requests = max_requests
        self.prefix = prefix
        self._clock = clock
        self._windows: Dict[str, Dict] = {}
        self._lock = threading.Lock()
        self._next_prune = clock() + self.window_seconds

    def _get_client_id(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _hit(self, client_id: str) -> Dict:
        """Count one request and return the client's window after counting."""
        now = self._clock()
        with self._lock:
            if now >= self._next_prune:
                self._prune(now)
            window = self._windows.get(client_id)
            if window is None or now >= window["reset_at"]:
                window = {"count": 0, "reset_at": now + self.window_seconds}
                self._windows[client_id] = window
            window["count"] += 1
            return dict(window, now=now)

    def _prune(self, now: float):
        """Drop closed windows; called with the lock held, at most once per window."""
        expired = [cid for cid, window in self._windows.items() if now >= window["reset_at"]]
        for cid in expired:
            del self._windows[cid]
        self._next_prune = now + self.window_seconds

    def _applies_to(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + "/")

    async def dispatch(self, request: Request, call_next):
        if not self._applies_to(request.url.path):
            return await call_next(request)

        client_id = self._get_client_id(request)
        window = self._hit(client_id)
        remaining = max(self.max_requests - window["count"], 0)
        reset_in = max(math.ceil(window["reset_at"] - window["now"]), 0)
        headers = {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(reset_in),
        }

        if window["count"] > self.max_requests:
            logs.log(logging.WARNING, f"Rate limit exceeded for {client_id} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests, please try again later."},
                headers={**headers, "Retry-After": str(reset_in)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the usual hardening headers to every response."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "Referrer-Policy": "no-referrer",
        "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
        "Cross-Origin-Resource-Policy": "same-origin",
        "X-DNS-Prefetch-Control": "off",
    }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects requests whose declared body is larger than `max_bytes`."""

    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            return JSONResponse(status_code=413, content={"error": "Request entity too large"})
        return await call_next(request)
