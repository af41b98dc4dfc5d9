"""Request context middleware: single deep middleware for observability and rate limiting.

Responsibilities (all handled in one pass, not separate middlewares):
- Generate or propagate ``X-Request-ID`` header
- Measure request duration
- Log every request/response as structured JSON
- Enforce per-client rate limiting through the injected ``RateLimiter``
- Attach security headers to every response
"""

import logging
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from ..core.logging_config import request_id_var
from ..core.rate_limiter import RateLimiter
from ..exceptions import RateLimitedError

logger = logging.getLogger(__name__)

# Paths that bypass rate limiting (health probes should never be throttled).
_EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "img-src 'self' data: https:; "
        "connect-src 'self' https://api.github.com https://generativelanguage.googleapis.com; "
        "frame-ancestors 'none'"
    ),
}


def _client_key(request: Request) -> str:
    """Derive a rate-limit key from the request.

    Uses the ``X-Forwarded-For`` header when behind a proxy, otherwise the
    direct client IP.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Single middleware handling request-id, timing, logging, rate limiting and security headers."""

    def __init__(self, app: ASGIApp, rate_limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self.rate_limiter = rate_limiter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # --- Request ID ---
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        # --- Rate limiting ---
        if self.rate_limiter is not None and request.url.path not in _EXEMPT_PATHS:
            key = _client_key(request)
            if not self.rate_limiter.allow(key):
                retry_after = self.rate_limiter.retry_after(key)
                logger.warning(
                    "Rate limit exceeded",
                    extra={"client": key, "path": request.url.path, "retry_after": round(retry_after, 1)},
                )
                error = RateLimitedError(retry_after)
                response = JSONResponse(
                    status_code=error.status_code,
                    content=error.to_dict(),
                    headers={
                        "Retry-After": str(int(retry_after) + 1),
                        "X-Request-ID": rid,
                    },
                )
                response.headers.update(SECURITY_HEADERS)
                return response

        # --- Timing ---
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        # --- Response headers ---
        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)

        # --- Structured request log ---
        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        return response
