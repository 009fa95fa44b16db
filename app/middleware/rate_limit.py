from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.settings import settings
from app.utils.db import RateLimitDdbError, rate_limit_hit
from app.utils.log import logger

# ─────────────────────────────────────────
# Config
# ─────────────────────────────────────────


@dataclass(frozen=True)
class LimitConfig:
    read_per_min: int
    write_per_min: int
    ai_per_min: int


# ─────────────────────────────────────────
# Middleware
# ─────────────────────────────────────────


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client fixed-window rate limiting.

    Three buckets: model-backed endpoints (transcription + extraction are paid
    per call), other writes, and reads. CORS preflights are never counted.
    Storage errors fail open.
    """

    def __init__(self, app):
        super().__init__(app)

        self.excluded_prefixes = settings.RATE_LIMIT_EXCLUDED_PREFIXES
        self.ai_paths = settings.RATE_LIMIT_AI_PATHS

        self.limits = LimitConfig(
            read_per_min=settings.RATE_LIMIT_READ_PER_MIN,
            write_per_min=settings.RATE_LIMIT_WRITE_PER_MIN,
            ai_per_min=settings.RATE_LIMIT_AI_PER_MIN,
        )

        self.ttl_seconds = settings.RATE_LIMIT_TTL_SECONDS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not settings.RATE_LIMIT_ENABLED or request.method.upper() == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        if any(path.startswith(prefix) for prefix in self.excluded_prefixes):
            return await call_next(request)

        bucket, limit = self._bucket_for(request)
        client_id = f"{bucket}:{self._identify_client(request)}"

        try:
            allowed, retry_after = rate_limit_hit(
                client_id=client_id,
                limit=limit,
                ttl_seconds=self.ttl_seconds,
            )
        except RateLimitDdbError:
            logger.warning(
                f"Rate limiter storage error; allowing {request.method} {path}"
            )
            return await call_next(request)

        if not allowed:
            logger.info(f"Rate limited {request.method} {path} ({bucket}), retry after {retry_after}s")
            return JSONResponse(
                {"error": "Rate limit exceeded. Please try again shortly."},
                status_code=429,
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)

    # ─────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────

    def _bucket_for(self, request: Request) -> tuple[str, int]:
        if request.url.path in self.ai_paths:
            return "ai", self.limits.ai_per_min
        if request.method.upper() in ("GET", "HEAD"):
            return "read", self.limits.read_per_min
        return "write", self.limits.write_per_min

    def _identify_client(self, request: Request) -> str:
        """
        Client IP (first X-Forwarded-For hop when behind a proxy) plus a
        user-agent digest. The digest must be stable across processes, since
        every instance shares the same counters.
        """
        xff = request.headers.get("x-forwarded-for")
        if xff:
            ip = xff.split(",")[0].strip()
        elif request.client:
            ip = request.client.host
        else:
            ip = "unknown"

        ua = request.headers.get("user-agent", "unknown")
        ua_hash = hashlib.blake2s(ua.encode(), digest_size=6).hexdigest()
        return f"ip:{ip}:ua:{ua_hash}"
