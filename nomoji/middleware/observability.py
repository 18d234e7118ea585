"""Per-request observability: request IDs, timing, logging and analytics.

Unhandled exceptions from handlers are caught here, logged with traceback and
answered with the error envelope, so no raw server error escapes.
"""

from __future__ import annotations

import logging
import secrets
import string
import time

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from nomoji.config import get_settings
from nomoji.services.analytics import Analytics

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_request_id() -> str:
    """req_<epoch ms>_<9 random base-36 chars>."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


class PerformanceTracker:
    """Named timing marks relative to request start, in milliseconds."""

    def __init__(self) -> None:
        self.start = time.perf_counter()
        self.marks: dict[str, float] = {}

    def mark(self, name: str) -> None:
        self.marks[name] = time.perf_counter()

    def duration_ms(self, from_mark: str | None = None) -> float:
        start = self.marks.get(from_mark, self.start) if from_mark else self.start
        return (time.perf_counter() - start) * 1000

    def mark_duration_ms(self, start_mark: str, end_mark: str) -> float:
        if start_mark not in self.marks or end_mark not in self.marks:
            return 0.0
        return (self.marks[end_mark] - self.marks[start_mark]) * 1000

    def all_marks(self) -> dict[str, float]:
        return {name: (at - self.start) * 1000 for name, at in self.marks.items()}

    def server_timing(self) -> str:
        return ", ".join(f"{name};dur={ms:.1f}" for name, ms in self.all_marks().items())


class ObservabilityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, analytics: Analytics | None = None) -> None:
        super().__init__(app)
        self.analytics = analytics

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        analytics = self.analytics or Analytics()
        request_id = generate_request_id()
        perf = PerformanceTracker()
        request.state.request_id = request_id
        request.state.perf = perf

        method = request.method
        path = request.url.path
        user_agent = request.headers.get("user-agent") or "unknown"
        country = request.headers.get("cf-ipcountry") or "unknown"
        logger.info(
            "Request received: request_id=%s method=%s path=%s user_agent=%s",
            request_id,
            method,
            path,
            user_agent,
        )
        perf.mark("request_start")

        try:
            response = await call_next(request)
        except Exception as exc:
            perf.mark("error")
            duration = perf.duration_ms()
            logger.exception(
                "Request failed: request_id=%s method=%s path=%s duration_ms=%.1f",
                request_id,
                method,
                path,
                duration,
            )
            analytics.track_error(endpoint=path, error=str(exc) or type(exc).__name__, status_code=500)
            if get_settings().profile.expose_error_details:
                message = str(exc) or type(exc).__name__
            else:
                message = "Internal server error"
            response = JSONResponse(
                status_code=500,
                content={"success": False, "error": message, "requestId": request_id},
            )
            response.headers["X-Request-Id"] = request_id
            return response

        perf.mark("request_end")
        duration = perf.duration_ms()
        logger.info(
            "Request completed: request_id=%s method=%s path=%s status=%d duration_ms=%.1f",
            request_id,
            method,
            path,
            response.status_code,
            duration,
        )
        analytics.track_request(
            endpoint=path,
            method=method,
            status_code=response.status_code,
            duration_ms=round(duration, 3),
            user_id=request.path_params.get("user_id"),
            user_agent=user_agent,
            country=country,
        )

        for name, value in getattr(request.state, "rate_limit_headers", {}).items():
            response.headers.setdefault(name, value)
        response.headers["X-Request-Id"] = request_id
        response.headers["X-Response-Time"] = f"{round(duration)}ms"
        response.headers["Server-Timing"] = perf.server_timing()
        return response
