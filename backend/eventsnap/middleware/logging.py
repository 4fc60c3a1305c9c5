"""
EventSnap Backend — Access Log Middleware
===========================================

What:  One access line per HTTP request: method, path, status, duration and
       the size of the uploaded body.
Why:   /api/process latency is dominated by the upstream call (several
       seconds) and by the image size; the access line makes slow or
       failing calls easy to spot.

The request id is not part of the message: RequestIDFilter (main.py) stamps
it on every record, this one included.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, body size, client IP
    ❌ Don't log here: the request body (a full base64 image)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("eventsnap.access")

# Probed every few seconds by the platform; not worth a line each
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, otherwise INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Times the downstream call and writes the access line once it returns."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            level_for_status(response.status_code),
            "%s %s → %d in %.0fms (body=%sB, client=%s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.headers.get("content-length", "0"),
            request.client.host if request.client else "unknown",
        )
        return response
