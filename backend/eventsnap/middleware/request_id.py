"""
EventSnap Backend — Request ID Middleware
===========================================

What:  Assigns an id to each incoming request and returns it in X-Request-ID.
Why:   One /api/process call logs at half a dozen stages (start, upstream
       dump, extracted text, final response). A shared id ties them together.
How:   Reuses a client-sent X-Request-ID or generates a short UUID, stores it
       in a ContextVar read by the log filter in main.py.

The id lives in a response header only; response bodies stay identical for
identical requests.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID header when present
        2. Otherwise generate an 8-char UUID prefix
        3. Store in ContextVar and request.state
        4. Echo in the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
