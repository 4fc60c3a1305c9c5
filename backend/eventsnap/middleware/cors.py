"""
EventSnap Backend — CORS Middleware
=====================================

What:  Attaches the CORS headers to every response and answers preflight.
Why:   The caller is an iPhone Shortcuts automation (and occasionally a
       browser page); both expect the headers on every response, including
       405/400/500 errors. Starlette's CORSMiddleware only adds them when an
       Origin header is present and only answers fully-formed preflights.
How:   OPTIONS on any path → 200 with an empty body. Every other response
       gets the three headers before it leaves the app.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def apply_cors_headers(response: Response) -> Response:
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Sets Access-Control-Allow-* on every response; short-circuits OPTIONS.

    Preflight never reaches routing, so the body of an OPTIONS request is
    never read.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return apply_cors_headers(Response(status_code=200))

        response = await call_next(request)
        return apply_cors_headers(response)
