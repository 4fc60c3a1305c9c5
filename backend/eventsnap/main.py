"""
EventSnap Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes logging setup, middleware registration, route mounting,
       and the error boundary in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn eventsnap.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  CORS        │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────┐ ┌────────────────────────┐  │
    │  │ POST /api/process  │ │ GET /health            │  │
    │  └────────────────────┘ └────────────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Rejected→{error} │ Processing→{success,error}│   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eventsnap import __version__
from eventsnap.config import Settings, settings
from eventsnap.exceptions import (
    PROCESSING_FAILED_PREFIX,
    MethodNotAllowedError,
    ProcessingError,
    RequestRejectedError,
)
from eventsnap.middleware.cors import CORSHeadersMiddleware, apply_cors_headers
from eventsnap.middleware.logging import RequestLoggingMiddleware
from eventsnap.middleware.request_id import RequestIDMiddleware, request_id_var
from eventsnap.routes import health, process

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

class RequestIDFilter(logging.Filter):
    """Stamps every record with the current request id ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        return True


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s
    When:   Called once during app startup, before anything logs.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, configuration check. Shutdown: log only (no resources
    outlive a request).
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("EventSnap Backend starting up...")

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: /api/process reports the missing key per request
        logger.error("Configuration error: %s", str(e))

    logger.info("Upstream: %s (model=%s)", app_settings.dashscope_base_url, app_settings.dashscope_model)
    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("EventSnap Backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    The single error boundary of the request cycle.

    Handler hierarchy:
        RequestRejectedError    → exc.status_code, {"error": message}
        ProcessingError         → 500, {"success": false, "error": "Processing failed: ..."}
        Starlette 405           → 405, {"error": "Only POST requests are supported"}
        Starlette other         → exc.status_code, {"error": detail}
        Exception (fallback)    → 500, processing body, CORS headers attached here

    Diagnostic context is logged, never returned.
    """

    @app.exception_handler(RequestRejectedError)
    async def handle_rejected(request: Request, exc: RequestRejectedError):
        """Guard failure before any upstream call."""
        logger.warning("Request rejected (%d): %s | Context: %s", exc.status_code, exc.message, exc.context)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(ProcessingError)
    async def handle_processing_error(request: Request, exc: ProcessingError):
        """Upstream, extraction, format or unknown failure."""
        logger.error("Error during processing: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.public_message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Routing errors raised by Starlette itself (405 on a known path, 404)."""
        headers = getattr(exc, "headers", None)
        if exc.status_code == 405:
            rejected = MethodNotAllowedError(request.method, context={"path": request.url.path})
            logger.warning("Method not allowed: %s | Context: %s", rejected.message, rejected.context)
            return JSONResponse(
                status_code=rejected.status_code,
                content={"error": rejected.message},
                headers=headers,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Runs outside the middleware stack, so the CORS headers are added here.
        """
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        response = JSONResponse(
            status_code=500,
            content={"success": False, "error": f"{PROCESSING_FAILED_PREFIX}: {exc}"},
        )
        return apply_cors_headers(response)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to run with. Defaults to the environment-loaded
                      singleton; tests pass their own.
    """
    app = FastAPI(
        title="EventSnap API",
        description=(
            "Recognises event posters and notices with Qwen-VL and returns "
            "title, content, location, time and requirements as JSON."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings or settings

    # Middleware executes in REVERSE order of addition:
    # CORS → RequestID → Logging → route
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(CORSHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(process.router)
    app.include_router(health.router)

    return app


app = create_app()
