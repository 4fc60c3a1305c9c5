"""
EventSnap Backend — Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Reports whether DashScope credentials are configured. It does not
       call DashScope: every upstream call costs quota.

Status levels:
    - healthy:  API key configured (HTTP 200)
    - degraded: API key missing; /api/process will answer 500 (HTTP 200)
"""

import logging
import time

from fastapi import APIRouter, Request

from eventsnap import __version__
from eventsnap.config import Settings
from eventsnap.schemas.extraction import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    app_settings: Settings = request.app.state.settings

    if app_settings.api_key_configured:
        overall, upstream = "healthy", "configured"
    else:
        overall, upstream = "degraded", "unconfigured"
        logger.warning("Health check: ALIYUN_API_KEY is not configured")

    return HealthResponse(
        status=overall,
        version=__version__,
        upstream=upstream,
        model=app_settings.dashscope_model,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
