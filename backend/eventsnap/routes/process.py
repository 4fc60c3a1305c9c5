"""
EventSnap Backend — Process Route Handler
===========================================

What:  Handles POST /api/process: image in, five-field record out.
Who:   Called by the iPhone Shortcuts automation.
When:  Each time the user shares a photo of a poster or notice.

Request Flow:
    1. Client sends JSON {"image": "<base64 or data URI>"}
    2. Missing/empty or non-string image → 400 (no upstream call)
    3. ExtractionService: API key check → DashScope → parse answer
    4. Return 200 {"success": true, "data": {...}}
    5. On error: global exception handlers format the response

The body is read by hand instead of through a Pydantic parameter so that a
missing image yields our 400 message, not FastAPI's automatic 422.
"""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from eventsnap.config import Settings
from eventsnap.exceptions import InvalidPayloadError, MissingPayloadError
from eventsnap.schemas.extraction import (
    ErrorResponse,
    ExtractionRequest,
    ProcessErrorResponse,
    ProcessResponse,
)
from eventsnap.services.dashscope_service import DashScopeService
from eventsnap.services.extraction_service import ExtractionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Process"])


def get_extraction_service(request: Request) -> ExtractionService:
    """
    Build the per-request service from the settings the app was created with.

    Tests override this dependency to point DashScopeService at a stub
    transport.
    """
    app_settings: Settings = request.app.state.settings
    # The .env.example placeholder counts as "not configured"
    api_key = app_settings.aliyun_api_key if app_settings.api_key_configured else ""
    vision = DashScopeService(
        api_key=api_key,
        base_url=app_settings.dashscope_base_url,
        model=app_settings.dashscope_model,
        use_async=app_settings.dashscope_async,
    )
    return ExtractionService(vision)


async def read_image(request: Request) -> str:
    """
    Pull a non-empty `image` string out of the JSON body.

    Raises:
        MissingPayloadError: unreadable body, or `image` absent or falsy
        InvalidPayloadError: `image` present but not a string
    """
    try:
        body = await request.json()
    except ValueError as e:
        logger.error("No image data received: unreadable body (%s)", type(e).__name__)
        raise MissingPayloadError(context={"reason": type(e).__name__})

    image = body.get("image") if isinstance(body, dict) else None
    if image and not isinstance(image, str):
        logger.error("Invalid image data: got %s", type(image).__name__)
        raise InvalidPayloadError(context={"image_type": type(image).__name__})

    try:
        payload = ExtractionRequest.model_validate(body)
    except ValidationError as e:
        logger.error("No image data received: unreadable body (%s)", type(e).__name__)
        raise MissingPayloadError(context={"reason": type(e).__name__})

    if not payload.image:
        logger.error("No image data received")
        raise MissingPayloadError()

    return payload.image


@router.post(
    "/process",
    status_code=200,
    response_model=ProcessResponse,
    responses={
        200: {"description": "Image recognised", "model": ProcessResponse},
        400: {"description": "No image, or a non-string image, in the request body", "model": ErrorResponse},
        405: {"description": "Method other than POST/OPTIONS", "model": ErrorResponse},
        500: {
            "description": "Server misconfigured, upstream failure or unusable AI answer",
            "model": ProcessErrorResponse,
        },
    },
    summary="Extract event details from an image",
    description=(
        "Send a base64-encoded image (or data URI). The image is recognised by a "
        "Qwen-VL model and the answer is normalized to title, content, location, "
        "time and requirements. Missing fields are returned as empty strings."
    ),
)
async def process_image(
    request: Request,
    service: ExtractionService = Depends(get_extraction_service),
) -> ProcessResponse:
    logger.info("Start processing image")

    image = await read_image(request)
    return await service.process(image)
