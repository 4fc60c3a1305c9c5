"""
EventSnap Backend — Extraction Service (Request Cycle Orchestrator)
=====================================================================

What:  Runs one image → upstream → parse → response cycle.
Why:   Keeps the route handler down to HTTP concerns.
How:   Composes a VisionService (the upstream call) with the answer parser.

Orchestration Flow (POST /api/process):
    ┌──────────┐    ┌──────────────┐    ┌───────────────┐    ┌──────────┐
    │  Route   │───▶│  DashScope   │───▶│  Parse answer │───▶│ Response │
    │ (guards) │    │  (one call)  │    │  ({...} JSON) │    │  (200)   │
    └──────────┘    └──────────────┘    └───────────────┘    └──────────┘

    On failure at any step the exception propagates to the handlers in
    main.py. Unknown exceptions are wrapped into ProcessingError here so
    every post-guard failure has the same body shape.

ExtractionService is stateless: identical inputs against an identical
upstream produce identical responses.
"""

import logging

from eventsnap.exceptions import EventSnapError, ProcessingError
from eventsnap.schemas.extraction import ProcessResponse
from eventsnap.services.response_parser import parse_extraction
from eventsnap.services.vision_base import VisionService

logger = logging.getLogger(__name__)


class ExtractionService:
    """
    Business logic for /api/process.

    Error Handling Strategy:
        EventSnapError subclasses propagate with their own type.
        Anything else is logged with its traceback and re-raised as a bare
        ProcessingError carrying the original message.
    """

    def __init__(self, vision: VisionService):
        self.vision = vision

    async def process(self, image: str) -> ProcessResponse:
        """
        Recognise the image and return the normalized success body.

        Raises:
            MisconfiguredServerError: No API key (before any upstream call)
            UpstreamError: Upstream answered non-2xx
            ExtractionError: No text item in the answer
            FormatError: No JSON block, or invalid JSON
            ProcessingError: Anything unexpected
        """
        try:
            extracted_text = await self.vision.extract_text(image)
            logger.info("Extracted text: %s", extracted_text)

            result = parse_extraction(extracted_text)
            response = ProcessResponse(success=True, data=result)

            logger.info("Final response: %s", response.model_dump_json())
            return response

        except EventSnapError:
            raise
        except Exception as e:
            logger.error("Unexpected error during processing: %s", str(e), exc_info=True)
            raise ProcessingError(
                message=str(e) or type(e).__name__,
                context={"original_error": type(e).__name__},
            ) from e
