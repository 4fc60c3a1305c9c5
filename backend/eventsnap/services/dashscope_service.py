"""
EventSnap Backend — DashScope (Qwen-VL) Service Implementation
================================================================

What:  Concrete vision service calling Alibaba Cloud DashScope's multimodal
       generation endpoint.
Why:   Qwen-VL reads Chinese posters and notices well, which is what the
       Shortcuts client photographs.
How:   One awaited HTTPS POST via httpx carrying the image and a fixed
       extraction prompt; the answer text is pulled out of the response.
Who:   Built per request by the route dependency; called by ExtractionService.

Resilience:
    None on purpose at this layer: one attempt, no retry, no client-side
    timeout. A failed call fails the request.
"""

import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from eventsnap.exceptions import ExtractionError, MisconfiguredServerError, UpstreamError
from eventsnap.services.response_parser import extract_message_text
from eventsnap.services.vision_base import VisionService

logger = logging.getLogger(__name__)

GENERATION_PATH = "/api/v1/services/aigc/multimodal-generation/generation"

DEFAULT_BASE_URL = "https://dashscope.aliyuncs.com"
DEFAULT_MODEL = "qwen-vl-plus"

# Five fields, empty string when absent, pure JSON only. The example object
# keeps the model from wrapping the answer in prose.
EXTRACTION_PROMPT = (
    "Extract the following information from this image precisely and return it as JSON:\n"
    "1. title: event title\n"
    "2. content: main content\n"
    "3. location: event location\n"
    "4. time: event time (convert dates and times to a standard format)\n"
    "5. requirements: event requirements\n"
    "\n"
    "If an item does not exist, set it to an empty string. Return pure JSON only, "
    "with no other text. Example: "
    '{"title": "Meeting", "content": "Project discussion", "location": "Room A", '
    '"time": "2024-01-20 14:00", "requirements": "Bring documents"}'
)


class DashScopeService(VisionService):
    """
    DashScope multimodal-generation client.

    Configuration is injected, never read from globals at call time:
        api_key:   Bearer token; empty → MisconfiguredServerError per call
        base_url:  Scheme + host of the API
        model:     Qwen-VL model identifier
        use_async: Sends X-DashScope-Async: enable
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        use_async: bool = True,
        prompt: str = EXTRACTION_PROMPT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or ""
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.use_async = use_async
        self.prompt = prompt
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{GENERATION_PATH}"

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.use_async:
            headers["X-DashScope-Async"] = "enable"
        return headers

    def build_payload(self, image: str) -> Dict[str, Any]:
        """Request body: one user message holding [image item, prompt item]."""
        return {
            "model": self.model,
            "input": {
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"image": image},
                            {"text": self.prompt},
                        ],
                    }
                ]
            },
            "parameters": {"result_format": "message"},
        }

    async def extract_text(self, image: str) -> str:
        """
        Send the image to DashScope and return the answer text.

        Flow:
            1. Check credentials → MisconfiguredServerError (no call made)
            2. POST to the generation endpoint
            3. Non-2xx → UpstreamError (status + raw body, body only logged)
            4. Walk output.choices[0].message.content → ExtractionError on mismatch
        """
        if not self.is_configured():
            logger.error("API key is not configured")
            raise MisconfiguredServerError()

        logger.info("Calling DashScope: model=%s", self.model)
        start_time = time.perf_counter()

        # timeout=None: the request waits as long as the upstream takes
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            response = await client.post(
                self.endpoint,
                headers=self.build_headers(),
                json=self.build_payload(image),
            )

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not response.is_success:
            logger.error(
                "DashScope request failed after %.0fms: %d %s",
                duration_ms,
                response.status_code,
                response.text,
            )
            raise UpstreamError(status=response.status_code, body=response.text)

        # ValueError covers JSONDecodeError and UnicodeDecodeError on undecodable bytes
        try:
            result_data = response.json()
        except ValueError as e:
            logger.error("DashScope returned a non-JSON body: %s", response.text)
            raise ExtractionError(context={"decode_error": str(e)}) from e

        logger.info(
            "DashScope responded in %.0fms: %s",
            duration_ms,
            json.dumps(result_data, ensure_ascii=False),
        )

        return extract_message_text(result_data)
