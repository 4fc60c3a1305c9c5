"""
EventSnap Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for every failure of the
       /api/process cycle.
Why:   Each failure kind maps to one HTTP status and one body shape. Raising
       typed exceptions and translating them at a single boundary (the
       handlers registered in main.py) keeps the services free of HTTP code.
How:   Each exception carries a message, an optional context dict and the
       HTTP status code it maps to.

Exception Hierarchy:
    EventSnapError (base)
    ├── RequestRejectedError             body: {"error": message}
    │   ├── MethodNotAllowedError        → 405
    │   ├── MissingPayloadError          → 400
    │   ├── InvalidPayloadError          → 400
    │   └── MisconfiguredServerError     → 500
    └── ProcessingError                  body: {"success": false, "error": "Processing failed: ..."}
        ├── UpstreamError                → 500 (DashScope returned non-2xx)
        ├── ExtractionError              → 500 (no text in the answer)
        └── FormatError                  → 500 (no JSON / invalid JSON in the text)

    A bare ProcessingError is the "unknown error" kind: anything unexpected
    raised during the cycle is wrapped into one by ExtractionService.
"""

from typing import Any, Dict, Optional

METHOD_NOT_ALLOWED_MESSAGE = "Only POST requests are supported"
MISSING_IMAGE_MESSAGE = "No image data received"
INVALID_IMAGE_MESSAGE = "Invalid image data: expected a base64 string or data URI"
MISCONFIGURED_MESSAGE = "Server configuration error"
PROCESSING_FAILED_PREFIX = "Processing failed"


class EventSnapError(Exception):
    """
    Base exception for all EventSnap application errors.

    Attributes:
        message:     User-facing error description (safe to return in API response)
        context:     Additional debug info (logged but NOT returned to client)
        status_code: HTTP status the boundary responds with
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


# ══════════════════════════════════════════════════════════════════════════
# Guard failures: raised before any upstream call
# ══════════════════════════════════════════════════════════════════════════


class RequestRejectedError(EventSnapError):
    """
    Raised by the early guards of the request cycle.

    HTTP body: {"error": message}
    """


class MethodNotAllowedError(RequestRejectedError):
    """Anything other than POST or OPTIONS. HTTP 405."""

    status_code = 405

    def __init__(self, method: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if method:
            ctx["method"] = method
        super().__init__(message=METHOD_NOT_ALLOWED_MESSAGE, context=ctx)


class MissingPayloadError(RequestRejectedError):
    """
    Raised when a POST body carries no usable `image` field.

    When:    Field absent or falsy, or the body is not a JSON object.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=MISSING_IMAGE_MESSAGE, context=context)


class InvalidPayloadError(RequestRejectedError):
    """The `image` field is present and truthy but not a string. HTTP 400."""

    status_code = 400

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=INVALID_IMAGE_MESSAGE, context=context)


class MisconfiguredServerError(RequestRejectedError):
    """
    Raised when the DashScope API key is not configured.

    When:    Checked per request, before the upstream call.
    HTTP:    500 Internal Server Error
    Security: The response never says which setting is missing; the log does.
    """

    status_code = 500

    def __init__(self, setting: str = "ALIYUN_API_KEY", context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["setting"] = setting
        super().__init__(message=MISCONFIGURED_MESSAGE, context=ctx)


# ══════════════════════════════════════════════════════════════════════════
# Processing failures: raised once the upstream cycle has started
# ══════════════════════════════════════════════════════════════════════════


class ProcessingError(EventSnapError):
    """
    Base for every failure after the guards, and the catch-all kind itself.

    HTTP:    500
    Body:    {"success": false, "error": "Processing failed: <message>"}
    """

    @property
    def public_message(self) -> str:
        return f"{PROCESSING_FAILED_PREFIX}: {self.message}"


class UpstreamError(ProcessingError):
    """
    Raised when DashScope answers with a non-2xx status.

    The raw response body is kept in `body` (and in context) for logging.
    Only the status code reaches the client.
    """

    def __init__(
        self,
        status: int,
        body: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["upstream_status"] = status
        super().__init__(message=f"Upstream API request failed: {status}", context=ctx)
        self.status = status
        self.body = body


class ExtractionError(ProcessingError):
    """Raised when no text item can be found in the upstream answer."""

    def __init__(
        self,
        message: str = "AI processing failed: unable to extract information",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FormatError(ProcessingError):
    """
    Raised when the answer text does not carry a usable JSON object.

    Two flavours, distinguished by message:
        - no {...} block in the text      → "AI returned malformed format"
        - the block is not valid JSON     → "AI returned malformed data"
    """

    MALFORMED_FORMAT = "AI returned malformed format"
    MALFORMED_DATA = "AI returned malformed data"

    def __init__(
        self,
        message: str = MALFORMED_FORMAT,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
