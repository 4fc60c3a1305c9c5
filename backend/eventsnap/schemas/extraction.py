"""
EventSnap Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract with the Shortcuts client.
Why:   Strict input validation, automatic serialization, and OpenAPI docs.
How:   The route validates the raw JSON body against ExtractionRequest and
       serializes ProcessResponse / error models as the response body.

Invariant:
    Every ExtractionResult field is always present and always a string.
    Missing or falsy values in the model answer become "".
"""

import json
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ExtractionRequest(BaseModel):
    """
    What:  Body of POST /api/process.
    Why Optional: A missing image is reported as a 400 with our own message,
           not as FastAPI's automatic 422.
    """
    image: Optional[str] = Field(
        default=None,
        description="Base64-encoded image bytes or a data URI (data:image/jpeg;base64,...)",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


RESULT_FIELDS = ("title", "content", "location", "time", "requirements")


class ExtractionResult(BaseModel):
    """
    What:  The five-field record recognised from the image.
    Who:   Built by the response parser; returned inside ProcessResponse.data.
    """
    title: str = Field(default="", description="Event title")
    content: str = Field(default="", description="Main content")
    location: str = Field(default="", description="Event location")
    time: str = Field(default="", description="Event time, normalized when it is a date-time")
    requirements: str = Field(default="", description="Requirements for attendees")

    @field_validator(*RESULT_FIELDS, mode="before")
    @classmethod
    def coerce_to_text(cls, v: Any) -> str:
        """Falsy → "", strings as-is, anything else rendered to text."""
        if not v:
            return ""
        if isinstance(v, str):
            return v
        if isinstance(v, (dict, list)):
            return json.dumps(v, ensure_ascii=False, separators=(",", ":"))
        return str(v)

    @classmethod
    def from_answer(cls, data: dict) -> "ExtractionResult":
        """Pick the known fields off a parsed model answer, ignoring the rest."""
        return cls(**{name: data.get(name) for name in RESULT_FIELDS})


class ProcessResponse(BaseModel):
    """
    What:  Success body of POST /api/process (HTTP 200).
    """
    success: bool = Field(default=True)
    data: ExtractionResult


class ProcessErrorResponse(BaseModel):
    """
    What:  Body for failures after the request guards (HTTP 500).
    Example:
        {"success": false, "error": "Processing failed: AI returned malformed format"}
    """
    success: bool = Field(default=False)
    error: str = Field(description="Short, client-safe failure description")


class ErrorResponse(BaseModel):
    """
    What:  Body for guard failures: wrong method (405), missing image (400),
           missing API key (500).
    """
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """
    What:  Health check response.
    Why no upstream probe: DashScope has no free endpoint; a probe would
           consume quota on every load balancer check.
    """
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    upstream: str = Field(description="DashScope credentials: configured, unconfigured")
    model: str = Field(description="Configured vision-language model")
    uptime_seconds: float = Field(description="Seconds since service started")
