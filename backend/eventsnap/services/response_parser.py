"""
EventSnap Backend — Model Answer Parser
=========================================

What:  Turns the DashScope response payload into an ExtractionResult.
How:   Three small steps, each failing with a typed error:

    payload ──extract_message_text──▶ answer text ──find_json_block──▶ "{...}"
            (ExtractionError)                      (FormatError)
                                   ──parse_extraction──▶ ExtractionResult
                                                         (FormatError)

Expected payload shape:
    {"output": {"choices": [{"message": {"content": [{"text": "..."}, ...]}}]}}

The JSON locator is a greedy `{` ... last `}` match. It misfires when the
model emits two JSON-like blocks or braces in surrounding prose; that is
accepted as long as the prompt asks for pure JSON.
"""

import json
import logging
import re
from typing import Any, Optional

from eventsnap.exceptions import ExtractionError, FormatError
from eventsnap.schemas.extraction import ExtractionResult

logger = logging.getLogger(__name__)

JSON_BLOCK_PATTERN = re.compile(r"\{[\s\S]*\}")


def _get(value: Any, key: str) -> Optional[Any]:
    if isinstance(value, dict):
        return value.get(key)
    return None


def _first(value: Any) -> Optional[Any]:
    if isinstance(value, list) and value:
        return value[0]
    return None


def extract_message_text(payload: Any) -> str:
    """
    Return the first non-empty `text` item of output.choices[0].message.content.

    Any shape mismatch along the chain (missing key, wrong type, empty list)
    ends in ExtractionError instead of a KeyError/TypeError.
    """
    message = _get(_first(_get(_get(payload, "output"), "choices")), "message")
    content = _get(message, "content")

    if isinstance(content, list):
        for item in content:
            text = _get(item, "text")
            if isinstance(text, str) and text:
                return text

    logger.error("Unable to extract text from upstream response")
    raise ExtractionError()


def find_json_block(text: str) -> str:
    """Return the greedy {...} substring of the answer text."""
    match = JSON_BLOCK_PATTERN.search(text)
    if not match:
        logger.error("No JSON data found in answer: %s", text)
        raise FormatError(FormatError.MALFORMED_FORMAT)
    return match.group(0)


def parse_extraction(text: str) -> ExtractionResult:
    """
    Parse the model answer text into the five-field record.

    Raises:
        FormatError: no {...} block, or the block is not valid JSON.
    """
    json_string = find_json_block(text)

    try:
        parsed = json.loads(json_string)
    except json.JSONDecodeError as e:
        # Parse error and raw block stay in the log; the client gets a short message
        logger.error("JSON parse error: %s | raw text: %s", e, json_string)
        raise FormatError(
            FormatError.MALFORMED_DATA,
            context={"parse_error": str(e)},
        ) from e

    return ExtractionResult.from_answer(parsed)
