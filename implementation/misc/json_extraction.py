"""
Tolerant JSON recovery from raw LLM text.

Models asked for "pure JSON" still wrap their answer in markdown fences or a
sentence of commentary often enough that a plain json.loads is not usable.
"""

import json
import logging
import re
from typing import Any, Optional

from implementation.classes.errors import MalformedModelOutput

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)
_PREVIEW_CHARS = 200


def strip_code_fences(text: str) -> str:
    """Remove every ``` / ```json marker anywhere in the text and trim."""
    return _FENCE_PATTERN.sub("", text).strip()


def _loads_object(candidate: str) -> Optional[dict[str, Any]]:
    """Parse candidate text, returning None unless it is a JSON object."""
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_json(raw_text: str) -> dict[str, Any]:
    """
    Recover a JSON object from model output.

    Attempts, in order:
        1. Strip code fences and parse the whole text.
        2. Parse the slice from the first '{' to the last '}'.

    Args:
        raw_text: Raw completion text.

    Returns:
        The parsed JSON object.

    Raises:
        MalformedModelOutput: if neither attempt yields a JSON object.
    """
    cleaned = strip_code_fences(raw_text or "")

    parsed = _loads_object(cleaned)
    if parsed is not None:
        return parsed

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        parsed = _loads_object(cleaned[start:end + 1])
        if parsed is not None:
            logger.debug("Recovered JSON object from chars %d-%d of model output", start, end)
            return parsed

    logger.warning("No JSON object recoverable from model output: %r", cleaned[:_PREVIEW_CHARS])
    raise MalformedModelOutput("Invalid JSON returned by model")
