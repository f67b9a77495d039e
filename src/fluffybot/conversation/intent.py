import json
import logging
import re
from pydantic import ValidationError
from fluffybot.models.conversation import ResponderIntent


logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?i:json)?\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fence(text: str) -> str:
    """Remove a single ```/```json wrapper around the whole reply, if present."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    stripped = _FENCE_OPEN.sub("", stripped, count=1)
    stripped = _FENCE_CLOSE.sub("", stripped, count=1)
    return stripped.strip()


def parse_intent(text: str) -> ResponderIntent | None:
    """Parse the model's reply into an intent; None when it breaks the protocol."""
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse LLM response as JSON: {e}")
        return None

    if not isinstance(data, dict):
        logger.error(f"LLM response is not a JSON object: {type(data).__name__}")
        return None

    try:
        return ResponderIntent(**data)
    except ValidationError as e:
        logger.error(f"Unknown or incomplete LLM response: {e}")
        return None
