"""Backend reply parsing: fence trimming, structural decode, markdown failsafes."""

import logging
import re

from pydantic import ValidationError

from story_ai.errors import MalformedResponse
from story_ai.models import TurnResponse

logger = logging.getLogger(__name__)

_LEADING_FENCES = ("```json\n", "```JSON\n", "```\n")
_TRAILING_FENCE = "\n```"

_MARKDOWN_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_MARKDOWN_ITALIC_RE = re.compile(r"\*(.*?)\*")


def strip_fences(text: str) -> str:
    """Remove a leading ```json line and trailing ``` line when both are present.

    Only those exact markers are trimmed; anything else is left for the
    decoder to reject.
    """
    cleaned = text.strip()
    if not cleaned.endswith(_TRAILING_FENCE):
        return cleaned
    for fence in _LEADING_FENCES:
        if cleaned.startswith(fence):
            return cleaned[len(fence):-len(_TRAILING_FENCE)]
    return cleaned


def apply_markdown_failsafes(story: str) -> str:
    """Rewrite stray markdown emphasis into the markup subset.

    Bold runs first so ``**x**`` is not mistaken for two italic markers.
    """
    story = _MARKDOWN_BOLD_RE.sub(r"<strong>\1</strong>", story)
    return _MARKDOWN_ITALIC_RE.sub(r"<em>\1</em>", story)


def parse_turn_response(text: str) -> TurnResponse:
    """Decode raw backend output into a TurnResponse.

    Raises MalformedResponse with the decoder's message when the payload does
    not match the schema. No partial result is ever returned.
    """
    cleaned = strip_fences(text)
    try:
        parsed = TurnResponse.model_validate_json(cleaned)
    except ValidationError as e:
        logger.warning("Backend reply is not a valid turn response: %s", e.errors(include_url=False)[:3])
        raise MalformedResponse(str(e)) from e

    story = apply_markdown_failsafes(parsed.story_update.story)
    if story == parsed.story_update.story:
        return parsed
    update = parsed.story_update.model_copy(update={"story": story})
    return parsed.model_copy(update={"story_update": update})
