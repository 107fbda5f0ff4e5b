"""Bounded, backend-assisted repair of malformed replies.

The backend is unreliable at strict JSON. Instead of guessing locally, the
broken text is sent back with a "please fix this JSON" instruction, up to
``attempts`` times. Each attempt sends the most recent broken text: the
original first, then the backend's own previous (still broken) correction.

An upstream failure uses up an attempt but leaves the text to repair as it
was. Cancellation is not intercepted: a cancelled request abandons the
remaining attempts and nothing downstream runs.
"""

import logging

from story_ai.errors import MalformedResponse, UnrecoverableResponse
from story_ai.llm import LLM, LLMError
from story_ai.models import TurnResponse
from story_ai.prompts import build_repair_prompt

from .parsing import parse_turn_response

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3
REPAIR_STAGE = "json_repair"


class RetryCoordinator:
    def __init__(self, llm: LLM, attempts: int = DEFAULT_ATTEMPTS) -> None:
        self._llm = llm
        self._attempts = attempts

    async def parse(self, raw: str) -> TurnResponse:
        """Parse ``raw``, falling back to the repair loop when it is malformed.

        Raises UnrecoverableResponse once every attempt is used up.
        """
        try:
            return parse_turn_response(raw)
        except MalformedResponse as e:
            logger.warning("Initial parse failed, asking the backend to repair it: %s", e)
            return await self.repair(raw, e)

    async def repair(self, raw: str, error: Exception) -> TurnResponse:
        last_error: Exception = error
        for attempt in range(1, self._attempts + 1):
            try:
                corrected = await self._llm(REPAIR_STAGE, build_repair_prompt(raw))
            except LLMError as e:
                logger.warning("Repair attempt %d/%d: backend call failed: %s", attempt, self._attempts, e)
                last_error = e
                continue
            if not corrected.strip():
                logger.warning("Repair attempt %d/%d: backend returned nothing", attempt, self._attempts)
                last_error = LLMError("LLM backend returned an empty completion")
                continue

            try:
                parsed = parse_turn_response(corrected)
            except MalformedResponse as e:
                logger.warning("Repair attempt %d/%d still invalid: %s", attempt, self._attempts, e)
                last_error = e
                raw = corrected
                continue

            logger.info("Backend repaired its reply on attempt %d", attempt)
            return parsed

        raise UnrecoverableResponse(
            f"failed to parse response after {self._attempts} attempts"
        ) from last_error
