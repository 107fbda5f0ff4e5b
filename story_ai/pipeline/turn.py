"""Turn orchestration: one player action in, one story page out.

Per turn, strictly in order and under the session's lock:

  1. Narrator call with the system prompt + {game_state, user_action}.
  2. Parse the reply, repairing it through the backend when malformed.
  3. Validate proper nouns against the story text.
  4. Mark unmarked gained/lost items, then annotate proper nouns.
  5. Commit: merge state into the session and append the page.

A failed turn (backend unreachable, or a reply that stayed malformed) still
appends a page with the player's prompt and a bracketed explanation, so the
transcript stays in step with the player; the game state is not touched.
A failed *opening* turn raises StoryStartError instead and leaves the session
exactly as it was.
"""

from __future__ import annotations

import dataclasses
import html
import logging
import random

from story_ai.errors import InvalidAction, StoryStartError, UnrecoverableResponse
from story_ai.inspiration import InspirationSource
from story_ai.llm import LLM, LLMError
from story_ai.models import DEFAULT_MOOD_COLOR, StoryPage, TurnResponse, TurnResult
from story_ai.narrators import DEFAULT_GENRE, GENRES, roll_narrator
from story_ai.prompts import build_start_prompt, build_turn_prompt
from story_ai.session import SessionState

from .annotation import annotate_proper_nouns, mark_items
from .reconcile import commit_turn, record_failed_turn
from .retry import DEFAULT_ATTEMPTS, RetryCoordinator
from .validation import validate_proper_nouns

logger = logging.getLogger(__name__)

NARRATOR_STAGE = "narrator"
START_PROMPT = "Start"
RESTART_COMMAND = "restart"
DEFAULT_MAX_ACTION_WORDS = 15

BLOCKED_MESSAGE = "[The AI's response was blocked. Try something else.]"
INVALID_MESSAGE = "[The AI's response was not valid JSON: {error}]"


def is_restart(action: str) -> bool:
    return action.strip().lower() == RESTART_COMMAND


def check_action(action: str, max_words: int = DEFAULT_MAX_ACTION_WORDS) -> str:
    action = action.strip()
    if not action:
        raise InvalidAction("Response must not be empty.")
    if len(action.split()) > max_words:
        raise InvalidAction(f"Response must be {max_words} words or less.")
    return action


def render_turn(response: TurnResponse) -> str:
    """Validate nouns and return the fully annotated story text."""
    validated = validate_proper_nouns(response)
    update = validated.story_update
    nouns = validated.new_game_state.proper_nouns
    story = mark_items(update.story, update.items_added, update.items_removed, nouns)
    return annotate_proper_nouns(story, nouns)


async def _generate(llm: LLM, prompt: str, attempts: int) -> TurnResponse:
    raw = await llm(NARRATOR_STAGE, prompt)
    if not raw.strip():
        raise LLMError("LLM backend returned an empty completion")
    return await RetryCoordinator(llm, attempts).parse(raw)


async def start_story(
    session: SessionState,
    llm: LLM,
    *,
    genre: str,
    consequence_model: str,
    inspiration: InspirationSource | None = None,
    attempts: int = DEFAULT_ATTEMPTS,
    rng: random.Random | None = None,
) -> TurnResult:
    """Begin a new story, replacing whatever the session held before."""
    genre = genre if genre in GENRES else DEFAULT_GENRE
    consequence_model = consequence_model or "challenging"
    rng = rng or random.Random()

    async with session.lock:
        # Prompts are built from a draft so a failed start changes nothing.
        draft = dataclasses.replace(
            session,
            game_state=None,
            history=[],
            genre=genre,
            consequence_model=consequence_model,
            narrator=roll_narrator(genre, rng),
            historical=None,
            last_result=None,
        )
        seed = None
        if inspiration is not None:
            if genre == "historical-fiction":
                draft.historical = inspiration.pick_event(rng)
            else:
                seed = inspiration.pick(genre, rng)

        logger.info(
            "new story: session=%s author=%s genre=%s difficulty=%s",
            session.id, draft.narrator.author, genre, consequence_model,
        )
        try:
            response = await _generate(llm, build_start_prompt(draft, seed), attempts)
        except (LLMError, UnrecoverableResponse) as e:
            raise StoryStartError(f"The AI failed to start the story: {e}") from e

        story = render_turn(response)
        opening = draft.narrator.opening_line
        if opening and not story.startswith(opening):
            story = f"{opening}<br><br>{story}"

        session.game_state = None
        session.history = []
        session.genre = draft.genre
        session.consequence_model = draft.consequence_model
        session.narrator = draft.narrator
        session.historical = draft.historical
        page = StoryPage(prompt=START_PROMPT, response=story)
        commit_turn(session, response.new_game_state, page)

        session.last_result = TurnResult(
            page=page,
            mood_color=response.story_update.background_color,
            game_over=response.story_update.game_over,
            game_won=response.new_game_state.game_won,
        )
        return session.last_result


async def run_turn(
    session: SessionState,
    llm: LLM,
    action: str,
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    max_words: int = DEFAULT_MAX_ACTION_WORDS,
) -> TurnResult:
    """Play one action against the session's current story."""
    action = check_action(action, max_words)
    if not session.started:
        raise InvalidAction("No story in progress. Start a new story first.")

    async with session.lock:
        try:
            response = await _generate(llm, build_turn_prompt(session, action), attempts)
        except LLMError as e:
            logger.warning("session %s: turn failed, backend unavailable: %s", session.id, e)
            return _failed(session, action, BLOCKED_MESSAGE, e)
        except UnrecoverableResponse as e:
            logger.warning("session %s: turn failed, reply unrecoverable: %s", session.id, e)
            return _failed(session, action, INVALID_MESSAGE.format(error=html.escape(str(e))), e)

        page = StoryPage(prompt=action, response=render_turn(response))
        commit_turn(session, response.new_game_state, page)

        result = TurnResult(
            page=page,
            mood_color=response.story_update.background_color,
            game_over=response.story_update.game_over,
            game_won=response.new_game_state.game_won,
        )
        session.last_result = result
        if result.game_over or result.game_won:
            logger.info("session %s: story finished (won=%s)", session.id, result.game_won)
        return result


def _failed(session: SessionState, action: str, message: str, error: Exception) -> TurnResult:
    page = StoryPage(prompt=action, response=message)
    record_failed_turn(session, page)
    session.last_result = TurnResult(
        page=page,
        mood_color=DEFAULT_MOOD_COLOR,
        failed=True,
        error=str(error),
    )
    return session.last_result
