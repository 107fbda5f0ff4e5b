"""Merge a turn's state into the session.

The backend returns a complete new game state each turn and it replaces the
session's state wholesale, with one exception: the proper-noun collection.
Known nouns (keyed by canonical name) are kept exactly as first recorded and
new ones are appended, so the glossary of an exported story never loses an
entry and the collection never shrinks.
"""

import logging

from story_ai.models import GameState, ProperNoun, StoryPage
from story_ai.session import SessionState

logger = logging.getLogger(__name__)


def merge_proper_nouns(
    existing: list[ProperNoun], incoming: list[ProperNoun]
) -> list[ProperNoun]:
    merged = list(existing)
    known = {n.noun for n in existing}
    for noun in incoming:
        if noun.blank:
            continue
        if noun.noun not in known:
            merged.append(noun)
            known.add(noun.noun)
    return merged


def merge_game_state(current: GameState | None, incoming: GameState) -> GameState:
    """Return the session's next state. Neither argument is modified.

    ``incoming`` must be the state as the backend returned it, not the copy the
    noun validator corrected for rendering.
    """
    existing = current.proper_nouns if current is not None else []
    nouns = merge_proper_nouns(existing, incoming.proper_nouns)
    merged = incoming.model_copy(deep=True)
    merged.proper_nouns = [n.model_copy() for n in nouns]
    return merged


def commit_turn(session: SessionState, incoming: GameState, page: StoryPage) -> None:
    """Apply a successful turn to the session: merged state, then the new page."""
    before = len(session.proper_nouns)
    session.game_state = merge_game_state(session.game_state, incoming)
    session.history.append(page)
    logger.debug(
        "session %s: committed turn %d, proper nouns %d -> %d",
        session.id, len(session.history), before, len(session.proper_nouns),
    )


def record_failed_turn(session: SessionState, page: StoryPage) -> None:
    """Append a failure page and leave the game state at its last good value."""
    session.history.append(page)
