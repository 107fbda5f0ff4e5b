"""Cross-check proper-noun entries against the story text actually produced."""

import logging

from story_ai.models import ProperNoun, TurnResponse

from .markup import contains_phrase

logger = logging.getLogger(__name__)


def _validated(noun: ProperNoun, story: str) -> ProperNoun | None:
    if noun.blank:
        logger.debug("proper noun without a name or phrase, dropped")
        return None
    if contains_phrase(story, noun.phrase_used):
        return noun
    if contains_phrase(story, noun.noun):
        logger.debug("proper noun %r: phrase %r not in story, using the noun itself", noun.noun, noun.phrase_used)
        return noun.model_copy(update={"phrase_used": noun.noun})
    logger.debug("proper noun %r: neither phrase nor noun in story, dropped", noun.noun)
    return None


def validate_proper_nouns(response: TurnResponse) -> TurnResponse:
    """Keep only entries the annotator can actually wrap.

    Per entry: keep it when ``phrase_used`` occurs in the story; otherwise
    rewrite ``phrase_used`` to the canonical noun when that occurs; otherwise
    drop it. Idempotent. The returned copy is for this turn's rendering only.
    """
    story = response.story_update.story
    survivors = [
        checked
        for noun in response.new_game_state.proper_nouns
        if (checked := _validated(noun, story)) is not None
    ]
    state = response.new_game_state.model_copy(update={"proper_nouns": survivors})
    return response.model_copy(update={"new_game_state": state})
