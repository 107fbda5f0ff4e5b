"""Handlebars prompt rendering for the narrator and the JSON repair loop.

Templates use triple-stash ``{{{ }}}`` for anything that may contain markup or
JSON, since pybars HTML-escapes double-stash values.
"""

import json
from collections.abc import Callable
from typing import Any

import pybars

from story_ai.inspiration import Inspiration
from story_ai.models import GameState, Rules
from story_ai.session import SessionState

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


# ── Templates ────────────────────────────────────────────

SYSTEM_TEMPLATE = """You are the Game Master of a text adventure. You receive a JSON object with the current 'game_state' and the player's 'user_action'. Work out the consequences of the action and reply with a single valid JSON object and nothing else:

{
  "new_game_state": <the complete updated game state, same structure as the input>,
  "story_update": {
    "story": "<what happens, at most 100 words>",
    "items_added": ["<inventory item names gained this turn>"],
    "items_removed": ["<inventory item names lost this turn>"],
    "game_over": <true only if the player dies or the story definitively ends>,
    "background_color": "<a muted #RRGGBB color matching the mood>"
  }
}

Rules:
- Every change to the state must follow logically from the action and the previous state.
- Invent hidden 'win_conditions' when a story starts; set 'game_won' when one is fulfilled.
- Raise 'world.world_tension' when the player escalates and lower it when they de-escalate. At 100 set 'climax'; the update after the climax is the last one.
- Wrap item names in the story: <span class="item-added">name</span> or <span class="item-removed">name</span>.
- Record every important person, place or unique object mentioned in the story in 'new_game_state.proper_nouns' as {"noun": "<canonical name>", "phrase_used": "<the exact words used for it in this story>", "description": "<at most 20 words>"}. Keep all previously known proper nouns. Do not wrap proper nouns in markup yourself.
- Obey 'rules.consequence_model': "exploratory" is forgiving, "challenging" has real setbacks, "punishing" can kill the player.
- If the game state is empty, start a new story with the player waking up somewhere interesting.
- Write in the style of {{{author}}}.
{{#if addendum}}- {{{addendum}}}
{{/if}}{{#if fantasy}}- The story is set in a classic fantasy world: magic, mythical creatures, runes, alchemy, traps and locks.
{{/if}}{{#if scifi}}- The story is set in a science fiction world: failing technology, alien life, hacking, zero gravity, security systems.
{{/if}}{{#if historical}}- The story is set during {{{historical.event}}}: {{{historical.description}}}
- The player is one of the good guys. Background: {{{historical.summary}}}
- Obstacles come from the era itself: customs, technology, espionage and the real events.
{{/if}}
"""

INSPIRATION_TEMPLATE = """- Use this title and description as inspiration for the story:
- Title: {{{title}}}
- Description: {{{description}}}
"""

REPAIR_TEMPLATE = """The previous response you sent was not valid JSON. Analyze the text below, which contains the invalid response, and correct it. Reply with a single valid JSON object with the keys "new_game_state" and "story_update" and nothing else: no explanations, no apologies.

Invalid response:
{{{invalid_response}}}
"""


# ── Builders ─────────────────────────────────────────────


def build_system_prompt(session: SessionState) -> str:
    ctx: dict[str, Any] = {
        "author": session.narrator.author,
        "addendum": session.narrator.addendum,
        "fantasy": session.genre == "fantasy",
        "scifi": session.genre == "sci-fi",
        "historical": None,
    }
    if session.genre == "historical-fiction" and session.historical:
        ctx["historical"] = session.historical.model_dump()
    return render_prompt(SYSTEM_TEMPLATE, ctx)


def _request_json(game_state: GameState, action: str) -> str:
    return json.dumps({"game_state": game_state.model_dump(), "user_action": action})


def build_start_prompt(session: SessionState, inspiration: Inspiration | None = None) -> str:
    """Prompt for the opening turn: empty state carrying only the rules."""
    prompt = build_system_prompt(session)
    if inspiration is not None:
        prompt += render_prompt(INSPIRATION_TEMPLATE, inspiration.model_dump())
    initial = GameState(rules=Rules(consequence_model=session.consequence_model))
    return prompt + _request_json(initial, "Start the game.")


def build_turn_prompt(session: SessionState, action: str) -> str:
    state = session.game_state or GameState(rules=Rules(consequence_model=session.consequence_model))
    return build_system_prompt(session) + _request_json(state, action)


def build_repair_prompt(invalid_response: str) -> str:
    return render_prompt(REPAIR_TEMPLATE, {"invalid_response": invalid_response})
