"""Core domain models.

Field names follow the JSON the text-completion backend is asked to produce,
so a reply can be validated directly with ``TurnResponse.model_validate_json``.
Pydantic is used for validation and serialisation at every data boundary.

The backend is sloppy about optional keys: missing keys and explicit nulls
both fall back to the field default, and unknown keys are ignored.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

DEFAULT_MOOD_COLOR = "#1e1e1e"

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class _Lenient(BaseModel):
    """Base for backend-produced records: nulls are treated as missing."""

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# ---------------------------------------------------------------------------
# Game state
# ---------------------------------------------------------------------------

class ProperNoun(_Lenient):
    """A tracked named entity.

    ``noun`` is the canonical name and the de-duplication key across turns.
    ``phrase_used`` is the exact wording used in this turn's story text and is
    what the annotator wraps; it defaults to the canonical name, and a
    nameless entry takes its phrase as the name. An entry with neither is
    kept here and discarded by the noun validator and the state merge.
    """

    noun: str = Field(default="", validation_alias=AliasChoices("noun", "name"))
    phrase_used: str = ""
    description: str = ""

    @model_validator(mode="after")
    def _default_phrase(self) -> ProperNoun:
        if not self.noun.strip():
            self.noun = self.phrase_used
        if not self.phrase_used.strip():
            self.phrase_used = self.noun
        return self

    @property
    def blank(self) -> bool:
        return not self.noun.strip()


class PlayerStatus(_Lenient):
    health: int = 100
    stamina: int = 100
    conditions: list[str] = Field(default_factory=list)


class Item(_Lenient):
    """An object in the player's inventory."""

    name: str = ""
    description: str = ""
    properties: list[str] = Field(default_factory=list)
    state: str = ""


class WorldObject(_Lenient):
    name: str = ""
    properties: list[str] = Field(default_factory=list)
    state: str = ""


class Environment(_Lenient):
    location_name: str = ""
    description: str = ""
    exits: dict[str, str] = Field(default_factory=dict)
    world_objects: list[WorldObject] = Field(default_factory=list)


class NPC(_Lenient):
    name: str = ""
    disposition: str = ""
    knowledge: list[str] = Field(default_factory=list)
    goal: str = ""


class Puzzle(_Lenient):
    name: str = ""
    description: str = ""
    status: str = ""
    solution_hints: list[str] = Field(default_factory=list)


class World(_Lenient):
    world_tension: int = 0


class Rules(_Lenient):
    consequence_model: str = "challenging"  # exploratory | challenging | punishing


class GameState(_Lenient):
    """The whole simulated world, round-tripped through the backend each turn."""

    player_status: PlayerStatus = Field(default_factory=PlayerStatus)
    inventory: list[Item] = Field(default_factory=list)
    environment: Environment = Field(default_factory=Environment)
    npcs: list[NPC] = Field(default_factory=list)
    active_puzzles_and_obstacles: list[Puzzle] = Field(default_factory=list)
    world: World = Field(default_factory=World)
    climax: bool = False
    win_conditions: list[str] = Field(default_factory=list)
    game_won: bool = False
    rules: Rules = Field(default_factory=Rules)
    proper_nouns: list[ProperNoun] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Backend reply
# ---------------------------------------------------------------------------

class StoryUpdate(_Lenient):
    """Narrative half of a reply. ``story`` carries the inline markup subset."""

    story: str
    items_added: list[str] = Field(default_factory=list)
    items_removed: list[str] = Field(default_factory=list)
    game_over: bool = False
    background_color: str = DEFAULT_MOOD_COLOR

    @field_validator("items_added", "items_removed")
    @classmethod
    def _unique_items(cls, items: list[str]) -> list[str]:
        seen: set[str] = set()
        unique: list[str] = []
        for item in items:
            name = item.strip()
            if name and name not in seen:
                seen.add(name)
                unique.append(name)
        return unique

    @field_validator("background_color")
    @classmethod
    def _hex_color(cls, value: str) -> str:
        value = value.strip()
        return value if _HEX_COLOR_RE.match(value) else DEFAULT_MOOD_COLOR


class TurnResponse(_Lenient):
    """One accepted backend reply. Frozen: corrections produce copies."""

    model_config = ConfigDict(frozen=True)

    new_game_state: GameState
    story_update: StoryUpdate


# ---------------------------------------------------------------------------
# Session-facing records
# ---------------------------------------------------------------------------

class StoryPage(BaseModel):
    """One entry of a session's append-only transcript."""

    prompt: str
    response: str  # annotated HTML subset


class TurnResult(BaseModel):
    """What the orchestrator hands back to the HTTP layer after a turn."""

    page: StoryPage
    mood_color: str = DEFAULT_MOOD_COLOR
    game_over: bool = False
    game_won: bool = False
    failed: bool = False
    error: str | None = None
