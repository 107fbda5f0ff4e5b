"""Tests for story_ai.pipeline.parsing."""

import json

import pytest

from conftest import turn_reply
from story_ai.errors import MalformedResponse
from story_ai.models import DEFAULT_MOOD_COLOR
from story_ai.pipeline.parsing import (
    apply_markdown_failsafes,
    parse_turn_response,
    strip_fences,
)


class TestStripFences:
    def test_json_fence_removed(self) -> None:
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence_removed(self) -> None:
        assert strip_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_surrounding_whitespace_trimmed_first(self) -> None:
        assert strip_fences('  \n```json\n{"a": 1}\n```\n  ') == '{"a": 1}'

    def test_leading_fence_alone_is_kept(self) -> None:
        assert strip_fences('```json\n{"a": 1}') == '```json\n{"a": 1}'

    def test_trailing_fence_alone_is_kept(self) -> None:
        assert strip_fences('{"a": 1}\n```') == '{"a": 1}\n```'

    def test_plain_json_untouched(self) -> None:
        assert strip_fences('{"a": 1}') == '{"a": 1}'


class TestMarkdownFailsafes:
    def test_bold(self) -> None:
        assert apply_markdown_failsafes("a **big** door") == "a <strong>big</strong> door"

    def test_italic(self) -> None:
        assert apply_markdown_failsafes("a *quiet* hall") == "a <em>quiet</em> hall"

    def test_bold_before_italic(self) -> None:
        result = apply_markdown_failsafes("**loud** and *soft*")
        assert result == "<strong>loud</strong> and <em>soft</em>"

    def test_non_greedy(self) -> None:
        result = apply_markdown_failsafes("*one* two *three*")
        assert result == "<em>one</em> two <em>three</em>"


class TestParseTurnResponse:
    def test_well_formed(self) -> None:
        parsed = parse_turn_response(turn_reply("You wake in a cellar."))
        assert parsed.story_update.story == "You wake in a cellar."
        assert parsed.story_update.background_color == "#223344"
        assert parsed.new_game_state.player_status.stamina == 90

    def test_fenced_reply(self) -> None:
        parsed = parse_turn_response("```json\n" + turn_reply("Hello.") + "\n```")
        assert parsed.story_update.story == "Hello."

    def test_defaults_filled(self) -> None:
        raw = json.dumps({"new_game_state": {}, "story_update": {"story": "x"}})
        parsed = parse_turn_response(raw)
        assert parsed.story_update.background_color == DEFAULT_MOOD_COLOR
        assert parsed.story_update.game_over is False
        assert parsed.new_game_state.player_status.health == 100
        assert parsed.new_game_state.proper_nouns == []

    def test_nulls_treated_as_missing(self) -> None:
        raw = json.dumps({
            "new_game_state": {"inventory": None, "world": None},
            "story_update": {"story": "x", "background_color": None, "items_added": None},
        })
        parsed = parse_turn_response(raw)
        assert parsed.new_game_state.inventory == []
        assert parsed.new_game_state.world.world_tension == 0
        assert parsed.story_update.background_color == DEFAULT_MOOD_COLOR
        assert parsed.story_update.items_added == []

    def test_invalid_color_falls_back(self) -> None:
        parsed = parse_turn_response(turn_reply("x", background_color="dark red"))
        assert parsed.story_update.background_color == DEFAULT_MOOD_COLOR

    def test_markdown_rewritten_in_story(self) -> None:
        parsed = parse_turn_response(turn_reply("The **Iron Gate** is *locked*."))
        assert parsed.story_update.story == "The <strong>Iron Gate</strong> is <em>locked</em>."

    def test_item_lists_deduplicated(self) -> None:
        parsed = parse_turn_response(turn_reply("x", items_added=["torch", "rope", "torch"]))
        assert parsed.story_update.items_added == ["torch", "rope"]

    def test_truncated_json_raises(self) -> None:
        with pytest.raises(MalformedResponse):
            parse_turn_response(turn_reply("You wake.")[:-5])

    def test_missing_story_raises(self) -> None:
        raw = json.dumps({"new_game_state": {}, "story_update": {"game_over": False}})
        with pytest.raises(MalformedResponse, match="story"):
            parse_turn_response(raw)

    def test_missing_game_state_raises(self) -> None:
        with pytest.raises(MalformedResponse, match="new_game_state"):
            parse_turn_response(json.dumps({"story_update": {"story": "x"}}))

    def test_prose_raises(self) -> None:
        with pytest.raises(MalformedResponse):
            parse_turn_response("Sure! Here is your story: you wake up.")

    def test_proper_noun_name_alias(self) -> None:
        raw = turn_reply("Theron waits.", proper_nouns=[{"name": "Theron", "description": "a knight"}])
        noun = parse_turn_response(raw).new_game_state.proper_nouns[0]
        assert noun.noun == "Theron"
        assert noun.phrase_used == "Theron"

    def test_nameless_proper_noun_takes_its_phrase(self) -> None:
        raw = turn_reply("A door.", proper_nouns=[{"phrase_used": "door", "description": "x"}])
        noun = parse_turn_response(raw).new_game_state.proper_nouns[0]
        assert noun.noun == "door"
        assert noun.phrase_used == "door"

    def test_empty_proper_noun_does_not_fail_the_reply(self) -> None:
        raw = turn_reply("A door.", proper_nouns=[{"description": "nothing to wrap"}])
        [noun] = parse_turn_response(raw).new_game_state.proper_nouns
        assert noun.blank

    def test_nameless_records_default(self) -> None:
        raw = json.dumps({
            "new_game_state": {
                "inventory": [{"description": "a thing"}],
                "environment": {"world_objects": [{"state": "open"}]},
                "npcs": [{"disposition": "wary"}],
                "active_puzzles_and_obstacles": [{"status": "unsolved"}],
            },
            "story_update": {"story": "x"},
        })
        state = parse_turn_response(raw).new_game_state
        assert state.inventory[0].name == ""
        assert state.inventory[0].description == "a thing"
        assert state.environment.world_objects[0].name == ""
        assert state.npcs[0].name == ""
        assert state.active_puzzles_and_obstacles[0].name == ""
