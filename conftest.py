import json

import pytest

from story_ai.session import SessionState


# ---------------------------------------------------------------------------
# StubLLM: dispatches by stage name, independent queue per stage
# ---------------------------------------------------------------------------

class StubLLM:
    """Deterministic LLM stand-in for tests.

    Provide a dict mapping stage name → list of responses (in call order).
    A queued Exception instance is raised instead of returned.
    Raises AssertionError if a stage is called more times than responses
    were provided.
    """

    def __init__(self, responses: dict[str, list[str | Exception]]) -> None:
        self._queues = {k: list(v) for k, v in responses.items()}
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, stage: str, prompt: str) -> str:
        self.calls.append((stage, prompt))
        queue = self._queues.get(stage)
        if not queue:
            raise AssertionError(
                f"StubLLM: unexpected call to stage={stage!r} "
                f"(no responses queued). calls so far: {len(self.calls)}"
            )
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def stages(self) -> list[str]:
        return [stage for stage, _ in self.calls]

    def assert_exhausted(self) -> None:
        """Assert every queued response was consumed."""
        leftover = {k: v for k, v in self._queues.items() if v}
        if leftover:
            raise AssertionError(f"StubLLM: unused responses remain: {leftover}")


def turn_reply(
    story: str,
    *,
    proper_nouns: list[dict] | None = None,
    items_added: list[str] | None = None,
    items_removed: list[str] | None = None,
    game_over: bool = False,
    game_won: bool = False,
    background_color: str = "#223344",
    health: int = 100,
    inventory: list[dict] | None = None,
    world_tension: int = 0,
) -> str:
    """A well-formed backend reply as JSON text."""
    return json.dumps({
        "new_game_state": {
            "player_status": {"health": health, "stamina": 90, "conditions": []},
            "inventory": inventory or [],
            "world": {"world_tension": world_tension},
            "game_won": game_won,
            "proper_nouns": proper_nouns or [],
        },
        "story_update": {
            "story": story,
            "items_added": items_added or [],
            "items_removed": items_removed or [],
            "game_over": game_over,
            "background_color": background_color,
        },
    })


@pytest.fixture
def session() -> SessionState:
    return SessionState(id="test-session")
