"""Exceptions raised by the turn pipeline.

Upstream (network / backend) failures are ``story_ai.llm.LLMError``.
"""


class MalformedResponse(ValueError):
    """The backend's reply could not be decoded into a TurnResponse."""


class UnrecoverableResponse(RuntimeError):
    """The reply stayed malformed after every repair attempt."""


class InvalidAction(ValueError):
    """The player's action was rejected before reaching the backend."""


class StoryStartError(RuntimeError):
    """The opening turn of a new story failed; the session is left untouched."""
