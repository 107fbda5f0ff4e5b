"""In-memory per-player sessions.

Each browser gets a session id in a cookie. The session owns its game state
and story transcript exclusively; nothing is shared between sessions and
nothing outlives the process.

Turns for one session are serialised through ``SessionState.lock``: the turn
pipeline holds it from the first backend call until the state is committed,
so a double-submitted action cannot interleave with another turn.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from story_ai.inspiration import HistoricalEvent
from story_ai.models import GameState, ProperNoun, StoryPage, TurnResult
from story_ai.narrators import CLASSIC_AUTHORS, DEFAULT_GENRE, NarratorStyle, classic_style

logger = logging.getLogger(__name__)

SESSION_COOKIE = "story_session"


@dataclass
class SessionState:
    id: str
    game_state: GameState | None = None
    history: list[StoryPage] = field(default_factory=list)
    genre: str = DEFAULT_GENRE
    consequence_model: str = "challenging"
    narrator: NarratorStyle = field(default_factory=lambda: classic_style(CLASSIC_AUTHORS[0]))
    historical: HistoricalEvent | None = None
    last_result: TurnResult | None = None
    last_seen: float = 0.0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def started(self) -> bool:
        return self.game_state is not None

    @property
    def proper_nouns(self) -> list[ProperNoun]:
        return self.game_state.proper_nouns if self.game_state else []


class SessionManager:
    """Creates, looks up and expires sessions.

    Args:
        ttl_seconds: Idle time after which a session is discarded.
        clock:       Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = 86400.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: dict[str, SessionState] = {}
        self._ttl = ttl_seconds
        self._clock = clock

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str | None) -> SessionState | None:
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session is None:
            return None
        now = self._clock()
        if now - session.last_seen > self._ttl:
            self.discard(session_id)
            return None
        session.last_seen = now
        return session

    def get_or_create(self, session_id: str | None) -> tuple[SessionState, bool]:
        """Return (session, created). Unknown or expired ids get a fresh session."""
        self.prune()
        session = self.get(session_id)
        if session is not None:
            return session, False
        session = SessionState(id=uuid.uuid4().hex, last_seen=self._clock())
        self._sessions[session.id] = session
        logger.debug("created session %s", session.id)
        return session, True

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.debug("discarded session %s", session_id)

    def prune(self) -> int:
        """Drop every idle session. Returns how many were removed."""
        now = self._clock()
        expired = [sid for sid, s in self._sessions.items() if now - s.last_seen > self._ttl]
        for sid in expired:
            self.discard(sid)
        return len(expired)
