"""Tests for story_ai.export.pdf."""

from story_ai.export.pdf import build_story_pdf, latin1
from story_ai.inspiration import HistoricalEvent
from story_ai.models import GameState, ProperNoun, StoryPage
from story_ai.narrators import NARRATORS
from story_ai.session import SessionState


def _session(**kwargs) -> SessionState:
    session = SessionState(
        id="pdf",
        game_state=GameState(proper_nouns=[ProperNoun(noun="Theron", description="a weary knight")]),
        history=[
            StoryPage(prompt="Start", response="You wake in a <em>cold</em> cellar."),
            StoryPage(
                prompt="take the torch",
                response=(
                    '<span class="proper-noun tooltip">Theron'
                    '<span class="tooltiptext">a weary knight</span></span> hands you a '
                    '<span class="item-added">torch</span> and cuts the '
                    '<span class="item-removed">rope</span>.<br>“Go,” he says… — now.'
                ),
            ),
        ],
        **kwargs,
    )
    return session


class TestLatin1:
    def test_typographic_punctuation(self) -> None:
        assert latin1("“Go,” he said… it’s late — now") == '"Go," he said... it\'s late -- now'

    def test_unencodable_replaced(self) -> None:
        assert latin1("fire 🔥") == "fire ?"

    def test_latin1_kept(self) -> None:
        assert latin1("café") == "café"


class TestBuildStoryPdf:
    def test_returns_pdf_bytes(self) -> None:
        data = build_story_pdf(_session())
        assert data.startswith(b"%PDF")

    def test_parenthetical_policy(self) -> None:
        data = build_story_pdf(_session(), policy="parenthetical")
        assert data.startswith(b"%PDF")

    def test_historical_title_page(self) -> None:
        session = _session(
            genre="historical-fiction",
            narrator=NARRATORS["historian"],
            historical=HistoricalEvent(
                event="Apollo 13",
                description="An oxygen tank explodes.",
                wikipedia="https://en.wikipedia.org/wiki/Apollo_13",
                summary="Three astronauts nurse a crippled ship home.",
            ),
        )
        assert build_story_pdf(session).startswith(b"%PDF")

    def test_no_nouns_no_glossary(self) -> None:
        session = _session()
        session.game_state = GameState()
        assert build_story_pdf(session).startswith(b"%PDF")

    def test_session_untouched(self) -> None:
        session = _session()
        before = [p.model_copy() for p in session.history]
        build_story_pdf(session)
        assert session.history == before
