"""Request helpers shared by the endpoint modules."""

from fastapi import Request, Response

from story_ai.config import Settings
from story_ai.inspiration import InspirationSource
from story_ai.llm import LLM
from story_ai.models import DEFAULT_MOOD_COLOR
from story_ai.session import SESSION_COOKIE, SessionManager, SessionState
from story_ai.status import inventory_payload, status_payload


def settings(request: Request) -> Settings:
    return request.app.state.settings


def llm(request: Request) -> LLM:
    return request.app.state.llm


def inspiration(request: Request) -> InspirationSource:
    return request.app.state.inspiration


def session_for(request: Request, response: Response) -> SessionState:
    """The caller's session; a new one sets the cookie on ``response``."""
    sessions: SessionManager = request.app.state.sessions
    session, created = sessions.get_or_create(request.cookies.get(SESSION_COOKIE))
    if created:
        response.set_cookie(SESSION_COOKIE, session.id, httponly=True, samesite="lax")
    return session


def cookie_headers(response: Response) -> dict[str, str] | None:
    """The session cookie set on ``response``, for replies built elsewhere."""
    cookie = response.headers.get("set-cookie")
    return {"set-cookie": cookie} if cookie else None


def story_payload(session: SessionState) -> dict:
    """Everything the live view needs to redraw itself."""
    state = session.game_state
    last = session.last_result
    return {
        "pages": [page.model_dump() for page in session.history],
        "mood_color": last.mood_color if last else DEFAULT_MOOD_COLOR,
        "game_over": last.game_over if last else False,
        "game_won": state.game_won if state else False,
        "failed": last.failed if last else False,
        "placeholder": session.narrator.placeholder,
        "world_tension": state.world.world_tension if state else 0,
        "consequence_model": session.consequence_model,
        "genre": session.genre,
        "status": status_payload(state),
        "inventory": inventory_payload(state.inventory) if state else [],
    }
