"""Story endpoints: start a story, play a turn, fetch the transcript."""

from fastapi import APIRouter, HTTPException, Request, Response

from story_ai.errors import InvalidAction, StoryStartError
from story_ai.pipeline import is_restart, run_turn, start_story
from story_ai.session import SessionState

from . import deps
from .models import GenerateBody, StartBody

router = APIRouter()


async def _start(
    request: Request, response: Response, session: SessionState, genre: str, consequence_model: str
) -> None:
    try:
        await start_story(
            session,
            deps.llm(request),
            genre=genre,
            consequence_model=consequence_model,
            inspiration=deps.inspiration(request),
            attempts=deps.settings(request).json_retry_attempts,
        )
    except StoryStartError as e:
        raise HTTPException(502, str(e), headers=deps.cookie_headers(response))


@router.post("/start")
async def start(body: StartBody, request: Request, response: Response):
    """Begin a new story for the caller, replacing any story in progress."""
    session = deps.session_for(request, response)
    await _start(request, response, session, body.genre, body.consequence_model)
    return deps.story_payload(session)


@router.post("/generate")
async def generate(body: GenerateBody, request: Request, response: Response):
    """Play one action. "restart" begins a fresh story with the same settings."""
    session = deps.session_for(request, response)
    if is_restart(body.prompt):
        await _start(request, response, session, session.genre, session.consequence_model)
        return deps.story_payload(session)

    config = deps.settings(request)
    try:
        await run_turn(
            session,
            deps.llm(request),
            body.prompt,
            attempts=config.json_retry_attempts,
            max_words=config.max_action_words,
        )
    except InvalidAction as e:
        raise HTTPException(400, str(e), headers=deps.cookie_headers(response))
    return deps.story_payload(session)


@router.get("/story")
async def get_story(request: Request, response: Response):
    """The caller's transcript and current status."""
    session = deps.session_for(request, response)
    return deps.story_payload(session)
