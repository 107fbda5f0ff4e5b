import logging

from fastapi import FastAPI

from story_ai.config import Settings, load_settings
from story_ai.inspiration import InspirationSource
from story_ai.llm import LLM, EchoLLM, HttpLLM
from story_ai.routes import router
from story_ai.session import SessionManager

logger = logging.getLogger(__name__)


def build_llm(settings: Settings) -> LLM:
    """The backend client selected by LLM_PROVIDER_FORMAT."""
    if settings.llm_provider_format == "echo":
        logger.warning("LLM backend: echo (no model; every turn will fail)")
        return EchoLLM()
    logger.info("LLM backend: %s (%s)", settings.llm_provider_url, settings.llm_provider_format)
    return HttpLLM(
        provider_url=settings.llm_provider_url,
        api_key=settings.llm_api_key,
        provider_format=settings.llm_provider_format,
        model=settings.llm_model,
        timeout=settings.llm_timeout,
    )


def create_app(settings: Settings | None = None, llm: LLM | None = None) -> FastAPI:
    settings = settings or load_settings()
    if llm is None:
        llm = build_llm(settings)

    app = FastAPI(title="Story AI")
    app.state.settings = settings
    app.state.llm = llm
    app.state.sessions = SessionManager(ttl_seconds=settings.session_ttl_seconds)
    app.state.inspiration = InspirationSource(settings.inspiration_path)
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (settings from the environment / .env)
app = create_app()
