"""Runtime settings, read from the environment (and .env at the repo root).

    LLM_PROVIDER_URL      base URL of the completion backend   (http://localhost:5001)
    LLM_API_KEY           bearer token / query key             ("")
    LLM_PROVIDER_FORMAT   koboldcpp | openai | gemini | echo   (koboldcpp)
    LLM_MODEL             model id for openai / gemini         ("")
    LLM_TIMEOUT           seconds per backend call             (120)
    JSON_RETRY_ATTEMPTS   repair attempts per malformed reply  (3)
    MAX_ACTION_WORDS      word limit for a player action       (15)
    SESSION_TTL_SECONDS   idle time before a session is gone   (86400)
    GLOSSARY_POLICY       omit | parenthetical                 (omit)
    INSPIRATION_PATH      JSON flavor file                     (packaged preset)
    HOST / PORT           bind address for main.py             (0.0.0.0 / 9779)
    LOG_LEVEL             root log level                       (INFO)

Bad values fail loudly with a pydantic ValidationError at start-up.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from story_ai.inspiration import DEFAULT_INSPIRATION_PATH

ROOT = Path(__file__).parent.parent

_ENV_FIELDS = {
    "LLM_PROVIDER_URL": "llm_provider_url",
    "LLM_API_KEY": "llm_api_key",
    "LLM_PROVIDER_FORMAT": "llm_provider_format",
    "LLM_MODEL": "llm_model",
    "LLM_TIMEOUT": "llm_timeout",
    "JSON_RETRY_ATTEMPTS": "json_retry_attempts",
    "MAX_ACTION_WORDS": "max_action_words",
    "SESSION_TTL_SECONDS": "session_ttl_seconds",
    "GLOSSARY_POLICY": "glossary_policy",
    "INSPIRATION_PATH": "inspiration_path",
    "HOST": "host",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    llm_provider_url: str = "http://localhost:5001"
    llm_api_key: str = ""
    llm_provider_format: Literal["koboldcpp", "openai", "gemini", "echo"] = "koboldcpp"
    llm_model: str = ""
    llm_timeout: float = Field(default=120.0, gt=0)
    json_retry_attempts: int = Field(default=3, ge=1)
    max_action_words: int = Field(default=15, ge=1)
    session_ttl_seconds: float = Field(default=86400.0, gt=0)
    glossary_policy: Literal["omit", "parenthetical"] = "omit"
    inspiration_path: Path = DEFAULT_INSPIRATION_PATH
    host: str = "0.0.0.0"
    port: int = 9779
    log_level: str = "INFO"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``environ`` (default: os.environ after loading .env)."""
    if environ is None:
        load_dotenv(ROOT / ".env")
        environ = os.environ
    values = {field: environ[var] for var, field in _ENV_FIELDS.items() if environ.get(var)}
    return Settings.model_validate(values)
