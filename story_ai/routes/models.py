"""Pydantic request models for API endpoints."""

from pydantic import BaseModel

from story_ai.narrators import DEFAULT_GENRE


class StartBody(BaseModel):
    genre: str = DEFAULT_GENRE
    consequence_model: str = "challenging"


class GenerateBody(BaseModel):
    prompt: str
