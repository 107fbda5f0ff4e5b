"""FastAPI API endpoints under /api.

Endpoint groups: health, story (start / generate / current story) and export
(PDF download). Every story endpoint works on the caller's session, found via
the ``story_session`` cookie and created on first contact.
"""

from fastapi import APIRouter

from .export import router as export_router
from .health import router as health_router
from .story import router as story_router

router = APIRouter()
router.include_router(health_router)
router.include_router(story_router)
router.include_router(export_router)
