"""PDF download endpoint."""

from fastapi import APIRouter, HTTPException, Request, Response

from story_ai.export import build_story_pdf

from . import deps

router = APIRouter()


@router.get("/download")
async def download(request: Request, response: Response):
    """The caller's story as a PDF attachment."""
    session = deps.session_for(request, response)
    if not session.history:
        # A session created by this request is always empty, so only this
        # reply can carry a new cookie.
        raise HTTPException(404, "No story to download", headers=deps.cookie_headers(response))
    data = build_story_pdf(session, deps.settings(request).glossary_policy)
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="story.pdf"'},
    )
