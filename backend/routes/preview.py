"""Editor preview routes — live preview of draft content and the section outline."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import HTMLResponse

from backend.config import settings
from backend.models.site import OutlineResponse, PreviewRequest
from backend.services.page_service import build_outline, render_stored_preview, render_unsaved_preview

router = APIRouter(prefix="/api", tags=["preview"])

_NO_STORE = {"Cache-Control": settings.PREVIEW_CACHE_CONTROL}


@router.post("/preview", response_class=HTMLResponse)
async def preview_unsaved(req: PreviewRequest) -> HTMLResponse:
    """Render content the editor holds, saved or not, with selection affordances."""
    return HTMLResponse(content=render_unsaved_preview(req), headers=_NO_STORE)


@router.get("/sites/{site_id}/pages/{page_id}/preview", response_class=HTMLResponse)
async def preview_stored(
    site_id: str,
    page_id: str,
    hovered: str | None = None,
    selected: str | None = None,
) -> HTMLResponse:
    """Render a stored page including drafts."""
    html = await render_stored_preview(site_id, page_id, hovered_id=hovered, selected_id=selected)
    if html is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found.")
    return HTMLResponse(content=html, headers=_NO_STORE)


@router.get("/sites/{site_id}/pages/{page_id}/outline")
async def page_outline(site_id: str, page_id: str) -> OutlineResponse:
    """Outline rows for the editor sidebar, in render order."""
    outline = await build_outline(site_id, page_id)
    if outline is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found.")
    return outline
