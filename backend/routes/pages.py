"""Public page serving — GET /s/{site_slug}[/{page_slug}] renders published content."""

from __future__ import annotations

import hashlib

from fastapi import APIRouter
from fastapi.responses import HTMLResponse, Response

from backend.config import settings
from backend.services.page_service import render_public_page

router = APIRouter(tags=["pages"])

_NOT_FOUND_HTML = "<html><body><h1>404 — Page not found</h1></body></html>"


def _html_response(html: str | None) -> Response:
    """
    Wrap rendered HTML with cache headers, or a 404 page.

    Cache headers:
    - Cache-Control: from settings (public, short browser TTL, longer CDN TTL)
    - ETag: MD5 of the HTML content for conditional requests
    """
    if html is None:
        return HTMLResponse(content=_NOT_FOUND_HTML, status_code=404)

    html_bytes = html.encode("utf-8")
    etag = f'"{hashlib.md5(html_bytes, usedforsecurity=False).hexdigest()}"'

    return Response(
        content=html_bytes,
        media_type="text/html; charset=utf-8",
        headers={
            "Cache-Control": settings.CACHE_CONTROL,
            "ETag": etag,
            "X-Content-Type-Options": "nosniff",
        },
    )


@router.get("/s/{site_slug}", response_class=HTMLResponse)
async def serve_home_page(site_slug: str) -> Response:
    """Serve a site's published home page."""
    return _html_response(await render_public_page(site_slug))


@router.get("/s/{site_slug}/{page_slug}", response_class=HTMLResponse)
async def serve_page(site_slug: str, page_slug: str) -> Response:
    """Serve a published page. 404 if the site, the page, or its publication is missing."""
    return _html_response(await render_public_page(site_slug, page_slug))
