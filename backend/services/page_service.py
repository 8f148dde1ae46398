"""
Page service — assembles a page's inputs from the repo and calls the kernel.

Public serving and the editor preview go through the same `build_document`;
they differ in which records are included (published vs. all) and in the
selection decorator the preview passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from backend.config import settings
from backend.models.site import OutlineResponse, OutlineRow, PreviewRequest
from backend.repos.site_repo import SiteRepo, site_repo
from pagesmith.kernel.overrides import resolve_chrome, split_sections
from pagesmith.kernel.primitives import block_label, resolve_section
from pagesmith.kernel.renderer import Decorator, render, render_document
from pagesmith.kernel.selection import SELECTION_CSS, EditorSelection, ManualScheduler, SelectionDecorator
from pagesmith.kernel.theme import load_theme, resolve_theme
from pagesmith.kernel.types import BlockContext, DocumentOptions, Page, Section, Site, Theme

logger = logging.getLogger(__name__)


@dataclass
class PageInputs:
    site: Site
    page: Page
    sections: list[Section]
    theme: Theme | None
    social_links: list[dict[str, Any]]
    blog_posts: list[dict[str, Any]]


def build_document(
    inputs: PageInputs,
    *,
    base_path: str = "",
    decorator: Decorator | None = None,
    extra_css: str = "",
    url: str | None = None,
) -> str:
    """Render a full HTML document for a page."""
    chrome = resolve_chrome(inputs.site, inputs.page, inputs.sections)
    context = BlockContext(
        theme=resolve_theme(inputs.theme),
        base_path=base_path,
        site_name=inputs.site.name,
        social_links=inputs.social_links,
        blog_posts=inputs.blog_posts,
    )
    tree = render(
        chrome.body,
        chrome.header,
        chrome.footer,
        inputs.theme,
        decorator,
        color_mode=inputs.site.color_mode,
        context=context,
    )
    page_title = inputs.page.meta_title or inputs.page.title
    title = f"{page_title} | {inputs.site.name}" if page_title and inputs.site.name else page_title or inputs.site.name
    return render_document(
        tree,
        DocumentOptions(
            title=title,
            description=inputs.page.meta_description or inputs.site.meta_description,
            site_name=inputs.site.name,
            url=url,
            extra_css=extra_css,
            storage_key=settings.COLOR_MODE_STORAGE_KEY,
        ),
    )


def preview_decorator(hovered_id: str | None, selected_id: str | None) -> SelectionDecorator:
    """A decorator showing the editor's current hover/selection."""
    selection = EditorSelection(scheduler=ManualScheduler(), delay_ms=settings.SCROLL_SYNC_DELAY_MS)
    selection.select(selected_id)
    selection.hover(hovered_id)
    return SelectionDecorator(selection)


async def _load_inputs(repo: SiteRepo, site: Site, page: Page, published_only: bool) -> PageInputs:
    return PageInputs(
        site=site,
        page=page,
        sections=await repo.fetch_sections(page.id, published_only=published_only),
        theme=await repo.fetch_theme(site.id),
        social_links=await repo.fetch_social_links(site.id),
        blog_posts=await repo.fetch_blog_posts(site.id),
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


async def render_public_page(site_slug: str, page_slug: str | None = None, repo: SiteRepo | None = None) -> str | None:
    """
    HTML for a published page, or None when the site or page doesn't exist
    or the page isn't published. Only published records are rendered.
    """
    repo = repo or site_repo
    site = await repo.fetch_site_by_slug(site_slug)
    if site is None:
        return None

    if page_slug is None:
        page = await repo.fetch_home_page(site.id)
    else:
        page = await repo.fetch_page_by_slug(site.id, page_slug)
    if page is None or page.status != "published":
        logger.info("render_public_page: no published page %r on site %s", page_slug, site_slug)
        return None

    inputs = await _load_inputs(repo, site, page, published_only=True)
    path = f"/s/{site_slug}" + ("" if page_slug is None else f"/{page_slug}")
    return build_document(inputs, base_path=f"/s/{site_slug}", url=settings.PUBLIC_URL + path)


async def render_stored_preview(
    site_id: str,
    page_id: str,
    hovered_id: str | None = None,
    selected_id: str | None = None,
    repo: SiteRepo | None = None,
) -> str | None:
    """Editor preview of a stored page, drafts included."""
    repo = repo or site_repo
    site = await repo.fetch_site(site_id)
    page = await repo.fetch_page(site_id, page_id) if site else None
    if site is None or page is None:
        return None

    inputs = await _load_inputs(repo, site, page, published_only=False)
    return build_document(
        inputs,
        decorator=preview_decorator(hovered_id, selected_id),
        extra_css=SELECTION_CSS,
    )


def render_unsaved_preview(req: PreviewRequest) -> str:
    """Editor preview of content the editor holds but may not have saved."""
    site = Site(
        id="preview",
        slug="preview",
        name=req.site_name,
        header=req.site_header,
        footer=req.site_footer,
        color_mode=req.color_mode,
    )
    page = Page(
        id=req.page_id,
        site_id=site.id,
        slug="preview",
        title=req.title,
        header=req.page_header,
        footer=req.page_footer,
    )
    inputs = PageInputs(
        site=site,
        page=page,
        sections=[s.to_section(req.page_id) for s in req.sections],
        theme=load_theme(req.theme) if req.theme else None,
        social_links=[],
        blog_posts=[],
    )
    return build_document(
        inputs,
        decorator=preview_decorator(req.hovered_id, req.selected_id),
        extra_css=SELECTION_CSS,
    )


async def build_outline(site_id: str, page_id: str, repo: SiteRepo | None = None) -> OutlineResponse | None:
    """Outline rows for a page, in the order the preview renders them."""
    repo = repo or site_repo
    page = await repo.fetch_page(site_id, page_id)
    if page is None:
        return None

    split = split_sections(await repo.fetch_sections(page_id))
    rows = []
    for section in split.body:
        resolved = resolve_section(section)
        rows.append(
            OutlineRow(
                id=section.id,
                declared_type=section.declared_type,
                primitive=resolved.primitive,
                preset=resolved.preset,
                label=block_label(resolved),
                position=section.position,
                status=section.status,
                anchor_id=section.anchor_id,
            )
        )
    return OutlineResponse(
        page_id=page_id,
        header_id=split.header.id if split.header else None,
        footer_id=split.footer.id if split.footer else None,
        rows=rows,
    )

