"""Repository for sites, pages, content records and themes (in-memory)."""

from __future__ import annotations

import asyncio
import copy
from typing import Any

from pagesmith.kernel.theme import load_theme
from pagesmith.kernel.types import Page, Section, Site, Theme


class SiteRepo:
    """
    All site-related storage operations.

    Content records and themes are held in their persisted (camelCase) shape
    and rebuilt on every read, the way rows come back from a database. Sites
    and pages are copied on the way in and out, so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._sites: dict[str, Site] = {}
        self._pages: dict[str, Page] = {}
        self._sections: dict[str, dict[str, Any]] = {}
        self._themes: dict[str, dict[str, Any]] = {}
        self._social_links: dict[str, list[dict[str, Any]]] = {}
        self._blog_posts: dict[str, list[dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def clear(self) -> None:
        self._sites.clear()
        self._pages.clear()
        self._sections.clear()
        self._themes.clear()
        self._social_links.clear()
        self._blog_posts.clear()

    # -- seeding ------------------------------------------------------------

    def add_site(self, site: Site) -> Site:
        self._sites[site.id] = copy.deepcopy(site)
        return site

    def add_page(self, page: Page) -> Page:
        self._pages[page.id] = copy.deepcopy(page)
        return page

    def add_section(self, section: Section) -> Section:
        self._sections[section.id] = copy.deepcopy(section.to_dict())
        return section

    def set_theme(self, site_id: str, theme: Theme) -> None:
        self._themes[site_id] = copy.deepcopy(theme.to_dict())

    def set_social_links(self, site_id: str, links: list[dict[str, Any]]) -> None:
        self._social_links[site_id] = copy.deepcopy(links)

    def set_blog_posts(self, site_id: str, posts: list[dict[str, Any]]) -> None:
        self._blog_posts[site_id] = copy.deepcopy(posts)

    # -- reads --------------------------------------------------------------

    async def fetch_site(self, site_id: str) -> Site | None:
        site = self._sites.get(site_id)
        return copy.deepcopy(site) if site else None

    async def fetch_site_by_slug(self, slug: str) -> Site | None:
        """Match the slug, or a verified custom domain."""
        for site in self._sites.values():
            if site.slug == slug or (site.custom_domain == slug and site.domain_verified):
                return copy.deepcopy(site)
        return None

    async def fetch_page(self, site_id: str, page_id: str) -> Page | None:
        page = self._pages.get(page_id)
        if page is None or page.site_id != site_id:
            return None
        return copy.deepcopy(page)

    async def fetch_page_by_slug(self, site_id: str, slug: str) -> Page | None:
        for page in self._pages.values():
            if page.site_id == site_id and page.slug == slug:
                return copy.deepcopy(page)
        return None

    async def fetch_home_page(self, site_id: str) -> Page | None:
        """The page flagged as home, else the first page by slug."""
        pages = sorted((p for p in self._pages.values() if p.site_id == site_id), key=lambda p: p.slug)
        home = next((p for p in pages if p.is_home), pages[0] if pages else None)
        return copy.deepcopy(home) if home else None

    async def fetch_sections(self, page_id: str, published_only: bool = False) -> list[Section]:
        """All content records of a page, ordered by position."""
        sections = [Section.from_dict(copy.deepcopy(row)) for row in self._sections.values()]
        sections = [
            s for s in sections if s.page_id == page_id and (not published_only or s.status == "published")
        ]
        return sorted(sections, key=lambda s: (s.position, s.id))

    async def fetch_theme(self, site_id: str) -> Theme | None:
        """The site's stored theme completed by load_theme, else the theme set on the site."""
        row = self._themes.get(site_id)
        if row is not None:
            return load_theme(copy.deepcopy(row))
        site = self._sites.get(site_id)
        return copy.deepcopy(site.theme) if site and site.theme else None

    async def fetch_social_links(self, site_id: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self._social_links.get(site_id, []))

    async def fetch_blog_posts(self, site_id: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self._blog_posts.get(site_id, []))

    # -- writes -------------------------------------------------------------

    async def save_section(self, section: Section) -> Section:
        """Insert or replace a content record and return it as stored."""
        async with self._lock:
            self._sections[section.id] = copy.deepcopy(section.to_dict())
            row = copy.deepcopy(self._sections[section.id])
        return Section.from_dict(row)


# Singleton instance
site_repo = SiteRepo()
