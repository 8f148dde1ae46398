"""
Pytest configuration and fixtures for Pagesmith backend tests.
"""

from __future__ import annotations

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing config
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("PUBLIC_URL", "https://pages.test")

from backend.main import app  # noqa: E402
from backend.repos.site_repo import site_repo  # noqa: E402
from pagesmith.kernel.types import Page, Section, Site  # noqa: E402


@pytest.fixture
async def client():
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def seeded_repo():
    """
    One site with a published home page, a published about page, and a
    draft page. The home page mixes published and draft records.
    """
    site_repo.clear()
    site_repo.add_site(
        Site(
            id="site-1",
            slug="acme",
            name="Acme",
            header={"siteName": "Acme", "links": [{"label": "About", "url": "/about"}]},
            footer={"copyright": "© Acme"},
            color_mode="user_choice",
            meta_description="Acme makes things.",
        )
    )
    site_repo.add_page(Page(id="home", site_id="site-1", slug="home", title="Home", status="published", is_home=True))
    site_repo.add_page(
        Page(id="about", site_id="site-1", slug="about", title="About", status="published", footer={"copyright": "About footer"})
    )
    site_repo.add_page(Page(id="secret", site_id="site-1", slug="secret", title="Secret", status="draft"))

    site_repo.add_section(
        Section(id="hero", page_id="home", declared_type="hero", content={"heading": "Welcome to Acme"}, position=0, status="published")
    )
    site_repo.add_section(
        Section(id="wip", page_id="home", declared_type="text", content={"body": "<p>Work in progress</p>"}, position=1, status="draft")
    )
    site_repo.add_section(
        Section(
            id="feat",
            page_id="home",
            declared_type="cards",
            content={"template": "feature", "items": [{"title": "Fast"}]},
            position=2,
            status="published",
        )
    )
    site_repo.add_section(
        Section(id="hdr", page_id="home", declared_type="header", content={"siteName": "Acme Home"}, position=-1, status="published")
    )
    site_repo.add_section(
        Section(id="about-text", page_id="about", declared_type="richtext", content={"mode": "markdown", "markdown": "We **build**."}, status="published")
    )
    site_repo.set_blog_posts("site-1", [{"id": "p1", "title": "Launch day", "slug": "launch"}])
    yield site_repo
    site_repo.clear()
