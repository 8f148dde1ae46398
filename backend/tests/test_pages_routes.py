"""
Tests for public page serving.

GET /s/{site_slug} and GET /s/{site_slug}/{page_slug} render published
content only, with the site header/footer merged with page overrides.
"""

import hashlib

from httpx import AsyncClient


class TestPublicPages:
    """Published pages render through the shared pipeline."""

    async def test_home_page(self, client: AsyncClient, seeded_repo):
        """GET /s/acme serves the home page."""
        response = await client.get("/s/acme")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Welcome to Acme" in response.text
        assert "Fast" in response.text

    async def test_draft_sections_excluded(self, client: AsyncClient, seeded_repo):
        response = await client.get("/s/acme")
        assert "Work in progress" not in response.text
        assert "data-section-id" not in response.text

    async def test_body_order(self, client: AsyncClient, seeded_repo):
        text = (await client.get("/s/acme")).text
        assert text.index("Welcome to Acme") < text.index("Fast")

    async def test_header_record_overrides_site_header(self, client: AsyncClient, seeded_repo):
        text = (await client.get("/s/acme")).text
        assert "Acme Home" in text
        assert 'href="/s/acme/about"' in text

    async def test_page_footer_override(self, client: AsyncClient, seeded_repo):
        text = (await client.get("/s/acme/about")).text
        assert "About footer" in text
        assert "© Acme" not in text

    async def test_markdown_page(self, client: AsyncClient, seeded_repo):
        text = (await client.get("/s/acme/about")).text
        assert "<strong>build</strong>" in text

    async def test_seo_meta(self, client: AsyncClient, seeded_repo):
        text = (await client.get("/s/acme/about")).text
        assert "<title>About | Acme</title>" in text
        assert '<meta name="description" content="Acme makes things.">' in text
        assert 'content="https://pages.test/s/acme/about"' in text

    async def test_user_choice_init_script_in_head(self, client: AsyncClient, seeded_repo):
        text = (await client.get("/s/acme")).text
        head = text.split("</head>")[0]
        assert "localStorage.getItem('site-color-mode')" in head
        assert "data-color-mode-toggle" in text


class TestNotFound:
    """Missing sites and unpublished pages are 404s."""

    async def test_unknown_site(self, client: AsyncClient, seeded_repo):
        response = await client.get("/s/nope")
        assert response.status_code == 404
        assert "Page not found" in response.text

    async def test_unknown_page(self, client: AsyncClient, seeded_repo):
        assert (await client.get("/s/acme/missing")).status_code == 404

    async def test_draft_page(self, client: AsyncClient, seeded_repo):
        assert (await client.get("/s/acme/secret")).status_code == 404


class TestCacheHeaders:
    """Cache-Control and ETag on published pages."""

    async def test_cache_control(self, client: AsyncClient, seeded_repo):
        response = await client.get("/s/acme")
        assert response.headers["cache-control"].startswith("public, max-age=300")
        assert response.headers["x-content-type-options"] == "nosniff"

    async def test_etag_is_md5_of_body(self, client: AsyncClient, seeded_repo):
        response = await client.get("/s/acme")
        expected = hashlib.md5(response.content, usedforsecurity=False).hexdigest()
        assert response.headers["etag"] == f'"{expected}"'

    async def test_etag_stable(self, client: AsyncClient, seeded_repo):
        first = await client.get("/s/acme")
        second = await client.get("/s/acme")
        assert first.headers["etag"] == second.headers["etag"]


class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
