"""
Tests for the editor preview and outline endpoints.

The preview renders drafts and unsaved content through the same pipeline
as public pages, adding selection hooks around each block.
"""

from httpx import AsyncClient


class TestStoredPreview:
    """GET /api/sites/{site_id}/pages/{page_id}/preview"""

    async def test_includes_drafts(self, client: AsyncClient, seeded_repo):
        response = await client.get("/api/sites/site-1/pages/home/preview")
        assert response.status_code == 200
        assert "Work in progress" in response.text
        assert response.headers["cache-control"] == "no-store"

    async def test_blocks_carry_selection_hooks(self, client: AsyncClient, seeded_repo):
        text = (await client.get("/api/sites/site-1/pages/home/preview")).text
        for section_id in ("hero", "wip", "feat"):
            assert f'data-section-id="{section_id}"' in text
        assert 'data-section-id="hdr"' not in text

    async def test_selected_block_highlighted(self, client: AsyncClient, seeded_repo):
        text = (await client.get("/api/sites/site-1/pages/home/preview", params={"selected": "feat"})).text
        assert 'class="ps-selectable ps-selected" data-section-id="feat"' in text

    async def test_hovered_block_highlighted(self, client: AsyncClient, seeded_repo):
        text = (await client.get("/api/sites/site-1/pages/home/preview", params={"hovered": "hero"})).text
        assert 'class="ps-selectable ps-hovered" data-section-id="hero"' in text

    async def test_unknown_page(self, client: AsyncClient, seeded_repo):
        response = await client.get("/api/sites/site-1/pages/nope/preview")
        assert response.status_code == 404
        assert response.json()["detail"] == "Page not found."

    async def test_page_of_other_site(self, client: AsyncClient, seeded_repo):
        assert (await client.get("/api/sites/other/pages/home/preview")).status_code == 404


class TestUnsavedPreview:
    """POST /api/preview"""

    async def test_renders_unsaved_sections(self, client: AsyncClient):
        response = await client.post(
            "/api/preview",
            json={
                "title": "Draft",
                "sections": [
                    {"id": "b", "declared_type": "cta", "content": {"heading": "Second"}, "position": 2},
                    {"id": "a", "declared_type": "hero", "content": {"heading": "First"}, "position": 1},
                ],
                "site_header": {"siteName": "Acme"},
                "page_header": {"siteName": "Override"},
            },
        )
        assert response.status_code == 200
        text = response.text
        assert text.index("First") < text.index("Second")
        assert "Override" in text
        assert 'data-section-id="a"' in text

    async def test_bad_blocks_do_not_fail_the_page(self, client: AsyncClient):
        response = await client.post(
            "/api/preview",
            json={
                "sections": [
                    {"id": "x", "declared_type": "pricing_table", "content": {}},
                    {"id": "y", "declared_type": "hero", "content": "not an object", "position": 1},
                    {"id": "z", "declared_type": "text", "content": {"body": "<p>Survivor</p>"}, "position": 2},
                ]
            },
        )
        assert response.status_code == 200
        assert "Unknown block type: pricing_table" in response.text
        assert "could not be displayed" in response.text
        assert "<p>Survivor</p>" in response.text

    async def test_theme_applied(self, client: AsyncClient):
        response = await client.post("/api/preview", json={"theme": {"colors": {"primary": "#ff0000"}}})
        assert "--color-primary: #ff0000;" in response.text

    async def test_system_color_mode(self, client: AsyncClient):
        response = await client.post("/api/preview", json={"color_mode": "system"})
        assert "@media (prefers-color-scheme: dark)" in response.text

    async def test_unknown_field_rejected(self, client: AsyncClient):
        response = await client.post("/api/preview", json={"sections": [], "bogus": True})
        assert response.status_code == 422

    async def test_invalid_color_mode_rejected(self, client: AsyncClient):
        response = await client.post("/api/preview", json={"color_mode": "sepia"})
        assert response.status_code == 422

    async def test_empty_page_message(self, client: AsyncClient):
        response = await client.post("/api/preview", json={})
        assert "This page has no content yet." in response.text


class TestOutline:
    """GET /api/sites/{site_id}/pages/{page_id}/outline"""

    async def test_rows_in_render_order(self, client: AsyncClient, seeded_repo):
        response = await client.get("/api/sites/site-1/pages/home/outline")
        assert response.status_code == 200
        data = response.json()
        assert [row["id"] for row in data["rows"]] == ["hero", "wip", "feat"]
        assert [row["label"] for row in data["rows"]] == ["Hero", "Text", "Features"]
        assert data["header_id"] == "hdr"
        assert data["footer_id"] is None

    async def test_rows_carry_resolved_type(self, client: AsyncClient, seeded_repo):
        rows = (await client.get("/api/sites/site-1/pages/home/outline")).json()["rows"]
        assert rows[0]["primitive"] == "hero_primitive"
        assert rows[0]["preset"] == "full"
        assert rows[1]["status"] == "draft"

    async def test_unknown_page(self, client: AsyncClient, seeded_repo):
        assert (await client.get("/api/sites/site-1/pages/nope/outline")).status_code == 404
