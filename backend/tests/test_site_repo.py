"""Tests for SiteRepo storage: content records and themes in persisted shape."""

from __future__ import annotations

from backend.repos.site_repo import SiteRepo
from pagesmith.kernel.theme import default_theme
from pagesmith.kernel.types import Section, Site


async def test_save_section_then_fetch():
    """A saved record comes back from fetch_sections unchanged."""
    repo = SiteRepo()
    section = Section(
        id="s1",
        page_id="home",
        declared_type="hero",
        content={"heading": "Hi"},
        position=3,
        status="published",
        styling={"spacing": "large"},
        anchor_id="top",
    )

    saved = await repo.save_section(section)
    fetched = await repo.fetch_sections("home")

    assert saved == section
    assert fetched == [section]


async def test_save_section_replaces_existing():
    repo = SiteRepo()
    await repo.save_section(Section(id="s1", page_id="home", declared_type="text", content={"body": "old"}))
    await repo.save_section(Section(id="s1", page_id="home", declared_type="text", content={"body": "new"}))

    sections = await repo.fetch_sections("home")

    assert len(sections) == 1
    assert sections[0].content == {"body": "new"}


async def test_saved_section_is_isolated_from_caller():
    """Mutating the caller's object after save doesn't change the store."""
    repo = SiteRepo()
    section = Section(id="s1", page_id="home", declared_type="text", content={"body": "kept"})
    await repo.save_section(section)

    section.content["body"] = "changed"

    assert (await repo.fetch_sections("home"))[0].content == {"body": "kept"}


async def test_fetch_sections_ordered_and_filtered():
    repo = SiteRepo()
    await repo.save_section(Section(id="b", page_id="home", declared_type="text", position=2, status="published"))
    await repo.save_section(Section(id="a", page_id="home", declared_type="text", position=1, status="draft"))
    await repo.save_section(Section(id="c", page_id="other", declared_type="text", position=0, status="published"))

    assert [s.id for s in await repo.fetch_sections("home")] == ["a", "b"]
    assert [s.id for s in await repo.fetch_sections("home", published_only=True)] == ["b"]


async def test_theme_round_trip():
    repo = SiteRepo()
    theme = default_theme()
    theme.colors.primary = "#ff0000"
    repo.set_theme("site-1", theme)

    fetched = await repo.fetch_theme("site-1")

    assert fetched.colors == theme.colors
    assert fetched.typography == theme.typography
    assert fetched.dark_colors is None


async def test_partial_stored_theme_is_completed():
    """A stored theme missing roles never yields empty --color-* values."""
    repo = SiteRepo()
    theme = default_theme()
    theme.colors.border = ""
    repo.set_theme("site-1", theme)

    fetched = await repo.fetch_theme("site-1")

    assert fetched.colors.border == default_theme().colors.border


async def test_fetch_theme_falls_back_to_site_theme():
    repo = SiteRepo()
    theme = default_theme()
    repo.add_site(Site(id="site-1", slug="acme", theme=theme))

    assert (await repo.fetch_theme("site-1")).colors == theme.colors
    assert await repo.fetch_theme("missing") is None
