"""
Pagesmith Kernel — Header/Footer Overrides

A site defines a baseline header and footer; a page may override them.
The merge is pure and cheap enough to run on every render.

Rules, in order:
  1. no page override  -> the site value, unchanged (may be None)
  2. no site value     -> the page override, unchanged
  3. both present      -> field by field; every non-None page field wins,
                          collections (nav links, social links) are replaced
                          wholesale, never merged element by element
  4. both absent       -> None, and the block is not rendered at all
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pagesmith.kernel.primitives import FOOTER, HEADER, resolve_section
from pagesmith.kernel.types import Page, Section, Site

logger = logging.getLogger(__name__)


def merge_overrides(base: dict[str, Any] | None, override: dict[str, Any] | None) -> dict[str, Any] | None:
    """Merge a page-level override onto a site-level baseline."""
    if override is None or not isinstance(override, dict):
        return base
    if base is None or not isinstance(base, dict):
        return override

    merged = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        merged[key] = value
    return merged


def merge_header(site_header: dict[str, Any] | None, page_header: dict[str, Any] | None) -> dict[str, Any] | None:
    return merge_overrides(site_header, page_header)


def merge_footer(site_footer: dict[str, Any] | None, page_footer: dict[str, Any] | None) -> dict[str, Any] | None:
    return merge_overrides(site_footer, page_footer)


# ---------------------------------------------------------------------------
# Extraction from a page's content records
# ---------------------------------------------------------------------------


@dataclass
class SplitSections:
    """A page's records with header and footer pulled out of the body."""

    header: Section | None = None
    footer: Section | None = None
    body: list[Section] = field(default_factory=list)


def sort_sections(sections: list[Section]) -> list[Section]:
    """Ascending by position; ties broken by id so output is stable."""
    return sorted(sections, key=lambda s: (s.position, s.id))


def split_sections(sections: list[Section]) -> SplitSections:
    """
    Separate header/footer records from the ordered body.

    A page holds at most one of each. If stored data breaks that, the record
    with the lowest position wins and the rest are dropped with a warning.
    """
    split = SplitSections()
    for section in sort_sections(sections):
        primitive = resolve_section(section).primitive
        if primitive == HEADER:
            if split.header is None:
                split.header = section
            else:
                logger.warning("split_sections: extra header %s on page %s ignored", section.id, section.page_id)
            continue
        if primitive == FOOTER:
            if split.footer is None:
                split.footer = section
            else:
                logger.warning("split_sections: extra footer %s on page %s ignored", section.id, section.page_id)
            continue
        split.body.append(section)
    return split


@dataclass
class ResolvedChrome:
    header: dict[str, Any] | None
    footer: dict[str, Any] | None
    body: list[Section]


def resolve_chrome(site: Site | None, page: Page | None, sections: list[Section]) -> ResolvedChrome:
    """
    Resolve the header and footer a page renders with.

    The page-level override is the page's own header/footer payload with any
    header/footer content record layered on top; that override is then
    merged onto the site baseline.
    """
    split = split_sections(sections)

    page_header = merge_overrides(
        page.header if page else None,
        _record_content(split.header),
    )
    page_footer = merge_overrides(
        page.footer if page else None,
        _record_content(split.footer),
    )

    return ResolvedChrome(
        header=merge_header(site.header if site else None, page_header),
        footer=merge_footer(site.footer if site else None, page_footer),
        body=split.body,
    )


def _record_content(section: Section | None) -> dict[str, Any] | None:
    if section is None:
        return None
    if not isinstance(section.content, dict):
        logger.warning("resolve_chrome: %s record %s has non-object content", section.declared_type, section.id)
        return None
    return section.content
