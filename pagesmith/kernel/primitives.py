"""
Pagesmith Kernel — Primitive/Preset Resolution

Maps a section's declared type plus its content payload to a canonical
(primitive, preset) pair. The block vocabulary evolved over time: older
records carry a declared type such as "features" or "gallery", newer ones
carry the primitive name and keep the preset inside the payload. Every
downstream consumer (block registry, outline, styling controls) goes through
`resolve` so that both generations are handled uniformly without a data
migration.

`resolve` is total. It never raises, whatever it is handed.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from pagesmith.kernel.types import ResolvedType, Section

# ---------------------------------------------------------------------------
# Tables (immutable, built once at import)
# ---------------------------------------------------------------------------

HEADER = "header"
FOOTER = "footer"

# Legacy declared type -> fixed (primitive, preset), independent of payload.
LEGACY_BLOCK_TYPES: MappingProxyType[str, ResolvedType] = MappingProxyType(
    {
        # richtext
        "text": ResolvedType("richtext", "visual"),
        "markdown": ResolvedType("richtext", "markdown"),
        "article": ResolvedType("richtext", "article"),
        # hero_primitive
        "hero": ResolvedType("hero_primitive", "full"),
        "cta": ResolvedType("hero_primitive", "cta"),
        "heading": ResolvedType("hero_primitive", "title-only"),
        # cards
        "features": ResolvedType("cards", "feature"),
        "testimonials": ResolvedType("cards", "testimonial"),
        "product_grid": ResolvedType("cards", "product"),
        # media
        "image": ResolvedType("media", "single"),
        "gallery": ResolvedType("media", "gallery"),
        "embed": ResolvedType("media", "embed"),
        # blog
        "blog_featured": ResolvedType("blog", "featured"),
        "blog_grid": ResolvedType("blog", "grid"),
        # standalone
        "header": ResolvedType("header"),
        "footer": ResolvedType("footer"),
        "contact": ResolvedType("contact"),
        "social_links": ResolvedType("social_links"),
    }
)

# Current primitive -> (payload field carrying the preset, default preset).
PRESET_FIELDS: MappingProxyType[str, tuple[str, str]] = MappingProxyType(
    {
        "richtext": ("mode", "visual"),
        "hero_primitive": ("layout", "full"),
        "cards": ("template", "feature"),
        "media": ("mode", "single"),
        "blog": ("mode", "featured"),
    }
)

PRESETS: MappingProxyType[str, frozenset[str]] = MappingProxyType(
    {
        "richtext": frozenset({"visual", "markdown", "article"}),
        "hero_primitive": frozenset({"full", "cta", "title-only"}),
        "cards": frozenset({"feature", "testimonial", "product"}),
        "media": frozenset({"single", "gallery", "embed"}),
        "blog": frozenset({"featured", "grid"}),
    }
)

_LABELS: MappingProxyType[str, str] = MappingProxyType(
    {
        "header": "Header",
        "footer": "Footer",
        "contact": "Contact Form",
        "social_links": "Social Links",
        "richtext/visual": "Text",
        "richtext/markdown": "Markdown",
        "richtext/article": "Article",
        "hero_primitive/full": "Hero",
        "hero_primitive/cta": "Call to Action",
        "hero_primitive/title-only": "Heading",
        "cards/feature": "Features",
        "cards/testimonial": "Testimonials",
        "cards/product": "Product Grid",
        "media/single": "Image",
        "media/gallery": "Gallery",
        "media/embed": "Embed",
        "blog/featured": "Featured Post",
        "blog/grid": "Post Grid",
    }
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve(declared_type: Any, content: Any = None) -> ResolvedType:
    """
    Resolve a declared type and payload to its (primitive, preset).

    Legacy types map through a fixed table. Current primitive names read
    their preset from the payload, falling back to the primitive's default
    when the field is absent or holds an unrecognized value. Anything else
    maps to itself with no preset, so block types newer than this table
    still flow through to the renderer.
    """
    if not isinstance(declared_type, str):
        declared_type = "" if declared_type is None else str(declared_type)

    legacy = LEGACY_BLOCK_TYPES.get(declared_type)
    if legacy is not None:
        return legacy

    preset_field = PRESET_FIELDS.get(declared_type)
    if preset_field is None:
        return ResolvedType(declared_type, None)

    field_name, default = preset_field
    preset = content.get(field_name) if isinstance(content, dict) else None
    if not isinstance(preset, str) or preset not in PRESETS[declared_type]:
        preset = default
    return ResolvedType(declared_type, preset)


def resolve_section(section: Section) -> ResolvedType:
    return resolve(section.declared_type, section.content)


def is_header_or_footer(section: Section) -> bool:
    return resolve_section(section).primitive in (HEADER, FOOTER)


def block_label(resolved: ResolvedType) -> str:
    """Human-readable label for outline rows and the preview affordance."""
    label = _LABELS.get(resolved.key) or _LABELS.get(resolved.primitive)
    if label:
        return label
    return resolved.primitive.replace("_", " ").title() or "Block"
