"""
Pagesmith Kernel — Shared Types

Data classes used across primitives, overrides, theme, blocks, renderer and
selection. These are the contracts that bind the kernel together.

Persisted shapes arrive as camelCase JSON (`pageId`, `declaredType`,
`mutedForeground`, `darkColors`); `to_dict` writes that shape and
`from_dict` reads it back, accepting snake_case keys as well.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

SECTION_STATUSES: frozenset[str] = frozenset({"draft", "published"})

COLOR_MODES: frozenset[str] = frozenset({"light", "dark", "system", "user_choice"})

# Palette roles in emission order, paired with their CSS custom property.
PALETTE_ROLES: tuple[tuple[str, str], ...] = (
    ("primary", "--color-primary"),
    ("secondary", "--color-secondary"),
    ("accent", "--color-accent"),
    ("background", "--color-background"),
    ("foreground", "--color-foreground"),
    ("muted", "--color-muted"),
    ("muted_foreground", "--color-muted-foreground"),
    ("border", "--color-border"),
)

PALETTE_KEYS: tuple[str, ...] = tuple(role for role, _ in PALETTE_ROLES)


class PagesmithError(Exception):
    """Raised for programming errors, never for content problems."""


def _pick(d: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among keys."""
    for key in keys:
        value = d.get(key)
        if value is not None:
            return value
    return default


# ---------------------------------------------------------------------------
# Content records
# ---------------------------------------------------------------------------


@dataclass
class Section:
    """
    One content record of a page.

    `content` is the polymorphic payload; its shape depends on the
    (primitive, preset) the resolver derives from `declared_type`.
    """

    id: str
    page_id: str
    declared_type: str
    content: dict[str, Any] = field(default_factory=dict)
    position: int = 0
    status: str = "draft"
    styling: dict[str, Any] | None = None
    anchor_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "pageId": self.page_id,
            "declaredType": self.declared_type,
            "content": self.content,
            "position": self.position,
            "status": self.status,
        }
        if self.styling is not None:
            d["stylingOverrides"] = self.styling
        if self.anchor_id is not None:
            d["anchorId"] = self.anchor_id
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Section:
        position = _pick(d, "position", default=0)
        try:
            position = int(position)
        except (TypeError, ValueError):
            position = 0
        status = _pick(d, "status", default="draft")
        return cls(
            id=str(d.get("id", "")),
            page_id=str(_pick(d, "pageId", "page_id", default="")),
            declared_type=str(_pick(d, "declaredType", "declared_type", "block_type", default="")),
            content=_pick(d, "content", default={}),
            position=position,
            status=status if isinstance(status, str) and status in SECTION_STATUSES else "draft",
            styling=_pick(d, "stylingOverrides", "styling_overrides", "styling"),
            anchor_id=_pick(d, "anchorId", "anchor_id"),
        )


@dataclass
class Page:
    """A page of a site. Header/footer are page-level override payloads."""

    id: str
    site_id: str
    slug: str
    title: str = ""
    status: str = "draft"
    is_home: bool = False
    header: dict[str, Any] | None = None
    footer: dict[str, Any] | None = None
    meta_title: str | None = None
    meta_description: str | None = None


@dataclass
class Site:
    """Root of a tenant's published presence."""

    id: str
    slug: str
    name: str = ""
    custom_domain: str | None = None
    domain_verified: bool = False
    header: dict[str, Any] | None = None
    footer: dict[str, Any] | None = None
    color_mode: str = "light"
    theme: Theme | None = None
    meta_description: str | None = None


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------


@dataclass
class ColorPalette:
    """Eight role colors plus the generator's rationale."""

    primary: str
    secondary: str
    accent: str
    background: str
    foreground: str
    muted: str
    muted_foreground: str
    border: str
    rationale: str = ""

    def get(self, role: str) -> str:
        return getattr(self, role)

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "accent": self.accent,
            "background": self.background,
            "foreground": self.foreground,
            "muted": self.muted,
            "mutedForeground": self.muted_foreground,
            "border": self.border,
            "rationale": self.rationale,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any], fallback: ColorPalette | None = None) -> ColorPalette:
        """Build a palette; roles missing from `d` are taken from `fallback`."""

        def role(name: str, *keys: str) -> str:
            value = _pick(d, *keys)
            if isinstance(value, str) and value.strip():
                return value.strip()
            return fallback.get(name) if fallback is not None else ""

        return cls(
            primary=role("primary", "primary"),
            secondary=role("secondary", "secondary"),
            accent=role("accent", "accent"),
            background=role("background", "background"),
            foreground=role("foreground", "foreground"),
            muted=role("muted", "muted"),
            muted_foreground=role("muted_foreground", "mutedForeground", "muted_foreground"),
            border=role("border", "border"),
            rationale=str(d.get("rationale") or (fallback.rationale if fallback else "")),
        )


@dataclass
class FontConfig:
    family: str
    weights: list[int] = field(default_factory=lambda: [400])

    def to_dict(self) -> dict[str, Any]:
        return {"family": self.family, "weights": list(self.weights)}


@dataclass
class Typography:
    """Heading/body fonts, the type scale and line heights."""

    heading_font: FontConfig
    body_font: FontConfig
    scale: dict[str, str] = field(default_factory=dict)
    line_heights: dict[str, str] = field(default_factory=dict)
    rationale: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "headingFont": self.heading_font.to_dict(),
            "bodyFont": self.body_font.to_dict(),
            "scale": dict(self.scale),
            "lineHeights": dict(self.line_heights),
            "rationale": self.rationale,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any], fallback: Typography | None = None) -> Typography:
        def font(*keys: str, default: FontConfig | None) -> FontConfig:
            raw = _pick(d, *keys)
            if isinstance(raw, dict) and isinstance(raw.get("family"), str) and raw["family"].strip():
                weights = raw.get("weights")
                if not isinstance(weights, list):
                    weights = list(default.weights) if default else [400]
                return FontConfig(family=raw["family"].strip(), weights=weights)
            if default is not None:
                return FontConfig(family=default.family, weights=list(default.weights))
            return FontConfig(family="Inter")

        scale = dict(fallback.scale) if fallback else {}
        if isinstance(d.get("scale"), dict):
            scale.update(d["scale"])
        line_heights = dict(fallback.line_heights) if fallback else {}
        raw_lh = _pick(d, "lineHeights", "line_heights")
        if isinstance(raw_lh, dict):
            line_heights.update(raw_lh)

        return cls(
            heading_font=font("headingFont", "heading_font", default=fallback.heading_font if fallback else None),
            body_font=font("bodyFont", "body_font", default=fallback.body_font if fallback else None),
            scale=scale,
            line_heights=line_heights,
            rationale=str(d.get("rationale") or ""),
        )


@dataclass
class Theme:
    """
    Versioned design-token bundle.

    `dark_colors` may be None on an authored theme; a theme returned by
    `theme.resolve_theme` always carries both palettes.
    """

    colors: ColorPalette
    typography: Typography
    components: dict[str, Any] = field(default_factory=dict)
    dark_colors: ColorPalette | None = None
    css_variables: str = ""
    design_system_extensions: dict[str, Any] = field(default_factory=dict)
    generated_at: str | None = None
    provider: str | None = None
    model: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "colors": self.colors.to_dict(),
            "typography": self.typography.to_dict(),
            "components": self.components,
            "cssVariables": self.css_variables,
            "designSystemExtensions": self.design_system_extensions,
            "generatedAt": self.generated_at,
            "provider": self.provider,
            "model": self.model,
        }
        if self.dark_colors is not None:
            d["darkColors"] = self.dark_colors.to_dict()
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any], fallback: Theme | None = None) -> Theme:
        """
        Build a theme from its persisted shape.

        With a `fallback`, every palette role, font and component token that
        `d` omits is filled from it, so a partially generated theme still
        yields a complete one.
        """
        colors_raw = d.get("colors") if isinstance(d.get("colors"), dict) else {}
        dark_raw = _pick(d, "darkColors", "dark_colors")
        typo_raw = d.get("typography") if isinstance(d.get("typography"), dict) else {}
        components = dict(fallback.components) if fallback else {}
        if isinstance(d.get("components"), dict):
            components.update(d["components"])

        colors = ColorPalette.from_dict(colors_raw, fallback.colors if fallback else None)
        dark_colors = None
        if isinstance(dark_raw, dict) and dark_raw:
            dark_colors = ColorPalette.from_dict(dark_raw, fallback.dark_colors if fallback else None)

        extensions = _pick(d, "designSystemExtensions", "design_system_extensions", "tailwindExtends")
        return cls(
            colors=colors,
            dark_colors=dark_colors,
            typography=Typography.from_dict(typo_raw, fallback.typography if fallback else None),
            components=components,
            css_variables=_pick(d, "cssVariables", "css_variables", default=""),
            design_system_extensions=extensions if isinstance(extensions, dict) else {},
            generated_at=_pick(d, "generatedAt", "generated_at"),
            provider=_pick(d, "provider", "aiProvider"),
            model=_pick(d, "model", "aiModel"),
        )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolvedType:
    """Canonical (primitive, preset) pair for a content record."""

    primitive: str
    preset: str | None = None

    @property
    def key(self) -> str:
        return f"{self.primitive}/{self.preset}" if self.preset else self.primitive


@dataclass
class BlockContext:
    """
    Read-only inputs a block renderer may consult.

    Deliberately carries no editing flag: renderers behave identically in
    the editor preview and on the public site.
    """

    theme: Theme
    base_path: str = ""
    site_name: str = ""
    social_links: list[dict[str, Any]] = field(default_factory=list)
    blog_posts: list[dict[str, Any]] = field(default_factory=list)
    color_mode: str = "light"


@dataclass
class RenderNode:
    """
    One node of the render tree.

    `html` is the node's own markup; `children` are serialized after it,
    inside the node's tag. A node without a tag serializes to its content
    only.
    """

    kind: str  # "block" | "placeholder" | "degraded" | "decorator" | "affordance"
    tag: str | None = "section"
    attrs: dict[str, str] = field(default_factory=dict)
    html: str = ""
    children: list[RenderNode] = field(default_factory=list)
    section_id: str | None = None
    primitive: str | None = None
    preset: str | None = None

    def walk(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class DocumentOptions:
    """Document-level options for render_document."""

    title: str = ""
    description: str | None = None
    site_name: str = ""
    url: str | None = None
    lang: str = "en"
    extra_css: str = ""
    storage_key: str = "site-color-mode"
