"""
Pagesmith Kernel — Theme Token Engine

Pure function: (theme, color_mode) → StyleDeclarations
No IO. Deterministic: same input → same output, always.

Every theme that reaches rendering carries a light and a dark palette. When
the authored theme has no dark palette one is synthesized from the light
one: surfaces are pushed into a dark lightness band, text into a light band,
and brand colors keep their hue but are lifted enough to read on dark
surfaces.

Color modes:
  light        light palette on :root
  dark         dark palette on :root
  system       light on :root, dark inside prefers-color-scheme: dark
  user_choice  light on :root, dark under .dark, plus a pre-paint script
               that applies .dark from the persisted preference before the
               first frame is shown
"""

from __future__ import annotations

import colorsys
import copy
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any

from pagesmith.kernel.types import (
    COLOR_MODES,
    PALETTE_KEYS,
    PALETTE_ROLES,
    ColorPalette,
    Theme,
)

logger = logging.getLogger(__name__)

DARK_SELECTOR = ".dark"
DARK_CLASS = "dark"
DARK_MEDIA = "(prefers-color-scheme: dark)"
COLOR_MODE_STORAGE_KEY = "site-color-mode"

# ---------------------------------------------------------------------------
# Default theme
# ---------------------------------------------------------------------------

DEFAULT_THEME_DATA: dict[str, Any] = {
    "colors": {
        "primary": "#10B981",
        "secondary": "#64748b",
        "accent": "#0ea5e9",
        "background": "#ffffff",
        "foreground": "#0f172a",
        "muted": "#f1f5f9",
        "mutedForeground": "#64748b",
        "border": "#e2e8f0",
        "rationale": "Professional emerald green color palette for trust and growth.",
    },
    "typography": {
        "headingFont": {"family": "Inter", "weights": [400, 500, 600, 700]},
        "bodyFont": {"family": "Inter", "weights": [400, 500]},
        "scale": {
            "h1": "3rem",
            "h2": "2.25rem",
            "h3": "1.875rem",
            "h4": "1.5rem",
            "body": "1rem",
            "small": "0.875rem",
        },
        "lineHeights": {"tight": "1.25", "normal": "1.5", "relaxed": "1.75"},
        "rationale": "Inter provides excellent readability across all sizes.",
    },
    "components": {
        "button": {"borderRadius": "0.5rem", "paddingX": "1rem", "paddingY": "0.5rem"},
        "card": {
            "borderRadius": "0.75rem",
            "padding": "1.5rem",
            "shadow": "0 1px 3px rgba(0,0,0,0.1)",
            "border": "#e2e8f0",
        },
        "input": {
            "borderRadius": "0.375rem",
            "borderColor": "#e2e8f0",
            "focusRing": "#10B981",
            "padding": "0.75rem",
        },
        "badge": {"borderRadius": "9999px", "padding": "0.25rem 0.75rem"},
        "rationale": "Clean, modern component styles with subtle shadows.",
    },
    "cssVariables": "",
    "designSystemExtensions": {},
    "generatedAt": "2025-01-01T00:00:00.000Z",
    "provider": "default",
    "model": "fallback",
}


def default_theme() -> Theme:
    """A fresh copy of the built-in theme, used when a site has none."""
    return Theme.from_dict(copy.deepcopy(DEFAULT_THEME_DATA))


# ---------------------------------------------------------------------------
# Color parsing
# ---------------------------------------------------------------------------

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGB_RE = re.compile(r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*[\d.]+%?\s*)?\)$")


def parse_color(value: Any) -> tuple[float, float, float] | None:
    """
    Parse a CSS color into (r, g, b) floats in [0, 1].

    Accepts #rgb, #rgba, #rrggbb, #rrggbbaa and rgb()/rgba(); alpha is
    dropped. Returns None for anything else.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()

    m = _HEX_RE.match(text)
    if m:
        digits = m.group(1)
        if len(digits) in (3, 4):
            digits = "".join(c * 2 for c in digits[:3])
        digits = digits[:6]
        return tuple(int(digits[i : i + 2], 16) / 255 for i in (0, 2, 4))  # type: ignore[return-value]

    m = _RGB_RE.match(text.lower())
    if m:
        channels = [min(int(c), 255) / 255 for c in m.groups()]
        return channels[0], channels[1], channels[2]

    return None


def to_hex(rgb: tuple[float, float, float]) -> str:
    return "#" + "".join(f"{round(max(0.0, min(1.0, c)) * 255):02x}" for c in rgb)


def relative_luminance(value: Any) -> float | None:
    """Perceived brightness in [0, 1], or None when unparseable."""
    rgb = parse_color(value)
    if rgb is None:
        return None
    r, g, b = rgb
    return 0.299 * r + 0.587 * g + 0.114 * b


def is_color_dark(value: Any) -> bool:
    luminance = relative_luminance(value)
    return luminance is not None and luminance < 0.5


# ---------------------------------------------------------------------------
# Dark palette synthesis
# ---------------------------------------------------------------------------

# role -> (band floor, band span, invert, max saturation)
# New lightness is floor + span * (1 - lightness) when inverted, floor + span * lightness otherwise.
_SURFACE_BANDS: dict[str, tuple[float, float, bool, float]] = {
    "background": (0.04, 0.08, True, 0.25),
    "muted": (0.10, 0.10, True, 0.25),
    "border": (0.16, 0.12, True, 0.20),
    "foreground": (0.86, 0.10, True, 0.20),
    "muted_foreground": (0.60, 0.16, True, 0.20),
}

_BRAND_ROLES = ("primary", "secondary", "accent")
_BRAND_MIN_LIGHTNESS = 0.55
_BRAND_MAX_LIGHTNESS = 0.80

# Used when a role's light color can't be parsed.
_DARK_ROLE_DEFAULTS: dict[str, str] = {
    "primary": "#a1a1aa",
    "secondary": "#a1a1aa",
    "accent": "#a1a1aa",
    "background": "#0a0a0b",
    "foreground": "#fafafa",
    "muted": "#18181b",
    "muted_foreground": "#a1a1aa",
    "border": "#27272a",
}

SYNTHESIZED_RATIONALE = "Auto-generated dark mode palette"


def synthesize_dark_palette(light: ColorPalette) -> ColorPalette:
    """
    Derive a dark palette from a light one.

    Deterministic and total: every role is populated and nothing raises,
    whatever the light palette holds.
    """
    roles = {role: _dark_role(role, light.get(role) if light is not None else None) for role, _ in PALETTE_ROLES}
    return ColorPalette(rationale=SYNTHESIZED_RATIONALE, **roles)


def _dark_role(role: str, value: Any) -> str:
    rgb = parse_color(value)
    if rgb is None:
        if role in _BRAND_ROLES and isinstance(value, str) and value.strip():
            # Named colors and var() references pass through untouched.
            return value.strip()
        return _DARK_ROLE_DEFAULTS[role]

    hue, lightness, saturation = colorsys.rgb_to_hls(*rgb)

    if role in _BRAND_ROLES:
        new_l = min(max(lightness, _BRAND_MIN_LIGHTNESS), _BRAND_MAX_LIGHTNESS)
        return to_hex(colorsys.hls_to_rgb(hue, new_l, saturation))

    floor, span, invert, max_s = _SURFACE_BANDS[role]
    source = 1 - lightness if invert else lightness
    new_l = floor + span * source
    return to_hex(colorsys.hls_to_rgb(hue, new_l, min(saturation, max_s)))


def resolve_theme(theme: Theme | None) -> Theme:
    """
    Return a theme guaranteed to carry both palettes.

    A missing theme becomes the default theme; a missing dark palette is
    synthesized. The input is never mutated.
    """
    if theme is None:
        theme = default_theme()
    if theme.dark_colors is not None:
        return theme
    return replace(theme, dark_colors=synthesize_dark_palette(theme.colors))


def load_theme(data: Any) -> Theme:
    """
    Build a theme from its persisted shape, completing whatever is missing.

    Light roles, fonts and component tokens fall back to the default theme;
    roles missing from an authored dark palette are taken from the
    synthesized one.
    """
    if not isinstance(data, dict) or not data:
        return default_theme()

    theme = Theme.from_dict(data, fallback=default_theme())
    if theme.dark_colors is not None:
        synthesized = synthesize_dark_palette(theme.colors)
        missing = {role: synthesized.get(role) for role in PALETTE_KEYS if not theme.dark_colors.get(role)}
        if missing:
            theme = replace(theme, dark_colors=replace(theme.dark_colors, **missing))
    return theme


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CssRule:
    selector: str
    properties: tuple[tuple[str, str], ...]
    media: str | None = None

    def to_css(self) -> str:
        body = "\n".join(f"  {name}: {value};" for name, value in self.properties)
        rule = f"{self.selector} {{\n{body}\n}}"
        if self.media:
            indented = "\n".join(f"  {line}" for line in rule.splitlines())
            return f"@media {self.media} {{\n{indented}\n}}"
        return rule


@dataclass(frozen=True)
class StyleDeclarations:
    """
    The styling a page ships with.

    `rules` are what gets emitted for the color mode. `light_properties` and
    `dark_properties` always hold the full resolved palettes, whatever the
    mode, so callers (color mode previews, the toggle) can rely on both.
    """

    color_mode: str
    rules: tuple[CssRule, ...]
    light_properties: dict[str, str] = field(default_factory=dict)
    dark_properties: dict[str, str] = field(default_factory=dict)
    font_properties: dict[str, str] = field(default_factory=dict)
    init_script: str | None = None

    def to_css(self) -> str:
        return "\n".join(rule.to_css() for rule in self.rules)

    def computed(
        self,
        root_classes: set[str] | frozenset[str] | tuple = (),
        prefers_dark: bool = False,
    ) -> dict[str, str]:
        """
        Custom properties in effect on the document root for a given state.

        Mirrors the cascade: :root rules always apply, media-scoped rules
        apply when the OS prefers dark, and .dark rules apply when the root
        carries the dark class. Later rules win.
        """
        classes = set(root_classes)
        result: dict[str, str] = {}
        for rule in self.rules:
            if rule.media is not None and not prefers_dark:
                continue
            if rule.selector == DARK_SELECTOR and DARK_CLASS not in classes:
                continue
            result.update(rule.properties)
        return result


# Characters that end a declaration, a rule, a quoted font name or the <style> element.
_UNSAFE_CSS_VALUE = re.compile(r'[<>{};"\\]')

DEFAULT_FONT_FAMILY = "Inter"


def _css_value(name: str, value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip() and not _UNSAFE_CSS_VALUE.search(value):
        return value
    logger.warning("theme: rejected value %r for %s, using %s", value, name, fallback)
    return fallback


def font_properties(theme: Theme) -> dict[str, str]:
    heading = _css_value("--font-heading", theme.typography.heading_font.family, DEFAULT_FONT_FAMILY)
    body = _css_value("--font-body", theme.typography.body_font.family, DEFAULT_FONT_FAMILY)
    return {
        "--font-heading": f'"{heading}", sans-serif',
        "--font-body": f'"{body}", sans-serif',
    }


def palette_properties(palette: ColorPalette, dark: bool = False) -> dict[str, str]:
    """
    Custom properties for a palette. A role whose value is empty or could
    break out of the style block gets the default theme's color instead.
    """
    defaults = _DARK_ROLE_DEFAULTS if dark else _light_role_defaults()
    return {var: _css_value(var, palette.get(role), defaults[role]) for role, var in PALETTE_ROLES}


def _light_role_defaults() -> dict[str, str]:
    colors = default_theme().colors
    return {role: colors.get(role) for role in PALETTE_KEYS}


def materialize(theme: Theme | None, color_mode: str = "light") -> StyleDeclarations:
    """
    Produce the style declarations for a theme under a color mode.
    Pure function. No side effects. No IO.
    """
    resolved = resolve_theme(theme)
    light = palette_properties(resolved.colors)
    dark = palette_properties(resolved.dark_colors, dark=True)  # type: ignore[arg-type]
    fonts = font_properties(resolved)

    if color_mode not in COLOR_MODES:
        logger.warning("materialize: unknown color mode %r, using light", color_mode)
        color_mode = "light"

    root_palette = dark if color_mode == "dark" else light
    rules = [CssRule(":root", tuple({**root_palette, **fonts}.items()))]
    init_script = None

    if color_mode == "system":
        rules.append(CssRule(":root", tuple(dark.items()), media=DARK_MEDIA))
    elif color_mode == "user_choice":
        rules.append(CssRule(DARK_SELECTOR, tuple(dark.items())))
        init_script = color_mode_script()

    return StyleDeclarations(
        color_mode=color_mode,
        rules=tuple(rules),
        light_properties=light,
        dark_properties=dark,
        font_properties=fonts,
        init_script=init_script,
    )


def color_mode_script(storage_key: str = COLOR_MODE_STORAGE_KEY) -> str:
    """
    Pre-paint initializer for user_choice sites.

    Must be placed in <head> ahead of any rendered content so the dark class
    is on the root before the first frame.
    """
    return (
        "(function() {\n"
        "  try {\n"
        f"    var mode = localStorage.getItem('{storage_key}');\n"
        "    if (mode === 'dark') {\n"
        f"      document.documentElement.classList.add('{DARK_CLASS}');\n"
        "    }\n"
        "  } catch (e) {}\n"
        "})();"
    )


# ---------------------------------------------------------------------------
# Derived theme output
# ---------------------------------------------------------------------------


def regenerate_theme_output(theme: Theme) -> Theme:
    """
    Rebuild css_variables and design_system_extensions after manual edits,
    so the derived artifacts stay in sync with colors and typography.
    """
    resolved = resolve_theme(theme)
    light_rule = CssRule(":root", tuple({**palette_properties(resolved.colors), **font_properties(resolved)}.items()))
    dark_properties = palette_properties(resolved.dark_colors, dark=True)  # type: ignore[arg-type]
    dark_rule = CssRule(DARK_SELECTOR, tuple(dark_properties.items()))

    button = theme.components.get("button") if isinstance(theme.components.get("button"), dict) else {}
    extensions = {
        "colors": {
            "primary": theme.colors.primary,
            "secondary": theme.colors.secondary,
            "accent": theme.colors.accent,
            "background": theme.colors.background,
            "foreground": theme.colors.foreground,
            "muted": theme.colors.muted,
            "muted-foreground": theme.colors.muted_foreground,
            "border": theme.colors.border,
        },
        "fontFamily": {
            "heading": [theme.typography.heading_font.family, "sans-serif"],
            "body": [theme.typography.body_font.family, "sans-serif"],
        },
        "borderRadius": {"DEFAULT": button.get("borderRadius", "0.5rem")},
    }
    return replace(
        theme,
        css_variables=f"{light_rule.to_css()}\n\n{dark_rule.to_css()}",
        design_system_extensions=extensions,
    )
