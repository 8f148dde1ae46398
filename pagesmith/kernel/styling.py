"""
Pagesmith Kernel — Block Styling

Two concerns:
  - per-section styling overrides (spacing, text color mode, border, box
    background, background image + overlay, content width, text size),
    turned into inline declarations for the section wrapper
  - component styles derived from theme tokens (buttons, cards, headings)

Colors always go through the --color-* custom properties so a block follows
the page's light/dark switch without re-rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pagesmith.kernel.theme import parse_color
from pagesmith.kernel.types import Theme

BORDER_WIDTHS: dict[str, str] = {"thin": "1px", "medium": "2px", "thick": "4px"}

BORDER_RADII: dict[str, str] = {
    "none": "0",
    "small": "4px",
    "medium": "8px",
    "large": "16px",
    "full": "9999px",
}

CONTENT_WIDTHS: dict[str, str] = {"narrow": "48rem", "medium": "64rem", "full": "80rem"}

SPACINGS: dict[str, str] = {"none": "0", "small": "2rem", "medium": "4rem", "large": "6rem"}

TEXT_SIZES: dict[str, dict[str, str]] = {
    "small": {"body": "0.875rem", "h1": "1.75rem", "h2": "1.5rem", "h3": "1.25rem"},
    "normal": {"body": "1rem", "h1": "2.25rem", "h2": "1.875rem", "h3": "1.5rem"},
    "large": {"body": "1.125rem", "h1": "2.75rem", "h2": "2.25rem", "h3": "1.875rem"},
}

TEXT_COLORS: dict[str, dict[str, str]] = {
    "light": {"heading": "#FFFFFF", "body": "#F3F4F6", "muted": "#D1D5DB"},
    "dark": {"heading": "#111827", "body": "#374151", "muted": "#6B7280"},
    "auto": {
        "heading": "var(--color-foreground)",
        "body": "var(--color-foreground)",
        "muted": "var(--color-muted-foreground)",
    },
}

# Payload keys that count as styling when stored inline on legacy content.
STYLING_KEYS: frozenset[str] = frozenset(
    {
        "enableStyling",
        "spacing",
        "textColorMode",
        "showBorder",
        "borderWidth",
        "borderRadius",
        "borderColor",
        "boxBackgroundColor",
        "boxBackgroundOpacity",
        "useThemeBackground",
        "backgroundImage",
        "overlayColor",
        "overlayOpacity",
        "contentWidth",
        "textSize",
    }
)


def style_attr(declarations: dict[str, Any]) -> str:
    """Serialize declarations to an inline style string, skipping empty values."""
    return "; ".join(f"{name}: {value}" for name, value in declarations.items() if value not in (None, ""))


def _choice(table: dict[str, Any], value: Any, default: str) -> Any:
    return table[value] if isinstance(value, str) and value in table else table[default]


def hex_to_rgba(color: Any, opacity: Any) -> str:
    """Color + opacity (0-1 or 0-100) to rgba(); unparseable colors pass through."""
    rgb = parse_color(color)
    if rgb is None:
        return str(color or "")
    try:
        alpha = float(opacity)
    except (TypeError, ValueError):
        alpha = 1.0
    if alpha > 1:
        alpha = alpha / 100
    alpha = max(0.0, min(1.0, alpha))
    r, g, b = (round(c * 255) for c in rgb)
    return f"rgba({r}, {g}, {b}, {alpha:g})"


# ---------------------------------------------------------------------------
# Section styling
# ---------------------------------------------------------------------------


@dataclass
class SectionStyles:
    section: dict[str, str] = field(default_factory=dict)
    container: dict[str, str] = field(default_factory=dict)
    overlay: dict[str, str] | None = None
    text_colors: dict[str, str] = field(default_factory=lambda: dict(TEXT_COLORS["auto"]))
    text_sizes: dict[str, str] = field(default_factory=dict)
    content_width: str = CONTENT_WIDTHS["full"]


def effective_styling(content: Any, overrides: dict[str, Any] | None) -> dict[str, Any]:
    """
    Styling for a section: styling keys found inline in the payload (how
    older records store it), overlaid with the record's styling overrides.
    """
    styling: dict[str, Any] = {}
    if isinstance(content, dict):
        styling.update({k: v for k, v in content.items() if k in STYLING_KEYS and v is not None})
    if isinstance(overrides, dict):
        styling.update({k: v for k, v in overrides.items() if v is not None})
    return styling


def build_section_styles(styling: dict[str, Any]) -> SectionStyles:
    """
    Translate styling fields into declarations. Unknown enum values fall back
    to defaults rather than failing.
    """
    result = SectionStyles()

    text_size = styling.get("textSize")
    if isinstance(text_size, str) and text_size in TEXT_SIZES:
        result.text_sizes = dict(TEXT_SIZES[text_size])
    result.content_width = _choice(CONTENT_WIDTHS, styling.get("contentWidth"), "full")
    result.text_colors = dict(_choice(TEXT_COLORS, styling.get("textColorMode"), "auto"))

    spacing = styling.get("spacing")
    if isinstance(spacing, str) and spacing in SPACINGS:
        spacing = SPACINGS[spacing]
        result.section["padding-top"] = spacing
        result.section["padding-bottom"] = spacing

    result.section["--text-heading"] = result.text_colors["heading"]
    result.section["--text-body"] = result.text_colors["body"]
    result.section["--text-muted"] = result.text_colors["muted"]
    for name, size in result.text_sizes.items():
        result.section[f"--text-size-{name}"] = size

    background_image = styling.get("backgroundImage")
    if isinstance(background_image, str) and background_image:
        result.section["background-image"] = f"url({background_image})"
        result.section["background-size"] = "cover"
        result.section["background-position"] = "center"
        result.section["position"] = "relative"
        overlay_color = styling.get("overlayColor")
        if overlay_color:
            result.overlay = {
                "position": "absolute",
                "inset": "0",
                "background-color": hex_to_rgba(overlay_color, styling.get("overlayOpacity", 50)),
                "pointer-events": "none",
            }

    if styling.get("showBorder"):
        result.container["border-width"] = _choice(BORDER_WIDTHS, styling.get("borderWidth"), "medium")
        result.container["border-style"] = "solid"
        result.container["border-color"] = styling.get("borderColor") or "var(--color-primary)"
        result.container["border-radius"] = _choice(BORDER_RADII, styling.get("borderRadius"), "medium")

    if styling.get("useThemeBackground"):
        result.container["background-color"] = "var(--color-background)"
    elif styling.get("boxBackgroundColor"):
        result.container["background-color"] = hex_to_rgba(
            styling["boxBackgroundColor"], styling.get("boxBackgroundOpacity", 100)
        )

    result.container["max-width"] = result.content_width
    return result


# ---------------------------------------------------------------------------
# Component styles from theme tokens
# ---------------------------------------------------------------------------


def _component(theme: Theme, name: str) -> dict[str, Any]:
    value = theme.components.get(name)
    return value if isinstance(value, dict) else {}


def button_style(theme: Theme) -> str:
    button = _component(theme, "button")
    return style_attr(
        {
            "background-color": "var(--color-primary)",
            "color": "#FFFFFF",
            "border-radius": button.get("borderRadius", "0.5rem"),
            "padding": f"{button.get('paddingY', '0.5rem')} {button.get('paddingX', '1rem')}",
            "font-family": "var(--font-body)",
            "font-weight": "500",
            "text-decoration": "none",
            "display": "inline-block",
        }
    )


def outline_button_style(theme: Theme) -> str:
    button = _component(theme, "button")
    return style_attr(
        {
            "background-color": "transparent",
            "color": "var(--color-primary)",
            "border": "1px solid var(--color-primary)",
            "border-radius": button.get("borderRadius", "0.5rem"),
            "padding": f"{button.get('paddingY', '0.5rem')} {button.get('paddingX', '1rem')}",
            "font-family": "var(--font-body)",
            "font-weight": "500",
            "text-decoration": "none",
            "display": "inline-block",
        }
    )


def card_style(theme: Theme) -> str:
    card = _component(theme, "card")
    return style_attr(
        {
            "background-color": "var(--color-background)",
            "border": "1px solid var(--color-border)",
            "border-radius": card.get("borderRadius", "0.75rem"),
            "padding": card.get("padding", "1.5rem"),
            "box-shadow": card.get("shadow"),
        }
    )


def input_style(theme: Theme) -> str:
    field_tokens = _component(theme, "input")
    return style_attr(
        {
            "background-color": "var(--color-background)",
            "border": "1px solid var(--color-border)",
            "border-radius": field_tokens.get("borderRadius", "0.375rem"),
            "padding": field_tokens.get("padding", "0.75rem"),
            "font-family": "var(--font-body)",
            "color": "var(--color-foreground)",
            "width": "100%",
        }
    )


def heading_style(theme: Theme, level: str = "h2") -> str:
    size = theme.typography.scale.get(level, "2rem")
    if level in ("h1", "h2", "h3"):
        # A section's textSize overrides the theme scale for its top headings.
        size = f"var(--text-size-{level}, {size})"
    return style_attr(
        {
            "font-family": "var(--font-heading)",
            "font-size": size,
            "line-height": theme.typography.line_heights.get("tight", "1.25"),
            "color": "var(--text-heading, var(--color-foreground))",
            "font-weight": "600",
            "margin": "0",
        }
    )


def body_style(theme: Theme) -> str:
    return style_attr(
        {
            "font-family": "var(--font-body)",
            "font-size": "var(--text-size-body, " + theme.typography.scale.get("body", "1rem") + ")",
            "line-height": theme.typography.line_heights.get("normal", "1.5"),
            "color": "var(--text-body, var(--color-foreground))",
        }
    )


def muted_style(theme: Theme) -> str:
    return style_attr(
        {
            "font-family": "var(--font-body)",
            "font-size": theme.typography.scale.get("small", "0.875rem"),
            "color": "var(--text-muted, var(--color-muted-foreground))",
        }
    )


def page_style() -> str:
    return style_attr(
        {
            "background-color": "var(--color-background)",
            "color": "var(--color-foreground)",
            "font-family": "var(--font-body)",
        }
    )
