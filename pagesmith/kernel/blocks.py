"""
Pagesmith Kernel — Block Renderer Registry

Maps a resolved (primitive, preset) to a renderer:

    renderer(content: dict, ctx: BlockContext) -> HTML fragment

Lookup order: exact (primitive, preset), then the primitive's preset-agnostic
default, then nothing (the pipeline substitutes a placeholder). Built-in
renderers are mustache templates rendered with chevron; payloads are read
defensively so content that is mid-edit or written under an older schema
still renders something.

Renderers never know whether they run in the editor preview or on the
public site.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from html import escape as _html_escape
from typing import Any

import chevron

from pagesmith.kernel.styling import (
    body_style,
    button_style,
    card_style,
    heading_style,
    input_style,
    muted_style,
    outline_button_style,
    style_attr,
)
from pagesmith.kernel.types import BlockContext, PagesmithError, ResolvedType

Renderer = Callable[[dict[str, Any], BlockContext], str]

MAX_HERO_BUTTONS = 4


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class BlockRegistry:
    """
    Renderers keyed by (primitive, preset); preset None is the primitive's
    default. A frozen registry rejects registration, so the shared instance
    stays read-only while many renders use it at once.
    """

    def __init__(self) -> None:
        self._renderers: dict[tuple[str, str | None], Renderer] = {}
        self._frozen = False

    def register(self, primitive: str, preset: str | None, renderer: Renderer) -> None:
        if self._frozen:
            raise PagesmithError("Cannot register renderers on a frozen registry; use copy()")
        if not callable(renderer):
            raise PagesmithError(f"Renderer for {primitive}/{preset} is not callable")
        self._renderers[(primitive, preset)] = renderer

    def renderer(self, primitive: str, preset: str | None = None) -> Callable[[Renderer], Renderer]:
        """Decorator form of register()."""

        def decorate(fn: Renderer) -> Renderer:
            self.register(primitive, preset, fn)
            return fn

        return decorate

    def lookup(self, resolved: ResolvedType) -> Renderer | None:
        if resolved.preset is not None:
            exact = self._renderers.get((resolved.primitive, resolved.preset))
            if exact is not None:
                return exact
        return self._renderers.get((resolved.primitive, None))

    def freeze(self) -> BlockRegistry:
        self._frozen = True
        return self

    def copy(self) -> BlockRegistry:
        """An unfrozen copy, for callers that add or replace renderers."""
        clone = BlockRegistry()
        clone._renderers = dict(self._renderers)
        return clone

    def __contains__(self, key: tuple[str, str | None]) -> bool:
        return key in self._renderers


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def escape(text: Any) -> str:
    """HTML-escape user content."""
    return _html_escape(str(text), quote=True)


def _text(content: dict[str, Any], *keys: str, default: str = "") -> str:
    for key in keys:
        value = content.get(key)
        if isinstance(value, str) and value.strip():
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
    return default


def _items(content: dict[str, Any], *keys: str) -> list[dict[str, Any]]:
    """The first list found under keys, keeping only object entries."""
    for key in keys:
        value = content.get(key)
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
    return []


def _flag(content: dict[str, Any], key: str, default: bool) -> bool:
    value = content.get(key)
    return value if isinstance(value, bool) else default


def _int(value: Any, default: int, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def safe_url(url: Any, base_path: str = "") -> str:
    """Neutralize script URLs and prefix site-relative paths with the base path."""
    if not isinstance(url, str) or not url.strip():
        return "#"
    url = url.strip()
    if re.match(r"^\s*(javascript|vbscript|data):", url, re.IGNORECASE):
        return "#"
    if url.startswith("/") and not url.startswith("//") and base_path:
        return base_path.rstrip("/") + url
    return url


def _columns_style(columns: Any) -> str:
    if columns in (2, 3, 4) or columns in ("2", "3", "4"):
        return f"display: grid; gap: 1.5rem; grid-template-columns: repeat({int(columns)}, minmax(0, 1fr))"
    return "display: grid; gap: 1.5rem; grid-template-columns: repeat(auto-fill, minmax(16rem, 1fr))"


def _render(template: str, data: dict[str, Any]) -> str:
    return chevron.render(template, data)


# ---------------------------------------------------------------------------
# Inline markdown (markdown preset)
# ---------------------------------------------------------------------------

_LINK_RE = re.compile(r"\[([^\]]+)\]\((https?://[^\)]+)\)")
_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC_RE = re.compile(r"\*([^*]+)\*")
_CODE_RE = re.compile(r"`([^`]+)`")
_HEADING_RE = re.compile(r"^(#{1,4})\s+(.*)$")


def _render_inline(text: str) -> str:
    text = escape(text)
    text = _CODE_RE.sub(r"<code>\1</code>", text)
    text = _LINK_RE.sub(r'<a href="\2">\1</a>', text)
    text = _BOLD_RE.sub(r"<strong>\1</strong>", text)
    text = _ITALIC_RE.sub(r"<em>\1</em>", text)
    return text


def markdown_to_html(source: str) -> str:
    """Headings, bullet lists and paragraphs with inline formatting."""
    parts: list[str] = []
    for block in re.split(r"\n\s*\n", source.strip()):
        lines = [line.rstrip() for line in block.splitlines() if line.strip()]
        if not lines:
            continue
        heading = _HEADING_RE.match(lines[0])
        if heading and len(lines) == 1:
            level = len(heading.group(1))
            parts.append(f"<h{level}>{_render_inline(heading.group(2))}</h{level}>")
        elif all(line.lstrip().startswith(("- ", "* ")) for line in lines):
            items = "".join(f"<li>{_render_inline(line.lstrip()[2:])}</li>" for line in lines)
            parts.append(f"<ul>{items}</ul>")
        else:
            parts.append(f"<p>{'<br>'.join(_render_inline(line) for line in lines)}</p>")
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Built-in renderers
# ---------------------------------------------------------------------------

DEFAULT_REGISTRY = BlockRegistry()

_HEADER_TEMPLATE = """<header class="ps-header ps-header--{{layout}}{{#sticky}} ps-header--sticky{{/sticky}}" style="{{style}}">
  <a class="ps-header-brand" href="{{home_url}}">{{#has_logo}}<img src="{{logo_url}}" alt="{{site_name}}" style="height: {{logo_size}}px">{{/has_logo}}{{#show_logo_text}}<span class="ps-header-name" style="{{heading_style}}">{{site_name}}</span>{{/show_logo_text}}</a>
  <nav class="ps-header-nav">{{#links}}<a href="{{url}}">{{label}}</a>{{/links}}</nav>
  {{#show_social}}<div class="ps-social ps-social--{{social_position}}">{{#social}}<a href="{{url}}" aria-label="{{platform}}">{{platform}}</a>{{/social}}</div>{{/show_social}}
  {{#show_cta}}<a class="ps-button" href="{{cta_url}}" style="{{button_style}}">{{cta_text}}</a>{{/show_cta}}
</header>"""


def _links(content: dict[str, Any], ctx: BlockContext, key: str = "links") -> list[dict[str, str]]:
    return [
        {"label": _text(link, "label", "title"), "url": safe_url(link.get("url"), ctx.base_path)}
        for link in _items(content, key)
    ]


def _social(links: list[dict[str, Any]], ctx: BlockContext) -> list[dict[str, str]]:
    return [
        {"platform": _text(link, "platform", default="website"), "url": safe_url(link.get("url"), ctx.base_path)}
        for link in links
        if isinstance(link, dict)
    ]


def _chrome_style(content: dict[str, Any], edge: str) -> str:
    declarations: dict[str, Any] = {"background-color": "var(--color-background)"}
    if _flag(content, "enableStyling", False):
        if content.get("backgroundColor"):
            declarations["background-color"] = content["backgroundColor"]
        if content.get("backgroundImage"):
            declarations["background-image"] = f"url({content['backgroundImage']})"
            declarations["background-size"] = "cover"
    if _flag(content, "showBorder", False):
        width = {"thin": "1px", "medium": "2px", "thick": "4px"}.get(content.get("borderWidth"), "1px")
        declarations[f"border-{edge}"] = f"{width} solid {content.get('borderColor') or 'var(--color-border)'}"
    return style_attr(declarations)


@DEFAULT_REGISTRY.renderer("header")
def render_header(content: dict[str, Any], ctx: BlockContext) -> str:
    layout = content.get("layout") if content.get("layout") in ("left", "right", "center") else "left"
    logo_url = _text(content, "logoUrl")
    social = _social(ctx.social_links, ctx)
    return _render(
        _HEADER_TEMPLATE,
        {
            "layout": layout,
            "sticky": _flag(content, "sticky", True),
            "style": _chrome_style(content, "bottom"),
            "home_url": safe_url("/", ctx.base_path),
            "has_logo": bool(logo_url),
            "logo_url": safe_url(logo_url),
            "logo_size": _int(content.get("logoSize"), 40, 24, 80),
            "show_logo_text": _flag(content, "showLogoText", True),
            "site_name": _text(content, "siteName", default=ctx.site_name),
            "heading_style": heading_style(ctx.theme, "h4"),
            "links": _links(content, ctx),
            "show_social": _flag(content, "showSocialLinks", False) and bool(social),
            "social_position": "left" if content.get("socialLinksPosition") == "left" else "right",
            "social": social,
            "show_cta": _flag(content, "showCta", False) and bool(_text(content, "ctaText")),
            "cta_text": _text(content, "ctaText"),
            "cta_url": safe_url(content.get("ctaUrl"), ctx.base_path),
            "button_style": button_style(ctx.theme),
        },
    )


_FOOTER_TEMPLATE = """<footer class="ps-footer ps-footer--{{layout}}" style="{{style}}">
  {{#show_social}}<div class="ps-social ps-social--{{social_alignment}}">{{#social}}<a href="{{url}}" aria-label="{{platform}}">{{platform}}</a>{{/social}}</div>{{/show_social}}
  {{#has_links}}<nav class="ps-footer-nav">{{#links}}<a href="{{url}}">{{label}}</a>{{/links}}</nav>{{/has_links}}
  <p class="ps-footer-copyright" style="{{muted_style}}">{{copyright}}</p>
</footer>"""


@DEFAULT_REGISTRY.renderer("footer")
def render_footer(content: dict[str, Any], ctx: BlockContext) -> str:
    layout = content.get("layout") if content.get("layout") in ("simple", "columns", "minimal") else "simple"
    links = _links(content, ctx)
    social = _social(ctx.social_links, ctx)
    alignment = content.get("socialLinksAlignment")
    return _render(
        _FOOTER_TEMPLATE,
        {
            "layout": layout,
            "style": _chrome_style(content, "top"),
            "show_social": _flag(content, "showSocialLinks", False) and bool(social),
            "social_alignment": alignment if alignment in ("left", "center", "right") else "center",
            "social": social,
            "has_links": bool(links) and layout != "minimal",
            "links": links,
            "copyright": _text(content, "copyright"),
            "muted_style": muted_style(ctx.theme),
        },
    )


_CONTACT_TEMPLATE = """<div class="ps-contact ps-contact--{{variant}}">
  {{#heading}}<h2 style="{{heading_style}}">{{heading}}</h2>{{/heading}}
  {{#description}}<p style="{{body_style}}">{{description}}</p>{{/description}}
  <form class="ps-contact-form" data-contact-form method="post" style="{{card_style}}">
    <input type="text" name="name" placeholder="Name" required style="{{input_style}}">
    <input type="email" name="email" placeholder="Email" required style="{{input_style}}">
    {{#detailed}}<input type="tel" name="phone" placeholder="Phone" style="{{input_style}}">
    <input type="text" name="subject" placeholder="Subject" style="{{input_style}}">{{/detailed}}
    <textarea name="message" rows="5" placeholder="Message" required style="{{input_style}}"></textarea>
    <button type="submit" style="{{button_style}}">{{submit_text}}</button>
  </form>
</div>"""


@DEFAULT_REGISTRY.renderer("contact")
def render_contact(content: dict[str, Any], ctx: BlockContext) -> str:
    variant = "detailed" if content.get("variant") == "detailed" else "simple"
    return _render(
        _CONTACT_TEMPLATE,
        {
            "variant": variant,
            "detailed": variant == "detailed",
            "heading": _text(content, "heading"),
            "description": _text(content, "description"),
            "submit_text": _text(content, "submitText", default="Send message"),
            "heading_style": heading_style(ctx.theme, "h2"),
            "body_style": body_style(ctx.theme),
            "card_style": card_style(ctx.theme),
            "input_style": input_style(ctx.theme),
            "button_style": button_style(ctx.theme),
        },
    )


_SOCIAL_TEMPLATE = """<div class="ps-social-links ps-social-links--{{alignment}} ps-social-links--{{size}}">
  {{#has_title}}<h2 style="{{heading_style}}">{{title}}</h2>{{/has_title}}
  {{#subtitle}}<p style="{{muted_style}}">{{subtitle}}</p>{{/subtitle}}
  <ul>{{#links}}<li><a href="{{url}}" data-platform="{{platform}}" aria-label="{{platform}}">{{platform}}</a></li>{{/links}}</ul>
</div>"""


@DEFAULT_REGISTRY.renderer("social_links")
def render_social_links(content: dict[str, Any], ctx: BlockContext) -> str:
    links = _items(content, "links") or ctx.social_links
    alignment = content.get("alignment")
    size = content.get("size")
    title = _text(content, "title")
    return _render(
        _SOCIAL_TEMPLATE,
        {
            "alignment": alignment if alignment in ("left", "center", "right") else "center",
            "size": size if size in ("small", "medium", "large") else "medium",
            "has_title": bool(title),
            "title": title,
            "subtitle": _text(content, "subtitle"),
            "links": _social(links, ctx),
            "heading_style": heading_style(ctx.theme, "h3"),
            "muted_style": muted_style(ctx.theme),
        },
    )


# -- richtext ---------------------------------------------------------------

_RICHTEXT_TEMPLATE = """<div class="ps-richtext ps-richtext--{{mode}}"{{#rounding}} data-image-rounding="{{rounding}}"{{/rounding}} style="{{body_style}}">{{{html}}}</div>"""


@DEFAULT_REGISTRY.renderer("richtext")
@DEFAULT_REGISTRY.renderer("richtext", "visual")
def render_richtext_visual(content: dict[str, Any], ctx: BlockContext) -> str:
    # Rich text is an opaque HTML payload produced by the editor.
    return _render(
        _RICHTEXT_TEMPLATE,
        {"mode": "visual", "html": _text(content, "body", "html"), "body_style": body_style(ctx.theme)},
    )


@DEFAULT_REGISTRY.renderer("richtext", "markdown")
def render_richtext_markdown(content: dict[str, Any], ctx: BlockContext) -> str:
    return _render(
        _RICHTEXT_TEMPLATE,
        {
            "mode": "markdown",
            "html": markdown_to_html(_text(content, "markdown", "body")),
            "body_style": body_style(ctx.theme),
        },
    )


@DEFAULT_REGISTRY.renderer("richtext", "article")
def render_richtext_article(content: dict[str, Any], ctx: BlockContext) -> str:
    rounding = content.get("imageRounding")
    return _render(
        _RICHTEXT_TEMPLATE,
        {
            "mode": "article",
            "html": _text(content, "body", "html"),
            "rounding": rounding if isinstance(rounding, str) else "",
            "body_style": body_style(ctx.theme),
        },
    )


# -- hero -------------------------------------------------------------------

_HERO_TEMPLATE = """<div class="ps-hero ps-hero--{{layout}} ps-align--{{alignment}}"{{#has_background}} style="background-image: url({{background}}); background-size: cover; background-position: center"{{/has_background}}>
  {{#has_image}}<img class="ps-hero-image ps-hero-image--{{image_position}}" src="{{image}}" alt="{{image_alt}}">{{/has_image}}
  <h{{level}} style="{{heading_style}}">{{heading}}</h{{level}}>
  {{#subheading}}<p class="ps-hero-subheading" style="{{muted_style}}">{{subheading}}</p>{{/subheading}}
  {{#body_text}}<p class="ps-hero-body" style="{{body_style}}">{{body_text}}</p>{{/body_text}}
  {{#has_buttons}}<div class="ps-hero-buttons">{{#buttons}}<a class="ps-button ps-button--{{variant}}" href="{{url}}" style="{{style}}">{{text}}</a>{{/buttons}}</div>{{/has_buttons}}
</div>"""


def _hero_buttons(content: dict[str, Any], ctx: BlockContext) -> list[dict[str, str]]:
    raw = _items(content, "buttons")
    if not raw:
        # Older hero/cta payloads carry a single button.
        text = _text(content, "ctaText", "buttonText")
        show = _flag(content, "showCta", True)
        if text and show:
            raw = [{"text": text, "url": content.get("ctaUrl") or content.get("buttonUrl"), "variant": "primary"}]

    buttons = []
    for button in raw[:MAX_HERO_BUTTONS]:
        text = _text(button, "text")
        if not text:
            continue
        variant = "secondary" if button.get("variant") == "secondary" else "primary"
        buttons.append(
            {
                "text": text,
                "url": safe_url(button.get("url"), ctx.base_path),
                "variant": variant,
                "style": outline_button_style(ctx.theme) if variant == "secondary" else button_style(ctx.theme),
            }
        )
    return buttons


def _render_hero(
    content: dict[str, Any],
    ctx: BlockContext,
    layout: str,
    level: int,
    heading: str,
    subheading: str,
) -> str:
    buttons = _hero_buttons(content, ctx) if layout != "title-only" else []
    alignment = _text(content, "textAlignment", "alignment", default="center")
    image = _text(content, "image")
    background = _text(content, "heroBackgroundImage")
    return _render(
        _HERO_TEMPLATE,
        {
            "layout": layout,
            "alignment": alignment if alignment in ("left", "center", "right") else "center",
            "level": level,
            "heading": heading,
            "subheading": subheading,
            "body_text": _text(content, "bodyText") if layout == "full" else "",
            "has_background": bool(background),
            "background": safe_url(background),
            "has_image": bool(image) and layout == "full",
            "image": safe_url(image),
            "image_alt": _text(content, "imageAlt"),
            "image_position": _text(content, "imagePosition", default="top"),
            "has_buttons": bool(buttons),
            "buttons": buttons,
            "heading_style": heading_style(ctx.theme, f"h{level}"),
            "muted_style": muted_style(ctx.theme),
            "body_style": body_style(ctx.theme),
        },
    )


@DEFAULT_REGISTRY.renderer("hero_primitive")
@DEFAULT_REGISTRY.renderer("hero_primitive", "full")
def render_hero_full(content: dict[str, Any], ctx: BlockContext) -> str:
    return _render_hero(content, ctx, "full", 1, _text(content, "heading", "title"), _text(content, "subheading"))


@DEFAULT_REGISTRY.renderer("hero_primitive", "cta")
def render_hero_cta(content: dict[str, Any], ctx: BlockContext) -> str:
    return _render_hero(
        content, ctx, "cta", 2, _text(content, "heading", "title"), _text(content, "subheading", "description")
    )


@DEFAULT_REGISTRY.renderer("hero_primitive", "title-only")
def render_hero_title(content: dict[str, Any], ctx: BlockContext) -> str:
    level = _int(content.get("headingLevel", content.get("level")), 2, 1, 3)
    return _render_hero(
        content, ctx, "title-only", level, _text(content, "title", "heading"), _text(content, "subtitle", "subheading")
    )


# -- cards ------------------------------------------------------------------

_CARDS_TEMPLATE = """<div class="ps-cards ps-cards--{{template}}">
  {{#section_title}}<h2 style="{{heading_style}}">{{section_title}}</h2>{{/section_title}}
  {{#section_subtitle}}<p style="{{muted_style}}">{{section_subtitle}}</p>{{/section_subtitle}}
  <div class="ps-cards-grid" style="{{grid_style}}">{{#items}}
    <div class="ps-card" style="{{card_style}}">{{{body}}}</div>{{/items}}
  </div>
</div>"""

_FEATURE_CARD = """{{#icon}}<span class="ps-icon" data-icon="{{icon}}" aria-hidden="true"></span>{{/icon}}<h3 style="{{heading_style}}">{{title}}</h3>{{#subtitle}}<p style="{{muted_style}}">{{subtitle}}</p>{{/subtitle}}<p style="{{body_style}}">{{description}}</p>{{#has_button}}<a href="{{button_url}}" style="{{link_style}}">{{button_text}}</a>{{/has_button}}"""

_TESTIMONIAL_CARD = """<blockquote style="{{body_style}}">{{quote}}</blockquote><div class="ps-testimonial-author">{{#avatar}}<img src="{{avatar}}" alt="{{author}}">{{/avatar}}<strong>{{author}}</strong>{{#role}}<span style="{{muted_style}}">{{role}}</span>{{/role}}</div>"""

_PRODUCT_CARD = """{{#has_image}}<img src="{{image}}" alt="{{title}}" loading="lazy">{{/has_image}}{{#show_title}}<h3 style="{{heading_style}}">{{title}}</h3>{{/show_title}}{{#show_description}}<p style="{{body_style}}">{{description}}</p>{{/show_description}}<ul class="ps-product-links">{{#links}}<li><a href="{{url}}" data-platform="{{platform}}">{{label}}</a></li>{{/links}}</ul>"""


def _render_cards(content: dict[str, Any], ctx: BlockContext, template: str, bodies: list[str]) -> str:
    return _render(
        _CARDS_TEMPLATE,
        {
            "template": template,
            "section_title": _text(content, "sectionTitle"),
            "section_subtitle": _text(content, "sectionSubtitle"),
            "grid_style": _columns_style(content.get("columns", 3)),
            "items": [{"body": body, "card_style": card_style(ctx.theme)} for body in bodies],
            "heading_style": heading_style(ctx.theme, "h2"),
            "muted_style": muted_style(ctx.theme),
        },
    )


@DEFAULT_REGISTRY.renderer("cards")
@DEFAULT_REGISTRY.renderer("cards", "feature")
def render_cards_feature(content: dict[str, Any], ctx: BlockContext) -> str:
    bodies = [
        _render(
            _FEATURE_CARD,
            {
                "icon": _text(item, "icon"),
                "title": _text(item, "title"),
                "subtitle": _text(item, "subtitle"),
                "description": _text(item, "description"),
                "has_button": bool(_text(item, "buttonText")),
                "button_text": _text(item, "buttonText"),
                "button_url": safe_url(item.get("buttonUrl"), ctx.base_path),
                "heading_style": heading_style(ctx.theme, "h4"),
                "muted_style": muted_style(ctx.theme),
                "body_style": body_style(ctx.theme),
                "link_style": "color: var(--color-primary)",
            },
        )
        for item in _items(content, "items", "features")
    ]
    return _render_cards(content, ctx, "feature", bodies)


@DEFAULT_REGISTRY.renderer("cards", "testimonial")
def render_cards_testimonial(content: dict[str, Any], ctx: BlockContext) -> str:
    bodies = [
        _render(
            _TESTIMONIAL_CARD,
            {
                "quote": _text(item, "quote"),
                "author": _text(item, "author"),
                "role": _text(item, "role"),
                "avatar": safe_url(item["avatar"]) if _text(item, "avatar") else "",
                "body_style": body_style(ctx.theme),
                "muted_style": muted_style(ctx.theme),
            },
        )
        for item in _items(content, "items", "testimonials")
    ]
    return _render_cards(content, ctx, "testimonial", bodies)


@DEFAULT_REGISTRY.renderer("cards", "product")
def render_cards_product(content: dict[str, Any], ctx: BlockContext) -> str:
    show_title = _flag(content, "showItemTitles", True)
    show_description = _flag(content, "showItemDescriptions", True)
    bodies = []
    for item in _items(content, "items"):
        links = [
            {
                "url": safe_url(link.get("url"), ctx.base_path),
                "platform": _text(link, "platform", default="custom"),
                "label": _text(link, "label", "platform", default="Link"),
            }
            for link in _items(item, "links")
        ]
        bodies.append(
            _render(
                _PRODUCT_CARD,
                {
                    "has_image": bool(_text(item, "image")),
                    "image": safe_url(item.get("image")),
                    "title": _text(item, "title"),
                    "description": _text(item, "description"),
                    "show_title": show_title and bool(_text(item, "title")),
                    "show_description": show_description and bool(_text(item, "description")),
                    "links": links,
                    "heading_style": heading_style(ctx.theme, "h4"),
                    "body_style": body_style(ctx.theme),
                },
            )
        )
    return _render_cards(content, ctx, "product", bodies)


# -- media ------------------------------------------------------------------

_IMAGE_TEMPLATE = """<figure class="ps-media ps-media--single">{{#has_src}}<img src="{{src}}" alt="{{alt}}" loading="lazy">{{/has_src}}{{^has_src}}<div class="ps-media-empty" style="{{muted_style}}">No image selected</div>{{/has_src}}{{#caption}}<figcaption style="{{muted_style}}">{{caption}}</figcaption>{{/caption}}</figure>"""

_GALLERY_TEMPLATE = """<div class="ps-media ps-media--gallery ps-gallery--{{layout}}" data-lightbox="{{lightbox}}" style="{{grid_style}}">{{#images}}
  <figure><img src="{{src}}" alt="{{alt}}" loading="lazy">{{#caption}}<figcaption style="{{muted_style}}">{{caption}}</figcaption>{{/caption}}</figure>{{/images}}
</div>"""

_EMBED_TEMPLATE = """<div class="ps-media ps-media--embed" style="{{frame_style}}">{{#has_src}}<iframe src="{{src}}" title="{{title}}" loading="lazy" allowfullscreen style="position: absolute; inset: 0; width: 100%; height: 100%; border: 0"></iframe>{{/has_src}}{{^has_src}}<div class="ps-media-empty" style="{{muted_style}}">No embed configured</div>{{/has_src}}</div>"""

_ASPECT_PADDING = {"16:9": "56.25%", "4:3": "75%", "1:1": "100%"}


@DEFAULT_REGISTRY.renderer("media")
@DEFAULT_REGISTRY.renderer("media", "single")
def render_media_single(content: dict[str, Any], ctx: BlockContext) -> str:
    src = _text(content, "src", "image")
    return _render(
        _IMAGE_TEMPLATE,
        {
            "has_src": bool(src),
            "src": safe_url(src),
            "alt": _text(content, "alt", "imageAlt"),
            "caption": _text(content, "caption"),
            "muted_style": muted_style(ctx.theme),
        },
    )


@DEFAULT_REGISTRY.renderer("media", "gallery")
def render_media_gallery(content: dict[str, Any], ctx: BlockContext) -> str:
    layout = content.get("galleryLayout", content.get("layout"))
    images = [
        {"src": safe_url(image.get("src")), "alt": _text(image, "alt"), "caption": _text(image, "caption")}
        for image in _items(content, "images")
        if _text(image, "src")
    ]
    return _render(
        _GALLERY_TEMPLATE,
        {
            "layout": layout if layout in ("grid", "masonry", "carousel") else "grid",
            "lightbox": "true" if _flag(content, "lightbox", True) else "false",
            "grid_style": _columns_style(content.get("columns", 3)),
            "images": images,
            "muted_style": muted_style(ctx.theme),
        },
    )


@DEFAULT_REGISTRY.renderer("media", "embed")
def render_media_embed(content: dict[str, Any], ctx: BlockContext) -> str:
    src = _text(content, "embedSrc", "src")
    if not re.match(r"^https?://", src):
        src = ""
    ratio = _text(content, "embedAspectRatio", "aspectRatio", default="16:9")
    if ratio == "custom":
        height = _int(content.get("customHeight"), 400, 100, 2000)
        frame_style = f"position: relative; height: {height}px"
    else:
        frame_style = f"position: relative; padding-bottom: {_ASPECT_PADDING.get(ratio, '56.25%')}; height: 0"
    return _render(
        _EMBED_TEMPLATE,
        {
            "has_src": bool(src),
            "src": src,
            "title": _text(content, "embedTitle", "title", default="Embedded content"),
            "frame_style": frame_style,
            "muted_style": muted_style(ctx.theme),
        },
    )


# -- blog -------------------------------------------------------------------

_POST_TEMPLATE = """<article class="ps-post" data-post-id="{{id}}" style="{{card_style}}">
  {{#has_image}}<img src="{{image}}" alt="{{title}}" loading="lazy">{{/has_image}}
  <h3 style="{{heading_style}}"><a href="{{url}}">{{title}}</a></h3>
  {{#show_excerpt}}<p style="{{body_style}}">{{excerpt}}</p>{{/show_excerpt}}
  {{#show_author}}<p class="ps-post-author" style="{{muted_style}}">{{author}}</p>{{/show_author}}
</article>"""

_BLOG_TEMPLATE = """<div class="ps-blog ps-blog--{{mode}}"{{#layout}} data-layout="{{layout}}"{{/layout}} style="{{grid_style}}">{{#posts}}
{{{html}}}{{/posts}}{{^posts}}<p class="ps-blog-empty" style="{{muted_style}}">No posts yet.</p>{{/posts}}
</div>"""


def _post_html(post: dict[str, Any], ctx: BlockContext, show_excerpt: bool, show_author: bool) -> str:
    slug = _text(post, "slug")
    url = post.get("url") or (f"/blog/{slug}" if slug else "#")
    return _render(
        _POST_TEMPLATE,
        {
            "id": _text(post, "id"),
            "title": _text(post, "title", default="Untitled"),
            "url": safe_url(url, ctx.base_path),
            "has_image": bool(_text(post, "image")),
            "image": safe_url(post.get("image")),
            "excerpt": _text(post, "excerpt"),
            "author": _text(post, "author"),
            "show_excerpt": show_excerpt and bool(_text(post, "excerpt")),
            "show_author": show_author and bool(_text(post, "author")),
            "card_style": card_style(ctx.theme),
            "heading_style": heading_style(ctx.theme, "h3"),
            "body_style": body_style(ctx.theme),
            "muted_style": muted_style(ctx.theme),
        },
    )


@DEFAULT_REGISTRY.renderer("blog")
@DEFAULT_REGISTRY.renderer("blog", "featured")
def render_blog_featured(content: dict[str, Any], ctx: BlockContext) -> str:
    # Posts are supplied by the caller; a missing post renders the empty state.
    post_id = content.get("postId")
    posts = [p for p in ctx.blog_posts if isinstance(p, dict)]
    chosen = next((p for p in posts if post_id and p.get("id") == post_id), posts[0] if posts else None)
    html = [{"html": _post_html(chosen, ctx, True, _flag(content, "showAuthor", True))}] if chosen else []
    layout = content.get("featuredLayout", content.get("layout"))
    return _render(
        _BLOG_TEMPLATE,
        {
            "mode": "featured",
            "layout": layout if layout in ("split", "stacked", "hero", "minimal") else "split",
            "grid_style": "",
            "posts": html,
            "muted_style": muted_style(ctx.theme),
        },
    )


@DEFAULT_REGISTRY.renderer("blog", "grid")
def render_blog_grid(content: dict[str, Any], ctx: BlockContext) -> str:
    count = _int(content.get("postCount"), 3, 1, 24)
    show_excerpt = _flag(content, "showExcerpt", True)
    show_author = _flag(content, "showAuthor", True)
    posts = [p for p in ctx.blog_posts if isinstance(p, dict)][:count]
    return _render(
        _BLOG_TEMPLATE,
        {
            "mode": "grid",
            "layout": "",
            "grid_style": _columns_style(3),
            "posts": [{"html": _post_html(p, ctx, show_excerpt, show_author)} for p in posts],
            "muted_style": muted_style(ctx.theme),
        },
    )


DEFAULT_REGISTRY.freeze()


# ---------------------------------------------------------------------------
# Placeholder
# ---------------------------------------------------------------------------

_PLACEHOLDER_TEMPLATE = """<div class="ps-placeholder" style="padding: 2rem; text-align: center; color: var(--color-muted-foreground)">{{message}}</div>"""


def render_placeholder(resolved: ResolvedType) -> str:
    """Visible stand-in for a block type this renderer doesn't know."""
    name = resolved.key or "(empty)"
    return _render(_PLACEHOLDER_TEMPLATE, {"message": f"Unknown block type: {name}"})


def render_degraded(resolved: ResolvedType) -> str:
    """Stand-in for a known block whose payload couldn't be rendered."""
    return _render(_PLACEHOLDER_TEMPLATE, {"message": f"This {resolved.key} block could not be displayed."})
