"""
Pagesmith Kernel — Page Rendering Pipeline

Pure function: (sections, header, footer, theme, decorator?) → RenderTree
No IO. Deterministic: same input → same output, always.

The same pipeline serves the editor preview and the public site. The only
difference is the optional decorator, which wraps each body block in
selection affordances; strip the decorator nodes from a preview tree and
what remains is the public tree.

A block never takes the page down with it: an unknown type becomes a
placeholder, a payload its renderer chokes on becomes a degraded node.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from pagesmith.kernel.blocks import (
    DEFAULT_REGISTRY,
    BlockRegistry,
    escape,
    render_degraded,
    render_placeholder,
)
from pagesmith.kernel.overrides import sort_sections
from pagesmith.kernel.primitives import FOOTER, HEADER, is_header_or_footer, resolve_section
from pagesmith.kernel.styling import build_section_styles, effective_styling, page_style, style_attr
from pagesmith.kernel.theme import DARK_CLASS, StyleDeclarations, color_mode_script, materialize, resolve_theme
from pagesmith.kernel.types import (
    BlockContext,
    DocumentOptions,
    RenderNode,
    ResolvedType,
    Section,
    Theme,
)

logger = logging.getLogger(__name__)

Decorator = Callable[[RenderNode, Section, ResolvedType], RenderNode]

EMPTY_PAGE_MESSAGE = "This page has no content yet."


# ---------------------------------------------------------------------------
# Render tree
# ---------------------------------------------------------------------------


@dataclass
class RenderTree:
    header: RenderNode | None
    body: list[RenderNode] = field(default_factory=list)
    footer: RenderNode | None = None
    styles: StyleDeclarations | None = None

    def nodes(self):
        """Every node in document order."""
        if self.header is not None:
            yield from self.header.walk()
        for node in self.body:
            yield from node.walk()
        if self.footer is not None:
            yield from self.footer.walk()

    def blocks(self) -> list[RenderNode]:
        """Body nodes that stand for a content record, in order."""
        return [n for n in self.nodes() if n.section_id is not None and n.kind != "decorator"]

    def to_html(self) -> str:
        parts: list[str] = []
        if self.header is not None:
            parts.append(node_to_html(self.header))
        parts.append('<main class="ps-page">')
        if self.body:
            parts.extend(node_to_html(node) for node in self.body)
        else:
            parts.append(f'  <p class="ps-empty">{EMPTY_PAGE_MESSAGE}</p>')
        parts.append("</main>")
        if self.footer is not None:
            parts.append(node_to_html(self.footer))
        return "\n".join(parts)


def node_to_html(node: RenderNode) -> str:
    inner = node.html + "".join(node_to_html(child) for child in node.children)
    if node.tag is None:
        return inner
    attrs = "".join(f' {name}="{escape(value)}"' for name, value in node.attrs.items() if value is not None)
    return f"<{node.tag}{attrs}>{inner}</{node.tag}>"


def strip_decorators(node: RenderNode) -> RenderNode:
    """The undecorated node a decorator wrapped (the node itself otherwise)."""
    if node.kind != "decorator":
        return node
    for child in node.children:
        if child.kind != "affordance":
            return strip_decorators(child)
    return node


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render(
    ordered_sections: list[Section],
    resolved_header: dict[str, Any] | None,
    resolved_footer: dict[str, Any] | None,
    resolved_theme: Theme | None,
    decorator: Decorator | None = None,
    *,
    color_mode: str = "light",
    context: BlockContext | None = None,
    registry: BlockRegistry | None = None,
) -> RenderTree:
    """
    Render a page into a tree of nodes.

    `ordered_sections` is the page body; header and footer records are
    expected to have been folded into `resolved_header`/`resolved_footer`
    already (see overrides.resolve_chrome) and are skipped if present.
    Pure function. No side effects. No IO.
    """
    registry = registry or DEFAULT_REGISTRY
    theme = resolve_theme(resolved_theme)
    styles = materialize(theme, color_mode)
    if context is None:
        ctx = BlockContext(theme=theme, color_mode=styles.color_mode)
    else:
        ctx = replace(context, theme=theme, color_mode=styles.color_mode)

    body: list[RenderNode] = []
    for section in sort_sections(ordered_sections):
        if is_header_or_footer(section):
            logger.warning("render: %s record %s in page body skipped", section.declared_type, section.id)
            continue
        resolved = resolve_section(section)
        node = render_section(section, resolved, ctx, registry)
        if decorator is not None:
            node = decorator(node, section, resolved)
        body.append(node)

    return RenderTree(
        header=_render_chrome(HEADER, resolved_header, ctx, registry),
        body=body,
        footer=_render_chrome(FOOTER, resolved_footer, ctx, registry),
        styles=styles,
    )


def render_section(
    section: Section,
    resolved: ResolvedType,
    ctx: BlockContext,
    registry: BlockRegistry | None = None,
) -> RenderNode:
    """Render one body record, wrapped in its section element."""
    registry = registry or DEFAULT_REGISTRY
    content = section.content

    if not isinstance(content, dict):
        logger.warning("render_section: %s has non-object content (%s)", section.id, type(content).__name__)
        return _wrap(section, resolved, "degraded", render_degraded(resolved), {})

    renderer = registry.lookup(resolved)
    if renderer is None:
        logger.warning("render_section: no renderer for %s (section %s)", resolved.key or "(empty)", section.id)
        return _wrap(section, resolved, "placeholder", render_placeholder(resolved), {})

    try:
        html = renderer(content, ctx)
    except Exception as e:
        logger.warning("render_section: %s renderer failed on %s: %s", resolved.key, section.id, e)
        return _wrap(section, resolved, "degraded", render_degraded(resolved), {})

    return _wrap(section, resolved, "block", html, effective_styling(content, section.styling))


def _wrap(
    section: Section,
    resolved: ResolvedType,
    kind: str,
    html: str,
    styling: dict[str, Any],
) -> RenderNode:
    styles = build_section_styles(styling)
    classes = f"ps-block ps-block--{resolved.primitive}"
    if resolved.preset:
        classes += f" ps-block--{resolved.preset}"

    overlay = f'<div class="ps-overlay" style="{escape(style_attr(styles.overlay))}"></div>' if styles.overlay else ""
    container = f'<div class="ps-container" style="{escape(style_attr(styles.container))}">{html}</div>'

    attrs = {"class": classes, "style": style_attr(styles.section)}
    if section.anchor_id:
        attrs = {"id": section.anchor_id, **attrs}

    return RenderNode(
        kind=kind,
        tag="section",
        attrs=attrs,
        html=overlay + container,
        section_id=section.id,
        primitive=resolved.primitive,
        preset=resolved.preset,
    )


def _render_chrome(
    primitive: str,
    payload: Any,
    ctx: BlockContext,
    registry: BlockRegistry,
) -> RenderNode | None:
    if payload is None:
        return None
    resolved = ResolvedType(primitive)
    if not isinstance(payload, dict):
        logger.warning("render: %s payload is not an object, rendering degraded", primitive)
        return RenderNode(kind="degraded", tag=None, html=render_degraded(resolved), primitive=primitive)

    renderer = registry.lookup(resolved)
    if renderer is None:
        logger.warning("render: no renderer registered for %s", primitive)
        return RenderNode(kind="placeholder", tag=None, html=render_placeholder(resolved), primitive=primitive)

    try:
        html = renderer(payload, ctx)
    except Exception as e:
        logger.warning("render: %s renderer failed: %s", primitive, e)
        return RenderNode(kind="degraded", tag=None, html=render_degraded(resolved), primitive=primitive)
    return RenderNode(kind="block", tag=None, html=html, primitive=primitive)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

_BASE_CSS = """*, *::before, *::after { box-sizing: border-box; }
body { margin: 0; }
.ps-container { margin: 0 auto; padding: 0 1.5rem; position: relative; }
.ps-header { display: flex; align-items: center; justify-content: space-between; gap: 1rem; padding: 1rem 1.5rem; }
.ps-header--sticky { position: sticky; top: 0; z-index: 40; }
.ps-header-nav, .ps-footer-nav, .ps-social { display: flex; gap: 1rem; }
.ps-footer { padding: 2rem 1.5rem; text-align: center; }
.ps-align--left { text-align: left; }
.ps-align--center { text-align: center; }
.ps-align--right { text-align: right; }
.ps-empty { padding: 4rem 1.5rem; text-align: center; color: var(--color-muted-foreground); }
.ps-color-mode-toggle { position: fixed; right: 1rem; bottom: 1rem; z-index: 50; }"""

_TOGGLE_SCRIPT = """(function() {{
  var button = document.querySelector('[data-color-mode-toggle]');
  if (!button) return;
  button.addEventListener('click', function() {{
    var dark = document.documentElement.classList.toggle('{dark_class}');
    try {{ localStorage.setItem('{storage_key}', dark ? 'dark' : 'light'); }} catch (e) {{}}
  }});
}})();"""


def render_document(tree: RenderTree, options: DocumentOptions | None = None) -> str:
    """
    Render a complete HTML document from a render tree.

    Theme declarations and the color mode initializer sit in <head>, ahead
    of any body content, so the right palette is in place before first paint.
    """
    opts = options or DocumentOptions()
    styles = tree.styles or materialize(None)
    parts: list[str] = []

    parts.append("<!DOCTYPE html>")
    parts.append(f'<html lang="{escape(opts.lang)}">')
    parts.append("<head>")
    parts.append('  <meta charset="utf-8">')
    parts.append('  <meta name="viewport" content="width=device-width, initial-scale=1">')

    title = opts.title or opts.site_name or "Untitled"
    parts.append(f"  <title>{escape(title)}</title>")
    if opts.description:
        parts.append(f'  <meta name="description" content="{escape(opts.description)}">')
    parts.append(_render_og_tags(title, opts))

    # Must precede the stylesheet and all body content
    if styles.init_script:
        parts.append(f"  <script>{color_mode_script(opts.storage_key)}</script>")

    parts.append("  <style>")
    parts.append(styles.to_css())
    parts.append(_BASE_CSS)
    if opts.extra_css:
        parts.append(opts.extra_css)
    parts.append("  </style>")

    parts.append("</head>")
    parts.append(f'<body style="{escape(page_style())}">')
    parts.append(tree.to_html())

    if styles.color_mode == "user_choice":
        parts.append(
            '  <button type="button" class="ps-color-mode-toggle" data-color-mode-toggle '
            'aria-label="Toggle dark mode">Toggle theme</button>'
        )
        parts.append(f"  <script>{_TOGGLE_SCRIPT.format(dark_class=DARK_CLASS, storage_key=opts.storage_key)}</script>")

    parts.append("</body>")
    parts.append("</html>")

    return "\n".join(parts)


def _render_og_tags(title: str, opts: DocumentOptions) -> str:
    lines = [
        f'  <meta property="og:title" content="{escape(title)}">',
        '  <meta property="og:type" content="website">',
    ]
    if opts.site_name:
        lines.append(f'  <meta property="og:site_name" content="{escape(opts.site_name)}">')
    if opts.description:
        lines.append(f'  <meta property="og:description" content="{escape(opts.description)}">')
    if opts.url:
        lines.append(f'  <meta property="og:url" content="{escape(opts.url)}">')
    return "\n".join(lines)
