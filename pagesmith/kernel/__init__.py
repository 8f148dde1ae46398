"""
Pagesmith Kernel — the pure site-rendering core.

Five components:
  primitives  — (declared type, payload) → (primitive, preset)
  overrides   — site header/footer + page override → effective header/footer
  theme       — (theme, color mode) → style declarations, dark palette synthesis
  renderer    — (sections, header, footer, theme, decorator?) → render tree
  selection   — editor hover/selection state and cross-panel scrolling

Block renderers live in blocks (registry) and styling (per-section styles).
"""

from pagesmith.kernel.blocks import DEFAULT_REGISTRY, BlockRegistry
from pagesmith.kernel.overrides import merge_footer, merge_header, merge_overrides, resolve_chrome
from pagesmith.kernel.primitives import block_label, resolve, resolve_section
from pagesmith.kernel.renderer import RenderTree, render, render_document
from pagesmith.kernel.selection import EditorSelection, NullSelection, SelectionDecorator
from pagesmith.kernel.theme import load_theme, materialize, regenerate_theme_output, resolve_theme

__all__ = [
    "resolve",
    "resolve_section",
    "block_label",
    "merge_overrides",
    "merge_header",
    "merge_footer",
    "resolve_chrome",
    "materialize",
    "resolve_theme",
    "load_theme",
    "regenerate_theme_output",
    "BlockRegistry",
    "DEFAULT_REGISTRY",
    "render",
    "render_document",
    "RenderTree",
    "EditorSelection",
    "NullSelection",
    "SelectionDecorator",
]
