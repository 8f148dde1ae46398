"""
Pagesmith Renderer -- Pipeline Tests

render(sections, header, footer, theme, decorator?) → RenderTree

Covers:
  - body blocks come out in position order, one node per record
  - header before body, footer after; absent chrome is omitted
  - unknown types become placeholders, malformed payloads degraded nodes,
    and neither stops the rest of the page from rendering
  - the preview (decorated) tree minus decorators equals the public tree
  - documents put theme CSS and the init script in <head>
  - anchors, SEO meta and the empty-page message
"""

from pagesmith.kernel.blocks import DEFAULT_REGISTRY
from pagesmith.kernel.renderer import (
    EMPTY_PAGE_MESSAGE,
    node_to_html,
    render,
    render_document,
    strip_decorators,
)
from pagesmith.kernel.selection import EditorSelection, ManualScheduler, SelectionDecorator
from pagesmith.kernel.theme import default_theme
from pagesmith.kernel.types import DocumentOptions, Section

# ============================================================================
# Helpers
# ============================================================================


def make_section(section_id, declared_type, content=None, position=0, **kwargs):
    return Section(
        id=section_id,
        page_id="page-1",
        declared_type=declared_type,
        content={} if content is None else content,
        position=position,
        **kwargs,
    )


def sample_sections():
    return [
        make_section("s3", "cta", {"heading": "Ready?", "buttonText": "Go", "buttonUrl": "/go"}, position=3),
        make_section("s1", "hero", {"heading": "Welcome", "subheading": "Hello there"}, position=1),
        make_section("s2", "cards", {"template": "feature", "items": [{"title": "Fast", "description": "Very"}]}, 2),
    ]


def assert_contains(html, *fragments):
    for fragment in fragments:
        assert fragment in html, f"Expected {fragment!r} in rendered HTML.\nGot (first 2000 chars):\n{html[:2000]}"


# ============================================================================
# Ordering and structure
# ============================================================================


class TestOrdering:
    def test_body_in_position_order(self):
        tree = render(sample_sections(), None, None, None)
        assert [n.section_id for n in tree.body] == ["s1", "s2", "s3"]

    def test_one_node_per_record(self):
        tree = render(sample_sections(), None, None, None)
        assert len(tree.blocks()) == 3

    def test_ties_broken_by_id(self):
        sections = [make_section("b", "text", position=1), make_section("a", "text", position=1)]
        assert [n.section_id for n in render(sections, None, None, None).body] == ["a", "b"]

    def test_header_and_footer_placement(self):
        tree = render(sample_sections(), {"siteName": "Acme"}, {"copyright": "© Acme"}, None)
        html = tree.to_html()
        assert html.index("ps-header") < html.index("Welcome") < html.index("© Acme")

    def test_absent_chrome_omitted(self):
        tree = render(sample_sections(), None, None, None)
        assert tree.header is None
        assert tree.footer is None
        assert "<header" not in tree.to_html()

    def test_header_records_in_body_skipped(self):
        sections = [make_section("h", "header", {"siteName": "X"}), make_section("t", "text", {"body": "<p>x</p>"})]
        tree = render(sections, None, None, None)
        assert [n.section_id for n in tree.body] == ["t"]

    def test_deterministic(self):
        first = render(sample_sections(), {"siteName": "Acme"}, None, None).to_html()
        second = render(sample_sections(), {"siteName": "Acme"}, None, None).to_html()
        assert first == second

    def test_resolved_type_on_nodes(self):
        tree = render(sample_sections(), None, None, None)
        assert [(n.primitive, n.preset) for n in tree.body] == [
            ("hero_primitive", "full"),
            ("cards", "feature"),
            ("hero_primitive", "cta"),
        ]


# ============================================================================
# Failure isolation
# ============================================================================


class TestFailureIsolation:
    def test_unknown_type_placeholder(self, caplog):
        sections = [
            make_section("x", "pricing_table", {"plans": []}, position=0),
            make_section("t", "text", {"body": "ok"}, position=1),
        ]
        tree = render(sections, None, None, None)
        assert tree.body[0].kind == "placeholder"
        assert "Unknown block type: pricing_table" in node_to_html(tree.body[0])
        assert tree.body[1].kind == "block"
        assert "no renderer for pricing_table" in caplog.text

    def test_non_dict_content_degraded(self):
        tree = render([make_section("m", "hero", "not an object")], None, None, None)
        assert tree.body[0].kind == "degraded"

    def test_renderer_exception_degraded(self, caplog):
        registry = DEFAULT_REGISTRY.copy()

        def boom(content, ctx):
            raise KeyError("missing")

        registry.register("richtext", "visual", boom)
        sections = [make_section("bad", "text", {"body": "x"}), make_section("ok", "hero", {"heading": "Still here"})]
        tree = render(sections, None, None, None, registry=registry)
        assert tree.body[0].kind == "degraded"
        assert "could not be displayed" in node_to_html(tree.body[0])
        assert "Still here" in node_to_html(tree.body[1])
        assert "renderer failed" in caplog.text

    def test_wrong_shaped_fields_best_effort(self):
        """Fields of the wrong type are ignored rather than crashing the block."""
        tree = render([make_section("c", "cards", {"items": "oops", "columns": {"x": 1}})], None, None, None)
        assert tree.body[0].kind == "block"

    def test_non_dict_header_degraded(self):
        tree = render([], "garbage", None, None)
        assert tree.header.kind == "degraded"


# ============================================================================
# Preview/public parity
# ============================================================================


class TestDecoratorParity:
    def test_stripped_preview_equals_public(self):
        selection = EditorSelection(scheduler=ManualScheduler())
        selection.select("s2")
        selection.hover("s1")

        public = render(sample_sections(), {"siteName": "Acme"}, None, None)
        preview = render(sample_sections(), {"siteName": "Acme"}, None, None, SelectionDecorator(selection))

        assert [node_to_html(strip_decorators(n)) for n in preview.body] == [node_to_html(n) for n in public.body]
        assert node_to_html(preview.header) == node_to_html(public.header)

    def test_decorated_nodes_carry_section_attrs(self):
        preview = render(sample_sections(), None, None, None, SelectionDecorator())
        wrapper = preview.body[0]
        assert wrapper.kind == "decorator"
        assert wrapper.attrs["data-section-id"] == "s1"
        assert wrapper.attrs["data-section-type"] == "hero"


# ============================================================================
# Section wrapper
# ============================================================================


class TestSectionWrapper:
    def test_anchor_id(self):
        tree = render([make_section("s", "text", {"body": "x"}, anchor_id="pricing")], None, None, None)
        assert tree.body[0].attrs["id"] == "pricing"

    def test_no_anchor_no_id(self):
        tree = render([make_section("s", "text", {"body": "x"})], None, None, None)
        assert "id" not in tree.body[0].attrs

    def test_styling_overrides_applied(self):
        section = make_section("s", "text", {"body": "x"}, styling={"spacing": "large", "contentWidth": "narrow"})
        html = node_to_html(render([section], None, None, None).body[0])
        assert_contains(html, "padding-top: 6rem", "max-width: 48rem")

    def test_text_size_sets_heading_and_body_sizes(self):
        section = make_section("s", "hero", {"heading": "Hi"}, styling={"textSize": "large"})
        html = node_to_html(render([section], None, None, None).body[0])
        assert_contains(
            html,
            "--text-size-body: 1.125rem",
            "--text-size-h1: 2.75rem",
            "--text-size-h3: 1.875rem",
            "font-size: var(--text-size-h1, 3rem)",
        )

    def test_no_text_size_keeps_theme_scale(self):
        html = node_to_html(render([make_section("s", "hero", {"heading": "Hi"})], None, None, None).body[0])
        assert "--text-size-h1:" not in html
        assert "var(--text-size-h1, 3rem)" in html

    def test_legacy_inline_styling_applied(self):
        section = make_section("s", "hero", {"heading": "Hi", "showBorder": True, "borderWidth": "thick"})
        assert "border-width: 4px" in node_to_html(render([section], None, None, None).body[0])


# ============================================================================
# Documents
# ============================================================================


class TestRenderDocument:
    def test_styles_in_head_before_body(self):
        html = render_document(render(sample_sections(), None, None, default_theme()))
        head, body = html.split("</head>")
        assert "--color-background" in head
        assert "Welcome" in body

    def test_user_choice_init_script_precedes_content(self):
        tree = render(sample_sections(), None, None, None, color_mode="user_choice")
        html = render_document(tree)
        assert html.index("localStorage.getItem('site-color-mode')") < html.index("<body")
        assert "data-color-mode-toggle" in html

    def test_storage_key_configurable(self):
        tree = render([], None, None, None, color_mode="user_choice")
        html = render_document(tree, DocumentOptions(storage_key="acme-mode"))
        assert "localStorage.getItem('acme-mode')" in html
        assert "localStorage.setItem('acme-mode'" in html

    def test_light_mode_has_no_script_or_toggle(self):
        html = render_document(render(sample_sections(), None, None, None))
        assert "<script>" not in html
        assert "data-color-mode-toggle" not in html

    def test_seo_meta(self):
        html = render_document(
            render([], None, None, None),
            DocumentOptions(title="About | Acme", description="Who we are", site_name="Acme", url="https://x.test/a"),
        )
        assert_contains(
            html,
            "<title>About | Acme</title>",
            '<meta name="description" content="Who we are">',
            '<meta property="og:site_name" content="Acme">',
            '<meta property="og:url" content="https://x.test/a">',
        )

    def test_title_escaped(self):
        html = render_document(render([], None, None, None), DocumentOptions(title="<script>x</script>"))
        assert "<title>&lt;script&gt;x&lt;/script&gt;</title>" in html

    def test_empty_page_message(self):
        assert EMPTY_PAGE_MESSAGE in render([], None, None, None).to_html()
