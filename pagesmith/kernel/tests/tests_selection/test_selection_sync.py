"""
Pagesmith Selection -- Hover/Select/Scroll Synchronization Tests

EditorSelection keeps the outline panel and the preview pointing at the
same section.

Covers:
  - state machine: idle → hovered → selected, hover overriding selection
    only while it lasts
  - clicks on interactive controls inside a block don't select it
  - a new selection scrolls every registered anchor after the delay,
    smoothly and centered; missing anchors are skipped
  - anchors are looked up when the scroll fires, not when it is scheduled
  - superseded and post-unmount scrolls never run
  - NullSelection is inert
  - SelectionDecorator marks hovered/selected blocks and labels them
"""

import pytest

from pagesmith.kernel.selection import (
    IDLE,
    NULL_SELECTION,
    SCROLL_DELAY_MS,
    EditorSelection,
    ManualScheduler,
    NullSelection,
    SelectionDecorator,
    SelectionState,
    is_interactive_target,
)
from pagesmith.kernel.types import RenderNode, ResolvedType, Section

# ============================================================================
# Helpers
# ============================================================================

DELAY = SCROLL_DELAY_MS / 1000


class FakeAnchor:
    """Records scrollIntoView calls."""

    def __init__(self):
        self.calls = []

    def scroll_into_view(self, behavior, block):
        self.calls.append((behavior, block))


class BrokenAnchor:
    def scroll_into_view(self, behavior, block):
        raise RuntimeError("detached")


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def selection(scheduler):
    return EditorSelection(scheduler=scheduler)


# ============================================================================
# State machine
# ============================================================================


class TestStates:
    def test_starts_idle(self, selection):
        assert selection.state == IDLE
        assert selection.hovered_id is None
        assert selection.selected_id is None

    def test_hover_then_leave(self, selection):
        selection.hover("a")
        assert selection.state == SelectionState("hovered", "a")
        selection.leave()
        assert selection.state == IDLE

    def test_selection_persists_across_hover(self, selection):
        selection.select("a")
        selection.hover("b")
        assert selection.state == SelectionState("hovered", "b")
        assert selection.selected_id == "a"
        selection.leave()
        assert selection.state == SelectionState("selected", "a")

    def test_hover_none_is_leave(self, selection):
        selection.hover("a")
        selection.hover(None)
        assert selection.hovered_id is None

    def test_select_none_clears(self, selection):
        selection.select("a")
        selection.select(None)
        assert selection.state == IDLE


class TestClicks:
    def test_plain_click_selects(self, selection):
        assert selection.handle_click("a", ["p", "div", "section"]) is True
        assert selection.selected_id == "a"

    @pytest.mark.parametrize("tag", ["a", "button", "input", "textarea", "select", "BUTTON"])
    def test_interactive_click_ignored(self, selection, tag):
        assert selection.handle_click("a", [tag]) is False
        assert selection.selected_id is None

    def test_click_inside_link_ignored(self, selection):
        """A <span> inside an <a> still counts as a click on the link."""
        assert selection.handle_click("a", ["span", "a", "div"]) is False

    def test_target_as_string(self):
        assert is_interactive_target("button")
        assert not is_interactive_target("div")


# ============================================================================
# Scrolling
# ============================================================================


class TestScroll:
    def test_scrolls_both_panels_after_delay(self, selection, scheduler):
        outline, preview = FakeAnchor(), FakeAnchor()
        selection.register_anchor("outline", "a", outline)
        selection.register_anchor("preview", "a", preview)

        selection.select("a")
        assert outline.calls == [] and preview.calls == []

        scheduler.advance(DELAY / 2)
        assert outline.calls == []

        scheduler.advance(DELAY / 2)
        assert outline.calls == [("smooth", "center")]
        assert preview.calls == [("smooth", "center")]

    def test_missing_anchor_skipped(self, selection, scheduler):
        outline = FakeAnchor()
        selection.register_anchor("outline", "a", outline)
        selection.select("a")
        scheduler.advance(DELAY)
        assert outline.calls == [("smooth", "center")]

    def test_late_registration_picked_up(self, selection, scheduler):
        selection.select("a")
        preview = FakeAnchor()
        selection.register_anchor("preview", "a", preview)
        scheduler.advance(DELAY)
        assert preview.calls == [("smooth", "center")]

    def test_reselecting_same_id_does_not_rescroll(self, selection, scheduler):
        outline = FakeAnchor()
        selection.register_anchor("outline", "a", outline)
        selection.select("a")
        scheduler.advance(DELAY)
        selection.select("a")
        scheduler.advance(DELAY)
        assert len(outline.calls) == 1

    def test_superseded_selection_does_not_scroll(self, selection, scheduler):
        first, second = FakeAnchor(), FakeAnchor()
        selection.register_anchor("preview", "a", first)
        selection.register_anchor("preview", "b", second)
        selection.select("a")
        selection.select("b")
        scheduler.advance(DELAY)
        assert first.calls == []
        assert second.calls == [("smooth", "center")]

    def test_hover_does_not_scroll(self, selection, scheduler):
        selection.hover("a")
        assert scheduler.pending == 0

    def test_close_cancels_pending(self, selection, scheduler):
        anchor = FakeAnchor()
        selection.register_anchor("preview", "a", anchor)
        selection.select("a")
        selection.close()
        scheduler.advance(DELAY)
        assert anchor.calls == []

    def test_failing_anchor_does_not_block_others(self, selection, scheduler, caplog):
        good = FakeAnchor()
        selection.register_anchor("outline", "a", BrokenAnchor())
        selection.register_anchor("preview", "a", good)
        selection.select("a")
        scheduler.advance(DELAY)
        assert good.calls == [("smooth", "center")]
        assert "detached" in caplog.text

    def test_custom_delay(self, scheduler):
        selection = EditorSelection(scheduler=scheduler, delay_ms=200)
        anchor = FakeAnchor()
        selection.register_anchor("preview", "a", anchor)
        selection.select("a")
        scheduler.advance(0.1)
        assert anchor.calls == []
        scheduler.advance(0.1)
        assert anchor.calls == [("smooth", "center")]


class TestAnchors:
    def test_unregister(self, selection):
        anchor = FakeAnchor()
        selection.register_anchor("outline", "a", anchor)
        selection.unregister_anchor("outline", "a")
        assert selection.anchor("outline", "a") is None

    def test_unregister_stale_anchor_keeps_newer(self, selection):
        """A remount registers first, then the old instance unregisters."""
        old, new = FakeAnchor(), FakeAnchor()
        selection.register_anchor("preview", "a", old)
        selection.register_anchor("preview", "a", new)
        selection.unregister_anchor("preview", "a", old)
        assert selection.anchor("preview", "a") is new

    def test_unknown_panel_ignored(self, selection, caplog):
        selection.register_anchor("sidebar", "a", FakeAnchor())
        assert selection.anchor("sidebar", "a") is None
        assert "unknown panel" in caplog.text


# ============================================================================
# Null synchronizer
# ============================================================================


class TestNullSelection:
    def test_inert(self):
        null = NullSelection()
        null.hover("a")
        null.select("a")
        null.register_anchor("preview", "a", FakeAnchor())
        assert null.hovered_id is None
        assert null.selected_id is None
        assert null.state == IDLE
        assert null.anchor("preview", "a") is None
        assert null.handle_click("a", ["div"]) is False


# ============================================================================
# Decorator
# ============================================================================


class TestSelectionDecorator:
    def decorate(self, synchronizer, section_id="s1"):
        node = RenderNode(kind="block", html="<p>x</p>", section_id=section_id)
        section = Section(id=section_id, page_id="p", declared_type="features")
        return SelectionDecorator(synchronizer)(node, section, ResolvedType("cards", "feature"))

    def test_wraps_without_touching_block(self, selection):
        wrapper = self.decorate(selection)
        assert wrapper.kind == "decorator"
        assert wrapper.children[1].html == "<p>x</p>"
        assert wrapper.attrs["data-section-id"] == "s1"
        assert wrapper.attrs["data-section-type"] == "features"
        assert wrapper.attrs["data-primitive"] == "cards/feature"

    def test_label_affordance(self, selection):
        label = self.decorate(selection).children[0]
        assert label.kind == "affordance"
        assert label.html == "Features"

    def test_highlight_classes(self, selection):
        selection.select("s1")
        assert "ps-selected" in self.decorate(selection).attrs["class"]
        selection.hover("s1")
        assert "ps-hovered" in self.decorate(selection).attrs["class"]
        assert "ps-hovered" not in self.decorate(selection, "s2").attrs["class"]

    def test_default_synchronizer_is_null(self):
        assert SelectionDecorator().synchronizer is NULL_SELECTION
