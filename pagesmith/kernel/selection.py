"""
Pagesmith Kernel — Selection/Scroll Synchronizer

Keeps the editor's outline panel and live preview pointing at the same
section. One session-scoped object holds the hovered and selected section
ids; both panels register an anchor per section so a selection made in
either panel scrolls the other into view.

States:
  idle          nothing hovered or selected
  hovered(id)   pointer over a section; wins over the selection while it lasts
  selected(id)  a section was clicked; survives hovers until replaced

Scrolling is deferred by a fixed delay so the panels have re-laid out after
the selection change. Anchors are looked up when the delayed callback fires,
not when it is scheduled.

Outside the editor there is no session: NullSelection answers every query
with "nothing" and ignores every call, so shared components never need to
branch on whether they are in the editor.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from pagesmith.kernel.blocks import escape
from pagesmith.kernel.primitives import block_label
from pagesmith.kernel.types import RenderNode, ResolvedType, Section

logger = logging.getLogger(__name__)

SCROLL_DELAY_MS = 50
SCROLL_BEHAVIOR = "smooth"
SCROLL_BLOCK = "center"

PANELS: tuple[str, ...] = ("outline", "preview")

# Clicks on these (or inside them) act on the control, not the section.
INTERACTIVE_TAGS: frozenset[str] = frozenset({"a", "button", "input", "textarea", "select"})


class Anchor(Protocol):
    def scroll_into_view(self, behavior: str, block: str) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], Any]


@dataclass(frozen=True)
class SelectionState:
    kind: str  # "idle" | "hovered" | "selected"
    section_id: str | None = None


IDLE = SelectionState("idle")


# ---------------------------------------------------------------------------
# Schedulers
# ---------------------------------------------------------------------------


def timer_scheduler(delay_seconds: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    timer.start()
    return timer


class ManualScheduler:
    """
    Scheduler driven by hand: callbacks fire only when `advance` moves the
    clock past their due time. Used by tests and by server-side previews
    that have no event loop of their own.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._pending: list[tuple[float, int, Callable[[], None]]] = []
        self._seq = 0

    def __call__(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        self._seq += 1
        self._pending.append((self.now + delay_seconds, self._seq, callback))

    @property
    def pending(self) -> int:
        return len(self._pending)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run everything now due. Returns how many ran."""
        self.now += seconds
        due = sorted(p for p in self._pending if p[0] <= self.now + 1e-9)
        self._pending = [p for p in self._pending if p[0] > self.now + 1e-9]
        for _, _, callback in due:
            callback()
        return len(due)


# ---------------------------------------------------------------------------
# Synchronizers
# ---------------------------------------------------------------------------


class Synchronizer(Protocol):
    @property
    def hovered_id(self) -> str | None: ...

    @property
    def selected_id(self) -> str | None: ...

    @property
    def state(self) -> SelectionState: ...

    def hover(self, section_id: str | None) -> None: ...

    def leave(self) -> None: ...

    def select(self, section_id: str | None) -> None: ...

    def register_anchor(self, panel: str, section_id: str, anchor: Anchor) -> None: ...

    def unregister_anchor(self, panel: str, section_id: str, anchor: Anchor | None = None) -> None: ...


class EditorSelection:
    """Selection state for one editing session."""

    def __init__(self, scheduler: Scheduler | None = None, delay_ms: int = SCROLL_DELAY_MS):
        self._scheduler = scheduler or timer_scheduler
        self._delay = delay_ms / 1000
        self._hovered: str | None = None
        self._selected: str | None = None
        self._anchors: dict[str, dict[str, Anchor]] = {panel: {} for panel in PANELS}
        self._scroll_generation = 0
        self._closed = False
        self._lock = threading.Lock()

    @property
    def hovered_id(self) -> str | None:
        return self._hovered

    @property
    def selected_id(self) -> str | None:
        return self._selected

    @property
    def state(self) -> SelectionState:
        if self._hovered is not None:
            return SelectionState("hovered", self._hovered)
        if self._selected is not None:
            return SelectionState("selected", self._selected)
        return IDLE

    @property
    def closed(self) -> bool:
        return self._closed

    # -- transitions --------------------------------------------------------

    def hover(self, section_id: str | None) -> None:
        if section_id is None:
            self.leave()
            return
        self._hovered = section_id

    def leave(self) -> None:
        self._hovered = None

    def select(self, section_id: str | None) -> None:
        """Select a section (None clears). Re-selecting the same id doesn't re-scroll."""
        if section_id == self._selected:
            return
        self._selected = section_id
        if section_id is not None:
            self._schedule_scroll(section_id)

    def handle_click(self, section_id: str | None, target_path: Iterable[str] | str = ()) -> bool:
        """
        A click in the preview. `target_path` is the tag names from the
        clicked element up to the section. Returns whether it selected.
        """
        if section_id is None or is_interactive_target(target_path):
            return False
        self.select(section_id)
        return True

    # -- anchors ------------------------------------------------------------

    def register_anchor(self, panel: str, section_id: str, anchor: Anchor) -> None:
        if panel not in self._anchors:
            logger.warning("register_anchor: unknown panel %r", panel)
            return
        with self._lock:
            self._anchors[panel][section_id] = anchor

    def unregister_anchor(self, panel: str, section_id: str, anchor: Anchor | None = None) -> None:
        """Drop an anchor. With `anchor`, only if it is still the registered one."""
        with self._lock:
            registered = self._anchors.get(panel, {})
            if anchor is not None and registered.get(section_id) is not anchor:
                return
            registered.pop(section_id, None)

    def anchor(self, panel: str, section_id: str) -> Anchor | None:
        return self._anchors.get(panel, {}).get(section_id)

    # -- scrolling ----------------------------------------------------------

    def _schedule_scroll(self, section_id: str) -> None:
        if self._closed:
            return
        self._scroll_generation += 1
        generation = self._scroll_generation

        def fire() -> None:
            # Superseded by a later selection, or the editor unmounted
            if self._closed or generation != self._scroll_generation:
                return
            self._scroll_to(section_id)

        self._scheduler(self._delay, fire)

    def _scroll_to(self, section_id: str) -> None:
        with self._lock:
            anchors = [self._anchors[panel].get(section_id) for panel in PANELS]
        for anchor in anchors:
            if anchor is None:
                continue
            try:
                anchor.scroll_into_view(behavior=SCROLL_BEHAVIOR, block=SCROLL_BLOCK)
            except Exception as e:
                logger.warning("scroll to section %s failed: %s", section_id, e)

    def close(self) -> None:
        """Unmount: pending scrolls become no-ops and anchors are released."""
        self._closed = True
        with self._lock:
            for registered in self._anchors.values():
                registered.clear()


class NullSelection:
    """Synchronizer for contexts with no editing session."""

    hovered_id = None
    selected_id = None
    state = IDLE

    def hover(self, section_id: str | None) -> None:
        pass

    def leave(self) -> None:
        pass

    def select(self, section_id: str | None) -> None:
        pass

    def handle_click(self, section_id: str | None, target_path: Iterable[str] | str = ()) -> bool:
        return False

    def register_anchor(self, panel: str, section_id: str, anchor: Anchor) -> None:
        pass

    def unregister_anchor(self, panel: str, section_id: str, anchor: Anchor | None = None) -> None:
        pass

    def anchor(self, panel: str, section_id: str) -> None:
        return None

    def close(self) -> None:
        pass


NULL_SELECTION = NullSelection()


def is_interactive_target(target_path: Iterable[str] | str) -> bool:
    """True when the click landed on (or inside) an interactive control."""
    if isinstance(target_path, str):
        target_path = (target_path,)
    return any(isinstance(tag, str) and tag.lower() in INTERACTIVE_TAGS for tag in target_path)


# ---------------------------------------------------------------------------
# Preview decorator
# ---------------------------------------------------------------------------

SELECTION_CSS = """.ps-selectable { position: relative; cursor: pointer; }
.ps-selectable > .ps-section-label { display: none; position: absolute; top: 0.5rem; left: 0.5rem; z-index: 30; padding: 0.125rem 0.5rem; font-size: 0.75rem; border-radius: 0.25rem; background: var(--color-primary); color: #FFFFFF; pointer-events: none; }
.ps-selectable.ps-hovered { outline: 2px dashed var(--color-primary); outline-offset: -2px; }
.ps-selectable.ps-selected { outline: 2px solid var(--color-primary); outline-offset: -2px; }
.ps-selectable.ps-hovered > .ps-section-label, .ps-selectable.ps-selected > .ps-section-label { display: block; }"""


class SelectionDecorator:
    """
    Wraps each preview block with selection hooks: data attributes the
    editor script reads, highlight classes for the current state, and a
    floating label naming the block type. The wrapped node is untouched.
    """

    def __init__(self, synchronizer: Synchronizer | None = None):
        self.synchronizer = synchronizer or NULL_SELECTION

    def __call__(self, node: RenderNode, section: Section, resolved: ResolvedType) -> RenderNode:
        classes = ["ps-selectable"]
        if self.synchronizer.hovered_id == section.id:
            classes.append("ps-hovered")
        if self.synchronizer.selected_id == section.id:
            classes.append("ps-selected")

        label = RenderNode(
            kind="affordance",
            tag="div",
            attrs={"class": "ps-section-label", "aria-hidden": "true"},
            html=escape(block_label(resolved)),
        )
        return RenderNode(
            kind="decorator",
            tag="div",
            attrs={
                "class": " ".join(classes),
                "data-section-id": section.id,
                "data-section-type": section.declared_type,
                "data-primitive": resolved.key,
            },
            children=[label, node],
            section_id=section.id,
            primitive=resolved.primitive,
            preset=resolved.preset,
        )
