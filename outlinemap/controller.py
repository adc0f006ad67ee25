"""Sync controller: keeps one outline panel consistent with its source window.

Two update paths share one throttle interval:

- full: re-render entries, mapping and structural nodes from the buffer
  (text changes, saves, attaching a new buffer);
- fast: re-prefix the cached entry content for a new anchor line and redraw
  the highlight layers (source cursor moves).

A request that arrives within the interval of its path's last run, or while
that path already has a timer pending, replaces the pending timer with one
trailing run. Every deferred callback re-checks that the controller is still
open and its handles are still valid before doing anything.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .config import OutlineConfig, is_language_supported, is_treesitter_enabled
from .highlight import (
    LAYER_CURSOR,
    LAYER_STRUCTURE,
    LAYER_SYNTAX,
    LAYER_VIEWPORT,
    cursor_region,
    resolve_styles,
    structure_regions,
    syntax_regions,
    viewport_regions,
)
from .host import LEVEL_INFO, Host, Panel, SourceBuffer, SourceWindow, Subscription, TimerHandle
from .keywords import resolve_highlight_keywords
from .languages import get_provider
from .navigation import follow_panel_cursor, jump_from_panel, sync_panel_cursor
from .prefix import RelativePrefixSettings, build_prefix_settings
from .render import compose_rows, render_outline
from .structure import scope_at_line, structural_nodes
from .types import LineMapping, OutlineEntry, StructuralNode

logger = logging.getLogger(__name__)

FULL = "full"
FAST = "fast"


class ControllerPhase:
    CLOSED = "closed"
    IDLE = "idle"
    PENDING_FULL = "pending_full"
    PENDING_FAST = "pending_fast"


@dataclass
class PendingTimer:
    token: object
    handle: TimerHandle


@dataclass
class EngineState:
    """Everything one open outline owns; discarded wholesale on close."""

    panel: Panel
    buffer: SourceBuffer
    window: SourceWindow
    entries: tuple[OutlineEntry, ...] = ()
    mapping: LineMapping = field(default_factory=LineMapping)
    nodes: tuple[StructuralNode, ...] = ()
    prefix_settings: RelativePrefixSettings | None = None
    highlight_keywords: tuple[str, ...] = ()
    last_full_update: float | None = None
    last_fast_update: float | None = None
    timers: dict[str, PendingTimer] = field(default_factory=dict)
    target_subscriptions: list[Subscription] = field(default_factory=list)
    panel_subscriptions: list[Subscription] = field(default_factory=list)
    anchor_line: int | None = None
    follow_scheduled: bool = False
    follow_timer: TimerHandle | None = None


def _unsubscribe_all(subscriptions: list[Subscription]) -> None:
    while subscriptions:
        subscriptions.pop().unsubscribe()


class OutlineController:
    def __init__(self, host: Host, config: OutlineConfig | None = None) -> None:
        self.host = host
        self.config = config or OutlineConfig()
        self.state: EngineState | None = None

    # -- lifecycle -------------------------------------------------------

    @property
    def phase(self) -> str:
        state = self.state
        if state is None:
            return ControllerPhase.CLOSED
        if FULL in state.timers:
            return ControllerPhase.PENDING_FULL
        if FAST in state.timers:
            return ControllerPhase.PENDING_FAST
        return ControllerPhase.IDLE

    @property
    def is_open(self) -> bool:
        return self.state is not None

    def supports(self, language: str) -> bool:
        return is_language_supported(self.config, language) and get_provider(language) is not None

    def open(self, window: SourceWindow | None = None) -> bool:
        """Open the panel for ``window`` (default: the host's current window)."""
        if self.state is not None and self.state.panel.is_valid():
            return True
        if self.state is not None:
            self.close()

        window = window or self.host.current_window()
        if window is None or not window.is_valid():
            return False
        buffer = window.buffer()
        if not self.supports(buffer.language):
            self.host.notify(f"Outline not supported for language: {buffer.language}", LEVEL_INFO)
            return False

        self.define_styles()
        panel = self.host.create_panel(self.config.side, self.config.width)
        self.state = EngineState(panel=panel, buffer=buffer, window=window)
        self._subscribe_panel()
        self._subscribe_target()
        self.full_update()
        return True

    def close(self) -> None:
        """Cancel timers, drop subscriptions, destroy the panel. Safe to repeat."""
        state = self.state
        if state is None:
            return
        self.state = None

        for pending in state.timers.values():
            pending.handle.cancel()
        state.timers.clear()
        if state.follow_timer is not None:
            state.follow_timer.cancel()
            state.follow_timer = None
        _unsubscribe_all(state.target_subscriptions)
        _unsubscribe_all(state.panel_subscriptions)
        if state.panel.is_valid():
            state.panel.destroy()

    def toggle(self, window: SourceWindow | None = None) -> bool:
        if self.state is not None:
            self.close()
            return False
        return self.open(window)

    def update_config(self, config: OutlineConfig) -> None:
        self.config = config
        state = self.state
        if state is None:
            return
        self.define_styles()
        if state.panel.is_valid():
            state.panel.set_width(config.width)
        self.full_update()

    def define_styles(self) -> None:
        for name, spec in resolve_styles(self.config.style, self.config.highlights).items():
            self.host.define_style(name, spec)

    # -- subscriptions ---------------------------------------------------

    def _subscribe_panel(self) -> None:
        state = self.state
        assert state is not None
        panel = state.panel
        state.panel_subscriptions.extend(
            [
                panel.on_cursor_moved(self._on_panel_cursor_moved),
                panel.on_focus_enter(self._on_panel_focus_enter),
                panel.on_focus_leave(self._on_panel_focus_leave),
                panel.on_closed(self.close),
                self.host.on_window_activated(self.follow_active_target),
                self.host.on_resized(self._on_resized),
            ]
        )

    def _subscribe_target(self) -> None:
        state = self.state
        assert state is not None
        _unsubscribe_all(state.target_subscriptions)
        state.target_subscriptions.extend(
            [
                state.buffer.on_changed(self.request_full_update),
                state.buffer.on_saved(self._on_saved),
                state.buffer.on_closed(self.follow_active_target),
                state.window.on_cursor_moved(self._on_source_cursor_moved),
            ]
        )

    # -- liveness --------------------------------------------------------

    def _live_state(self) -> EngineState | None:
        """Return the state when panel and buffer are usable; close otherwise."""
        state = self.state
        if state is None:
            return None
        if not state.panel.is_valid() or not state.buffer.is_valid():
            self.close()
            return None
        return state

    def anchor_line(self) -> int:
        """Line that distances are measured from: the pinned anchor or the source cursor."""
        state = self.state
        if state is None:
            return 1
        if self.config.navigation.pin_anchor and state.anchor_line is not None:
            return state.anchor_line
        if state.window.is_valid():
            return state.window.cursor_line()
        return 1

    # -- update paths ----------------------------------------------------

    def full_update(self) -> bool:
        """Re-render from the buffer. A failing render keeps the previous outline."""
        state = self._live_state()
        if state is None:
            return False
        self._cancel_timer(state, FULL)

        language = state.buffer.language
        provider = get_provider(language)
        try:
            lines = list(state.buffer.lines())
            rendered = render_outline(lines, language, self.config, provider)
            settings = build_prefix_settings(self.config)
            nodes: list[StructuralNode] = []
            if self.config.treesitter.highlight_scopes and is_treesitter_enabled(self.config, language):
                nodes = structural_nodes(lines, language, provider)
            keywords = ()
            if provider is not None:
                keywords = resolve_highlight_keywords(self.config, language, provider.highlight_defaults)
        except Exception:
            logger.exception("Outline render failed for buffer %s; keeping previous outline", state.buffer.id)
            return False

        state.entries = rendered.entries
        state.mapping = rendered.mapping
        state.nodes = tuple(nodes)
        state.prefix_settings = settings
        state.highlight_keywords = keywords

        anchor = self.anchor_line()
        rows = compose_rows(state.entries, anchor, settings)
        state.panel.set_lines(rows)
        self._redraw(state, anchor, rows)
        state.last_full_update = self.host.now()
        return True

    def fast_update(self) -> bool:
        """Re-prefix cached content for the current anchor and redraw highlights."""
        state = self._live_state()
        if state is None:
            return False
        self._cancel_timer(state, FAST)
        if not state.window.is_valid():
            return False

        settings = state.prefix_settings or build_prefix_settings(self.config)
        anchor = self.anchor_line()
        rows = compose_rows(state.entries, anchor, settings)
        if list(state.panel.lines()) != rows:
            state.panel.set_lines(rows)
        self._redraw(state, anchor, rows)
        state.last_fast_update = self.host.now()
        return True

    def _redraw(self, state: EngineState, anchor: int, rows: list[str]) -> None:
        panel = state.panel
        settings = state.prefix_settings or build_prefix_settings(self.config)
        language = state.buffer.language

        for layer in (LAYER_VIEWPORT, LAYER_CURSOR, LAYER_STRUCTURE, LAYER_SYNTAX):
            panel.clear_regions(layer)

        if state.nodes:
            panel.add_regions(
                LAYER_STRUCTURE,
                structure_regions(state.nodes, state.entries, state.mapping, anchor, settings, language),
            )
        panel.add_regions(
            LAYER_SYNTAX,
            syntax_regions(state.entries, rows, anchor, settings, state.highlight_keywords, language),
        )

        if state.window.is_valid():
            top, bottom = state.window.visible_range()
            panel.add_regions(LAYER_VIEWPORT, viewport_regions(state.mapping, top, bottom))
            if not panel.is_focused():
                sync_panel_cursor(panel, state.window.cursor_line(), state.mapping)
        self._draw_cursor(state)

    def _draw_cursor(self, state: EngineState) -> None:
        panel = state.panel
        panel.clear_regions(LAYER_CURSOR)
        if state.entries:
            panel.add_regions(LAYER_CURSOR, [cursor_region(panel.cursor_row())])

    # -- throttling ------------------------------------------------------

    def _cancel_timer(self, state: EngineState, path: str) -> None:
        pending = state.timers.pop(path, None)
        if pending is not None:
            pending.handle.cancel()

    def _throttled(self, path: str, run: Callable[[], bool]) -> None:
        state = self.state
        if state is None:
            return
        interval = max(0, self.config.render.throttle_ms) / 1000.0
        last = state.last_full_update if path == FULL else state.last_fast_update
        now = self.host.now()
        recent = last is not None and (now - last) < interval
        if path not in state.timers and not recent:
            run()
            return

        self._cancel_timer(state, path)
        token = object()

        def fire() -> None:
            current = self.state
            if current is not state:
                return
            pending = current.timers.get(path)
            if pending is None or pending.token is not token:
                return
            del current.timers[path]
            run()

        state.timers[path] = PendingTimer(token=token, handle=self.host.defer(interval, fire))

    def request_full_update(self) -> None:
        self._throttled(FULL, self.full_update)

    def request_fast_update(self) -> None:
        self._throttled(FAST, self.fast_update)

    # -- event handlers --------------------------------------------------

    def _on_source_cursor_moved(self) -> None:
        state = self.state
        if state is None:
            return
        if state.mapping:
            self.request_fast_update()
        else:
            self.request_full_update()

    def _on_saved(self) -> None:
        self.full_update()

    def _on_resized(self) -> None:
        state = self.state
        if state is not None and state.panel.is_valid():
            state.panel.set_width(self.config.width)

    def _on_panel_focus_enter(self) -> None:
        state = self.state
        if state is None or not state.panel.is_valid():
            return
        if self.config.navigation.pin_anchor and state.window.is_valid():
            state.anchor_line = state.window.cursor_line()
        else:
            state.anchor_line = None
        self._draw_cursor(state)

    def _on_panel_focus_leave(self) -> None:
        state = self.state
        if state is None:
            return
        state.anchor_line = None
        if not state.panel.is_valid() or not state.window.is_valid():
            return
        sync_panel_cursor(state.panel, state.window.cursor_line(), state.mapping)
        self.fast_update()

    def _on_panel_cursor_moved(self) -> None:
        state = self.state
        if state is None or not state.panel.is_valid():
            return
        self._draw_cursor(state)
        if self.config.navigation.follow_cursor and state.panel.is_focused():
            follow_panel_cursor(state.panel, state.window, state.mapping, center=self.config.navigation.auto_center)

    def jump(self) -> int | None:
        """Jump the source window to the entry under the panel cursor."""
        state = self.state
        if state is None:
            return None
        return jump_from_panel(state.panel, state.window, state.mapping, self.config)

    def current_scope(self) -> StructuralNode | None:
        """Innermost structural node enclosing the source cursor."""
        state = self.state
        if state is None or not state.nodes or not state.window.is_valid():
            return None
        return scope_at_line(state.nodes, state.window.cursor_line() - 1)

    def focus(self) -> bool:
        state = self.state
        if state is None or not state.panel.is_valid():
            return False
        state.panel.focus()
        return True

    # -- target following ------------------------------------------------

    def follow_active_target(self) -> None:
        """Re-target on the next turn of the host loop; repeated calls coalesce."""
        state = self.state
        if state is None or state.follow_scheduled:
            return
        state.follow_scheduled = True

        def fire() -> None:
            if self.state is not state:
                return
            state.follow_scheduled = False
            state.follow_timer = None
            self._follow_now()

        state.follow_timer = self.host.defer(0, fire)

    def _is_supported_target(self, window: SourceWindow | None) -> bool:
        if window is None or not window.is_valid():
            return False
        buffer = window.buffer()
        return buffer.is_valid() and self.supports(buffer.language)

    def _window_for_current_buffer(self, state: EngineState) -> SourceWindow | None:
        if state.window.is_valid() and state.window.buffer().id == state.buffer.id:
            return state.window
        for window in self.host.windows():
            if window.is_valid() and window.buffer().id == state.buffer.id:
                return window
        return None

    def _follow_now(self) -> None:
        state = self.state
        if state is None:
            return
        if not state.panel.is_valid():
            self.close()
            return

        current = self.host.current_window()
        if self._is_supported_target(current):
            self._attach(state, current)
            return

        if state.buffer.is_valid() and self.supports(state.buffer.language):
            window = self._window_for_current_buffer(state)
            if window is not None:
                self._attach(state, window)
                return

        for window in self.host.windows():
            if self._is_supported_target(window):
                self._attach(state, window)
                return

        self.close()

    def _attach(self, state: EngineState, window: SourceWindow) -> None:
        buffer = window.buffer()
        buffer_changed = buffer.id != state.buffer.id or not state.buffer.is_valid()
        window_changed = window.id != state.window.id
        if not buffer_changed and not window_changed:
            return

        logger.debug("Outline target -> window %s buffer %s", window.id, buffer.id)
        state.window = window
        state.buffer = buffer
        state.anchor_line = None
        self._subscribe_target()

        if buffer_changed:
            for path in (FULL, FAST):
                self._cancel_timer(state, path)
            state.entries = ()
            state.mapping = LineMapping()
            state.nodes = ()
            self.full_update()
        else:
            self.request_fast_update()
