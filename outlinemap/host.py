"""Contracts the outline engine expects from its host editor.

The engine never touches UI primitives directly; a host adapter implements
these protocols. Source cursor lines are 1-indexed and panel rows are
0-indexed (row ``i`` shows outline entry ``i``). All callbacks run on the
host's single UI thread.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Protocol

from .types import StyledRegion

Callback = Callable[[], None]

LEVEL_DEBUG = "debug"
LEVEL_INFO = "info"
LEVEL_WARN = "warn"
LEVEL_ERROR = "error"


class Subscription(Protocol):
    def unsubscribe(self) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class SourceBuffer(Protocol):
    id: int
    language: str

    def is_valid(self) -> bool: ...

    def lines(self) -> Sequence[str]: ...

    def line_count(self) -> int: ...

    def on_changed(self, callback: Callback) -> Subscription: ...

    def on_saved(self, callback: Callback) -> Subscription: ...

    def on_closed(self, callback: Callback) -> Subscription: ...


class SourceWindow(Protocol):
    id: int

    def is_valid(self) -> bool: ...

    def buffer(self) -> SourceBuffer: ...

    def cursor_line(self) -> int: ...

    def set_cursor_line(self, line: int, center: bool = False) -> None: ...

    def visible_range(self) -> tuple[int, int]: ...

    def focus(self) -> None: ...

    def on_cursor_moved(self, callback: Callback) -> Subscription: ...


class Panel(Protocol):
    """Read-only side panel that displays outline rows."""

    def is_valid(self) -> bool: ...

    def lines(self) -> Sequence[str]: ...

    def set_lines(self, lines: Sequence[str]) -> None: ...

    def cursor_row(self) -> int: ...

    def set_cursor_row(self, row: int) -> None: ...

    def width(self) -> int: ...

    def set_width(self, width: int) -> None: ...

    def is_focused(self) -> bool: ...

    def focus(self) -> None: ...

    def clear_regions(self, layer: str) -> None: ...

    def add_regions(self, layer: str, regions: Sequence[StyledRegion]) -> None: ...

    def on_cursor_moved(self, callback: Callback) -> Subscription: ...

    def on_focus_enter(self, callback: Callback) -> Subscription: ...

    def on_focus_leave(self, callback: Callback) -> Subscription: ...

    def on_closed(self, callback: Callback) -> Subscription: ...

    def destroy(self) -> None: ...


class Host(Protocol):
    def now(self) -> float:
        """Monotonic clock in seconds."""
        ...

    def defer(self, delay_seconds: float, callback: Callback) -> TimerHandle: ...

    def create_panel(self, side: str, width: int) -> Panel: ...

    def current_window(self) -> SourceWindow | None: ...

    def windows(self) -> Sequence[SourceWindow]: ...

    def on_window_activated(self, callback: Callback) -> Subscription: ...

    def on_resized(self, callback: Callback) -> Subscription: ...

    def notify(self, message: str, level: str = LEVEL_INFO) -> None: ...

    def define_style(self, name: str, spec: Mapping[str, object]) -> None: ...
