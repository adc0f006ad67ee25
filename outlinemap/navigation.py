"""Navigation between outline rows and source lines.

This module has no timing concerns; the controller decides when to call it.
"""

from __future__ import annotations

from .config import OutlineConfig
from .host import Panel, SourceWindow
from .types import NO_SELECTION, LineMapping


def jump_to_source(mapping: LineMapping, outline_index: int, line_count: int | None = None) -> int | None:
    """Return the source line for ``outline_index`` (clamped), or ``None`` when empty."""
    if not mapping:
        return None
    index = max(0, min(outline_index, len(mapping) - 1))
    line = mapping[index]
    if line_count is not None and line_count > 0:
        line = max(1, min(line, line_count))
    return line


def nearest_outline_index(mapping: LineMapping, source_line: int) -> int:
    """Return the last row whose source line is <= ``source_line``.

    Lines before the first entry select row 0; an empty outline selects
    nothing (``NO_SELECTION``).
    """
    if not mapping:
        return NO_SELECTION
    return max(0, mapping.floor_index(source_line))


def sync_panel_cursor(panel: Panel, source_line: int, mapping: LineMapping) -> int:
    """Place the panel cursor on the row nearest ``source_line``; return the row."""
    row = nearest_outline_index(mapping, source_line)
    if row != NO_SELECTION and panel.is_valid():
        panel.set_cursor_row(row)
    return row


def follow_panel_cursor(panel: Panel, window: SourceWindow, mapping: LineMapping, center: bool = True) -> int | None:
    """Move the source cursor to the line under the panel cursor, keeping focus in the panel."""
    if not panel.is_valid() or not window.is_valid():
        return None
    line = jump_to_source(mapping, panel.cursor_row(), window.buffer().line_count())
    if line is not None:
        window.set_cursor_line(line, center=center)
    return line


def jump_from_panel(panel: Panel, window: SourceWindow, mapping: LineMapping, config: OutlineConfig) -> int | None:
    """Jump to the entry under the panel cursor and focus the source window."""
    if not panel.is_valid() or not window.is_valid():
        return None
    line = jump_to_source(mapping, panel.cursor_row(), window.buffer().line_count())
    if line is None:
        return None
    window.set_cursor_line(line, center=config.navigation.auto_center)
    window.focus()
    return line
