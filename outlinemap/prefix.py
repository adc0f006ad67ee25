"""Relative distance prefixes shown in front of every outline row.

The prefix is recomputed for every visible row on every cursor move, so
everything here is pure and allocation-light. Layout::

    <distance><number_separator><indicator padded><separator>
"""

from __future__ import annotations

from dataclasses import dataclass

from .ansi import display_width, pad_right
from .config import OutlineConfig, RelativePrefixOptions

MAX_RELATIVE_DISTANCE = 999

UP = "up"
DOWN = "down"
CURRENT = "current"


@dataclass(frozen=True)
class RelativePrefixSettings:
    number_width: int
    number_fill: str
    number_separator: str
    separator: str
    up: str
    down: str
    current: str
    indicator_width: int

    def indicator(self, direction: str) -> str:
        if direction == UP:
            return self.up
        if direction == DOWN:
            return self.down
        return self.current


@dataclass(frozen=True)
class PrefixLayout:
    """Character offsets of the prefix fields, used by highlighting."""

    number_end: int
    indicator_start: int
    indicator_ends: dict[str, int]


def build_prefix_settings(options: RelativePrefixOptions | OutlineConfig | None = None) -> RelativePrefixSettings:
    """Normalize prefix options into the compact settings used by the render loop."""
    if isinstance(options, OutlineConfig):
        options = options.render.relative_prefix
    if options is None:
        options = RelativePrefixOptions()

    indicator_width = max(
        display_width(options.up),
        display_width(options.down),
        display_width(options.current),
    )
    return RelativePrefixSettings(
        number_width=max(1, options.number_width),
        number_fill=options.number_fill or " ",
        number_separator=options.number_separator,
        separator=options.separator,
        up=options.up,
        down=options.down,
        current=options.current,
        indicator_width=indicator_width,
    )


def relative_direction(source_line: int, anchor_line: int) -> tuple[str, int]:
    """Return ``(direction, capped distance)`` of ``source_line`` from the anchor."""
    delta = source_line - anchor_line
    if delta < 0:
        direction = UP
    elif delta > 0:
        direction = DOWN
    else:
        direction = CURRENT
    return direction, min(abs(delta), MAX_RELATIVE_DISTANCE)


def format_relative_prefix(
    source_line: int,
    anchor_line: int,
    settings: RelativePrefixSettings,
) -> tuple[str, str]:
    """Return ``(direction, label)`` for one outline row."""
    direction, distance = relative_direction(source_line, anchor_line)
    number = str(distance).rjust(settings.number_width, settings.number_fill)
    label = (
        number
        + settings.number_separator
        + pad_right(settings.indicator(direction), settings.indicator_width)
        + settings.separator
    )
    return direction, label


def prefix_layout(settings: RelativePrefixSettings, distance: int = 0) -> PrefixLayout:
    """Offsets for a row at ``distance``; wide distances push the indicator right."""
    number_end = max(settings.number_width, len(str(distance))) + len(settings.number_separator)
    return PrefixLayout(
        number_end=number_end,
        indicator_start=number_end,
        indicator_ends={
            direction: number_end + len(pad_right(settings.indicator(direction), settings.indicator_width))
            for direction in (UP, DOWN, CURRENT)
        },
    )
