"""Display-width measurement and ANSI painting of styled outline rows.

Prefix columns are aligned by terminal display width, so wide and combining
characters in indicator glyphs are measured the way a terminal draws them.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping

from .types import StyledRegion

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
RESET = "\033[0m"
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    """Return the display width of plain (escape-free) ``text``."""
    col = 0
    for ch in text:
        col += char_display_width(ch, col)
    return col


def pad_right(text: str, width: int) -> str:
    """Pad ``text`` with spaces up to ``width`` display columns."""
    current = display_width(text)
    if current >= width:
        return text
    return text + " " * (width - current)


def _hex_to_rgb(color: str) -> tuple[int, int, int] | None:
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        return None
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError:
        return None


def sgr_for_style(style: Mapping[str, object]) -> str:
    """Translate a resolved style dict (``fg``/``bg``/flags) into one SGR sequence."""
    params: list[str] = []
    if style.get("bold"):
        params.append("1")
    if style.get("italic"):
        params.append("3")
    if style.get("underline"):
        params.append("4")
    if style.get("reverse"):
        params.append("7")
    fg = style.get("fg")
    if isinstance(fg, str):
        rgb = _hex_to_rgb(fg)
        if rgb is not None:
            params.append("38;2;%d;%d;%d" % rgb)
    bg = style.get("bg")
    if isinstance(bg, str):
        rgb = _hex_to_rgb(bg)
        if rgb is not None:
            params.append("48;2;%d;%d;%d" % rgb)
    if not params:
        return ""
    return "\033[" + ";".join(params) + "m"


def paint_row(
    text: str,
    regions: Iterable[StyledRegion],
    styles: Mapping[str, Mapping[str, object]],
) -> str:
    """Apply styled regions to one plain row, later regions winning on overlap.

    Region columns are character offsets into ``text``.
    """
    if not text:
        return text
    per_char: list[str] = [""] * len(text)
    for region in regions:
        style = styles.get(region.group)
        if not style:
            continue
        sgr = sgr_for_style(style)
        if not sgr:
            continue
        end = len(text) if region.end_col < 0 else min(region.end_col, len(text))
        for idx in range(max(0, region.start_col), end):
            per_char[idx] = sgr

    out: list[str] = []
    active = ""
    for ch, sgr in zip(text, per_char):
        if sgr != active:
            out.append(RESET if active else "")
            if sgr:
                out.append(sgr)
            active = sgr
        out.append(ch)
    if active:
        out.append(RESET)
    return "".join(out)


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)
