"""Markdown provider: a table of contents plus code fences, images, links and HTML.

Headings carry per-level icons and render their bare title; the icon already
conveys the level. Setext headings render on the title line and the
underline is skipped. Lines inside fenced code blocks never produce entries.
"""

from __future__ import annotations

import re
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass

from ..types import SymbolInfo
from . import LanguageProvider

DEFAULT_KEYWORDS: tuple[str, ...] = ("H1", "H2", "H3", "H4", "H5", "H6", "code", "image", "link", "html")

HEADING_ICONS: dict[int, str] = {
    1: "󰉫",
    2: "󰉬",
    3: "󰉭",
    4: "󰉮",
    5: "󰉯",
    6: "󰉰",
}
IMAGE_ICON = "󰋩"
LINK_ICON = "󰌷"
HTML_ICON = ""

FENCE_CACHE_MAX = 8

_BLOCKQUOTE_RE = re.compile(r"^>+\s*")
_WHITESPACE_RE = re.compile(r"\s+")
_FENCE_RE = re.compile(r"^(`{3,}|~{3,})\s*(.*)$")
_ATX_RE = re.compile(r"^(#+)\s*(.*?)\s*#*$")
_SETEXT_H1_RE = re.compile(r"^=+$")
_SETEXT_H2_RE = re.compile(r"^-+$")
_IMAGE_INLINE_RE = re.compile(r"^!\[(.*?)\]\(([^)\s]+)")
_IMAGE_REFERENCE_RE = re.compile(r"^!\[(.*?)\]\[(.*?)\]")
_LINK_INLINE_RE = re.compile(r"\[(.*?)\]\(([^)\s]+)")
_LINK_REFERENCE_RE = re.compile(r"\[(.*?)\]\[([^\]]*)\]")
_HTML_TAG_RE = re.compile(r"^<\s*([\w:-]+)")
_URL_SUFFIX_RE = re.compile(r"[?#].*$")

QUERY_VARIANTS: tuple[str, ...] = (
    """
    (atx_heading) @class
    (setext_heading) @class
    """,
    "(atx_heading) @class",
    "(setext_heading) @class",
    "(heading) @class",
    "(section) @class",
)


@dataclass(frozen=True)
class FenceLine:
    opening: bool
    info: str


@dataclass(frozen=True)
class FenceInfo:
    """Per-buffer fence scan: fence lines and lines inside a fenced block (1-indexed)."""

    fences: dict[int, FenceLine]
    inside: frozenset[int]


_FENCE_CACHE: OrderedDict[int, tuple[Sequence[str], FenceInfo]] = OrderedDict()


def _strip_blockquote(text: str) -> str:
    return _BLOCKQUOTE_RE.sub("", text, count=1)


def _normalize(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def _scan_fences(all_lines: Sequence[str]) -> FenceInfo:
    fences: dict[int, FenceLine] = {}
    inside: set[int] = set()
    stack: list[tuple[str, int]] = []

    for line_nr, line in enumerate(all_lines, start=1):
        match = _FENCE_RE.match(_strip_blockquote(line.strip()))
        if match:
            marker, rest = match.group(1), _normalize(match.group(2))
            char, length = marker[0], len(marker)
            if stack and stack[-1][0] == char and length >= stack[-1][1]:
                stack.pop()
                fences[line_nr] = FenceLine(opening=False, info=rest)
            else:
                stack.append((char, length))
                fences[line_nr] = FenceLine(opening=True, info=rest)
        if stack:
            inside.add(line_nr)

    return FenceInfo(fences=fences, inside=frozenset(inside))


def fence_info(all_lines: Sequence[str]) -> FenceInfo:
    """Return the fence scan for ``all_lines``, cached by sequence identity.

    A render passes the same snapshot for every line, so the scan runs once
    per render instead of once per line.
    """
    key = id(all_lines)
    cached = _FENCE_CACHE.get(key)
    if cached is not None and cached[0] is all_lines:
        _FENCE_CACHE.move_to_end(key)
        return cached[1]

    info = _scan_fences(all_lines)
    _FENCE_CACHE[key] = (all_lines, info)
    _FENCE_CACHE.move_to_end(key)
    while len(_FENCE_CACHE) > FENCE_CACHE_MAX:
        _FENCE_CACHE.popitem(last=False)
    return info


def _heading(level: int, title: str) -> SymbolInfo:
    return SymbolInfo(keyword=f"H{level}", capture_type="class", display=title, icon=HEADING_ICONS[level])


def _atx_heading(trimmed: str) -> SymbolInfo | None:
    match = _ATX_RE.match(_strip_blockquote(trimmed))
    if not match:
        return None
    level = len(match.group(1))
    title = match.group(2).strip()
    if level > 6 or not title:
        return None
    return _heading(level, title)


def _setext_heading(trimmed: str, line_nr: int | None, all_lines: Sequence[str] | None) -> SymbolInfo | None:
    if line_nr is None or not all_lines or line_nr >= len(all_lines):
        return None
    underline = _strip_blockquote(all_lines[line_nr].strip())
    if _SETEXT_H1_RE.match(underline):
        level = 1
    elif _SETEXT_H2_RE.match(underline):
        level = 2
    else:
        return None
    title = _strip_blockquote(trimmed).strip()
    return _heading(level, title) if title else None


def _code_fence(fence: FenceLine) -> SymbolInfo | None:
    if not fence.opening:
        return None
    language = fence.info.split(" ", 1)[0] if fence.info else ""
    display = f"code {language}" if language else "code"
    return SymbolInfo(keyword="code", capture_type="function", display=display)


def _basename(path: str) -> str:
    cleaned = _URL_SUFFIX_RE.sub("", path or "")
    return cleaned.replace("\\", "/").rsplit("/", 1)[-1]


def _image(trimmed: str) -> SymbolInfo | None:
    cleaned = _strip_blockquote(trimmed)
    match = _IMAGE_INLINE_RE.match(cleaned) or _IMAGE_REFERENCE_RE.match(cleaned)
    if not match:
        return None
    label = _normalize(match.group(1)) or _normalize(_basename(match.group(2))) or "image"
    return SymbolInfo(keyword="image", capture_type="variable", display=label, icon=IMAGE_ICON)


def _find_link(pattern: re.Pattern[str], text: str) -> re.Match[str] | None:
    """Find the first link match that is not an image (``![...]``)."""
    for match in pattern.finditer(text):
        start = match.start()
        if start == 0 or text[start - 1] != "!":
            return match
    return None


def _link(trimmed: str) -> SymbolInfo | None:
    cleaned = _strip_blockquote(trimmed)
    match = _find_link(_LINK_INLINE_RE, cleaned)
    if match:
        label = _normalize(match.group(1)) or _normalize(_basename(match.group(2))) or "link"
        return SymbolInfo(keyword="link", capture_type="variable", display=label, icon=LINK_ICON)
    match = _find_link(_LINK_REFERENCE_RE, cleaned)
    if match:
        label = _normalize(match.group(1)) or _normalize(match.group(2)) or "link"
        return SymbolInfo(keyword="link", capture_type="variable", display=label, icon=LINK_ICON)
    return None


def _html_tag(trimmed: str) -> SymbolInfo | None:
    cleaned = _strip_blockquote(trimmed)
    if not cleaned.startswith("<") or cleaned.startswith(("</", "<!", "<?")):
        return None
    match = _HTML_TAG_RE.match(cleaned)
    if not match:
        return None
    return SymbolInfo(keyword="html", capture_type="class", display=f"<{match.group(1)}>", icon=HTML_ICON)


def parse_symbol(line_text: str, line_nr: int | None = None, all_lines: Sequence[str] | None = None) -> SymbolInfo | None:
    trimmed = (line_text or "").strip()
    if not trimmed:
        return None

    if line_nr is not None and all_lines:
        fences = fence_info(all_lines)
        fence = fences.fences.get(line_nr)
        if fence is not None:
            return _code_fence(fence)
        if line_nr in fences.inside:
            return None

    if _SETEXT_H1_RE.match(trimmed) or _SETEXT_H2_RE.match(trimmed):
        return None

    symbol = _atx_heading(trimmed) or _setext_heading(trimmed, line_nr, all_lines)
    if symbol is not None:
        return symbol
    return _html_tag(trimmed) or _image(trimmed) or _link(trimmed)


PROVIDER = LanguageProvider(
    name="markdown",
    parse_symbol=parse_symbol,
    default_keywords=DEFAULT_KEYWORDS,
    query_variants=QUERY_VARIANTS,
    grammar="markdown",
)
