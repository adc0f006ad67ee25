"""Python provider: classes, functions, methods and ``#`` comments."""

from __future__ import annotations

import re
from collections.abc import Sequence

from ..types import CommentEntry, SymbolInfo
from . import LanguageProvider
from .common import (
    DEFAULT_MARKERS,
    ExtractedComment,
    comment_entry_for,
    parse_return,
    shorten_comment,
    split_marker,
)

DEFAULT_KEYWORDS: tuple[str, ...] = ("class", "def")
MARKERS: tuple[str, ...] = DEFAULT_MARKERS + ("HACK",)

_CLASS_RE = re.compile(r"^class\s+(?P<name>[A-Za-z_]\w*)")
_DEF_RE = re.compile(r"^(?:async\s+)?def\s+(?P<name>[A-Za-z_]\w*)")
_COMMENT_RE = re.compile(r"^#+:?\s*")

QUERY_VARIANTS: tuple[str, ...] = (
    """
    (class_definition) @class
    (function_definition) @function
    """,
)


def _is_indented(line_nr: int | None, all_lines: Sequence[str] | None) -> bool:
    if line_nr is None or not all_lines or not 1 <= line_nr <= len(all_lines):
        return False
    line = all_lines[line_nr - 1]
    return bool(line) and line[0] in " \t"


def parse_symbol(line_text: str, line_nr: int | None = None, all_lines: Sequence[str] | None = None) -> SymbolInfo | None:
    cleaned = (line_text or "").strip()
    if not cleaned or cleaned.startswith("@"):
        return None

    match = _CLASS_RE.match(cleaned)
    if match:
        return SymbolInfo(keyword="class", capture_type="class", display="class " + match.group("name"))

    match = _DEF_RE.match(cleaned)
    if match:
        capture = "method" if _is_indented(line_nr, all_lines) else "function"
        return SymbolInfo(keyword="def", capture_type=capture, display="def " + match.group("name"))

    return parse_return(cleaned)


def is_comment_line(trimmed: str) -> bool:
    return trimmed.startswith("#")


def extract_comment(line: str) -> ExtractedComment | None:
    trimmed = line.strip()
    if trimmed.startswith("#!"):
        return None
    # Sphinx `#:` attribute comments act as documentation.
    is_doc = trimmed.startswith("#:")
    text = _COMMENT_RE.sub("", trimmed, count=1).strip()
    if not text:
        return ExtractedComment(text=None, marker=None, is_doc_comment=is_doc)

    marker, text = split_marker(text, MARKERS)
    return ExtractedComment(text=shorten_comment(text), marker=marker, is_doc_comment=is_doc, raw_text=text)


def render_comment(line: str, line_nr: int, all_lines: Sequence[str]) -> CommentEntry | None:
    return comment_entry_for(extract_comment(line), all_lines, line_nr, is_comment_line)


PROVIDER = LanguageProvider(
    name="python",
    parse_symbol=parse_symbol,
    default_keywords=DEFAULT_KEYWORDS,
    is_comment_line=is_comment_line,
    render_comment=render_comment,
    extract_comment=extract_comment,
    query_variants=QUERY_VARIANTS,
    grammar="python",
)
