"""Lua provider: functions, locals, module-table assignments and returns."""

from __future__ import annotations

import re
from collections.abc import Sequence

from ..types import CommentEntry, SymbolInfo
from . import LanguageProvider
from .common import ExtractedComment, comment_entry_for, parse_return, shorten_comment, split_marker

DEFAULT_KEYWORDS: tuple[str, ...] = ("function", "local", "return")
MARKERS: tuple[str, ...] = ("TODO", "FIXME", "NOTE", "WARNING", "BUG", "HACK")

_LOCAL_FUNCTION_RE = re.compile(r"^local\s+function\s+([\w.]+)")
_FUNCTION_RE = re.compile(r"^function\s+([\w.:]+)")
_LOCAL_ASSIGN_RE = re.compile(r"^local\s+([\w,\s]+?)\s*=")
_FIRST_NAME_RE = re.compile(r"^(\w+)")
_MODULE_FUNCTION_RE = re.compile(r"^(\w+\.\w+)\s*=\s*function\s*\(")
_FIELD_FUNCTION_RE = re.compile(r"^(\w+)\s*=\s*function\s*\(")

_COMMENT_STRIP_RES = (
    re.compile(r"^--\[=*\[\s*"),
    re.compile(r"^---+\s*"),
    re.compile(r"^--+\s*"),
    re.compile(r"\s*\]=*\]\s*$"),
)

QUERY_VARIANTS: tuple[str, ...] = (
    """
    (function_declaration) @function
    (local_function) @function
    (field) @variable
    (variable_declaration) @variable
    """,
    """
    (function_declaration) @function
    (local_function) @function
    """,
)


def parse_symbol(line_text: str, line_nr: int | None = None, all_lines: Sequence[str] | None = None) -> SymbolInfo | None:
    cleaned = (line_text or "").lstrip()
    if not cleaned:
        return None

    symbol = parse_return(cleaned)
    if symbol is not None:
        return symbol

    match = _LOCAL_FUNCTION_RE.match(cleaned)
    if match:
        return SymbolInfo(keyword="function", capture_type="function", display="local function " + match.group(1))

    match = _FUNCTION_RE.match(cleaned)
    if match:
        return SymbolInfo(keyword="function", capture_type="function", display="function " + match.group(1))

    match = _LOCAL_ASSIGN_RE.match(cleaned)
    if match:
        first = _FIRST_NAME_RE.match(match.group(1))
        if first:
            return SymbolInfo(keyword="local", capture_type="variable", display="local " + first.group(1))

    for pattern in (_MODULE_FUNCTION_RE, _FIELD_FUNCTION_RE):
        match = pattern.match(cleaned)
        if match:
            return SymbolInfo(keyword="function", capture_type="function", display="function " + match.group(1))

    return None


def is_comment_line(trimmed: str) -> bool:
    return trimmed.startswith("--")


def extract_comment(line: str) -> ExtractedComment | None:
    trimmed = line.strip()
    is_doc = trimmed.startswith("---")

    text = trimmed
    for pattern in _COMMENT_STRIP_RES:
        text = pattern.sub("", text, count=1)
    if not text:
        return ExtractedComment(text=None, marker=None, is_doc_comment=is_doc)

    marker, text = split_marker(text, MARKERS)
    return ExtractedComment(
        text=shorten_comment(text),
        marker=marker,
        is_doc_comment=is_doc,
        raw_text=text,
    )


def render_comment(line: str, line_nr: int, all_lines: Sequence[str]) -> CommentEntry | None:
    return comment_entry_for(extract_comment(line), all_lines, line_nr, is_comment_line)


PROVIDER = LanguageProvider(
    name="lua",
    parse_symbol=parse_symbol,
    default_keywords=DEFAULT_KEYWORDS,
    is_comment_line=is_comment_line,
    render_comment=render_comment,
    extract_comment=extract_comment,
    query_variants=QUERY_VARIANTS,
    grammar="lua",
)
