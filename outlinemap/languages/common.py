"""Helpers shared by the line-based language providers."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..types import CommentEntry, SymbolInfo

COMMENT_TEXT_MAX = 35
FILE_HEADER_SCAN_LINES = 50
FILE_HEADER_MIN_COMMENTS = 3

DEFAULT_MARKERS: tuple[str, ...] = ("MARK", "TODO", "FIXME", "NOTE", "WARNING", "BUG")

_WHITESPACE_RE = re.compile(r"\s+")
_RETURN_RE = re.compile(r"^return(?![\w])")


@dataclass(frozen=True)
class ExtractedComment:
    """Comment text with markers removed.

    ``text`` is shortened for display; ``raw_text`` keeps the full de-commented
    text so it can be re-parsed as a commented-out declaration.
    """

    text: str | None
    marker: str | None
    is_doc_comment: bool
    raw_text: str | None = None


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def shorten_comment(text: str) -> str:
    if len(text) > COMMENT_TEXT_MAX:
        return text[: COMMENT_TEXT_MAX - 3] + "..."
    return text


def split_marker(text: str, markers: Sequence[str]) -> tuple[str | None, str]:
    """Detect a ``MARKER:`` prefix and return ``(marker, remaining text)``.

    ``MARK:`` additionally swallows an Xcode-style ``-`` separator.
    """
    for marker in markers:
        prefix = marker + ":"
        if not text.startswith(prefix):
            continue
        rest = text[len(prefix):].lstrip()
        if marker == "MARK":
            rest = rest[1:].lstrip() if rest.startswith("-") else rest
        return marker, rest
    return None, text


def strip_leading(text: str, patterns: Sequence[re.Pattern[str]]) -> str:
    """Repeatedly strip any of ``patterns`` from the start of ``text``."""
    out = text.lstrip()
    changed = True
    while changed:
        changed = False
        for pattern in patterns:
            stripped, count = pattern.subn("", out, count=1)
            if count:
                out = stripped.lstrip()
                changed = True
    return out


def parse_return(cleaned: str, strip_semicolons: bool = False) -> SymbolInfo | None:
    """Parse ``return <expr>`` lines, which several providers surface as exits."""
    if not _RETURN_RE.match(cleaned):
        return None
    rest = cleaned[len("return"):].strip()
    if strip_semicolons:
        rest = rest.rstrip(";").strip()
    display = "return " + rest if rest else "return"
    return SymbolInfo(keyword="return", capture_type="function", display=display)


def is_file_header(
    lines: Sequence[str] | None,
    line_nr: int,
    is_comment_line: Callable[[str], bool],
) -> bool:
    """Return whether ``line_nr`` lies in a leading block of >= 3 comment lines.

    License banners and generated-file notices would otherwise dominate the
    outline. Blank lines inside the block extend it.
    """
    if not lines or line_nr > FILE_HEADER_SCAN_LINES:
        return False

    header_end = 0
    comment_count = 0
    for idx in range(min(FILE_HEADER_SCAN_LINES, len(lines))):
        trimmed = lines[idx].strip()
        if not trimmed:
            header_end = idx + 1
            continue
        if not is_comment_line(trimmed):
            break
        comment_count += 1
        header_end = idx + 1

    return comment_count >= FILE_HEADER_MIN_COMMENTS and line_nr <= header_end


def comment_entry_for(
    extracted: ExtractedComment | None,
    lines: Sequence[str] | None,
    line_nr: int,
    is_comment_line: Callable[[str], bool],
) -> CommentEntry | None:
    """Turn an extracted comment into a marker/comment entry.

    Markers are always shown; plain comments are dropped inside file headers.
    """
    if extracted is None:
        return None
    if extracted.marker:
        return CommentEntry(
            kind="marker",
            text=extracted.text or "",
            marker=extracted.marker,
            is_doc_comment=extracted.is_doc_comment,
        )
    if extracted.text and not is_file_header(lines, line_nr, is_comment_line):
        return CommentEntry(kind="comment", text=extracted.text, is_doc_comment=extracted.is_doc_comment)
    return None
