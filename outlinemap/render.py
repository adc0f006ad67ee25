"""Render engine: source lines -> outline entries + line mapping.

The outline lists only lines a language provider recognizes: declarations
whose keyword is enabled, comments, and ``TODO:``-style markers. Every entry
keeps its prefix-free ``content`` so the cursor fast path can re-prefix rows
without parsing the buffer again.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field

from .config import OutlineConfig
from .keywords import resolve_enabled
from .languages import LanguageProvider, get_provider
from .prefix import RelativePrefixSettings, format_relative_prefix
from .structure import COMMENT_ICON, icon_for_type
from .types import (
    COMMENT,
    COMMENTED_SYMBOL,
    MARKER,
    SYMBOL,
    CommentEntry,
    LineMapping,
    OutlineEntry,
    SymbolInfo,
)

logger = logging.getLogger(__name__)

MARKER_ICON = "⚑"
ELLIPSIS = "..."


@dataclass(frozen=True)
class OutlineRender:
    entries: tuple[OutlineEntry, ...] = ()
    mapping: LineMapping = field(default_factory=LineMapping)

    def __len__(self) -> int:
        return len(self.entries)


def compact_display(text: str, max_length: int) -> str:
    """Collapse whitespace runs and truncate to ``max_length`` with an ellipsis."""
    compact = " ".join((text or "").split())
    if len(compact) > max_length:
        if max_length <= len(ELLIPSIS):
            return compact[:max_length]
        return compact[: max_length - len(ELLIPSIS)] + ELLIPSIS
    return compact


def _symbol_entry(line_nr: int, symbol: SymbolInfo, max_length: int) -> OutlineEntry:
    icon = symbol.icon or icon_for_type(symbol.capture_type)
    display = compact_display(symbol.display, max_length)
    content = f"{icon} {display}" if icon else display
    return OutlineEntry(
        source_line=line_nr,
        kind=SYMBOL,
        icon=icon,
        display_text=display,
        content=content,
        symbol=symbol,
    )


def _commented_symbol(
    line: str,
    line_nr: int,
    all_lines: Sequence[str],
    comment: CommentEntry,
    provider: LanguageProvider,
) -> SymbolInfo | None:
    if comment.kind == COMMENTED_SYMBOL and comment.symbol is not None:
        return comment.symbol
    if provider.extract_comment is None:
        return None
    extracted = provider.extract_comment(line)
    if extracted is None or not extracted.raw_text:
        return None
    return provider.parse_symbol(extracted.raw_text.strip(), line_nr, all_lines)


def _comment_entry(
    line: str,
    line_nr: int,
    all_lines: Sequence[str],
    provider: LanguageProvider,
    enabled: Collection[str],
    max_length: int,
) -> OutlineEntry | None:
    if provider.render_comment is None:
        return None
    comment = provider.render_comment(line, line_nr, all_lines)
    if comment is None:
        return None

    if comment.kind == MARKER:
        marker = comment.marker or ""
        text = compact_display(comment.text, max_length)
        content = f"{MARKER_ICON} {marker}: {text}"
        return OutlineEntry(
            source_line=line_nr,
            kind=MARKER,
            icon=MARKER_ICON,
            display_text=text,
            content=content,
            marker=marker,
            is_doc_comment=comment.is_doc_comment,
        )

    symbol = _commented_symbol(line, line_nr, all_lines, comment, provider)
    if symbol is not None and symbol.keyword in enabled:
        icon = symbol.icon or icon_for_type(symbol.capture_type)
        display = compact_display(symbol.display, max_length)
        return OutlineEntry(
            source_line=line_nr,
            kind=COMMENTED_SYMBOL,
            icon=COMMENT_ICON,
            display_text=display,
            content=f"{COMMENT_ICON} {icon} {display}",
            symbol=symbol,
            is_doc_comment=comment.is_doc_comment,
        )

    text = compact_display(comment.text, max_length)
    return OutlineEntry(
        source_line=line_nr,
        kind=COMMENT,
        icon=COMMENT_ICON,
        display_text=text,
        content=f"{COMMENT_ICON} {text}",
        is_doc_comment=comment.is_doc_comment,
    )


def render_line(
    line: str,
    line_nr: int,
    all_lines: Sequence[str],
    provider: LanguageProvider,
    enabled: Collection[str],
    max_length: int = 40,
) -> OutlineEntry | None:
    """Render one 1-indexed source line, or return ``None`` when it is not listed."""
    trimmed = line.strip()
    if not trimmed:
        return None

    if provider.is_comment_line is not None and provider.is_comment_line(trimmed):
        return _comment_entry(line, line_nr, all_lines, provider, enabled, max_length)

    symbol = provider.parse_symbol(trimmed, line_nr, all_lines)
    if symbol is None or symbol.keyword not in enabled:
        return None
    return _symbol_entry(line_nr, symbol, max_length)


def render_outline(
    lines: Sequence[str],
    language: str,
    config: OutlineConfig | None = None,
    provider: LanguageProvider | None = None,
) -> OutlineRender:
    """Render ``lines`` into outline entries and their strictly increasing mapping.

    Unsupported languages render nothing. A provider error on one line is
    logged and skips that line only.
    """
    config = config or OutlineConfig()
    provider = provider or get_provider(language)
    if provider is None or not lines:
        return OutlineRender()

    snapshot = tuple(lines)
    enabled = resolve_enabled(config, language, provider.default_keywords)
    max_length = config.render.max_line_length

    entries: list[OutlineEntry] = []
    for line_nr, line in enumerate(snapshot, start=1):
        try:
            entry = render_line(line, line_nr, snapshot, provider, enabled, max_length)
        except Exception:
            logger.debug("Provider %s failed on line %d", provider.name, line_nr, exc_info=True)
            continue
        if entry is not None:
            entries.append(entry)

    return OutlineRender(
        entries=tuple(entries),
        mapping=LineMapping(tuple(entry.source_line for entry in entries)),
    )


def compose_rows(
    entries: Sequence[OutlineEntry],
    anchor_line: int,
    settings: RelativePrefixSettings,
) -> list[str]:
    """Return panel rows: distance prefix + cached content per entry."""
    rows: list[str] = []
    for entry in entries:
        _, prefix = format_relative_prefix(entry.source_line, anchor_line, settings)
        rows.append(prefix + entry.content)
    return rows
