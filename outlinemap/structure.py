"""Structural index: typed declaration spans from Tree-sitter.

Query strings come from the language providers as newest-first variants,
because node names drift between grammar releases. The first variant that
compiles is cached per language, and so is a language where none compiles.
Every failure degrades to an empty node list; the outline itself never
depends on Tree-sitter.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import lru_cache

from .languages import LanguageProvider, get_provider
from .types import StructuralNode

logger = logging.getLogger(__name__)

MISSING_PARSER_ERROR = "Tree-sitter parser package not found. Install tree-sitter-language-pack."

GRAMMAR_ALIASES: dict[str, str] = {
    "typescriptreact": "tsx",
    "javascriptreact": "javascript",
    "sh": "bash",
}

CAPTURE_ICONS: dict[str, str] = {
    "class": "󰠱",
    "function": "󰊕",
    "method": "󰆧",
    "variable": "󰀫",
    "comment": "󰆈",
}

CAPTURE_HIGHLIGHTS: dict[str, str] = {
    "class": "OutlineClass",
    "function": "OutlineFunction",
    "method": "OutlineMethod",
    "variable": "OutlineVariable",
    "comment": "OutlineComment",
}
DEFAULT_HIGHLIGHT = "OutlineText"

COMMENT_ICON = CAPTURE_ICONS["comment"]

_COMPILED_QUERIES: dict[str, object | None] = {}
_WARNED_LANGUAGES: set[str] = set()


def icon_for_type(capture_type: str | None) -> str:
    """Return the icon for a capture kind; unknown kinds have no icon."""
    return CAPTURE_ICONS.get(capture_type or "", "")


def highlight_for_type(capture_type: str | None) -> str:
    return CAPTURE_HIGHLIGHTS.get(capture_type or "", DEFAULT_HIGHLIGHT)


def grammar_name(language: str, provider: LanguageProvider | None = None) -> str:
    """Resolve a host language tag to a Tree-sitter grammar name."""
    if provider is not None and provider.grammar:
        return provider.grammar
    return GRAMMAR_ALIASES.get(language, language)


@lru_cache(maxsize=32)
def _load_parser(grammar: str):
    """Load a Tree-sitter parser from ``tree_sitter_language_pack``.

    Returns ``(parser, error_message)``.
    """
    try:
        from tree_sitter_language_pack import get_parser
    except ModuleNotFoundError:
        return None, MISSING_PARSER_ERROR

    try:
        return get_parser(grammar), None
    except Exception as exc:
        return None, f"Failed to load Tree-sitter parser for {grammar}: {exc}"


@lru_cache(maxsize=32)
def _load_language(grammar: str):
    """Return ``(language, error_message)`` for compiling queries."""
    try:
        from tree_sitter_language_pack import get_language
    except ModuleNotFoundError:
        return None, MISSING_PARSER_ERROR

    try:
        return get_language(grammar), None
    except Exception as exc:
        return None, f"Failed to load Tree-sitter language for {grammar}: {exc}"


def _compile_first(grammar: str, variants: Sequence[str]):
    """Compile ``variants`` in order; return ``(query, last_error)``."""
    ts_language, error = _load_language(grammar)
    if ts_language is None:
        return None, error

    from tree_sitter import Query

    last_error: str | None = "no query variants"
    for source in variants:
        if not source or not source.strip():
            continue
        try:
            return Query(ts_language, source), None
        except Exception as exc:
            last_error = str(exc)
    return None, last_error


def compiled_query(language: str, provider: LanguageProvider | None = None):
    """Return ``(query, error_message)`` for ``language``, cached per language."""
    if language in _COMPILED_QUERIES:
        query = _COMPILED_QUERIES[language]
        return query, None if query is not None else "query unavailable (cached)"

    provider = provider or get_provider(language)
    if provider is None or not provider.query_variants:
        _COMPILED_QUERIES[language] = None
        return None, f"no structural query for {language}"

    query, error = _compile_first(grammar_name(language, provider), provider.query_variants)
    _COMPILED_QUERIES[language] = query
    return query, error


def _warn_once(language: str, message: str | None) -> None:
    if language in _WARNED_LANGUAGES:
        return
    _WARNED_LANGUAGES.add(language)
    logger.warning("Structural index disabled for %s: %s", language, message or "unknown error")


def _run_captures(query, root) -> list[tuple[str, object]]:
    from tree_sitter import QueryCursor

    captures = QueryCursor(query).captures(root)
    out: list[tuple[str, object]] = []
    for name, nodes in captures.items():
        for node in nodes:
            out.append((name, node))
    return out


def structural_nodes(
    lines: Sequence[str],
    language: str,
    provider: LanguageProvider | None = None,
) -> list[StructuralNode]:
    """Return typed spans for ``lines`` sorted by start line (0-indexed rows)."""
    provider = provider or get_provider(language)
    if provider is None or not provider.query_variants:
        return []

    query, error = compiled_query(language, provider)
    if query is None:
        _warn_once(language, error)
        return []

    parser, error = _load_parser(grammar_name(language, provider))
    if parser is None:
        _warn_once(language, error)
        return []

    source_bytes = "\n".join(lines).encode("utf-8", errors="replace")
    try:
        tree = parser.parse(source_bytes)
        captures = _run_captures(query, tree.root_node)
    except Exception as exc:
        _warn_once(language, f"Tree-sitter parse failed: {exc}")
        return []

    nodes = [
        StructuralNode(
            capture=name,
            start_line=int(node.start_point[0]),
            end_line=int(node.end_point[0]),
            start_col=int(node.start_point[1]),
            end_col=int(node.end_point[1]),
        )
        for name, node in captures
    ]
    nodes.sort(key=lambda item: (item.start_line, item.start_col, -item.end_line))
    return nodes


def scope_at_line(nodes: Sequence[StructuralNode], line: int) -> StructuralNode | None:
    """Return the smallest node containing 0-indexed ``line``, if any."""
    best: StructuralNode | None = None
    best_span = None
    for node in nodes:
        if node.start_line <= line <= node.end_line:
            span = node.end_line - node.start_line
            if best_span is None or span < best_span:
                best, best_span = node, span
    return best


def clear_structure_caches() -> None:
    """Drop compiled queries, loaded parsers, and warn-once bookkeeping."""
    _COMPILED_QUERIES.clear()
    _WARNED_LANGUAGES.clear()
    _load_parser.cache_clear()
    _load_language.cache_clear()
