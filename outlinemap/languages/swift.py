"""Swift provider.

Declarations are recognized line by line after stripping attributes
(``@MainActor``, ``@available(...)``) and modifiers (``public``, ``final``,
``private(set)``, ...). Tree-sitter node names changed across Swift grammar
releases, so the structural query ships several variants, newest first.
"""

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
    strip_leading,
)

DEFAULT_KEYWORDS: tuple[str, ...] = (
    "func",
    "init",
    "deinit",
    "class",
    "struct",
    "enum",
    "protocol",
    "extension",
    "typealias",
    "actor",
    "let",
    "var",
    "subscript",
    "return",
)

TYPE_KEYWORDS: tuple[str, ...] = ("class", "struct", "enum", "protocol", "extension", "typealias", "actor")

_ATTRIBUTE_PATTERNS = (
    re.compile(r"^@\w+\([^)]*\)"),
    re.compile(r"^@\w+"),
)
_MODIFIER_PATTERNS = (
    re.compile(r"^(?:public|private|fileprivate|internal|open)\s*\([^)]*\)"),
    re.compile(r"^(?:public|private|fileprivate|internal|open)\s"),
    re.compile(
        r"^(?:final|static|indirect|lazy|weak|unowned|override|mutating|nonmutating"
        r"|convenience|required|dynamic)\s"
    ),
    # `class func` / `class var`: `class` used as a member modifier.
    re.compile(r"^class\s+(?=(?:func|var|let|subscript)\s)"),
)

_INIT_RE = re.compile(r"^init([?!]?)\s*[(<]")
_DEINIT_RE = re.compile(r"^deinit\s*(?:\{|\s|$)")
_FUNC_RE = re.compile(r"^func\s+([^\s(<]+)")
_SUBSCRIPT_RE = re.compile(r"^subscript\s*[(<]")
_NAMED_DECL_RES = {
    keyword: re.compile(rf"^{keyword}\s+([^\s(<:{{=]+)")
    for keyword in TYPE_KEYWORDS + ("let", "var")
}

_COMMENT_STRIP_RES = (
    re.compile(r"\s*\*/$"),
    re.compile(r"^///\s*"),
    re.compile(r"^//\s*"),
    re.compile(r"^/\*\*\s*"),
    re.compile(r"^/\*\s*"),
    re.compile(r"^\*\s*"),
)

QUERY_VARIANTS: tuple[str, ...] = (
    """
    (class_declaration) @class
    (struct_declaration) @class
    (enum_declaration) @class
    (protocol_declaration) @class
    (extension_declaration) @class
    (typealias_declaration) @class
    (actor_declaration) @class
    (function_declaration) @function
    (init_declaration) @function
    (deinitializer_declaration) @function
    (subscript_declaration) @function
    (property_declaration) @variable
    """,
    """
    (class_declaration) @class
    (protocol_declaration) @class
    (typealias_declaration) @class
    (function_declaration) @function
    (init_declaration) @function
    (deinit_declaration) @function
    (subscript_declaration) @function
    (property_declaration) @variable
    """,
    """
    (class_declaration) @class
    (protocol_declaration) @class
    (function_declaration) @function
    (init_declaration) @function
    (property_declaration) @variable
    """,
    """
    (class_declaration) @class
    (function_declaration) @function
    """,
)


def strip_declaration_prefix(text: str) -> str:
    """Drop leading attributes and modifiers so the declaration keyword leads."""
    return strip_leading(strip_leading(text, _ATTRIBUTE_PATTERNS), _MODIFIER_PATTERNS)


def parse_symbol(line_text: str, line_nr: int | None = None, all_lines: Sequence[str] | None = None) -> SymbolInfo | None:
    cleaned = strip_declaration_prefix(line_text or "")
    if not cleaned:
        return None

    match = _INIT_RE.match(cleaned)
    if match:
        return SymbolInfo(keyword="init", capture_type="function", display="init" + match.group(1))

    if _DEINIT_RE.match(cleaned):
        return SymbolInfo(keyword="deinit", capture_type="function", display="deinit")

    match = _FUNC_RE.match(cleaned)
    if match:
        return SymbolInfo(keyword="func", capture_type="function", display="func " + match.group(1))

    for keyword in TYPE_KEYWORDS:
        match = _NAMED_DECL_RES[keyword].match(cleaned)
        if match:
            return SymbolInfo(keyword=keyword, capture_type="class", display=f"{keyword} {match.group(1)}")

    for keyword in ("let", "var"):
        match = _NAMED_DECL_RES[keyword].match(cleaned)
        if match:
            return SymbolInfo(keyword=keyword, capture_type="variable", display=f"{keyword} {match.group(1)}")

    if _SUBSCRIPT_RE.match(cleaned):
        return SymbolInfo(keyword="subscript", capture_type="function", display="subscript")

    return parse_return(cleaned, strip_semicolons=True)


def is_comment_line(trimmed: str) -> bool:
    return trimmed.startswith(("//", "/*", "*"))


def extract_comment(line: str) -> ExtractedComment | None:
    trimmed = line.strip()
    is_doc = trimmed.startswith(("///", "/**"))

    text = trimmed
    for pattern in _COMMENT_STRIP_RES:
        text = pattern.sub("", text, count=1)
    if not text:
        return ExtractedComment(text=None, marker=None, is_doc_comment=is_doc)

    marker, text = split_marker(text, DEFAULT_MARKERS)
    return ExtractedComment(
        text=shorten_comment(text),
        marker=marker,
        is_doc_comment=is_doc,
        raw_text=text,
    )


def render_comment(line: str, line_nr: int, all_lines: Sequence[str]) -> CommentEntry | None:
    return comment_entry_for(extract_comment(line), all_lines, line_nr, is_comment_line)


PROVIDER = LanguageProvider(
    name="swift",
    parse_symbol=parse_symbol,
    default_keywords=DEFAULT_KEYWORDS,
    is_comment_line=is_comment_line,
    render_comment=render_comment,
    extract_comment=extract_comment,
    query_variants=QUERY_VARIANTS,
    grammar="swift",
)
