"""TypeScript provider.

Declarations are matched after stripping modifiers (``export default``,
``public async``, ...). Class members are recognized by shape: a name
followed by a balanced parameter list and ``:`` or ``{`` is a method, an
arrow-function initializer is a method, and ``name?: T`` is a property.

Block comments render a single entry: the first line of the block that
carries real text (``@tag`` lines are skipped), or its first marker.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import replace

from ..types import CommentEntry, SymbolInfo
from . import LanguageProvider
from .common import (
    DEFAULT_MARKERS,
    ExtractedComment,
    is_file_header,
    shorten_comment,
    split_marker,
    strip_leading,
)

DEFAULT_KEYWORDS: tuple[str, ...] = (
    "function",
    "method",
    "class",
    "interface",
    "type",
    "enum",
    "namespace",
    "module",
    "const",
    "let",
    "var",
    "property",
)

RESERVED = frozenset(
    {
        "if", "for", "while", "switch", "catch", "return", "throw", "break",
        "continue", "case", "default", "try", "do", "else", "new", "delete",
        "typeof", "instanceof", "void", "yield", "await", "import", "export",
        "from", "as", "in", "of",
    }
)

BLOCK_COMMENT_SCAN_LINES = 200

_MODIFIER_PATTERNS = tuple(
    re.compile(rf"^{modifier}\s+")
    for modifier in (
        "export", "default", "declare", "abstract", "public", "private",
        "protected", "readonly", "static", "override", "async",
    )
)

_IDENT = r"[\w$]+"
_CLASS_RE = re.compile(rf"^class\s+({_IDENT})")
_INTERFACE_RE = re.compile(rf"^interface\s+({_IDENT})")
_TYPE_RE = re.compile(rf"^type\s+({_IDENT})")
_ENUM_RE = re.compile(rf"^(?:const\s+)?enum\s+({_IDENT})")
_NAMESPACE_RE = re.compile(r"^(namespace|module)\s+([\w$.]+)")
_FUNCTION_RE = re.compile(rf"^function\s*\*?\s*({_IDENT})")
_BINDING_RE = re.compile(rf"^(const|let|var)\s+({_IDENT})\s*(.*)$")
_ACCESSOR_RE = re.compile(rf"^(get|set)\s+({_IDENT})\s*(?:<[^>]*>)?\s*(?=\()")
_METHOD_RE = re.compile(rf"^({_IDENT})\s*[?!]*\s*(?:<[^>]*>)?\s*(?=\()")
_MEMBER_ASSIGN_RE = re.compile(rf"^({_IDENT})\s*=\s*(.+)$")
_TYPED_MEMBER_ASSIGN_RE = re.compile(rf"^({_IDENT})\s*[?!]*\s*:.*?=\s*(.+)$")
_PROPERTY_RE = re.compile(rf"^({_IDENT})\s*[?!]*\s*:\s+")
_METHOD_BODY_RE = re.compile(r"\s*[:{]")

_ARROW_IDENT_RE = re.compile(rf"^{_IDENT}\s*=>")
_ARROW_GENERIC_RE = re.compile(r"^<[^>]+>\s*")
_ASYNC_RE = re.compile(r"^async\s+")
_TAG_RE = re.compile(r"^@\w+")

_JSX_COMMENT_RE = re.compile(r"^\{\s*/\*(.*?)\*/\s*\}$")
_JSX_OPEN_RE = re.compile(r"^\{\s*/\*")
_JSX_DOC_RE = re.compile(r"^\{\s*/\*\*")
_JSX_CLOSE_RE = re.compile(r"^\*/\s*\}$")
_COMMENT_STRIP_RES = (
    re.compile(r"^///\s*"),
    re.compile(r"^//\s*"),
    re.compile(r"^/\*\*\s*"),
    re.compile(r"^/\*\s*"),
    re.compile(r"^\*\s*"),
    re.compile(r"\s*\*/$"),
)

QUERY_VARIANTS: tuple[str, ...] = (
    """
    (class_declaration) @class
    (interface_declaration) @class
    (type_alias_declaration) @class
    (enum_declaration) @class
    (function_declaration) @function
    (method_definition) @method
    """,
    """
    (class_declaration) @class
    (function_declaration) @function
    """,
)


def strip_modifiers(text: str) -> str:
    return strip_leading(text, _MODIFIER_PATTERNS)


def balanced_end(text: str, start: int) -> int:
    """Return the index just past the ``)`` matching ``text[start] == "("``, or -1."""
    if start >= len(text) or text[start] != "(":
        return -1
    depth = 0
    for idx in range(start, len(text)):
        ch = text[idx]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return idx + 1
    return -1


def looks_like_function_value(rhs: str) -> bool:
    """Return whether an initializer is a function expression or arrow function."""
    text = _ASYNC_RE.sub("", rhs.lstrip(), count=1)
    if text.startswith("function"):
        return True
    if _ARROW_IDENT_RE.match(text):
        return True
    generic = _ARROW_GENERIC_RE.match(text)
    if generic:
        text = text[generic.end():]
        if _ARROW_IDENT_RE.match(text):
            return True
    end = balanced_end(text, 0)
    return end > 0 and text[end:].lstrip().startswith("=>")


def _has_method_body(member: str, paren_start: int) -> bool:
    end = balanced_end(member, paren_start)
    return end > 0 and _METHOD_BODY_RE.match(member, end) is not None


def _parse_member(cleaned: str) -> SymbolInfo | None:
    member = strip_modifiers(cleaned)
    if member.startswith("*"):
        member = member[1:].lstrip()

    match = _ACCESSOR_RE.match(member)
    if match and match.group(2) not in RESERVED and _has_method_body(member, match.end()):
        accessor, name = match.group(1), match.group(2)
        return SymbolInfo(keyword="method", capture_type="method", display=f"method {accessor} {name}")

    match = _METHOD_RE.match(member)
    if match and match.group(1) not in RESERVED and _has_method_body(member, match.end()):
        return SymbolInfo(keyword="method", capture_type="method", display="method " + match.group(1))

    match = _MEMBER_ASSIGN_RE.match(member) or _TYPED_MEMBER_ASSIGN_RE.match(member)
    if match and match.group(1) not in RESERVED and looks_like_function_value(match.group(2)):
        return SymbolInfo(keyword="method", capture_type="method", display="method " + match.group(1))

    match = _PROPERTY_RE.match(member)
    if match and match.group(1) not in RESERVED:
        return SymbolInfo(keyword="property", capture_type="variable", display="property " + match.group(1))

    return None


def parse_symbol(line_text: str, line_nr: int | None = None, all_lines: Sequence[str] | None = None) -> SymbolInfo | None:
    cleaned = strip_modifiers(line_text or "")
    if not cleaned or cleaned.startswith("@"):
        return None

    for pattern, keyword in ((_CLASS_RE, "class"), (_INTERFACE_RE, "interface"), (_TYPE_RE, "type"), (_ENUM_RE, "enum")):
        match = pattern.match(cleaned)
        if match:
            return SymbolInfo(keyword=keyword, capture_type="class", display=f"{keyword} {match.group(1)}")

    match = _NAMESPACE_RE.match(cleaned)
    if match:
        keyword = match.group(1)
        return SymbolInfo(keyword=keyword, capture_type="class", display=f"{keyword} {match.group(2)}")

    match = _FUNCTION_RE.match(cleaned)
    if match:
        return SymbolInfo(keyword="function", capture_type="function", display="function " + match.group(1))

    match = _BINDING_RE.match(cleaned)
    if match:
        keyword, name, rest = match.groups()
        _, eq, rhs = rest.partition("=")
        if eq and looks_like_function_value(rhs):
            return SymbolInfo(keyword="function", capture_type="function", display="function " + name)
        return SymbolInfo(keyword=keyword, capture_type="variable", display=f"{keyword} {name}")

    return _parse_member(cleaned)


def is_comment_line(trimmed: str) -> bool:
    # `*foo() {}` is a generator method, so continuation lines need `* ` or a bare `*`.
    return (
        trimmed.startswith(("//", "/*", "*/", "* "))
        or trimmed == "*"
        or _JSX_OPEN_RE.match(trimmed) is not None
    )


def _is_block_start(trimmed: str) -> bool:
    return trimmed.startswith("/*")


def _is_block_end(trimmed: str) -> bool:
    return trimmed.startswith("*/")


def _comment_text(text: str, is_doc: bool) -> ExtractedComment:
    if not text:
        return ExtractedComment(text=None, marker=None, is_doc_comment=is_doc)
    marker, text = split_marker(text, DEFAULT_MARKERS)
    return ExtractedComment(text=shorten_comment(text), marker=marker, is_doc_comment=is_doc, raw_text=text)


def extract_comment(line: str) -> ExtractedComment | None:
    trimmed = line.strip()
    is_doc = trimmed.startswith(("///", "/**")) or _JSX_DOC_RE.match(trimmed) is not None

    if trimmed in ("/*", "/**", "*/") or _JSX_CLOSE_RE.match(trimmed):
        return ExtractedComment(text=None, marker=None, is_doc_comment=is_doc)

    jsx = _JSX_COMMENT_RE.match(trimmed)
    if jsx:
        return _comment_text(jsx.group(1).lstrip("*").strip(), is_doc)

    text = trimmed
    for pattern in _COMMENT_STRIP_RES:
        text = pattern.sub("", text, count=1)
    return _comment_text(text, is_doc)


def _line(all_lines: Sequence[str], line_nr: int) -> str:
    if 1 <= line_nr <= len(all_lines):
        return all_lines[line_nr - 1]
    return ""


def _enclosing_block_start(all_lines: Sequence[str], line_nr: int) -> int | None:
    """Walk upward to the ``/*`` opening this line's block, never crossing a ``*/``."""
    for nr in range(line_nr - 1, max(0, line_nr - BLOCK_COMMENT_SCAN_LINES - 1), -1):
        trimmed = _line(all_lines, nr).strip()
        if _is_block_end(trimmed):
            return None
        if _is_block_start(trimmed):
            return nr
    return None


def _is_meaningful(extracted: ExtractedComment | None) -> bool:
    return bool(extracted and extracted.text and not _TAG_RE.match(extracted.text))


def _first_block_entry(all_lines: Sequence[str], start_nr: int) -> tuple[int, ExtractedComment] | None:
    """Return ``(line_nr, comment)`` of the line that represents a block comment.

    Continuation lines inherit the doc flag of a ``/**`` opener.
    """
    marker_hit: tuple[int, ExtractedComment] | None = None
    is_doc = _line(all_lines, start_nr).strip().startswith("/**")

    opening = extract_comment(_line(all_lines, start_nr))
    if opening is not None and opening.marker:
        marker_hit = (start_nr, opening)
    elif _is_meaningful(opening):
        return start_nr, opening

    last = min(len(all_lines), start_nr + BLOCK_COMMENT_SCAN_LINES)
    for nr in range(start_nr + 1, last + 1):
        raw = _line(all_lines, nr)
        if _is_block_end(raw.strip()):
            break
        extracted = extract_comment(raw)
        if extracted is None:
            continue
        if is_doc and not extracted.is_doc_comment:
            extracted = replace(extracted, is_doc_comment=True)
        if extracted.marker:
            if marker_hit is None:
                marker_hit = (nr, extracted)
            continue
        if _is_meaningful(extracted):
            return nr, extracted

    return marker_hit


def _entry(extracted: ExtractedComment | None, all_lines: Sequence[str], line_nr: int, allow_tags: bool = True) -> CommentEntry | None:
    if extracted is None:
        return None
    if extracted.marker:
        return CommentEntry(kind="marker", text=extracted.text or "", marker=extracted.marker, is_doc_comment=extracted.is_doc_comment)
    if not extracted.text:
        return None
    if not allow_tags and _TAG_RE.match(extracted.text):
        return None
    if is_file_header(all_lines, line_nr, is_comment_line):
        return None
    return CommentEntry(kind="comment", text=extracted.text, is_doc_comment=extracted.is_doc_comment)


def render_comment(line: str, line_nr: int, all_lines: Sequence[str]) -> CommentEntry | None:
    trimmed = line.strip()

    if _JSX_OPEN_RE.match(trimmed):
        return _entry(extract_comment(line), all_lines, line_nr)

    if _is_block_end(trimmed):
        return None

    if _is_block_start(trimmed):
        return _entry(extract_comment(line), all_lines, line_nr, allow_tags=False)

    if trimmed.startswith("*"):
        start_nr = _enclosing_block_start(all_lines, line_nr)
        if start_nr is None:
            return None
        found = _first_block_entry(all_lines, start_nr)
        if found is None or found[0] != line_nr:
            return None
        return _entry(found[1], all_lines, line_nr)

    return _entry(extract_comment(line), all_lines, line_nr)


PROVIDER = LanguageProvider(
    name="typescript",
    parse_symbol=parse_symbol,
    default_keywords=DEFAULT_KEYWORDS,
    is_comment_line=is_comment_line,
    render_comment=render_comment,
    extract_comment=extract_comment,
    query_variants=QUERY_VARIANTS,
    grammar="typescript",
)
