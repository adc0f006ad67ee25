"""TSX provider: TypeScript rules plus React hooks and component wrappers."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import replace

from ..types import SymbolInfo
from . import typescript
from .typescript import looks_like_function_value, strip_modifiers

DEFAULT_KEYWORDS: tuple[str, ...] = typescript.DEFAULT_KEYWORDS + ("hook",)

COMPONENT_WRAPPERS = frozenset({"memo", "forwardRef", "observer"})

_HOOK_CALL_RE = re.compile(r"^(?:React\.)?(use[A-Z][\w$]*)\s*(?:<[^()]*>)?\s*\((.*)$")
_FIRST_ARG_RE = re.compile(r"^([A-Za-z_$][\w$]*)\s*[,)]")
_WRAPPER_CALL_RE = re.compile(r"^(?:React\.)?([\w$]+)\s*(?:<[^()]*>)?\s*\((.*)$")
_DESTRUCTURE_RE = re.compile(r"^(?:const|let|var)\s*(\[[^\]]*\]|\{[^}]*\})\s*=\s*(.+)$")
_NAMED_BINDING_RE = re.compile(r"^(?:const|let|var)\s+([\w$]+)\s*.*?=\s*(.+)$")
_FIRST_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")

QUERY_VARIANTS: tuple[str, ...] = (
    """
    (class_declaration) @class
    (interface_declaration) @class
    (type_alias_declaration) @class
    (enum_declaration) @class
    (function_declaration) @function
    (method_definition) @method
    (lexical_declaration
      (variable_declarator
        name: (identifier) @function
        value: (arrow_function)))
    """,
) + typescript.QUERY_VARIANTS


def parse_hook_call(text: str) -> tuple[str, str | None] | None:
    """Return ``(hook name, first identifier argument)`` for ``useX(...)`` calls."""
    match = _HOOK_CALL_RE.match(text.lstrip())
    if not match:
        return None
    arg = _FIRST_ARG_RE.match(match.group(2).lstrip())
    return match.group(1), arg.group(1) if arg else None


def _hook_symbol(hook_name: str, label: str | None) -> SymbolInfo:
    display = "hook " + hook_name
    if label:
        display += " " + label
    return SymbolInfo(keyword="hook", capture_type="function", display=display)


def _is_wrapped_component(rhs: str) -> bool:
    match = _WRAPPER_CALL_RE.match(rhs.lstrip())
    if not match or match.group(1) not in COMPONENT_WRAPPERS:
        return False
    return looks_like_function_value(match.group(2))


def _parse_hook(cleaned: str) -> SymbolInfo | None:
    call = parse_hook_call(cleaned)
    if call:
        return _hook_symbol(*call)

    match = _DESTRUCTURE_RE.match(cleaned)
    if match:
        call = parse_hook_call(match.group(2))
        if call:
            first = _FIRST_IDENT_RE.search(match.group(1))
            return _hook_symbol(call[0], first.group(0) if first else None)

    match = _NAMED_BINDING_RE.match(cleaned)
    if match:
        call = parse_hook_call(match.group(2))
        if call:
            return _hook_symbol(call[0], match.group(1))

    return None


def parse_symbol(line_text: str, line_nr: int | None = None, all_lines: Sequence[str] | None = None) -> SymbolInfo | None:
    cleaned = strip_modifiers(line_text or "")
    if not cleaned or cleaned.startswith("@"):
        return None

    hook = _parse_hook(cleaned)
    if hook is not None:
        return hook

    match = _NAMED_BINDING_RE.match(cleaned)
    if match and match.group(1)[:1].isupper() and _is_wrapped_component(match.group(2)):
        return SymbolInfo(keyword="function", capture_type="function", display="function " + match.group(1))

    return typescript.parse_symbol(line_text, line_nr, all_lines)


PROVIDER = replace(
    typescript.PROVIDER,
    name="typescriptreact",
    parse_symbol=parse_symbol,
    default_keywords=DEFAULT_KEYWORDS,
    query_variants=QUERY_VARIANTS,
    grammar="tsx",
)
