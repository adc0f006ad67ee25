"""JavaScript provider: the TypeScript line rules without type-only declarations."""

from __future__ import annotations

from dataclasses import replace

from .typescript import PROVIDER as TYPESCRIPT

DEFAULT_KEYWORDS: tuple[str, ...] = ("function", "method", "class", "const", "let", "var")

QUERY_VARIANTS: tuple[str, ...] = (
    """
    (class_declaration) @class
    (function_declaration) @function
    (generator_function_declaration) @function
    (method_definition) @method
    """,
    """
    (class_declaration) @class
    (function_declaration) @function
    """,
)

PROVIDER = replace(
    TYPESCRIPT,
    name="javascript",
    default_keywords=DEFAULT_KEYWORDS,
    query_variants=QUERY_VARIANTS,
    grammar="javascript",
)
