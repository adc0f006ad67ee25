"""Language provider registry.

A provider is a capability set: the render engine needs ``parse_symbol`` and
``default_keywords``; comment handling and tree-sitter queries are optional
and left as ``None`` / empty when a language does not support them.

Bundled providers are imported lazily on first lookup and cached, including
misses, so unsupported tags cost one dictionary lookup afterwards.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..types import CommentEntry, SymbolInfo
from .common import ExtractedComment

logger = logging.getLogger(__name__)

ParseSymbol = Callable[[str, int | None, Sequence[str] | None], SymbolInfo | None]
RenderComment = Callable[[str, int, Sequence[str]], CommentEntry | None]


@dataclass(frozen=True)
class LanguageProvider:
    """Per-language line parsers and defaults."""

    name: str
    parse_symbol: ParseSymbol
    default_keywords: tuple[str, ...]
    default_highlight_keywords: tuple[str, ...] | None = None
    is_comment_line: Callable[[str], bool] | None = None
    render_comment: RenderComment | None = None
    extract_comment: Callable[[str], ExtractedComment | None] | None = None
    query_variants: tuple[str, ...] = ()
    grammar: str | None = None

    @property
    def highlight_defaults(self) -> tuple[str, ...]:
        if self.default_highlight_keywords is not None:
            return self.default_highlight_keywords
        return self.default_keywords


_BUNDLED_MODULES: dict[str, str] = {
    "swift": "swift",
    "lua": "lua",
    "typescript": "typescript",
    "typescriptreact": "typescriptreact",
    "javascript": "javascript",
    "python": "python",
    "markdown": "markdown",
}

_PROVIDERS: dict[str, LanguageProvider | None] = {}


def _load_bundled(language: str) -> LanguageProvider | None:
    module_name = _BUNDLED_MODULES.get(language)
    if module_name is None:
        return None
    try:
        module = importlib.import_module(f"{__name__}.{module_name}")
    except ImportError:
        logger.exception("Failed to import language provider %s", module_name)
        return None
    provider = getattr(module, "PROVIDER", None)
    return provider if isinstance(provider, LanguageProvider) else None


def get_provider(language: str | None) -> LanguageProvider | None:
    """Return the provider for ``language`` or ``None`` when unsupported."""
    if not isinstance(language, str) or not language:
        return None
    if language in _PROVIDERS:
        return _PROVIDERS[language]
    provider = _load_bundled(language)
    _PROVIDERS[language] = provider
    return provider


def supports(language: str | None) -> bool:
    return get_provider(language) is not None


def register_provider(language: str, provider: LanguageProvider) -> None:
    """Register (or replace) the provider used for ``language``."""
    _PROVIDERS[language] = provider


def unregister_provider(language: str) -> None:
    """Forget a registered provider; bundled ones reload on next lookup."""
    _PROVIDERS.pop(language, None)


def bundled_languages() -> tuple[str, ...]:
    return tuple(_BUNDLED_MODULES)


__all__ = [
    "LanguageProvider",
    "bundled_languages",
    "get_provider",
    "register_provider",
    "supports",
    "unregister_provider",
]
