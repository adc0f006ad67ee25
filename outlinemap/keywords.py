"""Per-language keyword visibility and highlight lists.

Config shape, keyed by language tag::

    {"symbols": {"swift": {
        "keywords": ["func", "struct"],          # allowlist (aliases: visible_keywords, include)
        "exclude": ["let", "var"],               # always removed, applied last
        "highlight_keywords": ["func"],          # line-start emphasis
    }}}

Absent or wrong-typed fields mean "use the default"; nothing here raises.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .config import OutlineConfig

_ALLOWLIST_KEYS = ("keywords", "visible_keywords", "include")


def _language_options(config: OutlineConfig | Mapping[str, object] | None, language: str) -> Mapping[str, object]:
    if isinstance(config, OutlineConfig):
        symbols: object = config.symbols
    elif isinstance(config, Mapping):
        symbols = config.get("symbols")
    else:
        return {}
    if not isinstance(symbols, Mapping) or not isinstance(language, str) or not language:
        return {}
    options = symbols.get(language)
    return options if isinstance(options, Mapping) else {}


def _string_list(value: object) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, str) and item]


def _base_keywords(options: Mapping[str, object], defaults: Iterable[str] | None) -> list[str]:
    for key in _ALLOWLIST_KEYS:
        allowlist = _string_list(options.get(key))
        if allowlist:
            return allowlist
    if defaults is None or isinstance(defaults, str):
        return []
    return _string_list(tuple(defaults))


def resolve_enabled(
    config: OutlineConfig | Mapping[str, object] | None,
    language: str,
    provider_defaults: Iterable[str],
) -> frozenset[str]:
    """Return the keywords whose symbols are shown for ``language``.

    An explicit allowlist replaces the provider defaults; ``exclude`` is
    removed afterwards, so it always wins.
    """
    options = _language_options(config, language)
    enabled = set(_base_keywords(options, provider_defaults))
    enabled.difference_update(_string_list(options.get("exclude")))
    return frozenset(enabled)


def resolve_highlight_keywords(
    config: OutlineConfig | Mapping[str, object] | None,
    language: str,
    provider_defaults: Iterable[str],
) -> tuple[str, ...]:
    """Return keywords emphasized at the start of rendered rows.

    Defaults to the visible keyword list so highlighting tracks visibility.
    """
    options = _language_options(config, language)
    explicit = _string_list(options.get("highlight_keywords"))
    if explicit:
        return tuple(explicit)
    return tuple(_base_keywords(options, provider_defaults))
