"""Outline configuration: defaults, persisted JSON, and defensive coercion.

Every field is read through a typed accessor; malformed or missing values fall
back to the documented defaults so configuration problems never surface as
exceptions.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "outlinemap"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_LANGUAGES: tuple[str, ...] = (
    "swift",
    "lua",
    "typescript",
    "typescriptreact",
    "javascript",
    "python",
    "markdown",
)
DEFAULT_EXCLUDE_FILETYPES: tuple[str, ...] = (
    "help",
    "terminal",
    "prompt",
    "qf",
    "neo-tree",
    "NvimTree",
    "lazy",
)
PANEL_SIDES = ("left", "right")
DEFAULT_STYLE = "monokai"


@dataclass(frozen=True)
class RelativePrefixOptions:
    """Distance-prefix layout: ``<number><number_separator><indicator><separator>``."""

    number_width: int = 3
    number_fill: str = "0"
    number_separator: str = " "
    separator: str = " "
    up: str = "↑"
    down: str = "↓"
    current: str = "·"


@dataclass(frozen=True)
class RenderOptions:
    max_line_length: int = 40
    throttle_ms: int = 100
    relative_prefix: RelativePrefixOptions = field(default_factory=RelativePrefixOptions)


@dataclass(frozen=True)
class NavigationOptions:
    """Outline navigation toggles.

    ``pin_anchor`` freezes the distance zero-point while the panel is focused,
    ``follow_cursor`` moves the source cursor along with the panel cursor, and
    ``auto_center`` recenters the source view after jumps.
    """

    auto_center: bool = True
    follow_cursor: bool = True
    pin_anchor: bool = True


@dataclass(frozen=True)
class TreeSitterOptions:
    enable: bool = True
    highlight_scopes: bool = True
    languages: tuple[str, ...] = DEFAULT_LANGUAGES


@dataclass(frozen=True)
class OutlineConfig:
    """Resolved, immutable configuration snapshot."""

    width: int = 40
    side: str = "right"
    auto_open: bool = False
    style: str = DEFAULT_STYLE
    filetypes: tuple[str, ...] = DEFAULT_LANGUAGES
    exclude_filetypes: tuple[str, ...] = DEFAULT_EXCLUDE_FILETYPES
    render: RenderOptions = field(default_factory=RenderOptions)
    navigation: NavigationOptions = field(default_factory=NavigationOptions)
    treesitter: TreeSitterOptions = field(default_factory=TreeSitterOptions)
    symbols: dict[str, object] = field(default_factory=dict)
    highlights: dict[str, object] = field(default_factory=dict)


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except Exception as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def merge_config(base: dict[str, object], overrides: object) -> dict[str, object]:
    """Deep-merge ``overrides`` into a copy of ``base`` (override wins)."""
    merged = dict(base)
    if not isinstance(overrides, dict):
        return merged
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = value
    return merged


def _section(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _coerce_bool(value: object, default: bool) -> bool:
    """Only explicit booleans are accepted; anything else keeps ``default``."""
    return value if isinstance(value, bool) else default


def _coerce_positive_int(value: object, default: int) -> int:
    """Accept integral numbers >= 1; booleans and other types keep ``default``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    as_int = int(value)
    return as_int if as_int >= 1 else default


def _coerce_nonnegative_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return max(0, int(value))


def _coerce_str(value: object, default: str) -> str:
    return value if isinstance(value, str) else default


def _coerce_fill(value: object, default: str) -> str:
    if isinstance(value, str) and len(value) == 1:
        return value
    return default


def _coerce_str_tuple(value: object, default: tuple[str, ...]) -> tuple[str, ...]:
    """Accept a list of strings; non-string members are dropped."""
    if not isinstance(value, (list, tuple)):
        return default
    return tuple(item for item in value if isinstance(item, str) and item)


def _relative_prefix_options(data: dict[str, object]) -> RelativePrefixOptions:
    defaults = RelativePrefixOptions()
    direction = _section(data, "direction")
    return RelativePrefixOptions(
        number_width=_coerce_positive_int(data.get("number_width"), defaults.number_width),
        number_fill=_coerce_fill(data.get("number_fill"), defaults.number_fill),
        number_separator=_coerce_str(data.get("number_separator"), defaults.number_separator),
        separator=_coerce_str(data.get("separator"), defaults.separator),
        up=_coerce_str(direction.get("up"), defaults.up),
        down=_coerce_str(direction.get("down"), defaults.down),
        current=_coerce_str(direction.get("current"), defaults.current),
    )


def _render_options(data: dict[str, object]) -> RenderOptions:
    defaults = RenderOptions()
    return RenderOptions(
        max_line_length=_coerce_positive_int(data.get("max_line_length"), defaults.max_line_length),
        throttle_ms=_coerce_nonnegative_int(data.get("throttle_ms"), defaults.throttle_ms),
        relative_prefix=_relative_prefix_options(_section(data, "relative_prefix")),
    )


def _navigation_options(data: dict[str, object]) -> NavigationOptions:
    defaults = NavigationOptions()
    return NavigationOptions(
        auto_center=_coerce_bool(data.get("auto_center"), defaults.auto_center),
        follow_cursor=_coerce_bool(data.get("follow_cursor"), defaults.follow_cursor),
        pin_anchor=_coerce_bool(data.get("pin_anchor"), defaults.pin_anchor),
    )


def _treesitter_options(data: dict[str, object]) -> TreeSitterOptions:
    defaults = TreeSitterOptions()
    return TreeSitterOptions(
        enable=_coerce_bool(data.get("enable"), defaults.enable),
        highlight_scopes=_coerce_bool(data.get("highlight_scopes"), defaults.highlight_scopes),
        languages=_coerce_str_tuple(data.get("languages"), defaults.languages),
    )


def config_from_mapping(data: object) -> OutlineConfig:
    """Build an :class:`OutlineConfig` from raw (possibly malformed) data."""
    if not isinstance(data, dict):
        return OutlineConfig()

    defaults = OutlineConfig()
    side = _coerce_str(data.get("side"), defaults.side)
    if side not in PANEL_SIDES:
        side = defaults.side
    style = _coerce_str(data.get("style"), defaults.style).strip() or defaults.style

    symbols = data.get("symbols")
    highlights = data.get("highlights")
    return OutlineConfig(
        width=_coerce_positive_int(data.get("width"), defaults.width),
        side=side,
        auto_open=_coerce_bool(data.get("auto_open"), defaults.auto_open),
        style=style,
        filetypes=_coerce_str_tuple(data.get("filetypes"), defaults.filetypes),
        exclude_filetypes=_coerce_str_tuple(data.get("exclude_filetypes"), defaults.exclude_filetypes),
        render=_render_options(_section(data, "render")),
        navigation=_navigation_options(_section(data, "navigation")),
        treesitter=_treesitter_options(_section(data, "treesitter")),
        symbols=dict(symbols) if isinstance(symbols, dict) else {},
        highlights=dict(highlights) if isinstance(highlights, dict) else {},
    )


def load_outline_config(path: Path | None = None, overrides: object = None) -> OutlineConfig:
    """Load persisted config, apply runtime ``overrides``, and coerce the result."""
    return config_from_mapping(merge_config(load_config(path), overrides))


def is_language_supported(config: OutlineConfig, language: str) -> bool:
    """Return whether ``language`` is enabled by the include/exclude lists."""
    if not language or language in config.exclude_filetypes:
        return False
    return language in config.filetypes


def is_treesitter_enabled(config: OutlineConfig, language: str) -> bool:
    if not config.treesitter.enable:
        return False
    return language in config.treesitter.languages
