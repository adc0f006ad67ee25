"""Style groups and styled regions for the outline panel.

Regions live in four independent layers (viewport, cursor, syntax,
structure) so the cursor fast path can redraw one layer without touching
the others.

Each style group links to a Pygments token role, so the outline follows the
active Pygments style. Groups carry fallback colors for styles that leave a
role uncolored, and user overrides from the ``highlights`` config are layered
on top (a plain string is shorthand for ``{"link": ...}``).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from pygments.style import StyleMeta
from pygments.styles import get_style_by_name
from pygments.token import Comment, Generic, Keyword, Literal, Name, Token, _TokenType, string_to_tokentype
from pygments.util import ClassNotFound

from .config import DEFAULT_STYLE
from .prefix import RelativePrefixSettings, format_relative_prefix, prefix_layout, relative_direction
from .structure import COMMENT_ICON, highlight_for_type
from .types import COMMENT, COMMENTED_SYMBOL, MARKER, LineMapping, OutlineEntry, StructuralNode, StyledRegion

logger = logging.getLogger(__name__)

LAYER_VIEWPORT = "viewport"
LAYER_CURSOR = "cursor"
LAYER_SYNTAX = "syntax"
LAYER_STRUCTURE = "structure"
LAYERS = (LAYER_VIEWPORT, LAYER_CURSOR, LAYER_SYNTAX, LAYER_STRUCTURE)

DIRECTION_GROUPS = {
    "up": "OutlineRelativeUp",
    "down": "OutlineRelativeDown",
    "current": "OutlineRelativeCurrent",
}
MARKER_GROUPS = {
    "MARK": "OutlineCommentMark",
    "TODO": "OutlineCommentTodo",
    "FIXME": "OutlineCommentFixme",
    "NOTE": "OutlineCommentNote",
    "WARNING": "OutlineCommentWarning",
    "BUG": "OutlineCommentBug",
    "HACK": "OutlineCommentHack",
}
MARKDOWN_HEADING_GROUPS = {f"H{level}": f"OutlineMarkdownH{level}" for level in range(1, 7)}


@dataclass(frozen=True)
class StyleGroup:
    """A named style: a linked token role plus adjustments."""

    link: _TokenType | None = None
    bold: bool | None = None
    italic: bool | None = None
    no_bg: bool = False
    no_fg: bool = False
    fallback: dict[str, object] = field(default_factory=dict)


STYLE_GROUPS: dict[str, StyleGroup] = {
    "OutlineBackground": StyleGroup(link=Token),
    "OutlineText": StyleGroup(link=Comment, no_bg=True),
    "OutlineViewport": StyleGroup(no_fg=True),
    "OutlineCursor": StyleGroup(no_fg=True),
    "OutlineFunction": StyleGroup(link=Name.Function, no_bg=True, fallback={"fg": "#7aa2f7", "bold": True}),
    "OutlineClass": StyleGroup(link=Name.Class, no_bg=True, fallback={"fg": "#bb9af7", "bold": True}),
    "OutlineMethod": StyleGroup(link=Name.Function, no_bg=True, fallback={"fg": "#7aa2f7"}),
    "OutlineVariable": StyleGroup(link=Name.Variable, no_bg=True, fallback={"fg": "#9ece6a"}),
    "OutlineComment": StyleGroup(link=Comment, no_bg=True),
    "OutlineRelativeUp": StyleGroup(link=Generic.Inserted, bold=True, no_bg=True, fallback={"fg": "#9ece6a", "bold": True}),
    "OutlineRelativeDown": StyleGroup(link=Generic.Deleted, bold=True, no_bg=True, fallback={"fg": "#f7768e", "bold": True}),
    "OutlineRelativeCurrent": StyleGroup(link=Literal.String, bold=True, no_bg=True, fallback={"fg": "#e0af68", "bold": True}),
    "OutlineRelativeNumber": StyleGroup(link=Literal.Number, bold=False, no_bg=True, fallback={"fg": "#c0caf5", "bold": True}),
    "OutlineRelativeKeyword": StyleGroup(link=Keyword, bold=True, no_bg=True, fallback={"fg": "#bb9af7", "bold": True}),
    "OutlineRelativeEntity": StyleGroup(link=Name, no_bg=True, fallback={"fg": "#7dcfff"}),
    "OutlineCommentNormal": StyleGroup(link=Comment, no_bg=True),
    "OutlineCommentDoc": StyleGroup(link=Literal.String.Doc, no_bg=True),
    "OutlineCommentMark": StyleGroup(link=Generic.Error, bold=True, no_bg=True),
    "OutlineCommentTodo": StyleGroup(link=Generic.Error, bold=True, no_bg=True),
    "OutlineCommentFixme": StyleGroup(link=Generic.Error, bold=True, no_bg=True),
    "OutlineCommentNote": StyleGroup(link=Generic.Error, bold=True, no_bg=True),
    "OutlineCommentWarning": StyleGroup(link=Generic.Error, bold=True, no_bg=True),
    "OutlineCommentBug": StyleGroup(link=Generic.Error, bold=True, no_bg=True),
    "OutlineCommentHack": StyleGroup(link=Generic.Error, bold=True, no_bg=True),
    "OutlineMarkdownH1": StyleGroup(link=Generic.Heading, bold=True, no_bg=True),
    "OutlineMarkdownH2": StyleGroup(link=Generic.Subheading, bold=True, no_bg=True),
    "OutlineMarkdownH3": StyleGroup(link=Generic.Subheading, no_bg=True),
    "OutlineMarkdownH4": StyleGroup(link=Keyword, no_bg=True),
    "OutlineMarkdownH5": StyleGroup(link=Name.Function, no_bg=True),
    "OutlineMarkdownH6": StyleGroup(link=Comment, no_bg=True),
    "OutlineMarkdownHeadingText": StyleGroup(link=Name, no_bg=True),
}

_STYLE_KEYS = ("fg", "bg", "bold", "italic", "underline", "reverse")


def load_pygments_style(name: str | None) -> StyleMeta:
    """Return the named Pygments style, or the default style when unknown."""
    try:
        return get_style_by_name(name or DEFAULT_STYLE)
    except ClassNotFound:
        logger.debug("Unknown Pygments style %r; using %s", name, DEFAULT_STYLE)
        return get_style_by_name(DEFAULT_STYLE)


def _hex(value: object) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    return value if value.startswith("#") else "#" + value


def _token_style(style: StyleMeta, token: _TokenType) -> dict[str, object]:
    raw = style.style_for_token(token)
    resolved: dict[str, object] = {}
    fg = _hex(raw.get("color"))
    bg = _hex(raw.get("bgcolor"))
    if fg:
        resolved["fg"] = fg
    if bg:
        resolved["bg"] = bg
    for key in ("bold", "italic", "underline"):
        if raw.get(key):
            resolved[key] = True
    return resolved


def _parse_token(value: object) -> _TokenType | None:
    if isinstance(value, _TokenType):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    name = value.strip()
    if name.startswith("Token."):
        name = name[len("Token."):]
    return string_to_tokentype(name)


def normalize_override(value: object) -> dict[str, object] | None:
    """Accept ``"Token.Comment"`` shorthand or a dict of style fields."""
    if isinstance(value, str):
        return {"link": value}
    if isinstance(value, Mapping):
        return dict(value)
    return None


def _with_override(group: StyleGroup, override: Mapping[str, object] | None) -> tuple[StyleGroup, dict[str, object]]:
    if not override:
        return group, {}
    link = _parse_token(override.get("link")) if "link" in override else group.link
    merged = StyleGroup(
        link=link,
        bold=override["bold"] if isinstance(override.get("bold"), bool) else group.bold,
        italic=override["italic"] if isinstance(override.get("italic"), bool) else group.italic,
        no_bg=override["no_bg"] if isinstance(override.get("no_bg"), bool) else group.no_bg,
        no_fg=override["no_fg"] if isinstance(override.get("no_fg"), bool) else group.no_fg,
        fallback=group.fallback,
    )
    explicit = {key: override[key] for key in _STYLE_KEYS if key in override}
    return merged, explicit


def _adjust_hex(color: str, amount: float) -> str:
    value = color.lstrip("#")
    channels = [int(value[idx : idx + 2], 16) for idx in (0, 2, 4)]
    if amount >= 0:
        adjusted = [round(ch + (255 - ch) * amount) for ch in channels]
    else:
        adjusted = [round(ch * (1 + amount)) for ch in channels]
    return "#" + "".join(f"{max(0, min(255, ch)):02x}" for ch in adjusted)


def _luminance(color: str) -> float:
    value = color.lstrip("#")
    r, g, b = (int(value[idx : idx + 2], 16) for idx in (0, 2, 4))
    return (0.2126 * r + 0.7152 * g + 0.0722 * b) / 255


def _selection_background(style: StyleMeta) -> str | None:
    """Pick a visible row background: the style's highlight color, else a shifted background."""
    background = _hex(getattr(style, "background_color", None))
    highlight = _hex(getattr(style, "highlight_color", None))
    if highlight and highlight != background:
        return highlight
    if background and len(background) == 7:
        return _adjust_hex(background, 0.08 if _luminance(background) < 0.5 else -0.08)
    return None


def resolve_group(
    name: str,
    group: StyleGroup,
    style: StyleMeta,
    override: Mapping[str, object] | None = None,
) -> dict[str, object]:
    """Resolve one group to concrete ``fg``/``bg``/flag fields."""
    group, explicit = _with_override(group, override)

    resolved: dict[str, object] = {}
    if group.link is not None:
        resolved = _token_style(style, group.link)
        if "fg" not in resolved and group.fallback:
            resolved = dict(group.fallback)
    elif group.fallback:
        resolved = dict(group.fallback)

    if name in ("OutlineCursor", "OutlineViewport") and "bg" not in resolved:
        selection = _selection_background(style)
        if selection:
            resolved["bg"] = selection
        else:
            resolved["reverse"] = True

    if group.bold is not None:
        resolved["bold"] = group.bold
    if group.italic is not None:
        resolved["italic"] = group.italic
    if group.no_bg:
        resolved.pop("bg", None)
    if group.no_fg:
        resolved.pop("fg", None)
    resolved.update(explicit)
    return resolved


def resolve_styles(
    style_name: str | None = DEFAULT_STYLE,
    overrides: Mapping[str, object] | None = None,
) -> dict[str, dict[str, object]]:
    """Resolve every style group against a Pygments style and user overrides.

    Override keys that name no known group define new, unlinked groups.
    """
    style = load_pygments_style(style_name)
    overrides = overrides or {}
    resolved: dict[str, dict[str, object]] = {}
    for name, group in STYLE_GROUPS.items():
        resolved[name] = resolve_group(name, group, style, normalize_override(overrides.get(name)))
    for name, value in overrides.items():
        if name in resolved or not isinstance(name, str):
            continue
        override = normalize_override(value)
        if override is not None:
            resolved[name] = resolve_group(name, StyleGroup(), style, override)
    return resolved


def _row_prefix_length(entry: OutlineEntry, anchor_line: int, settings: RelativePrefixSettings) -> int:
    _, prefix = format_relative_prefix(entry.source_line, anchor_line, settings)
    return len(prefix)


def _first_letter(text: str, start: int) -> int:
    for idx in range(start, len(text)):
        if text[idx].isalpha():
            return idx
    return -1


def _keyword_regions(
    row: int,
    text: str,
    start: int,
    highlight_keywords: Sequence[str],
    markdown: bool,
) -> list[StyledRegion]:
    pos = _first_letter(text, start)
    if pos < 0:
        return []
    for keyword in highlight_keywords:
        if not keyword or not text.startswith(keyword, pos):
            continue
        end = pos + len(keyword)
        if end < len(text) and (text[end].isalnum() or text[end] == "_"):
            continue
        keyword_group = "OutlineRelativeKeyword"
        entity_group = "OutlineRelativeEntity"
        if markdown and keyword in MARKDOWN_HEADING_GROUPS:
            keyword_group = entity_group = MARKDOWN_HEADING_GROUPS[keyword]
        regions = [StyledRegion(row, pos, end, keyword_group)]
        if end < len(text):
            regions.append(StyledRegion(row, end, -1, entity_group))
        return regions
    return []


def _heading_regions(row: int, text: str, start: int, entry: OutlineEntry, group: str) -> list[StyledRegion]:
    icon = entry.symbol.icon if entry.symbol is not None else None
    regions: list[StyledRegion] = []
    text_start = start
    if icon:
        icon_end = start + len(icon)
        regions.append(StyledRegion(row, start, icon_end, group))
        text_start = icon_end + 1 if text[icon_end : icon_end + 1] == " " else icon_end
    if text_start < len(text):
        regions.append(StyledRegion(row, text_start, -1, "OutlineMarkdownHeadingText"))
    return regions


def prefix_regions(
    row: int,
    entry: OutlineEntry,
    anchor_line: int,
    settings: RelativePrefixSettings,
) -> list[StyledRegion]:
    direction, distance = relative_direction(entry.source_line, anchor_line)
    layout = prefix_layout(settings, distance)
    return [
        StyledRegion(row, 0, layout.number_end, "OutlineRelativeNumber"),
        StyledRegion(row, layout.indicator_start, layout.indicator_ends[direction], DIRECTION_GROUPS[direction]),
    ]


def syntax_regions(
    entries: Sequence[OutlineEntry],
    rows: Sequence[str],
    anchor_line: int,
    settings: RelativePrefixSettings,
    highlight_keywords: Sequence[str] = (),
    language: str | None = None,
) -> list[StyledRegion]:
    """Return the syntax layer: prefix fields, comments, markers, headings, keywords."""
    markdown = language == "markdown"
    regions: list[StyledRegion] = []

    for row, (entry, text) in enumerate(zip(entries, rows)):
        regions.extend(prefix_regions(row, entry, anchor_line, settings))
        start = _row_prefix_length(entry, anchor_line, settings)

        if entry.kind == MARKER:
            group = MARKER_GROUPS.get(entry.marker or "", "OutlineCommentTodo")
            regions.append(StyledRegion(row, start, -1, group))
            continue

        if entry.kind in (COMMENT, COMMENTED_SYMBOL):
            group = "OutlineCommentDoc" if entry.is_doc_comment else "OutlineCommentNormal"
            if entry.kind == COMMENT:
                regions.append(StyledRegion(row, start, -1, group))
                continue
            regions.append(StyledRegion(row, start, start + len(COMMENT_ICON), group))
            start += len(COMMENT_ICON)

        symbol = entry.symbol
        if markdown and entry.kind != COMMENTED_SYMBOL and symbol is not None and symbol.keyword in MARKDOWN_HEADING_GROUPS:
            regions.extend(_heading_regions(row, text, start, entry, MARKDOWN_HEADING_GROUPS[symbol.keyword]))
            continue

        regions.extend(_keyword_regions(row, text, start, highlight_keywords, markdown))

    return regions


def structure_regions(
    nodes: Sequence[StructuralNode],
    entries: Sequence[OutlineEntry],
    mapping: LineMapping,
    anchor_line: int,
    settings: RelativePrefixSettings,
    language: str | None = None,
) -> list[StyledRegion]:
    """Highlight rendered rows whose source line starts a structural node."""
    markdown = language == "markdown"
    regions: list[StyledRegion] = []
    seen: set[int] = set()
    for node in nodes:
        row = mapping.index_of(node.start_line + 1)
        if row is None or row in seen or row >= len(entries):
            continue
        entry = entries[row]
        if markdown and entry.symbol is not None and entry.symbol.keyword in MARKDOWN_HEADING_GROUPS:
            continue
        seen.add(row)
        start = _row_prefix_length(entry, anchor_line, settings)
        regions.append(StyledRegion(row, start, -1, highlight_for_type(node.capture)))
    return regions


def cursor_region(row: int) -> StyledRegion:
    return StyledRegion(row, 0, -1, "OutlineCursor")


def viewport_regions(mapping: LineMapping, top_line: int, bottom_line: int) -> list[StyledRegion]:
    """Mark rows whose source line is visible in the source window."""
    first = max(0, mapping.floor_index(top_line - 1) + 1)
    last = mapping.floor_index(bottom_line)
    return [StyledRegion(row, 0, -1, "OutlineViewport") for row in range(first, last + 1)]
