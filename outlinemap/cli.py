"""Command-line front door for outlinemap.

Reads one source file, renders its outline with distance prefixes measured
from ``--anchor``, and prints the rows (colored on a TTY).
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .ansi import paint_row
from .config import OutlineConfig, is_treesitter_enabled, load_outline_config
from .highlight import resolve_styles, structure_regions, syntax_regions
from .keywords import resolve_highlight_keywords
from .languages import get_provider
from .prefix import build_prefix_settings
from .render import compose_rows, render_outline
from .structure import structural_nodes
from .types import StyledRegion

EXIT_UNSUPPORTED = 2

LANGUAGE_BY_SUFFIX: dict[str, str] = {
    ".swift": "swift",
    ".lua": "lua",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescriptreact",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".py": "python",
    ".pyi": "python",
    ".md": "markdown",
    ".markdown": "markdown",
}


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def read_text(path: Path) -> str:
    """Read text trying UTF-8, UTF-8 with BOM, then latin-1."""
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def detect_language(path: Path) -> str | None:
    return LANGUAGE_BY_SUFFIX.get(path.suffix.lower())


def render_outline_text(
    lines: Sequence[str],
    language: str,
    config: OutlineConfig,
    anchor_line: int = 1,
    color: bool = False,
) -> str:
    """Render ``lines`` as printable outline rows, one per entry."""
    provider = get_provider(language)
    rendered = render_outline(lines, language, config, provider)
    settings = build_prefix_settings(config)
    rows = compose_rows(rendered.entries, anchor_line, settings)
    if not rows:
        return ""
    if not color:
        return "\n".join(rows) + "\n"

    regions: list[StyledRegion] = []
    if config.treesitter.highlight_scopes and is_treesitter_enabled(config, language):
        nodes = structural_nodes(lines, language, provider)
        regions.extend(structure_regions(nodes, rendered.entries, rendered.mapping, anchor_line, settings, language))
    keywords: tuple[str, ...] = ()
    if provider is not None:
        keywords = resolve_highlight_keywords(config, language, provider.highlight_defaults)
    regions.extend(syntax_regions(rendered.entries, rows, anchor_line, settings, keywords, language))

    by_row: dict[int, list[StyledRegion]] = {}
    for region in regions:
        by_row.setdefault(region.row, []).append(region)
    styles = resolve_styles(config.style, config.highlights)
    return "".join(paint_row(row, by_row.get(idx, ()), styles) + "\n" for idx, row in enumerate(rows))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="outlinemap",
        description="Print the structural outline of a source file with relative distance prefixes.",
    )
    parser.add_argument("path", help="Source file to outline.")
    parser.add_argument("--language", default=None, help="Language tag (default: detected from the file suffix).")
    parser.add_argument("--anchor", type=_positive_int, default=1, help="1-indexed line distances are measured from.")
    parser.add_argument("--style", default=None, help="Pygments style name used for colors.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--max-length", type=_positive_int, default=None, help="Truncate entry text to this length.")
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON config file.")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and print the outline of one file."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    path = Path(args.path)
    if not path.is_file():
        parser.exit(EXIT_UNSUPPORTED, f"outlinemap: file not found: {path}\n")
    try:
        source = read_text(path)
    except OSError as exc:
        parser.exit(EXIT_UNSUPPORTED, f"outlinemap: cannot read {path}: {exc}\n")

    language = args.language or detect_language(path)
    if not language or get_provider(language) is None:
        parser.exit(EXIT_UNSUPPORTED, f"outlinemap: unsupported language for {path}: {language or 'unknown'}\n")

    overrides: dict[str, object] = {}
    if args.style:
        overrides["style"] = args.style
    if args.max_length is not None:
        overrides["render"] = {"max_line_length": args.max_length}
    config = load_outline_config(args.config, overrides)

    color = not args.no_color and sys.stdout.isatty()
    sys.stdout.write(render_outline_text(source.splitlines(), language, config, args.anchor, color))


if __name__ == "__main__":
    main()
