"""Shared outline datatypes."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

SYMBOL = "symbol"
COMMENT = "comment"
MARKER = "marker"
COMMENTED_SYMBOL = "commented_symbol"

NO_SELECTION = -1


@dataclass(frozen=True)
class SymbolInfo:
    """Declaration parsed from one trimmed source line by a language provider."""

    keyword: str
    capture_type: str
    display: str
    icon: str | None = None


@dataclass(frozen=True)
class CommentEntry:
    """Provider verdict for a comment line.

    ``kind`` is ``"marker"`` (TODO/MARK/...), ``"comment"`` or
    ``"commented_symbol"`` (a declaration that was commented out).
    """

    kind: str
    text: str = ""
    marker: str | None = None
    symbol: SymbolInfo | None = None
    is_doc_comment: bool = False


@dataclass(frozen=True)
class OutlineEntry:
    """One rendered outline row, mapped to exactly one source line.

    ``content`` is the row without its distance prefix; the fast cursor path
    re-prefixes it without re-parsing the buffer.
    """

    source_line: int
    kind: str
    icon: str
    display_text: str
    content: str
    symbol: SymbolInfo | None = None
    marker: str | None = None
    is_doc_comment: bool = False


@dataclass(frozen=True)
class StructuralNode:
    """Typed span reported by the structural index (0-indexed rows)."""

    capture: str
    start_line: int
    end_line: int
    start_col: int = 0
    end_col: int = 0


@dataclass(frozen=True)
class StyledRegion:
    """Style applied to ``[start_col, end_col)`` of one panel row.

    ``end_col`` of ``-1`` extends the region to the end of the row.
    """

    row: int
    start_col: int
    end_col: int
    group: str


@dataclass(frozen=True)
class LineMapping:
    """Outline row index -> 1-indexed source line, strictly increasing."""

    source_lines: tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.source_lines)

    def __bool__(self) -> bool:
        return bool(self.source_lines)

    def __getitem__(self, index: int) -> int:
        return self.source_lines[index]

    def __iter__(self):
        return iter(self.source_lines)

    def floor_index(self, source_line: int) -> int:
        """Return the greatest index whose source line is <= ``source_line``.

        Returns ``-1`` when every mapped line is greater than the target.
        """
        return bisect_right(self.source_lines, source_line) - 1

    def index_of(self, source_line: int) -> int | None:
        """Return the row showing ``source_line`` exactly, if any."""
        idx = self.floor_index(source_line)
        if idx >= 0 and self.source_lines[idx] == source_line:
            return idx
        return None
