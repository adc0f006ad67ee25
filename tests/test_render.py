"""Render engine behavior: entries, mapping, filtering and row composition."""

from __future__ import annotations

import unittest

from outlinemap.config import config_from_mapping
from outlinemap.languages import LanguageProvider
from outlinemap.navigation import nearest_outline_index
from outlinemap.prefix import build_prefix_settings
from outlinemap.render import compact_display, compose_rows, render_line, render_outline
from outlinemap.structure import COMMENT_ICON, icon_for_type
from outlinemap.types import COMMENT, COMMENTED_SYMBOL, MARKER, NO_SELECTION, SYMBOL, SymbolInfo

SWIFT_SOURCE = [
    "import Foundation",
    "",
    "// MARK: - Models",
    "struct User {",
    "    let id: Int",
    "    // func legacy() {}",
    "    func greet() -> String {",
    '        return "hi"',
    "    }",
    "}",
    "// TODO: func cleanup()",
    "// plain note",
]


def _fragile_parse(line_text: str, line_nr: int | None = None, all_lines=None) -> SymbolInfo | None:
    if "boom" in line_text:
        raise ValueError("provider bug")
    if line_text.startswith("def "):
        return SymbolInfo(keyword="def", capture_type="function", display=line_text)
    return None


FRAGILE = LanguageProvider(name="fragile", parse_symbol=_fragile_parse, default_keywords=("def",))


class RenderScenarioTests(unittest.TestCase):
    def test_symbols_are_listed_with_their_source_lines(self) -> None:
        rendered = render_outline(["func a() {}", "  let x = 1", "}"], "swift")
        self.assertEqual(len(rendered.entries), 2)
        self.assertEqual(tuple(rendered.mapping), (1, 2))
        self.assertEqual([entry.display_text for entry in rendered.entries], ["func a", "let x"])

    def test_excluded_keyword_is_skipped(self) -> None:
        cfg = config_from_mapping({"symbols": {"swift": {"exclude": ["let"]}}})
        rendered = render_outline(["func a() {}", "  let x = 1", "}"], "swift", cfg)
        self.assertEqual(tuple(rendered.mapping), (1,))

    def test_empty_buffer_renders_nothing(self) -> None:
        rendered = render_outline([], "swift")
        self.assertEqual(rendered.entries, ())
        self.assertEqual(len(rendered.mapping), 0)
        self.assertEqual(nearest_outline_index(rendered.mapping, 10), NO_SELECTION)

    def test_unsupported_language_renders_nothing(self) -> None:
        rendered = render_outline(["fn main() {}"], "rust")
        self.assertEqual(rendered.entries, ())
        self.assertEqual(len(rendered), 0)


class RenderEntryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.rendered = render_outline(SWIFT_SOURCE, "swift")
        self.by_line = {entry.source_line: entry for entry in self.rendered.entries}

    def test_mapping_lists_only_recognized_lines(self) -> None:
        self.assertEqual(tuple(self.rendered.mapping), (3, 4, 5, 6, 7, 8, 11, 12))

    def test_marker_entry_content(self) -> None:
        entry = self.by_line[3]
        self.assertEqual(entry.kind, MARKER)
        self.assertEqual(entry.marker, "MARK")
        self.assertEqual(entry.content, "⚑ MARK: Models")

    def test_marker_wins_over_commented_symbol(self) -> None:
        entry = self.by_line[11]
        self.assertEqual(entry.kind, MARKER)
        self.assertEqual(entry.content, "⚑ TODO: func cleanup()")

    def test_commented_out_declaration_keeps_both_icons(self) -> None:
        entry = self.by_line[6]
        self.assertEqual(entry.kind, COMMENTED_SYMBOL)
        self.assertEqual(entry.content, f"{COMMENT_ICON} {icon_for_type('function')} func legacy")

    def test_plain_comment_entry(self) -> None:
        entry = self.by_line[12]
        self.assertEqual(entry.kind, COMMENT)
        self.assertEqual(entry.content, f"{COMMENT_ICON} plain note")

    def test_symbol_entries_use_capture_icons(self) -> None:
        self.assertEqual(self.by_line[4].kind, SYMBOL)
        self.assertEqual(self.by_line[4].content, f"{icon_for_type('class')} struct User")
        self.assertEqual(self.by_line[5].content, f"{icon_for_type('variable')} let id")
        self.assertEqual(self.by_line[8].display_text, 'return "hi"')

    def test_commented_symbol_respects_keyword_filter(self) -> None:
        cfg = config_from_mapping({"symbols": {"swift": {"exclude": ["func"]}}})
        rendered = render_outline(SWIFT_SOURCE, "swift", cfg)
        by_line = {entry.source_line: entry for entry in rendered.entries}
        self.assertEqual(by_line[6].kind, COMMENT)
        self.assertNotIn(7, by_line)
        self.assertEqual(by_line[11].kind, MARKER)

    def test_render_is_idempotent(self) -> None:
        self.assertEqual(render_outline(SWIFT_SOURCE, "swift"), self.rendered)

    def test_mapping_is_strictly_increasing_and_in_range(self) -> None:
        lines = list(self.rendered.mapping)
        self.assertEqual(len(lines), len(self.rendered.entries))
        self.assertTrue(all(a < b for a, b in zip(lines, lines[1:])))
        self.assertTrue(all(1 <= line <= len(SWIFT_SOURCE) for line in lines))


class RenderRobustnessTests(unittest.TestCase):
    def test_provider_error_skips_only_that_line(self) -> None:
        lines = ["def a", "boom", "def b"]
        with self.assertLogs("outlinemap.render", level="DEBUG") as captured:
            rendered = render_outline(lines, "fragile", provider=FRAGILE)
        self.assertEqual(tuple(rendered.mapping), (1, 3))
        self.assertIn("line 2", "\n".join(captured.output))

    def test_long_display_text_is_truncated_with_ellipsis(self) -> None:
        cfg = config_from_mapping({"render": {"max_line_length": 12}})
        rendered = render_outline(["func averyveryverylongname() {}"], "swift", cfg)
        self.assertEqual(rendered.entries[0].display_text, "func aver...")

    def test_compact_display_collapses_whitespace(self) -> None:
        self.assertEqual(compact_display("a   b\t c", 40), "a b c")
        self.assertEqual(compact_display("abcdef", 5), "ab...")

    def test_compact_display_never_exceeds_tiny_limits(self) -> None:
        self.assertEqual(compact_display("abcdef", 2), "ab")
        self.assertEqual(compact_display("abcdef", 3), "abc")
        self.assertEqual(compact_display("ab", 2), "ab")

    def test_marker_and_comment_text_are_truncated(self) -> None:
        cfg = config_from_mapping({"render": {"max_line_length": 12}})
        lines = ["// TODO: implement the whole thing", "// a fairly long plain comment here"]
        marker, comment = render_outline(lines, "swift", cfg).entries
        self.assertEqual((marker.kind, marker.display_text), (MARKER, "implement..."))
        self.assertEqual(marker.content, "⚑ TODO: implement...")
        self.assertEqual((comment.kind, comment.display_text), (COMMENT, "a fairly ..."))
        self.assertEqual(comment.content, f"{COMMENT_ICON} a fairly ...")

    def test_render_line_skips_blank_lines(self) -> None:
        self.assertIsNone(render_line("   ", 1, ["   "], FRAGILE, {"def"}))


class ComposeRowsTests(unittest.TestCase):
    def test_rows_are_prefix_plus_cached_content(self) -> None:
        rendered = render_outline(["func a() {}", "", "", "", "let b = 1"], "swift")
        settings = build_prefix_settings()
        rows = compose_rows(rendered.entries, 5, settings)
        self.assertEqual(rows[0], "004 ↑ " + rendered.entries[0].content)
        self.assertEqual(rows[1], "000 · " + rendered.entries[1].content)

    def test_prefix_directions_relative_to_anchor(self) -> None:
        lines = [""] * 10
        lines[1] = "func up() {}"
        lines[4] = "func here() {}"
        lines[8] = "func down() {}"
        rendered = render_outline(lines, "swift")
        rows = compose_rows(rendered.entries, 5, build_prefix_settings())
        self.assertTrue(rows[0].startswith("003 ↑ "))
        self.assertTrue(rows[1].startswith("000 · "))
        self.assertTrue(rows[2].startswith("004 ↓ "))


if __name__ == "__main__":
    unittest.main()
