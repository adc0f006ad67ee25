from __future__ import annotations

import unittest

from outlinemap.languages import swift
from outlinemap.types import SymbolInfo


class SwiftParseSymbolTests(unittest.TestCase):
    def assertSymbol(self, line: str, keyword: str, capture: str, display: str) -> None:
        self.assertEqual(swift.parse_symbol(line), SymbolInfo(keyword=keyword, capture_type=capture, display=display))

    def test_functions_and_initializers(self) -> None:
        self.assertSymbol("func load(id: Int) async throws -> User {", "func", "function", "func load")
        self.assertSymbol("func map<T>(_ f: (Int) -> T) -> [T]", "func", "function", "func map")
        self.assertSymbol("init(name: String) {", "init", "function", "init")
        self.assertSymbol("init?(rawValue: String) {", "init", "function", "init?")
        self.assertSymbol("deinit {", "deinit", "function", "deinit")
        self.assertSymbol("subscript(index: Int) -> Int {", "subscript", "function", "subscript")

    def test_type_declarations(self) -> None:
        self.assertSymbol("struct Point: Equatable {", "struct", "class", "struct Point")
        self.assertSymbol("enum Direction {", "enum", "class", "enum Direction")
        self.assertSymbol("protocol Drawable {", "protocol", "class", "protocol Drawable")
        self.assertSymbol("extension Array where Element: Equatable {", "extension", "class", "extension Array")
        self.assertSymbol("typealias Handler = () -> Void", "typealias", "class", "typealias Handler")
        self.assertSymbol("actor Cache {", "actor", "class", "actor Cache")

    def test_attributes_and_modifiers_are_stripped(self) -> None:
        self.assertSymbol("@MainActor public final class ViewModel {", "class", "class", "class ViewModel")
        self.assertSymbol('@available(iOS 15, *) func modern() {}', "func", "function", "func modern")
        self.assertSymbol("private(set) var count = 0", "var", "variable", "var count")
        self.assertSymbol("override class func setUp() {", "func", "function", "func setUp")
        self.assertSymbol("static let shared = Cache()", "let", "variable", "let shared")

    def test_returns_drop_trailing_semicolons(self) -> None:
        self.assertSymbol("return value;", "return", "function", "return value")
        self.assertSymbol("return", "return", "function", "return")

    def test_non_declarations(self) -> None:
        for line in ("import UIKit", "print(x)", "returned = true", "}", ""):
            self.assertIsNone(swift.parse_symbol(line), line)


class SwiftCommentTests(unittest.TestCase):
    def test_comment_line_detection(self) -> None:
        for line in ("// note", "/* block", "* continued", "/// doc"):
            self.assertTrue(swift.is_comment_line(line), line)
        self.assertFalse(swift.is_comment_line("let x = 1"))

    def test_extract_marker_and_doc_flags(self) -> None:
        mark = swift.extract_comment("// MARK: - Networking")
        self.assertEqual((mark.marker, mark.text), ("MARK", "Networking"))
        doc = swift.extract_comment("/// Loads the user.")
        self.assertTrue(doc.is_doc_comment)
        self.assertEqual(doc.text, "Loads the user.")
        fixme = swift.extract_comment("/* FIXME: leaks */")
        self.assertEqual((fixme.marker, fixme.text), ("FIXME", "leaks"))

    def test_long_comment_text_is_shortened_but_raw_text_kept(self) -> None:
        text = "x" * 50
        extracted = swift.extract_comment("// " + text)
        self.assertEqual(extracted.text, "x" * 32 + "...")
        self.assertEqual(extracted.raw_text, text)

    def test_block_closer_has_no_text(self) -> None:
        self.assertIsNone(swift.extract_comment("*/").text)
        self.assertIsNone(swift.render_comment("*/", 5, ["a"] * 10))

    def test_file_header_comments_are_suppressed_but_markers_kept(self) -> None:
        lines = ["// Copyright", "// Licensed", "// TODO: relicense", "", "import Foundation", "// later"]
        self.assertIsNone(swift.render_comment(lines[0], 1, lines))
        marker = swift.render_comment(lines[2], 3, lines)
        self.assertEqual((marker.kind, marker.marker), ("marker", "TODO"))
        later = swift.render_comment(lines[5], 6, lines)
        self.assertEqual((later.kind, later.text), ("comment", "later"))


if __name__ == "__main__":
    unittest.main()
