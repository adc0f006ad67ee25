from __future__ import annotations

import unittest

from outlinemap.config import config_from_mapping
from outlinemap.languages import markdown
from outlinemap.render import render_outline

DOCUMENT = (
    "# Title",
    "",
    "Intro with [docs](https://x.io/guide.md).",
    "",
    "Setext Heading",
    "==============",
    "",
    "```python",
    "# not a heading",
    "```",
    "![](images/logo.png)",
    "<details>",
    "## Sub ##",
    "[ref link][r1]",
)


class MarkdownOutlineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.rendered = render_outline(DOCUMENT, "markdown")
        self.by_line = {entry.source_line: entry for entry in self.rendered.entries}

    def test_table_of_contents_lines(self) -> None:
        self.assertEqual(tuple(self.rendered.mapping), (1, 3, 5, 8, 11, 12, 13, 14))

    def test_headings_use_level_icons_and_bare_titles(self) -> None:
        self.assertEqual(self.by_line[1].content, markdown.HEADING_ICONS[1] + " Title")
        self.assertEqual(self.by_line[5].symbol.keyword, "H1")
        self.assertEqual(self.by_line[5].display_text, "Setext Heading")
        self.assertEqual(self.by_line[13].symbol.keyword, "H2")
        self.assertEqual(self.by_line[13].display_text, "Sub")

    def test_code_fences_and_their_contents(self) -> None:
        self.assertEqual(self.by_line[8].display_text, "code python")
        self.assertNotIn(9, self.by_line)
        self.assertNotIn(10, self.by_line)

    def test_images_links_and_html(self) -> None:
        self.assertEqual(self.by_line[11].content, markdown.IMAGE_ICON + " logo.png")
        self.assertEqual(self.by_line[3].display_text, "docs")
        self.assertEqual(self.by_line[14].display_text, "ref link")
        self.assertEqual(self.by_line[12].display_text, "<details>")

    def test_keyword_filter_applies_to_markdown_kinds(self) -> None:
        cfg = config_from_mapping({"symbols": {"markdown": {"keywords": ["H1", "H2"]}}})
        rendered = render_outline(DOCUMENT, "markdown", cfg)
        self.assertEqual(tuple(rendered.mapping), (1, 5, 13))


class MarkdownHelperTests(unittest.TestCase):
    def test_fence_scan_is_cached_per_snapshot(self) -> None:
        first = markdown.fence_info(DOCUMENT)
        self.assertIs(markdown.fence_info(DOCUMENT), first)
        self.assertIn(9, first.inside)
        self.assertTrue(first.fences[8].opening)
        self.assertFalse(first.fences[10].opening)

    def test_longer_closing_fence_closes_block(self) -> None:
        lines = ("~~~", "text", "~~~~", "# After")
        info = markdown.fence_info(lines)
        self.assertNotIn(4, info.inside)
        self.assertEqual(markdown.parse_symbol("# After", 4, lines).display, "After")

    def test_blockquoted_heading(self) -> None:
        self.assertEqual(markdown.parse_symbol("> ### Quoted").display, "Quoted")

    def test_image_is_not_reported_as_link(self) -> None:
        symbol = markdown.parse_symbol("![alt text](pic.png)")
        self.assertEqual((symbol.keyword, symbol.display), ("image", "alt text"))

    def test_closing_and_comment_html_tags_are_skipped(self) -> None:
        self.assertIsNone(markdown.parse_symbol("</details>"))
        self.assertIsNone(markdown.parse_symbol("<!-- note -->"))

    def test_markdown_has_no_comment_support(self) -> None:
        self.assertIsNone(markdown.PROVIDER.is_comment_line)
        self.assertIsNone(markdown.PROVIDER.render_comment)


if __name__ == "__main__":
    unittest.main()
