from __future__ import annotations

import unittest

from outlinemap.config import config_from_mapping
from outlinemap.keywords import resolve_enabled, resolve_highlight_keywords

SWIFT_DEFAULTS = ("func", "class", "struct", "let", "var")


class KeywordFilterTests(unittest.TestCase):
    def test_defaults_when_language_has_no_options(self) -> None:
        self.assertEqual(resolve_enabled(config_from_mapping({}), "swift", SWIFT_DEFAULTS), frozenset(SWIFT_DEFAULTS))

    def test_allowlist_replaces_defaults(self) -> None:
        cfg = config_from_mapping({"symbols": {"swift": {"keywords": ["func", "struct"]}}})
        self.assertEqual(resolve_enabled(cfg, "swift", SWIFT_DEFAULTS), frozenset({"func", "struct"}))

    def test_allowlist_aliases_are_accepted(self) -> None:
        for key in ("visible_keywords", "include"):
            cfg = {"symbols": {"swift": {key: ["class"]}}}
            self.assertEqual(resolve_enabled(cfg, "swift", SWIFT_DEFAULTS), frozenset({"class"}), key)

    def test_exclude_wins_over_allowlist(self) -> None:
        cfg = config_from_mapping({"symbols": {"swift": {"keywords": ["func", "let"], "exclude": ["let"]}}})
        self.assertEqual(resolve_enabled(cfg, "swift", SWIFT_DEFAULTS), frozenset({"func"}))

    def test_exclude_applies_to_defaults(self) -> None:
        cfg = config_from_mapping({"symbols": {"swift": {"exclude": ["let", "var"]}}})
        self.assertEqual(resolve_enabled(cfg, "swift", SWIFT_DEFAULTS), frozenset({"func", "class", "struct"}))

    def test_wrong_typed_options_fall_back_to_defaults(self) -> None:
        cfg = {"symbols": {"swift": {"keywords": "func", "exclude": 7}}}
        self.assertEqual(resolve_enabled(cfg, "swift", SWIFT_DEFAULTS), frozenset(SWIFT_DEFAULTS))
        self.assertEqual(resolve_enabled({"symbols": "x"}, "swift", SWIFT_DEFAULTS), frozenset(SWIFT_DEFAULTS))
        self.assertEqual(resolve_enabled(None, "swift", SWIFT_DEFAULTS), frozenset(SWIFT_DEFAULTS))

    def test_empty_allowlist_means_defaults(self) -> None:
        cfg = {"symbols": {"swift": {"keywords": []}}}
        self.assertEqual(resolve_enabled(cfg, "swift", SWIFT_DEFAULTS), frozenset(SWIFT_DEFAULTS))

    def test_highlight_keywords_explicit_list(self) -> None:
        cfg = {"symbols": {"swift": {"highlight_keywords": ["func"], "keywords": ["class"]}}}
        self.assertEqual(resolve_highlight_keywords(cfg, "swift", SWIFT_DEFAULTS), ("func",))

    def test_highlight_keywords_follow_visible_base_list(self) -> None:
        cfg = {"symbols": {"swift": {"keywords": ["class", "func"]}}}
        self.assertEqual(resolve_highlight_keywords(cfg, "swift", SWIFT_DEFAULTS), ("class", "func"))
        self.assertEqual(resolve_highlight_keywords({}, "swift", SWIFT_DEFAULTS), SWIFT_DEFAULTS)


if __name__ == "__main__":
    unittest.main()
