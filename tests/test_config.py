from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from outlinemap import config


class ConfigBehaviorTests(unittest.TestCase):
    def test_missing_config_file_loads_as_empty_mapping(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(config.load_config(Path(tmp) / "missing.json"), {})

    def test_malformed_config_file_is_ignored_with_warning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertLogs("outlinemap.config", level="WARNING"):
                self.assertEqual(config.load_config(path), {})

    def test_non_object_json_loads_as_empty_mapping(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("[1, 2, 3]", encoding="utf-8")
            self.assertEqual(config.load_config(path), {})

    def test_load_config_defaults_to_module_config_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"width": 30}), encoding="utf-8")
            with mock.patch("outlinemap.config.CONFIG_PATH", path):
                self.assertEqual(config.load_config(), {"width": 30})

    def test_defaults_match_documented_values(self) -> None:
        cfg = config.config_from_mapping({})
        self.assertEqual(cfg.width, 40)
        self.assertEqual(cfg.side, "right")
        self.assertEqual(cfg.style, "monokai")
        self.assertEqual(cfg.render.throttle_ms, 100)
        self.assertEqual(cfg.render.max_line_length, 40)
        self.assertEqual(cfg.render.relative_prefix.number_width, 3)
        self.assertEqual(cfg.render.relative_prefix.up, "↑")
        self.assertEqual(cfg.render.relative_prefix.down, "↓")
        self.assertEqual(cfg.render.relative_prefix.current, "·")
        self.assertTrue(cfg.navigation.pin_anchor)
        self.assertTrue(cfg.navigation.follow_cursor)
        self.assertTrue(cfg.navigation.auto_center)
        self.assertIn("swift", cfg.treesitter.languages)

    def test_wrong_typed_fields_fall_back_to_defaults(self) -> None:
        cfg = config.config_from_mapping(
            {
                "width": "wide",
                "side": "top",
                "auto_open": "yes",
                "style": 3,
                "filetypes": "swift",
                "render": {
                    "max_line_length": 0,
                    "throttle_ms": True,
                    "relative_prefix": {"number_width": -2, "number_fill": "00", "direction": {"up": 5}},
                },
                "navigation": {"pin_anchor": 1},
                "treesitter": "off",
                "symbols": ["swift"],
            }
        )
        defaults = config.OutlineConfig()
        self.assertEqual(cfg.width, defaults.width)
        self.assertEqual(cfg.side, defaults.side)
        self.assertFalse(cfg.auto_open)
        self.assertEqual(cfg.style, defaults.style)
        self.assertEqual(cfg.filetypes, defaults.filetypes)
        self.assertEqual(cfg.render, defaults.render)
        self.assertTrue(cfg.navigation.pin_anchor)
        self.assertEqual(cfg.treesitter, defaults.treesitter)
        self.assertEqual(cfg.symbols, {})

    def test_non_mapping_input_yields_defaults(self) -> None:
        self.assertEqual(config.config_from_mapping(None), config.OutlineConfig())
        self.assertEqual(config.config_from_mapping("width=3"), config.OutlineConfig())

    def test_valid_fields_are_applied(self) -> None:
        cfg = config.config_from_mapping(
            {
                "width": 28,
                "side": "left",
                "render": {"throttle_ms": 0, "relative_prefix": {"number_fill": " ", "direction": {"current": "="}}},
                "navigation": {"auto_center": False},
            }
        )
        self.assertEqual(cfg.width, 28)
        self.assertEqual(cfg.side, "left")
        self.assertEqual(cfg.render.throttle_ms, 0)
        self.assertEqual(cfg.render.relative_prefix.number_fill, " ")
        self.assertEqual(cfg.render.relative_prefix.current, "=")
        self.assertFalse(cfg.navigation.auto_center)

    def test_merge_config_deep_merges_nested_sections(self) -> None:
        base = {"render": {"throttle_ms": 50, "max_line_length": 30}, "width": 20}
        merged = config.merge_config(base, {"render": {"throttle_ms": 10}})
        self.assertEqual(merged, {"render": {"throttle_ms": 10, "max_line_length": 30}, "width": 20})
        self.assertEqual(base["render"], {"throttle_ms": 50, "max_line_length": 30})

    def test_merge_config_ignores_non_mapping_overrides(self) -> None:
        self.assertEqual(config.merge_config({"width": 20}, None), {"width": 20})

    def test_load_outline_config_applies_overrides_over_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"width": 30, "style": "default"}), encoding="utf-8")
            cfg = config.load_outline_config(path, {"width": 50})
        self.assertEqual(cfg.width, 50)
        self.assertEqual(cfg.style, "default")

    def test_exclude_filetypes_win_over_filetypes(self) -> None:
        cfg = config.config_from_mapping({"filetypes": ["swift", "lua"], "exclude_filetypes": ["lua"]})
        self.assertTrue(config.is_language_supported(cfg, "swift"))
        self.assertFalse(config.is_language_supported(cfg, "lua"))
        self.assertFalse(config.is_language_supported(cfg, "python"))
        self.assertFalse(config.is_language_supported(cfg, ""))

    def test_treesitter_toggle_and_language_list(self) -> None:
        cfg = config.config_from_mapping({"treesitter": {"languages": ["swift"]}})
        self.assertTrue(config.is_treesitter_enabled(cfg, "swift"))
        self.assertFalse(config.is_treesitter_enabled(cfg, "lua"))
        disabled = config.config_from_mapping({"treesitter": {"enable": False}})
        self.assertFalse(config.is_treesitter_enabled(disabled, "swift"))


if __name__ == "__main__":
    unittest.main()
