from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from sharpie import config
from sharpie.icons import DEFAULT_ICON_SET


class ConfigFromMappingTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = config.config_from_mapping({})

        self.assertEqual(settings.fuzzy_finder, "telescope")
        self.assertTrue(settings.auto_reload)
        self.assertEqual(settings.debounce_seconds, 0.5)
        self.assertFalse(settings.namespace_mode)
        self.assertEqual(settings.path_depth, 2)
        self.assertEqual(settings.separator_style, "line")
        self.assertIsNone(settings.language_force)
        self.assertEqual(settings.icon_set, DEFAULT_ICON_SET)
        self.assertEqual(
            settings.features_for("csharp"),
            {"show_async_indicators": True, "show_access_modifiers": True, "show_task_types": True},
        )
        self.assertTrue(all(settings.features_for("go").values()))
        self.assertEqual(settings.features_for("rust"), {})

    def test_nested_values_merge_over_defaults(self) -> None:
        settings = config.config_from_mapping(
            {
                "fuzzy_finder": "fzf",
                "display": {"auto_reload_debounce": 250},
                "symbol_options": {"path": 0, "namespace": True, "namespace_mode_separator_style": "bold"},
                "language": {"force": "go", "go": {"show_error_returns": False}},
                "logging": {"level": "DEBUG", "format": "json", "file": "/tmp/sharpie.log"},
            }
        )

        self.assertEqual(settings.fuzzy_finder, "fzf")
        self.assertTrue(settings.auto_reload)
        self.assertEqual(settings.debounce_seconds, 0.25)
        self.assertEqual(settings.path_depth, 0)
        self.assertTrue(settings.namespace_mode)
        self.assertEqual(settings.separator_style, "bold")
        self.assertEqual(settings.language_force, "go")
        self.assertFalse(settings.features_for("go")["show_error_returns"])
        self.assertTrue(settings.features_for("go")["show_receiver_types"])
        self.assertEqual((settings.log_level, settings.log_format), ("DEBUG", "json"))
        self.assertEqual(settings.log_file, "/tmp/sharpie.log")

    def test_bad_values_fall_back_to_defaults(self) -> None:
        settings = config.config_from_mapping(
            {
                "fuzzy_finder": "vim",
                "display": {"auto_reload": "yes", "auto_reload_debounce": "soon"},
                "symbol_options": {"path": -3, "namespace_mode_separator_style": "zigzag"},
                "language": {"csharp": {"show_task_types": 0}},
                "logging": {"max_file_size": 0, "format": "xml"},
            }
        )

        self.assertEqual(settings.fuzzy_finder, "telescope")
        self.assertTrue(settings.auto_reload)
        self.assertEqual(settings.auto_reload_debounce_ms, 500)
        self.assertEqual(settings.path_depth, 0)
        self.assertEqual(settings.separator_style, "line")
        self.assertTrue(settings.features_for("csharp")["show_task_types"])
        self.assertEqual(settings.log_max_bytes, 1)
        self.assertEqual(settings.log_format, "default")

    def test_icon_overrides_and_legacy_keys(self) -> None:
        settings = config.config_from_mapping(
            {"style": {"icon_set": {"class": "K", "go_slice": "S", "broken": 5}}}
        )

        self.assertEqual(settings.icon_set["class"], "K")
        self.assertEqual(settings.icon_set["slice"], "S")
        self.assertNotIn("go_slice", settings.icon_set)
        self.assertNotIn("broken", settings.icon_set)
        self.assertEqual(settings.icon_set["method"], DEFAULT_ICON_SET["method"])

    def test_log_path_defaults_to_user_log_dir(self) -> None:
        settings = config.config_from_mapping({"logging": {"console_output": True}})

        self.assertTrue(settings.log_console)
        self.assertEqual(settings.log_path, config.DEFAULT_LOG_PATH)
        self.assertEqual(
            config.config_from_mapping({"logging": {"file": "/tmp/s.log"}}).log_path,
            Path("/tmp/s.log"),
        )

    def test_defaults_are_not_mutated(self) -> None:
        config.config_from_mapping({"display": {"auto_reload_debounce": 10}})
        self.assertEqual(config.DEFAULTS["display"]["auto_reload_debounce"], 500)


class ConfigFileTests(unittest.TestCase):
    def test_missing_file_loads_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(config.load_config(Path(tmp) / "missing.json"), {})

    def test_malformed_or_non_object_json_loads_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            broken = Path(tmp) / "broken.json"
            broken.write_text("{not json", encoding="utf-8")
            listing = Path(tmp) / "list.json"
            listing.write_text("[1, 2]", encoding="utf-8")

            self.assertEqual(config.load_config(broken), {})
            self.assertEqual(config.load_config(listing), {})

    def test_save_then_load_uses_default_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("sharpie.config.CONFIG_PATH", config_path):
                config.save_config({"symbol_options": {"path": 3}})

                self.assertEqual(json.loads(config_path.read_text(encoding="utf-8")), {"symbol_options": {"path": 3}})
                self.assertEqual(config.load_sharpie_config().path_depth, 3)

    def test_unserializable_data_is_not_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with self.assertLogs("sharpie.config", level="WARNING"):
                config.save_config({"bad": object()}, config_path)
            self.assertFalse(config_path.exists())


if __name__ == "__main__":
    unittest.main()
