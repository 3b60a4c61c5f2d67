"""
Tests for YAML configuration loading.
"""

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import settings
from settings import DEFAULT_CONFIG, Settings, SettingsError, load_config, load_settings
from test_utils import TempDirTestCase


class TestLoadConfig(TempDirTestCase):
    def setUp(self):
        super().setUp()
        # Keep the developer's own config files out of the tests
        patcher = patch.object(settings, "candidate_config_paths", return_value=[])
        patcher.start()
        self.addCleanup(patcher.stop)

    def _write(self, name: str, text: str) -> str:
        path = self.root / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_defaults_when_nothing_configured(self):
        config = load_config(environ={})

        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertIsNot(config["general"], DEFAULT_CONFIG["general"])

    def test_user_file_is_deep_merged(self):
        path = self._write("cfg.yml", "archive:\n  compression_level: 3\n")

        config = load_config(path, environ={})

        self.assertEqual(config["archive"]["compression_level"], 3)
        self.assertTrue(config["archive"]["verify"])
        self.assertEqual(config["general"]["default_folder_name"], "shared-folder")

    def test_env_overrides_win(self):
        path = self._write("cfg.yml", "archive:\n  compression_level: 3\n")
        environ = {
            "STASH_ARCHIVE_COMPRESSION_LEVEL": "5",
            "STASH_PIPELINE_KEEP_ORIGINALS_ON_ARCHIVE_FAILURE": "yes",
            "STASH_GENERAL_DEFAULT_FOLDER_NAME": "bundle",
            "UNRELATED": "1",
        }

        config = load_config(path, environ=environ)

        self.assertEqual(config["archive"]["compression_level"], 5)
        self.assertIs(config["pipeline"]["keep_originals_on_archive_failure"], True)
        self.assertEqual(config["general"]["default_folder_name"], "bundle")

    def test_explicit_missing_file_raises(self):
        with self.assertRaises(SettingsError):
            load_config(str(self.root / "absent.yml"), environ={})

    def test_explicit_invalid_yaml_raises(self):
        path = self._write("bad.yml", "archive: [unclosed\n")

        with self.assertRaises(SettingsError):
            load_config(path, environ={})

    def test_non_mapping_top_level_raises(self):
        path = self._write("list.yml", "- a\n- b\n")

        with self.assertRaises(SettingsError):
            load_config(path, environ={})

    def test_discovered_invalid_file_falls_back_to_defaults(self):
        path = Path(self._write("stash-zip.yml", "general: [oops\n"))

        with patch.object(settings, "candidate_config_paths", return_value=[path]):
            config = load_config(environ={})

        self.assertEqual(config, DEFAULT_CONFIG)

    def test_discovered_file_is_used(self):
        path = Path(self._write("stash-zip.yml", "general:\n  color: false\n"))

        with patch.object(settings, "candidate_config_paths", return_value=[path]):
            config = load_config(environ={})

        self.assertFalse(config["general"]["color"])


class TestSettings(TempDirTestCase):
    def test_default_attributes(self):
        s = Settings()

        self.assertEqual(s.default_folder_name, "shared-folder")
        self.assertEqual(s.compression_level, 9)
        self.assertTrue(s.verify_archive)
        self.assertFalse(s.keep_originals_on_archive_failure)
        self.assertTrue(s.confirm_before_delete)
        self.assertEqual(s.log_level, "INFO")

    def test_out_of_range_level_rejected(self):
        with self.assertRaises(SettingsError):
            Settings({"archive": {"compression_level": 11}})

    def test_load_settings_wraps_bad_values(self):
        path = self.root / "cfg.yml"
        path.write_text("archive:\n  compression_level: lots\n", encoding="utf-8")

        with self.assertRaises(SettingsError):
            load_settings(str(path), environ={})

    def test_string_booleans_are_understood(self):
        s = Settings({"archive": {"verify": "off"}, "general": {"color": "no"}})

        self.assertFalse(s.verify_archive)
        self.assertFalse(s.color)


if __name__ == "__main__":
    unittest.main()
