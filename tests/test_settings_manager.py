"""
Test suite for the settings store.

Tests cover:
- Defaults and plain string values
- JSON object values and decode failures
- Listener registration, removal and isolation
- External changes restricted to known keys
- Optional file persistence
"""

import json
import os
import tempfile
import unittest

from receipt_engine import SETTINGS_KEYS, SettingsManager


class TestSettingValues(unittest.TestCase):
    """Test reading and writing settings."""

    def setUp(self):
        self.settings = SettingsManager()

    def test_defaults(self):
        self.assertEqual(self.settings.get_setting(SETTINGS_KEYS["THEME"]), "light")
        self.assertEqual(self.settings.get_setting(SETTINGS_KEYS["CURRENCY"]), "₹")
        self.assertIsNone(self.settings.get_setting("unknownKey"))
        self.assertEqual(self.settings.get_setting("unknownKey", "fallback"), "fallback")

    def test_set_and_get(self):
        self.settings.set_setting(SETTINGS_KEYS["THEME"], "dark")
        self.assertEqual(self.settings.get_setting(SETTINGS_KEYS["THEME"]), "dark")
        self.assertEqual(self.settings.all_settings()["appTheme"], "dark")

    def test_object_round_trip(self):
        user = {"name": "Asha", "email": "asha@example.com"}
        self.settings.set_setting_object(SETTINGS_KEYS["USER"], user)
        self.assertEqual(self.settings.get_setting_object(SETTINGS_KEYS["USER"]), user)

    def test_object_missing_or_corrupt(self):
        self.assertEqual(self.settings.get_setting_object(SETTINGS_KEYS["USER"]), {})
        self.settings.set_setting(SETTINGS_KEYS["USER"], "{not json")
        with self.assertLogs("receipt_engine.settings.settings_manager", level="ERROR"):
            value = self.settings.get_setting_object(SETTINGS_KEYS["USER"], {"name": None})
        self.assertEqual(value, {"name": None})


class TestSettingListeners(unittest.TestCase):
    """Test change notification."""

    def setUp(self):
        self.settings = SettingsManager()
        self.events = []

    def _record(self, key, value):
        self.events.append((key, value))

    def test_listener_receives_writes(self):
        self.settings.on_setting_change(self._record)
        self.settings.set_setting("appTheme", "dark")
        self.settings.set_setting_object("currentUser", {"name": "Ravi"})
        self.assertEqual(self.events, [
            ("appTheme", "dark"),
            ("currentUser", {"name": "Ravi"}),
        ])

    def test_removed_listener_is_not_called(self):
        self.settings.on_setting_change(self._record)
        self.settings.off_setting_change(self._record)
        self.settings.set_setting("appTheme", "dark")
        self.assertEqual(self.events, [])

    def test_removing_one_listener_keeps_others(self):
        other_events = []
        self.settings.on_setting_change(self._record)
        self.settings.on_setting_change(lambda key, value: other_events.append(key))
        self.settings.off_setting_change(self._record)
        self.settings.set_setting("appTheme", "dark")
        self.assertEqual(self.events, [])
        self.assertEqual(other_events, ["appTheme"])

    def test_failing_listener_does_not_block_others(self):
        def broken(key, value):
            raise RuntimeError("listener failed")

        self.settings.on_setting_change(broken)
        self.settings.on_setting_change(self._record)
        with self.assertLogs("receipt_engine.settings.settings_manager", level="ERROR"):
            self.settings.set_setting("appTheme", "dark")
        self.assertEqual(self.events, [("appTheme", "dark")])

    def test_external_change_for_known_key(self):
        self.settings.on_setting_change(self._record)
        applied = self.settings.apply_external_change("currencySymbol", "$")
        self.assertTrue(applied)
        self.assertEqual(self.settings.get_setting("currencySymbol"), "$")
        self.assertEqual(self.events, [("currencySymbol", "$")])

    def test_external_change_for_unknown_key_is_ignored(self):
        self.settings.on_setting_change(self._record)
        self.assertFalse(self.settings.apply_external_change("somethingElse", "x"))
        self.assertFalse(self.settings.apply_external_change(None, "x"))
        self.assertEqual(self.events, [])

    def test_external_removal_restores_default(self):
        self.settings.set_setting("appTheme", "dark")
        self.settings.on_setting_change(self._record)
        self.assertTrue(self.settings.apply_external_change("appTheme", None))
        self.assertEqual(self.settings.get_setting("appTheme"), "light")
        self.assertEqual(self.events, [("appTheme", None)])


class TestSettingsPersistence(unittest.TestCase):
    """Test the optional JSON file backing."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "settings.json")

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_values_survive_reload(self):
        SettingsManager(self.path).set_setting("appLanguage", "hi")
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"appLanguage": "hi"})
        self.assertEqual(SettingsManager(self.path).get_setting("appLanguage"), "hi")

    def test_failed_write_keeps_value_and_notifies(self):
        path = os.path.join(self.tmpdir.name, "missing_dir", "settings.json")
        settings = SettingsManager(path)
        events = []
        settings.on_setting_change(lambda key, value: events.append((key, value)))
        with self.assertLogs("receipt_engine.settings.settings_manager", level="ERROR"):
            settings.set_setting("appTheme", "dark")
        self.assertEqual(settings.get_setting("appTheme"), "dark")
        self.assertEqual(events, [("appTheme", "dark")])
        self.assertFalse(os.path.exists(path))

    def test_corrupt_file_starts_empty(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("not json")
        with self.assertLogs("receipt_engine.settings.settings_manager", level="ERROR"):
            settings = SettingsManager(self.path)
        self.assertEqual(settings.get_setting("appLanguage"), "en")


if __name__ == '__main__':
    unittest.main()
