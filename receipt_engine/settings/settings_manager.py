"""
Settings store with change notification.

Replaces ambient client-side preference globals with an explicit key-value
store. Every write, including writes made in another context and applied
through apply_external_change, is announced to registered listeners.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..config.engine_config import SETTINGS_DEFAULTS, SETTINGS_KEYS

logger = logging.getLogger(__name__)

SettingListener = Callable[[str, Any], None]


class SettingsManager:
    """Key-value settings store with change listeners."""

    def __init__(self, path: Optional[str] = None, defaults: Optional[Dict[str, str]] = None):
        """
        Initialize the store.

        Args:
            path: Optional JSON file to persist settings to. In-memory if omitted.
            defaults: Values returned for keys that were never written
        """
        self.path = Path(path) if path else None
        self.defaults = dict(SETTINGS_DEFAULTS if defaults is None else defaults)
        self.listeners: List[SettingListener] = []
        self._values: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load settings from %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.error("Settings file %s does not hold an object", self.path)
            return {}
        return data

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._values, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error("Failed to save settings to %s: %s", self.path, e)

    def get_setting(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a setting value, falling back to the given or configured default."""
        if key in self._values:
            return self._values[key]
        return default if default is not None else self.defaults.get(key)

    def set_setting(self, key: str, value: str) -> None:
        """Set a setting value and notify all listeners."""
        self._values[key] = value
        self._save()
        self.notify_listeners(key, value)

    def get_setting_object(self, key: str, default: Optional[Any] = None) -> Any:
        """Get a JSON-encoded setting, returning the default if it cannot be decoded."""
        if default is None:
            default = {}
        value = self._values.get(key)
        if not value:
            return default
        try:
            return json.loads(value)
        except (TypeError, json.JSONDecodeError) as e:
            logger.error("Error decoding setting %s: %s", key, e)
            return default

    def set_setting_object(self, key: str, obj: Any) -> None:
        """Store an object as JSON and notify listeners with the object itself."""
        self._values[key] = json.dumps(obj)
        self._save()
        self.notify_listeners(key, obj)

    def all_settings(self) -> Dict[str, str]:
        """Defaults overlaid with stored values."""
        merged = dict(self.defaults)
        merged.update(self._values)
        return merged

    def on_setting_change(self, callback: SettingListener) -> None:
        """Register a listener called with (key, value) on every write."""
        self.listeners.append(callback)

    def off_setting_change(self, callback: SettingListener) -> None:
        """Remove a previously registered listener."""
        self.listeners = [listener for listener in self.listeners if listener != callback]

    def notify_listeners(self, key: str, value: Any) -> None:
        """Call every listener; a failing listener does not stop the others."""
        for listener in list(self.listeners):
            try:
                listener(key, value)
            except Exception:
                logger.exception("Error in settings listener for %s", key)

    def apply_external_change(self, key: Optional[str], new_value: Optional[str]) -> bool:
        """
        Apply a write made in another context (another process, tab or worker).

        Only known settings keys are accepted.

        Returns:
            True if the change was applied and announced
        """
        if not key or key not in SETTINGS_KEYS.values():
            return False
        if new_value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = new_value
        self._save()
        self.notify_listeners(key, new_value)
        return True
