"""
Settings store for receipt engine clients.
"""

from .settings_manager import SettingsManager, SettingListener

__all__ = [
    "SettingsManager",
    "SettingListener",
]
