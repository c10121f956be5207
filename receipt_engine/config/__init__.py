"""
Configuration module for the Receipt Categorisation Engine.

This module contains the engine configuration and settings key definitions.
"""

from .engine_config import ENGINE_CONFIG, SETTINGS_KEYS, SETTINGS_DEFAULTS

__all__ = [
    "ENGINE_CONFIG",
    "SETTINGS_KEYS",
    "SETTINGS_DEFAULTS",
]
