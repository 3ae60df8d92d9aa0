"""Configuration management."""
from .settings import EngineSettings, SettingsError, find_settings_file, load_settings

__all__ = ["EngineSettings", "SettingsError", "find_settings_file", "load_settings"]
