"""Engine settings loaded from YAML configuration.

Example ``l2craft.yaml``:

```yaml
engine:
  max_nesting_depth: 64
logging:
  level: INFO
  file: ~/.l2craft/l2craft.log
```

Environment variables (``L2CRAFT_MAX_NESTING_DEPTH``, ``L2CRAFT_LOG_LEVEL``,
``L2CRAFT_LOG_FILE``) override values from the file.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV = "L2CRAFT_CONFIG"
DEFAULT_MAX_NESTING_DEPTH = 64


class SettingsError(Exception):
    """Settings file exists but cannot be used."""


@dataclass
class EngineSettings:
    """Tunables for the config engine and its hosts."""
    max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH
    log_level: str = "INFO"
    log_file: Optional[str] = None
    source: Optional[str] = None  # file the values came from, if any


def find_settings_file() -> Optional[Path]:
    """Find l2craft.yaml via L2CRAFT_CONFIG or the standard search paths."""
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()

    search_paths = [
        Path.cwd() / "configs" / "l2craft.yaml",
        Path.cwd() / "l2craft.yaml",
        Path.home() / ".config" / "l2craft" / "l2craft.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def _positive_int(value, key: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise SettingsError(f"{key} must be an integer, got {value!r}") from e
    if number < 1:
        raise SettingsError(f"{key} must be at least 1, got {number}")
    return number


def load_settings(path: Optional[str] = None) -> EngineSettings:
    """
    Load engine settings.

    Args:
        path: Explicit settings file; otherwise L2CRAFT_CONFIG or search paths

    Returns:
        EngineSettings (defaults when no file is found)

    Raises:
        SettingsError: File is unreadable, not YAML or has invalid values
    """
    settings = EngineSettings()
    settings_path = Path(path).expanduser() if path else find_settings_file()

    if settings_path is not None:
        if not settings_path.exists():
            if path:
                raise SettingsError(f"Settings file not found: {settings_path}")
            logger.debug(f"No settings file at {settings_path}, using defaults")
        else:
            _apply_file(settings, settings_path)

    _apply_env(settings)
    return settings


def _apply_file(settings: EngineSettings, settings_path: Path) -> None:
    """Merge values from a YAML settings file."""
    try:
        with open(settings_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"Cannot read settings from {settings_path}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {settings_path} must contain a mapping")

    engine = data.get("engine") or {}
    log = data.get("logging") or {}
    if not isinstance(engine, dict) or not isinstance(log, dict):
        raise SettingsError(f"'engine' and 'logging' in {settings_path} must be mappings")

    if "max_nesting_depth" in engine:
        settings.max_nesting_depth = _positive_int(
            engine["max_nesting_depth"], "engine.max_nesting_depth"
        )
    if "level" in log:
        settings.log_level = str(log["level"]).upper()
    if log.get("file"):
        settings.log_file = str(log["file"])

    settings.source = str(settings_path)
    logger.debug(f"Loaded settings from {settings_path}")


def _apply_env(settings: EngineSettings) -> None:
    """Environment variables take precedence over the file."""
    depth = os.environ.get("L2CRAFT_MAX_NESTING_DEPTH")
    if depth:
        settings.max_nesting_depth = _positive_int(depth, "L2CRAFT_MAX_NESTING_DEPTH")

    level = os.environ.get("L2CRAFT_LOG_LEVEL")
    if level:
        settings.log_level = level.upper()

    log_file = os.environ.get("L2CRAFT_LOG_FILE")
    if log_file:
        settings.log_file = log_file
