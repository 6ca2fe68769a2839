"""
Configuration management for Hourbook.

Loads config.yaml and provides typed access to settings.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional

# config.yaml lives inside the hourbook package
_PACKAGE_DIR = Path(__file__).parent.parent.resolve()
CONFIG_PATH = _PACKAGE_DIR / "config.yaml"

# Cache for loaded config
_config_cache: Optional[Dict[str, Any]] = None


def get_config(reload: bool = False) -> Dict[str, Any]:
    """
    Load configuration from config.yaml.

    Args:
        reload: Force reload even if cached

    Returns:
        Configuration dictionary
    """
    global _config_cache

    if _config_cache is not None and not reload:
        return _config_cache

    if not CONFIG_PATH.exists():
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as f:
        _config_cache = yaml.safe_load(f) or {}

    return _config_cache


def get_config_value(*keys: str, default: Any = None) -> Any:
    """
    Get a nested config value safely.

    Args:
        *keys: Path of keys to traverse (e.g., 'retry', 'max_attempts')
        default: Value to return if key not found

    Example:
        attempts = get_config_value('retry', 'max_attempts', default=3)
    """
    config = get_config()

    for key in keys:
        if isinstance(config, dict) and key in config:
            config = config[key]
        else:
            return default

    return config if config is not None else default


def get_calendar_weekdays() -> List[int]:
    """Weekday numbers (Mon=0) that the calendar counts as working days."""
    raw = get_config_value("calendar", "weekdays", default=[0, 1, 2, 3, 4])
    return sorted({int(d) for d in raw if 0 <= int(d) <= 6})


def get_cli_user() -> Optional[str]:
    """Resolve the CLI actor: HOURBOOK_USER env var wins over config.yaml."""
    env_user = os.environ.get("HOURBOOK_USER")
    if env_user:
        return env_user
    return get_config_value("auth", "user_id")


class HourbookPaths:
    """
    Centralized path access.

    Paths come from config.yaml; relative entries resolve under the
    package directory.

    Usage:
        from hourbook.core.config import HOURBOOK_PATHS
        db = HOURBOOK_PATHS.database
    """

    def __init__(self):
        self._config = None

    def _ensure_config(self):
        if self._config is None:
            self._config = get_config()

    def _resolve(self, raw: str) -> Path:
        p = Path(raw)
        if not p.is_absolute():
            p = _PACKAGE_DIR / p
        return p

    @property
    def database(self) -> Path:
        self._ensure_config()
        env_db = os.environ.get("HOURBOOK_DB")
        if env_db:
            return self._resolve(env_db)
        raw = self._config.get("destinations", {}).get("database", "data/hourbook.db")
        return self._resolve(raw)

    @property
    def root(self) -> Path:
        return _PACKAGE_DIR


HOURBOOK_PATHS = HourbookPaths()
