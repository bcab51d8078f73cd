# flairc/preferences/__init__.py
from typing import Any

import yaml

from flairc import env
from flairc.logger import get_logger

logger = get_logger(__name__)


class Preferences:
    def __init__(self):
        self.prefs: dict = {}
        self.initialized: bool = False
        self._ensure_loaded()  # lazy-load on initial import

    def get_preferences_path(self):
        prefs_path = env.get_settings_dir() / "preferences.yml"
        return prefs_path, prefs_path.exists()

    def reload(self):
        """Force a fresh read from disk"""
        self.prefs = self._load_preferences()
        self.initialized = bool(self.prefs)

    def _ensure_loaded(self):
        if not self.initialized:
            self.reload()

    def _load_preferences(self):
        prefs_path, exists = self.get_preferences_path()
        if exists:
            try:
                return yaml.safe_load(prefs_path.read_text()) or {}
            except yaml.YAMLError as e:
                logger.warning(f"Ignoring unreadable preferences at {prefs_path}: {e}")
                return {}
        return {}

    def save(self):
        """Write current preferences to <project>/.flair/settings/preferences.yml"""
        prefs_path, _ = self.get_preferences_path()
        prefs_path.parent.mkdir(parents=True, exist_ok=True)
        prefs_path.write_text(yaml.safe_dump(self.prefs, default_flow_style=False))

    def get(self, *keys: str, default: Any = None) -> Any:
        self._ensure_loaded()
        result = self.prefs
        for key in keys:
            if not isinstance(result, dict) or key not in result:
                return default
            result = result[key]
        return result

    def set(self, *keys: str, value: Any, save: bool = False):
        """
        Set a value in the nested preferences structure.
        Example: prefs.set("transform", "theme_path", value="theme.yml", save=True)
        """
        self._ensure_loaded()
        if not keys:
            raise ValueError("prefs.set() requires at least one key")

        target = self.prefs
        for key in keys[:-1]:
            if key not in target or not isinstance(target[key], dict):
                target[key] = {}
            target = target[key]
        target[keys[-1]] = value

        if save:
            self.save()

    def get_section(self, *keys: str, default: Any | None = None) -> dict:
        """
        Fetch an entire nested section as a plain dict.

        >>> prefs.get_section("transform")
        {'theme_path': 'theme/theme.yml', 'pure_modules': ['polished']}
        """
        data = self.get(*keys, default=default or {})
        return data if isinstance(data, dict) else {}


prefs = Preferences()
