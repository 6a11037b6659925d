"""Persistent user preferences.

Preferences are stored as a flat JSON object and merged over defaults on
load so that new keys pick up their default value.
"""

import json
from pathlib import Path
from typing import Any, Optional

import structlog

from montego.config import get_config
from montego.exceptions import SettingsError

logger = structlog.get_logger(__name__)


def get_default_settings() -> dict[str, Any]:
    """Get default preferences.

    Returns:
        Dictionary with all default preferences
    """
    return {
        "save_history": True,
        "default_iterations": get_config().simulation.default_iterations,
        "haptics": True,
    }


class SettingsManager:
    """Manages user preferences with persistence."""

    def __init__(self, settings_file: Optional[Path] = None) -> None:
        """Initialize settings manager.

        Args:
            settings_file: JSON file to persist to; defaults to the configured location
        """
        self.logger = logger.bind(component="settings_manager")
        self.settings_file = Path(settings_file) if settings_file else get_config().history.settings_file
        self.settings: dict[str, Any] = {}
        self._load_settings()

    def _load_settings(self) -> None:
        """Load settings from file or use defaults."""
        defaults = get_default_settings()
        if not self.settings_file.exists():
            self.settings = defaults
            self.logger.debug("Using default settings")
            return

        try:
            with open(self.settings_file, encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error("settings_load_failed", path=str(self.settings_file), error=str(e))
            self.settings = defaults
            return

        if not isinstance(loaded, dict):
            self.logger.error("settings_load_failed", path=str(self.settings_file), error="not an object")
            self.settings = defaults
            return

        self.settings = {**defaults, **{k: v for k, v in loaded.items() if k in defaults}}
        self.logger.debug("Settings loaded from file")

    def get(self, key: str) -> Any:
        """Get a preference value.

        Raises:
            SettingsError: If the key is unknown
        """
        if key not in self.settings:
            raise SettingsError(f"Unknown setting: {key}")
        return self.settings[key]

    def get_all(self) -> dict[str, Any]:
        """Get all preferences."""
        return self.settings.copy()

    def set(self, key: str, value: Any) -> None:
        """Set a preference value.

        Args:
            key: Preference name
            value: New value; must match the default's type

        Raises:
            SettingsError: If the key is unknown or the value has the wrong type
        """
        defaults = get_default_settings()
        if key not in defaults:
            raise SettingsError(f"Unknown setting: {key}")

        expected = type(defaults[key])
        if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
            raise SettingsError(f"{key} must be an integer, got {value!r}")
        if expected is bool and not isinstance(value, bool):
            raise SettingsError(f"{key} must be true or false, got {value!r}")
        if key == "default_iterations" and value < 1:
            raise SettingsError(f"default_iterations must be >= 1, got {value}")

        self.settings[key] = value

    def toggle(self, key: str) -> bool:
        """Flip a boolean preference.

        Returns:
            The new value
        """
        current = self.get(key)
        if not isinstance(current, bool):
            raise SettingsError(f"{key} is not a toggle")
        self.settings[key] = not current
        return self.settings[key]

    def save(self) -> None:
        """Write preferences to disk."""
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, indent=2)
        except OSError as e:
            raise SettingsError(f"Could not save settings: {e}") from e
        self.logger.info("Settings saved", path=str(self.settings_file))

    def reset(self) -> None:
        """Reset preferences to defaults."""
        self.settings = get_default_settings()
        self.logger.info("Settings reset to defaults")

    @property
    def save_history(self) -> bool:
        return bool(self.settings["save_history"])

    @property
    def default_iterations(self) -> int:
        return int(self.settings["default_iterations"])
