import json
import logging
from pathlib import Path
from typing import Any

import launchguard.settings as default_settings

log = logging.getLogger(__name__)


class MergedSettings:
    """
    A singleton class that merges default settings with JSON/env overrides.

    This class provides a unified, attribute-based access point for all
    configuration. It follows a clear precedence:
    1. Base values from `settings.py`.
    2. Overrides from the environment or a `.env` file (handled by `python-dotenv` in settings.py).
    3. Overrides from `overrides.json` for settings in `MODIFIABLE_SETTINGS`.
    """

    def __init__(self, overrides_path: Path = None) -> None:
        """
        Initializes the settings object by loading defaults and overrides.

        :param overrides_path: Optional path to an overrides file, defaults to OVERRIDES_JSON_PATH.
        """
        self.OVERRIDES_JSON_PATH: Path = overrides_path or default_settings.OVERRIDES_JSON_PATH

        self._load_defaults()
        self._load_overrides()

    def _load_defaults(self) -> None:
        """Loads all uppercase attributes from the settings.py module as defaults."""
        for key in dir(default_settings):
            if key.isupper() and key != "OVERRIDES_JSON_PATH":
                setattr(self, key, getattr(default_settings, key))

    def _coerce(self, key: str, value: Any) -> Any:
        """Converts an override to the type of the default value it replaces."""
        original_value = getattr(self, key)
        if isinstance(original_value, bool):
            if isinstance(value, bool):
                return value
            return str(value).lower() in ('true', '1', 't', 'yes', 'y')
        if isinstance(original_value, Path):
            return Path(value)
        if original_value is not None:
            return type(original_value)(value)
        return value

    def _load_overrides(self) -> None:
        """
        Loads and applies settings from the overrides file.

        Only keys that are explicitly listed in the `MODIFIABLE_SETTINGS` set
        in `settings.py` are applied.
        """
        if not self.OVERRIDES_JSON_PATH.exists():
            return

        try:
            with self.OVERRIDES_JSON_PATH.open('r') as f:
                overrides = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            log.error(f"Failed to load or parse overrides file '{self.OVERRIDES_JSON_PATH}': {e}")
            return

        if not isinstance(overrides, dict):
            log.error(f"Overrides file '{self.OVERRIDES_JSON_PATH}' must contain a JSON object. Ignoring.")
            return

        log.info(f"Loading configuration overrides from {self.OVERRIDES_JSON_PATH}")
        for key, value in overrides.items():
            if not hasattr(self, key):
                log.warning(f"Override setting '{key}' not found in default settings. Ignoring.")
                continue
            if key not in self.MODIFIABLE_SETTINGS:
                log.warning(f"Attempted to override non-modifiable setting '{key}'. Ignoring.")
                continue
            try:
                setattr(self, key, self._coerce(key, value))
                log.debug(f"Overridden setting: {key} = {value}")
            except (ValueError, TypeError) as e:
                log.error(f"Could not convert value '{value}' for key '{key}'. Error: {e}")


# Create a singleton instance to be imported by other modules
effective_settings = MergedSettings()
