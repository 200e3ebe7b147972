"""Last-used city, calculation method and theme, kept in a small JSON file."""

import json
import logging
import os

from prayerclock import config

logger = logging.getLogger(__name__)

CITY = "city"
CALC_METHOD = "calc_method"
DARK_MODE = "dark_mode"


class PreferenceStore:
    def __init__(self, path: str = None):
        self.path = path or config.PREFERENCES_FILE

    def _load(self) -> dict:
        if not os.path.isfile(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable preferences %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default=None):
        return self._load().get(key, default)

    def set(self, key: str, value) -> None:
        data = self._load()
        data[key] = value
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

