"""User preferences store, kept under its own key."""

import json
import logging
import math

from .core.models import TEXT_SIZE_MULTIPLIERS, Settings
from .persistence import SnapshotWriter
from .ports.key_value_store import KeyValueStore, PersistenceError

logger = logging.getLogger(__name__)

SETTINGS_KEY = "@gamepad_notes_settings"


class SettingsStore:
    """Loads, merges and saves the Settings record."""

    def __init__(self, kv: KeyValueStore, writer: SnapshotWriter | None = None):
        self.kv = kv
        self.writer = writer or SnapshotWriter(kv)
        self._settings = Settings()

    def load(self) -> None:
        """Read settings, filling anything missing with defaults."""
        self._settings = Settings()
        try:
            raw = self.kv.get(SETTINGS_KEY)
        except PersistenceError as e:
            logger.error(f"Failed to load settings: {e}")
            return
        if not raw:
            return

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Stored settings are unreadable, using defaults: {e}")
            return
        if not isinstance(data, dict):
            logger.error("Stored settings are not an object, using defaults")
            return
        self._settings = Settings.from_dict(data)

    def reload(self) -> None:
        self.writer.flush()
        self.load()

    def get_settings(self) -> Settings:
        return self._settings

    def update_settings(self, **changes) -> Settings:
        """Merge ``changes`` (field names) into the current settings and save."""
        self._settings = self._settings.with_changes(**changes)
        self.writer.submit(SETTINGS_KEY, json.dumps(self._settings.to_dict()))
        return self._settings

    def flush(self) -> None:
        self.writer.flush()

    def text_scale(self) -> float:
        return TEXT_SIZE_MULTIPLIERS.get(self._settings.text_size, 1.0)

    def scaled_text_size(self, base_size: float) -> int:
        """Font size adjusted for the text size preference."""
        return math.floor(base_size * self.text_scale() + 0.5)
