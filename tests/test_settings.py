"""Tests for the settings store."""

import json

import pytest

from gamepad_notes.adapters.memory_store import MemoryKeyValueStore
from gamepad_notes.core.models import Settings, TextSize
from gamepad_notes.journal import GAMES_KEY
from gamepad_notes.persistence import SnapshotWriter
from gamepad_notes.settings import SETTINGS_KEY, SettingsStore


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


def make_store(kv) -> SettingsStore:
    store = SettingsStore(kv, writer=SnapshotWriter(kv, background=False))
    store.load()
    return store


class TestLoad:
    def test_defaults_when_absent(self, kv):
        assert make_store(kv).get_settings() == Settings()

    def test_partial_record_is_default_filled(self, kv):
        kv.set(SETTINGS_KEY, json.dumps({"textSize": "small"}))
        settings = make_store(kv).get_settings()
        assert settings.text_size is TextSize.SMALL
        assert settings.show_confirm_deletes is True

    @pytest.mark.parametrize("raw", ["{broken", "[]", '"dark"'])
    def test_unreadable_record_uses_defaults(self, kv, raw):
        kv.set(SETTINGS_KEY, raw)
        assert make_store(kv).get_settings() == Settings()


class TestUpdate:
    def test_merges_and_persists(self, kv):
        store = make_store(kv)
        store.update_settings(dark_mode=True)
        store.update_settings(text_size="large")

        assert json.loads(kv.get(SETTINGS_KEY)) == {
            "darkMode": True,
            "textSize": "large",
            "showConfirmDeletes": True,
            "autoSave": True,
        }
        assert make_store(kv).get_settings().dark_mode is True

    def test_rejects_unknown_field(self, kv):
        store = make_store(kv)
        with pytest.raises(ValueError):
            store.update_settings(theme="seafoam")
        assert kv.get(SETTINGS_KEY) is None

    def test_independent_of_games_key(self, kv):
        kv.set(GAMES_KEY, "[]")
        store = make_store(kv)
        store.update_settings(auto_save=False)
        assert kv.get(GAMES_KEY) == "[]"


class TestTextScale:
    @pytest.mark.parametrize(
        "size, expected",
        [("small", 14), ("medium", 16), ("large", 18)],
    )
    def test_scaled_text_size(self, kv, size, expected):
        store = make_store(kv)
        store.update_settings(text_size=size)
        assert store.scaled_text_size(16) == expected
