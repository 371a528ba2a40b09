"""Tests for backup export and the staged restore."""

import json
from datetime import date, datetime, timezone

import pytest

from gamepad_notes.adapters.memory_store import MemoryKeyValueStore
from gamepad_notes.backup import STAGING_SUFFIX, BackupService
from gamepad_notes.core.backup import BackupValidationError
from gamepad_notes.core.models import Photo, TextSize
from gamepad_notes.journal import GAMES_KEY, JournalStore
from gamepad_notes.persistence import SnapshotWriter
from gamepad_notes.ports.key_value_store import PersistenceError
from gamepad_notes.settings import SETTINGS_KEY, SettingsStore


class FlakyKeyValueStore(MemoryKeyValueStore):
    """Memory store whose writes to chosen keys fail once armed."""

    def __init__(self):
        super().__init__()
        self.fail_keys: set[str] = set()

    def set(self, key: str, value: str) -> None:
        if key in self.fail_keys:
            raise PersistenceError(f"write to {key} failed")
        super().set(key, value)


@pytest.fixture
def kv():
    return FlakyKeyValueStore()


@pytest.fixture
def journal(kv):
    store = JournalStore(
        kv,
        writer=SnapshotWriter(kv, background=False),
        today=lambda: date(2025, 7, 3),
        seed_samples=False,
    )
    store.load()
    return store


@pytest.fixture
def settings(kv):
    store = SettingsStore(kv, writer=SnapshotWriter(kv, background=False))
    store.load()
    return store


@pytest.fixture
def service(journal, settings, kv):
    return BackupService(
        journal,
        settings,
        kv,
        app_name="GamePad Notes",
        platform="linux",
        clock=lambda: datetime(2025, 7, 3, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def populated(journal, settings):
    celeste = journal.add_game("Celeste")
    entry = journal.add_entry(celeste, "Reached chapter 3")
    journal.add_photo_to_entry(celeste, entry, Photo(uri="/media/summit.jpg", filename="summit.jpg"))
    hades = journal.add_game("Hades")
    journal.add_entry(hades, "Escaped once")
    settings.update_settings(dark_mode=True)
    return journal


def reload_all(journal, settings):
    journal.reload()
    settings.reload()


class TestExport:
    def test_export_backup(self, service, populated):
        doc = service.export_backup()
        assert doc["exportDate"] == "2025-07-03T12:00:00.000Z"
        assert doc["platform"] == "linux"
        assert doc["totalGames"] == 2
        assert doc["totalEntries"] == 2
        assert doc["settings"]["darkMode"] is True
        assert [g["title"] for g in doc["games"]] == ["Hades", "Celeste"]

    def test_export_to_file(self, service, populated, tmp_path):
        path = service.export_to_file(tmp_path / "backups", on=date(2025, 7, 3))
        assert path.name == "gamepad-notes-backup-2025-07-03.json"
        assert json.loads(path.read_text())["totalGames"] == 2


class TestImport:
    def test_round_trip(self, service, populated, journal, settings):
        before = journal.snapshot()
        doc = json.dumps(service.export_backup())

        journal.clear_all()
        settings.update_settings(dark_mode=False)
        result = service.import_backup(doc)
        reload_all(journal, settings)

        assert result.applied is True
        assert result.settings_replaced is True
        assert journal.snapshot() == before
        assert settings.get_settings().dark_mode is True

    def test_confirm_receives_fresh_counts(self, service, populated):
        doc = service.export_backup()
        doc["totalEntries"] = 999
        seen = []

        service.import_backup(doc, confirm=lambda summary: seen.append(summary) or True)

        assert (seen[0].games, seen[0].entries, seen[0].photos) == (2, 2, 1)

    def test_declined_changes_nothing(self, service, populated, kv):
        before = dict(kv.data)
        result = service.import_backup({"games": []}, confirm=lambda summary: False)
        assert result.applied is False
        assert kv.data == before

    @pytest.mark.parametrize(
        "doc",
        ['{"games": "not-an-array"}', '{"settings": {"darkMode": false}}', "{oops", {"games": [{"id": 1}]}],
    )
    def test_invalid_document_leaves_storage_untouched(self, service, populated, kv, doc):
        before = dict(kv.data)
        confirm_calls = []

        with pytest.raises(BackupValidationError):
            service.import_backup(doc, confirm=lambda s: confirm_calls.append(s) or True)

        assert kv.data == before
        assert confirm_calls == []

    def test_games_not_array_keeps_games(self, service, populated, journal):
        before = journal.snapshot()
        with pytest.raises(BackupValidationError) as exc:
            service.import_backup({"games": "not-an-array"})
        assert exc.value.reason == "missing or invalid games field"
        assert journal.snapshot() == before

    def test_settings_only_replaced_when_present(self, service, populated, settings, kv):
        before = kv.get(SETTINGS_KEY)
        result = service.import_backup({"games": []})
        settings.reload()

        assert result.settings_replaced is False
        assert kv.get(SETTINGS_KEY) == before
        assert settings.get_settings().dark_mode is True

    def test_short_settings_merge_over_current(self, service, populated, settings):
        settings.update_settings(text_size="large")
        service.import_backup({"games": [], "settings": {"autoSave": False}})
        settings.reload()

        current = settings.get_settings()
        assert current.auto_save is False
        assert current.text_size is TextSize.LARGE
        assert current.dark_mode is True

    def test_staging_failure_keeps_old_state(self, service, populated, kv):
        before = dict(kv.data)
        kv.fail_keys = {GAMES_KEY + STAGING_SUFFIX}

        with pytest.raises(PersistenceError):
            service.import_backup({"games": [], "settings": {"darkMode": False}})

        assert kv.data == before

    def test_settings_swap_failure_rolls_back_games(self, service, populated, kv):
        before = dict(kv.data)
        kv.fail_keys = {SETTINGS_KEY}

        with pytest.raises(PersistenceError):
            service.import_backup({"games": [], "settings": {"darkMode": False}})

        assert kv.data == before

    def test_rollback_removes_key_that_did_not_exist(self, service, kv):
        kv.fail_keys = {SETTINGS_KEY}
        assert kv.get(GAMES_KEY) is None

        with pytest.raises(PersistenceError):
            service.import_backup({"games": [], "settings": {"darkMode": True}})

        assert kv.get(GAMES_KEY) is None
        assert kv.keys() == []

    def test_staging_keys_are_cleaned_up(self, service, populated, kv):
        service.import_backup(service.export_backup())
        assert not [k for k in kv.keys() if k.endswith(STAGING_SUFFIX)]

    def test_journal_is_usable_after_import(self, service, populated, journal):
        service.import_backup({"games": []})
        journal.reload()
        assert journal.add_game("Celeste") is not None

    def test_import_file(self, service, populated, tmp_path, journal):
        path = service.export_to_file(tmp_path)
        journal.clear_all()

        service.import_file(path)
        journal.reload()

        assert {g.title for g in journal.snapshot()} == {"Celeste", "Hades"}

    def test_import_missing_file(self, service, tmp_path):
        with pytest.raises(BackupValidationError, match="cannot read backup file"):
            service.import_file(tmp_path / "nope.json")
