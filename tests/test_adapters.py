"""Tests for storage adapters."""

import json
from unittest.mock import patch

import pytest

from gamepad_notes.adapters.file_store import FileKeyValueStore
from gamepad_notes.adapters.local_files import LocalFileStorage
from gamepad_notes.adapters.memory_store import MemoryKeyValueStore
from gamepad_notes.journal import JournalStore
from gamepad_notes.persistence import SnapshotWriter
from gamepad_notes.ports.key_value_store import PersistenceError


class TestFileKeyValueStore:
    def test_get_missing(self, tmp_path):
        assert FileKeyValueStore(tmp_path).get("@gamepad_notes_games") is None

    def test_set_get_remove(self, tmp_path):
        kv = FileKeyValueStore(tmp_path)
        kv.set("@gamepad_notes_games", '[{"title": "Celeste"}]')
        assert kv.get("@gamepad_notes_games") == '[{"title": "Celeste"}]'

        kv.remove("@gamepad_notes_games")
        assert kv.get("@gamepad_notes_games") is None
        kv.remove("@gamepad_notes_games")

    def test_keys_are_safe_filenames(self, tmp_path):
        kv = FileKeyValueStore(tmp_path)
        kv.set("@gamepad_notes_games:staged", "[]")
        assert [p.name for p in tmp_path.iterdir()] == ["%40gamepad_notes_games%3Astaged.json"]
        assert kv.keys() == ["@gamepad_notes_games:staged"]

    def test_unicode_values(self, tmp_path):
        kv = FileKeyValueStore(tmp_path)
        kv.set("k", '{"emoji": "🎮"}')
        assert FileKeyValueStore(tmp_path).get("k") == '{"emoji": "🎮"}'

    def test_remove_many(self, tmp_path):
        kv = FileKeyValueStore(tmp_path)
        kv.set("a", "1")
        kv.set("b", "2")
        kv.remove_many(["a", "b", "c"])
        assert kv.keys() == []

    def test_failed_write_keeps_old_value(self, tmp_path):
        kv = FileKeyValueStore(tmp_path)
        kv.set("k", "old")

        with patch("gamepad_notes.adapters.file_store.os.replace", side_effect=OSError("no space")):
            with pytest.raises(PersistenceError):
                kv.set("k", "new")

        assert kv.get("k") == "old"
        assert kv.keys() == ["k"]

    def test_creates_directory(self, tmp_path):
        FileKeyValueStore(tmp_path / "nested" / "data")
        assert (tmp_path / "nested" / "data").is_dir()


class TestMemoryKeyValueStore:
    def test_basic_operations(self):
        kv = MemoryKeyValueStore({"a": "1"})
        kv.set("b", "2")
        assert kv.keys() == ["a", "b"]
        kv.remove_many(["a", "missing"])
        assert kv.get("a") is None
        assert kv.get("b") == "2"


class TestLocalFileStorage:
    def test_save_copies_into_media_dir(self, tmp_path):
        source = tmp_path / "shot.jpg"
        source.write_bytes(b"jpeg")
        storage = LocalFileStorage(tmp_path / "media")

        uri = storage.save(source, "gamepad_photo_1_2_3.jpg")

        assert uri == str(tmp_path / "media" / "gamepad_photo_1_2_3.jpg")
        assert (tmp_path / "media" / "gamepad_photo_1_2_3.jpg").read_bytes() == b"jpeg"
        assert source.exists()

    def test_delete_path_and_file_uri(self, tmp_path):
        storage = LocalFileStorage(tmp_path)
        a = tmp_path / "a.jpg"
        b = tmp_path / "b.jpg"
        a.write_bytes(b"a")
        b.write_bytes(b"b")

        storage.delete(str(a))
        storage.delete(b.as_uri())

        assert not a.exists()
        assert not b.exists()

    def test_delete_missing_and_embedded(self, tmp_path):
        storage = LocalFileStorage(tmp_path)
        storage.delete(str(tmp_path / "gone.jpg"))
        storage.delete("data:image/jpeg;base64,AAAA")

    def test_delete_refuses_files_outside_media_dir(self, tmp_path):
        media = tmp_path / "media"
        media.mkdir()
        important = tmp_path / "important.txt"
        important.write_text("keep me")
        storage = LocalFileStorage(media)

        storage.delete(str(important))
        storage.delete(important.as_uri())
        storage.delete(str(media / ".." / "important.txt"))

        assert important.exists()

    def test_delete_game_keeps_foreign_files(self, tmp_path):
        media = tmp_path / "media"
        important = tmp_path / "important.txt"
        important.write_text("keep me")
        kv = MemoryKeyValueStore()
        game = {
            "id": 1,
            "title": "Celeste",
            "lastEntry": "2025-07-03",
            "entries": [
                {"id": 2, "date": "2025-07-03", "text": "Summit!", "images": [{"id": 3, "uri": str(important)}]}
            ],
        }
        kv.set("@gamepad_notes_games", json.dumps([game]))
        store = JournalStore(kv, files=LocalFileStorage(media), writer=SnapshotWriter(kv, background=False))
        store.load()

        assert store.delete_game(1) is True
        assert important.exists()
