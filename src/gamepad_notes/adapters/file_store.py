"""File-based key-value storage adapter."""

import os
import tempfile
from pathlib import Path
from typing import Iterable
from urllib.parse import quote, unquote

from gamepad_notes.ports.key_value_store import PersistenceError


class FileKeyValueStore:
    """
    File-based key-value storage.

    Implements KeyValueStore protocol. Each key gets a JSON file; writes go
    to a temp file that is renamed over the old one, so a key is never
    half-written.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for_key(self, key: str) -> Path:
        """Get the file path for a given key."""
        return self.data_dir / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> str | None:
        """Read a value. Returns None if not found."""
        path = self._path_for_key(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Failed to read {key}: {e}") from e

    def set(self, key: str, value: str) -> None:
        """Write/overwrite a value atomically."""
        path = self._path_for_key(key)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to write {key}: {e}") from e

    def remove(self, key: str) -> None:
        """Delete a key if present."""
        try:
            self._path_for_key(key).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to remove {key}: {e}") from e

    def remove_many(self, keys: Iterable[str]) -> None:
        """Delete several keys."""
        for key in keys:
            self.remove(key)

    def keys(self) -> list[str]:
        """List stored keys."""
        return sorted(unquote(p.stem) for p in self.data_dir.glob("*.json") if not p.name.startswith(".tmp-"))
