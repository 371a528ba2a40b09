"""Shared workflow layer between the CLI and the stores.

Wires adapters to stores from config and implements the multi-step actions
(restore then reload, copy a photo in then attach it).
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from .adapters.file_store import FileKeyValueStore
from .adapters.local_files import LocalFileStorage
from .backup import BackupService, ImportResult
from .config import Config
from .core.backup import BackupSummary, iso_timestamp
from .core.covers import cover_filename, photo_filename
from .core.models import CustomCover, Id, Photo
from .journal import JournalStore
from .persistence import SnapshotWriter
from .ports.file_storage import FileStorage
from .ports.key_value_store import KeyValueStore
from .settings import SettingsStore

logger = logging.getLogger(__name__)


@dataclass
class Notebook:
    """Everything a front end needs, wired together."""

    kv: KeyValueStore
    files: FileStorage
    journal: JournalStore
    settings: SettingsStore
    backup: BackupService

    def close(self) -> None:
        """Flush pending writes and stop the writer thread."""
        self.journal.writer.close()


def open_notebook(
    config: Config,
    kv: KeyValueStore | None = None,
    files: FileStorage | None = None,
    background: bool = True,
) -> Notebook:
    """Build and load the stores described by ``config``."""
    kv = kv or FileKeyValueStore(config.data_path)
    files = files or LocalFileStorage(config.media_path)
    writer = SnapshotWriter(kv, background=background)

    journal = JournalStore(kv, files=files, writer=writer, seed_samples=config.seed_sample_games)
    settings = SettingsStore(kv, writer=writer)
    journal.load()
    settings.load()

    backup = BackupService(journal, settings, kv, app_name=config.app_name, platform=config.platform)
    return Notebook(kv=kv, files=files, journal=journal, settings=settings, backup=backup)


def restore_backup(
    notebook: Notebook,
    document: str | bytes | dict,
    confirm: Callable[[BackupSummary], bool] = lambda summary: True,
) -> ImportResult:
    """Restore a backup and reload both stores from what was written."""
    result = notebook.backup.import_backup(document, confirm)
    if result.applied:
        notebook.journal.reload()
        notebook.settings.reload()
    return result


def restore_backup_file(
    notebook: Notebook,
    path: Path | str,
    confirm: Callable[[BackupSummary], bool] = lambda summary: True,
) -> ImportResult:
    result = notebook.backup.import_file(path, confirm)
    if result.applied:
        notebook.journal.reload()
        notebook.settings.reload()
    return result


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def attach_photo(notebook: Notebook, game_id: Id, entry_id: Id, source: Path | str) -> Id | None:
    """Copy an image file into media storage and attach it to an entry."""
    if notebook.journal.get_game(game_id) is None:
        return None

    filename = photo_filename(game_id, entry_id, _timestamp_ms())
    uri = notebook.files.save(source, filename)
    photo = Photo(uri=uri, filename=filename, date_added=iso_timestamp(datetime.now(timezone.utc)))
    photo_id = notebook.journal.add_photo_to_entry(game_id, entry_id, photo)
    if photo_id is None:
        # Entry vanished; don't leave the copy behind.
        try:
            notebook.files.delete(uri)
        except OSError as e:
            logger.warning(f"Could not delete unused media file {uri}: {e}")
    return photo_id


def import_cover(notebook: Notebook, source: Path | str) -> CustomCover:
    """Copy an image file into media storage as a custom cover."""
    filename = cover_filename(_timestamp_ms())
    uri = notebook.files.save(source, filename)
    return CustomCover(uri=uri, filename=filename, date_added=iso_timestamp(datetime.now(timezone.utc)))
