"""Backup export and staged, all-or-nothing restore."""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Callable

from .core.backup import (
    BackupSummary,
    BackupValidationError,
    backup_filename,
    build_backup_document,
    parse_backup_document,
)
from .journal import GAMES_KEY, JournalStore
from .ports.key_value_store import KeyValueStore, PersistenceError
from .settings import SETTINGS_KEY, SettingsStore

logger = logging.getLogger(__name__)

STAGING_SUFFIX = ":staged"


@dataclass
class ImportResult:
    """Outcome of a restore. ``applied`` is False when the user declined."""

    summary: BackupSummary
    applied: bool
    settings_replaced: bool = False


class BackupService:
    """
    Exports the journal and settings to a backup document and restores them.

    A restore validates the whole document, asks for confirmation, then
    writes to staging keys before swapping onto the live ones. Storage ends
    up either entirely old or entirely new. After a successful restore the
    caller must reload both stores from storage.
    """

    def __init__(
        self,
        journal: JournalStore,
        settings: SettingsStore,
        kv: KeyValueStore,
        app_name: str,
        platform: str,
        clock: Callable[[], datetime] | None = None,
    ):
        self.journal = journal
        self.settings = settings
        self.kv = kv
        self.app_name = app_name
        self.platform = platform
        self.clock = clock

    # ============== Export ==============

    def export_backup(self) -> dict:
        """Build a backup document from the current in-memory state."""
        return build_backup_document(
            games=self.journal.snapshot(),
            settings=self.settings.get_settings().to_dict(),
            app_name=self.app_name,
            platform=self.platform,
            exported_at=self.clock() if self.clock else None,
        )

    def export_to_file(self, directory: Path | str, on: date | None = None) -> Path:
        """Write a backup document into ``directory``. Returns the file path."""
        directory = Path(directory).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / backup_filename(self.app_name, on)
        path.write_text(json.dumps(self.export_backup(), indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info(f"Exported backup to {path}")
        return path

    # ============== Import ==============

    def import_backup(
        self,
        document: str | bytes | dict,
        confirm: Callable[[BackupSummary], bool] = lambda summary: True,
    ) -> ImportResult:
        """
        Validate and restore a backup document.

        Raises BackupValidationError before anything is written, and
        PersistenceError if storage fails during the commit (after rolling
        back whatever had already been swapped).
        """
        parsed = parse_backup_document(document)
        summary = parsed.summary()

        if not confirm(summary):
            logger.info("Backup restore cancelled")
            return ImportResult(summary=summary, applied=False)

        values = {GAMES_KEY: json.dumps([g.to_dict() for g in parsed.games], ensure_ascii=False)}
        if parsed.settings:
            merged = self.settings.get_settings().merged(parsed.settings)
            values[SETTINGS_KEY] = json.dumps(merged.to_dict())

        with self.journal.suspended():
            self.settings.flush()
            self._commit(values)

        logger.info(f"Restored backup with {summary.games} games and {summary.entries} entries")
        return ImportResult(summary=summary, applied=True, settings_replaced=SETTINGS_KEY in values)

    def import_file(
        self,
        path: Path | str,
        confirm: Callable[[BackupSummary], bool] = lambda summary: True,
    ) -> ImportResult:
        """Restore from a backup file on disk."""
        try:
            raw = Path(path).expanduser().read_bytes()
        except OSError as e:
            raise BackupValidationError(f"cannot read backup file: {e}") from e
        return self.import_backup(raw, confirm)

    def _commit(self, values: dict[str, str]) -> None:
        staged = {key + STAGING_SUFFIX: value for key, value in values.items()}
        previous = {key: self.kv.get(key) for key in values}
        try:
            for key, value in staged.items():
                self.kv.set(key, value)
            for key, value in staged.items():
                if self.kv.get(key) != value:
                    raise PersistenceError(f"Staged write to {key} did not read back")

            swapped = []
            try:
                for key, value in values.items():
                    self.kv.set(key, value)
                    swapped.append(key)
            except PersistenceError:
                self._rollback(swapped, previous)
                raise
        finally:
            self._discard(staged)

    def _rollback(self, keys: list[str], previous: dict[str, str | None]) -> None:
        for key in keys:
            try:
                if previous[key] is None:
                    self.kv.remove(key)
                else:
                    self.kv.set(key, previous[key])
            except PersistenceError as e:
                logger.critical(f"Could not roll back {key} after a failed restore: {e}")

    def _discard(self, staged: dict[str, str]) -> None:
        try:
            self.kv.remove_many(staged)
        except PersistenceError as e:
            logger.warning(f"Could not remove staged backup keys: {e}")
