"""Backup document codec - pure build/parse/validate, no I/O."""

import json
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone

from .models import Game

BACKUP_VERSION = "1.0.0"
SUPPORTED_MAJOR = BACKUP_VERSION.split(".")[0]


class BackupValidationError(ValueError):
    """A backup document was rejected before anything was written."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass
class BackupSummary:
    """Counts shown to the user before a restore, computed from the games themselves."""

    games: int
    entries: int
    photos: int
    export_date: str | None = None
    app_name: str | None = None

    def describe(self) -> str:
        source = f" exported {self.export_date}" if self.export_date else ""
        return (
            f"Restore backup{source}: {self.games} games, {self.entries} entries, "
            f"{self.photos} photos. This replaces ALL current games and entries."
        )


@dataclass
class ParsedBackup:
    """A validated backup, ready to be committed."""

    games: list[Game]
    settings: dict | None
    version: str | None = None
    export_date: str | None = None
    app_name: str | None = None

    def summary(self) -> BackupSummary:
        return BackupSummary(
            games=len(self.games),
            entries=sum(len(g.entries) for g in self.games),
            photos=sum(len(g.photos()) for g in self.games),
            export_date=self.export_date,
            app_name=self.app_name,
        )


def iso_timestamp(moment: datetime | None = None) -> str:
    """UTC ISO-8601 with milliseconds and a trailing Z."""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_backup_document(
    games: list[Game],
    settings: dict,
    app_name: str,
    platform: str,
    exported_at: datetime | None = None,
) -> dict:
    """
    Assemble the portable backup document.

    ``totalGames`` and ``totalEntries`` are informational only; parsing
    ignores them.
    """
    return {
        "version": BACKUP_VERSION,
        "exportDate": iso_timestamp(exported_at),
        "appName": app_name,
        "platform": platform,
        "games": [g.to_dict() for g in games],
        "settings": dict(settings),
        "totalGames": len(games),
        "totalEntries": sum(len(g.entries) for g in games),
    }


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "backup"


def backup_filename(app_name: str, on: date | None = None) -> str:
    """``<app-slug>-backup-<YYYY-MM-DD>.json``"""
    return f"{slugify(app_name)}-backup-{(on or date.today()).isoformat()}.json"


def parse_backup_document(document: str | bytes | dict) -> ParsedBackup:
    """
    Parse and validate a backup document.

    Checks run in a fixed order (parse, games field, version, game records,
    settings) and the first failure raises BackupValidationError.
    """
    if isinstance(document, (str, bytes, bytearray)):
        try:
            data = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise BackupValidationError("malformed document") from None
    else:
        data = document

    if not isinstance(data, dict):
        raise BackupValidationError("malformed document")

    raw_games = data.get("games")
    if not isinstance(raw_games, list):
        raise BackupValidationError("missing or invalid games field")

    version = data.get("version")
    if version is not None:
        if not isinstance(version, str) or version.split(".")[0] != SUPPORTED_MAJOR:
            raise BackupValidationError(f"unsupported backup version {version!r}")

    games = []
    seen_ids = set()
    for index, raw in enumerate(raw_games):
        try:
            game = Game.from_dict(raw)
        except ValueError as e:
            raise BackupValidationError(f"invalid game at index {index}: {e}") from None
        if game.id in seen_ids:
            raise BackupValidationError(f"invalid game at index {index}: duplicate id {game.id!r}")
        seen_ids.add(game.id)
        games.append(game)

    settings = data.get("settings")
    if settings is not None and not isinstance(settings, dict):
        raise BackupValidationError("invalid settings field")

    export_date = data.get("exportDate")
    app_name = data.get("appName")
    return ParsedBackup(
        games=games,
        settings=settings or None,
        version=version,
        export_date=export_date if isinstance(export_date, str) else None,
        app_name=app_name if isinstance(app_name, str) else None,
    )
