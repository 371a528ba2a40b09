"""Functional core - entity model and backup codec with no I/O."""

from .models import (
    Cover,
    CustomCover,
    Entry,
    Game,
    Photo,
    PresetCover,
    Settings,
    TextSize,
    latest_entry_date,
    sort_for_display,
    today_str,
)
from .ids import IdGenerator
from .covers import PRESET_COVERS, preset_cover
from .backup import (
    BACKUP_VERSION,
    BackupSummary,
    BackupValidationError,
    ParsedBackup,
    backup_filename,
    build_backup_document,
    parse_backup_document,
)

__all__ = [
    # Model
    "Cover",
    "CustomCover",
    "Entry",
    "Game",
    "Photo",
    "PresetCover",
    "Settings",
    "TextSize",
    "latest_entry_date",
    "sort_for_display",
    "today_str",
    # Ids
    "IdGenerator",
    # Covers
    "PRESET_COVERS",
    "preset_cover",
    # Backup
    "BACKUP_VERSION",
    "BackupSummary",
    "BackupValidationError",
    "ParsedBackup",
    "backup_filename",
    "build_backup_document",
    "parse_backup_document",
]
