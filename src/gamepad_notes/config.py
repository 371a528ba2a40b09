"""Configuration management for GamePad Notes."""

import logging
import os
import platform as _platform
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

GAMEPAD_HOME = Path(os.environ.get("GAMEPAD_NOTES_HOME", Path.home() / "gamepad-notes"))
CONFIG_FILE = GAMEPAD_HOME / "config" / "gamepad-notes.conf"
DATA_DIR = GAMEPAD_HOME / "data"
MEDIA_DIR = GAMEPAD_HOME / "media"

APP_NAME = "GamePad Notes"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _default_platform() -> str:
    return _platform.system().lower() or "unknown"


@dataclass
class Config:
    """GamePad Notes configuration."""

    data_dir: str = ""
    media_dir: str = ""
    backup_dir: str = ""
    app_name: str = APP_NAME
    platform: str = field(default_factory=_default_platform)
    seed_sample_games: bool = True

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser() if self.data_dir else DATA_DIR

    @property
    def media_path(self) -> Path:
        return Path(self.media_dir).expanduser() if self.media_dir else MEDIA_DIR

    @property
    def backup_path(self) -> Path:
        return Path(self.backup_dir).expanduser() if self.backup_dir else Path.cwd()


def _parse_bool(key: str, value: str, default: bool) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    logger.warning(f"Invalid value for {key.upper()}: {value!r}, using {default}")
    return default


def load_config(path: Path | None = None) -> Config:
    """Load configuration from gamepad-notes.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value.startswith('"') or value.startswith("'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        else:
            # Unquoted: strip inline comments
            if "#" in value:
                value = value.split("#")[0].strip()

        match key:
            case "data_dir":
                config.data_dir = value
            case "media_dir":
                config.media_dir = value
            case "backup_dir":
                config.backup_dir = value
            case "app_name":
                config.app_name = value or APP_NAME
            case "platform":
                config.platform = value or _default_platform()
            case "seed_sample_games":
                config.seed_sample_games = _parse_bool(key, value, config.seed_sample_games)
            case _:
                logger.warning(f"Unknown config key: {key.upper()}")

    return config
