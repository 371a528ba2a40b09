"""Journal entity model - games, entries, photos, covers and settings.

Pure data types with no I/O. ``to_dict``/``from_dict`` map to the camelCase
JSON shape used both in storage and in backup documents.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from datetime import date
from enum import Enum

logger = logging.getLogger(__name__)

# Ids are integers when created here; older or hand-edited data may carry strings.
Id = int | str

CUSTOM_COVER_ID = "custom"


def today_str(today: date | None = None) -> str:
    """Local calendar date as ``YYYY-MM-DD``."""
    return (today or date.today()).isoformat()


def _require_id(data: dict, what: str) -> Id:
    value = data.get("id")
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"{what} has no valid id")
    return value


def _require_list(data: dict, key: str, what: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what} field '{key}' must be a list")
    return value


def _require_iso_date(value, what: str) -> str:
    """Accept only ``YYYY-MM-DD``; display and ordering both depend on it."""
    if not isinstance(value, str):
        raise ValueError(f"{what} has no date")
    try:
        valid = date.fromisoformat(value).isoformat() == value
    except ValueError:
        valid = False
    if not valid:
        raise ValueError(f"{what} date must be YYYY-MM-DD, got {value!r}")
    return value


def _optional_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return None


@dataclass
class Photo:
    """An image attached to an entry. Bytes live with the file storage."""

    uri: str
    filename: str = ""
    width: int | None = None
    height: int | None = None
    date_added: str = ""
    id: Id | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uri": self.uri,
            "filename": self.filename,
            "width": self.width,
            "height": self.height,
            "dateAdded": self.date_added,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Photo":
        if not isinstance(data, dict):
            raise ValueError("photo must be an object")
        uri = data.get("uri")
        if not isinstance(uri, str) or not uri:
            raise ValueError("photo has no uri")
        return cls(
            id=_require_id(data, "photo"),
            uri=uri,
            filename=data.get("filename") or "",
            width=_optional_int(data.get("width")),
            height=_optional_int(data.get("height")),
            date_added=data.get("dateAdded") or "",
        )


@dataclass(frozen=True)
class PresetCover:
    """One of the built-in cover icons."""

    id: str
    name: str
    emoji: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "emoji": self.emoji}


@dataclass(frozen=True)
class CustomCover:
    """A user-supplied cover image stored by the file storage."""

    uri: str
    filename: str = ""
    width: int | None = None
    height: int | None = None
    date_added: str = ""

    @property
    def id(self) -> str:
        return CUSTOM_COVER_ID

    def to_dict(self) -> dict:
        return {
            "id": CUSTOM_COVER_ID,
            "name": "Custom Image",
            "emoji": None,
            "uri": self.uri,
            "filename": self.filename,
            "width": self.width,
            "height": self.height,
            "dateAdded": self.date_added,
        }


Cover = PresetCover | CustomCover


def cover_from_dict(data: dict | None) -> Cover | None:
    """
    Decode a stored cover.

    Stored covers are untagged: a custom image is recognised by its
    ``"custom"`` id or by carrying a ``uri``.
    """
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError("cover image must be an object")
    if data.get("id") == CUSTOM_COVER_ID or "uri" in data:
        uri = data.get("uri")
        if not isinstance(uri, str) or not uri:
            raise ValueError("custom cover has no uri")
        return CustomCover(
            uri=uri,
            filename=data.get("filename") or "",
            width=_optional_int(data.get("width")),
            height=_optional_int(data.get("height")),
            date_added=data.get("dateAdded") or "",
        )
    preset_id = data.get("id")
    if not isinstance(preset_id, str) or not preset_id:
        raise ValueError("preset cover has no id")
    return PresetCover(id=preset_id, name=data.get("name") or "", emoji=data.get("emoji") or "")


@dataclass
class Entry:
    """A dated journal note. ``date`` never changes after creation."""

    id: Id
    date: str
    text: str
    images: list[Photo] = field(default_factory=list)

    def find_photo(self, photo_id: Id) -> Photo | None:
        for photo in self.images:
            if photo.id == photo_id:
                return photo
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "text": self.text,
            "images": [p.to_dict() for p in self.images],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Entry":
        if not isinstance(data, dict):
            raise ValueError("entry must be an object")
        entry_date = _require_iso_date(data.get("date"), "entry")
        text = data.get("text")
        if not isinstance(text, str):
            raise ValueError("entry has no text")
        return cls(
            id=_require_id(data, "entry"),
            date=entry_date,
            text=text,
            images=[Photo.from_dict(p) for p in _require_list(data, "images", "entry")],
        )


@dataclass
class Game:
    """A tracked title and its journal, newest entry first."""

    id: Id
    title: str
    last_entry: str
    image: Cover | None = None
    entries: list[Entry] = field(default_factory=list)

    def find_entry(self, entry_id: Id) -> Entry | None:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def refresh_last_entry(self, today: date | None = None) -> None:
        """Recompute ``last_entry`` from the entries, falling back to today."""
        self.last_entry = latest_entry_date(self.entries) or today_str(today)

    def photos(self) -> list[Photo]:
        return [photo for entry in self.entries for photo in entry.images]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "lastEntry": self.last_entry,
            "image": self.image.to_dict() if self.image else None,
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Game":
        if not isinstance(data, dict):
            raise ValueError("game must be an object")
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValueError("game has no title")
        entries = [Entry.from_dict(e) for e in _require_list(data, "entries", "game")]
        # lastEntry is derived; a stored value only counts for games without entries.
        last_entry = latest_entry_date(entries)
        if last_entry is None:
            stored = data.get("lastEntry")
            last_entry = _require_iso_date(stored, "game") if stored else today_str()
        return cls(
            id=_require_id(data, "game"),
            title=title,
            last_entry=last_entry,
            image=cover_from_dict(data.get("image")),
            entries=entries,
        )


def latest_entry_date(entries: list[Entry]) -> str | None:
    """Most recent entry date, or None when there are no entries."""
    # YYYY-MM-DD sorts lexically in date order.
    return max((e.date for e in entries), default=None)


def sort_for_display(games: list[Game]) -> list[Game]:
    """Most recently played first. Ties keep storage order."""
    return sorted(games, key=lambda g: g.last_entry, reverse=True)


class TextSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


TEXT_SIZE_MULTIPLIERS = {
    TextSize.SMALL: 0.9,
    TextSize.MEDIUM: 1.0,
    TextSize.LARGE: 1.1,
}


@dataclass(frozen=True)
class Settings:
    """User preferences."""

    dark_mode: bool = False
    text_size: TextSize = TextSize.MEDIUM
    show_confirm_deletes: bool = True
    auto_save: bool = True

    def to_dict(self) -> dict:
        return {
            "darkMode": self.dark_mode,
            "textSize": self.text_size.value,
            "showConfirmDeletes": self.show_confirm_deletes,
            "autoSave": self.auto_save,
        }

    def with_changes(self, **changes) -> "Settings":
        """Return a copy with ``changes`` applied. Raises ValueError on bad input."""
        known = {f.name for f in fields(self)}
        clean = {}
        for name, value in changes.items():
            if name not in known:
                raise ValueError(f"Unknown setting: {name}")
            clean[name] = _coerce_setting(name, value)
        return replace(self, **clean)

    def merged(self, data: dict) -> "Settings":
        """
        Shallow-merge a stored/backup settings record over these settings.

        Unknown keys are ignored and invalid values keep the current value,
        so older or shorter records load cleanly.
        """
        changes = {}
        for f in fields(self):
            key = _SETTING_KEYS[f.name]
            if key not in data:
                continue
            try:
                changes[f.name] = _coerce_setting(f.name, data[key])
            except ValueError as e:
                logger.warning(f"Ignoring setting {key}: {e}")
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        return cls().merged(data)


_SETTING_KEYS = {
    "dark_mode": "darkMode",
    "text_size": "textSize",
    "show_confirm_deletes": "showConfirmDeletes",
    "auto_save": "autoSave",
}


def _coerce_setting(name: str, value):
    if name == "text_size":
        try:
            return TextSize(value)
        except ValueError:
            raise ValueError(f"text size must be one of small, medium, large (got {value!r})") from None
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be true or false (got {value!r})")
    return value
