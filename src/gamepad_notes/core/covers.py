"""Built-in cover presets and media file naming."""

from .models import PresetCover

PRESET_COVERS: tuple[PresetCover, ...] = (
    PresetCover("default", "Default Game Icon", "🎮"),
    PresetCover("rpg", "RPG", "⚔️"),
    PresetCover("racing", "Racing", "🏎️"),
    PresetCover("sports", "Sports", "⚽"),
    PresetCover("puzzle", "Puzzle", "🧩"),
    PresetCover("shooter", "Action/Shooter", "🔫"),
    PresetCover("adventure", "Adventure", "🗺️"),
    PresetCover("platform", "Platform", "🦘"),
)


def preset_cover(preset_id: str) -> PresetCover:
    """Look up a preset by id. Raises KeyError for unknown ids."""
    for preset in PRESET_COVERS:
        if preset.id == preset_id:
            return preset
    raise KeyError(preset_id)


def photo_filename(game_id, entry_id, timestamp_ms: int) -> str:
    return f"gamepad_photo_{game_id}_{entry_id}_{timestamp_ms}.jpg"


def cover_filename(timestamp_ms: int) -> str:
    return f"gamepad_cover_{timestamp_ms}.jpg"
