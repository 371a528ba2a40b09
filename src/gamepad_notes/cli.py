"""GamePad Notes CLI - play journal for your game library."""

import json
import logging
import sys
from contextlib import contextmanager
from datetime import date

import click

from .config import load_config
from .core.backup import BackupValidationError
from .core.covers import PRESET_COVERS, preset_cover
from .core.models import CustomCover, Game, PresetCover
from .ports.key_value_store import PersistenceError
from .workflows import Notebook, attach_photo, import_cover, open_notebook, restore_backup_file

SETTING_NAMES = {
    "dark-mode": "dark_mode",
    "text-size": "text_size",
    "confirm-deletes": "show_confirm_deletes",
    "auto-save": "auto_save",
}


@contextmanager
def _notebook():
    """Open the notebook for one command and make sure writes land."""
    notebook = open_notebook(load_config())
    if notebook.journal.load_error:
        click.echo(f"Warning: saved games could not be loaded ({notebook.journal.load_error})", err=True)
    try:
        yield notebook
    except PersistenceError as e:
        _fail(str(e))
    finally:
        notebook.close()
        if notebook.journal.persistence_error:
            click.echo(f"Warning: changes may not be saved ({notebook.journal.persistence_error})", err=True)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _confirm_delete(notebook: Notebook, prompt: str, yes: bool) -> bool:
    if yes or not notebook.settings.get_settings().show_confirm_deletes:
        return True
    return click.confirm(prompt)


def _cover_label(game: Game) -> str:
    if isinstance(game.image, PresetCover):
        return game.image.emoji
    if isinstance(game.image, CustomCover):
        return "[img]"
    return "🎮"


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """GamePad Notes - track your play sessions."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


# ============== Games ==============


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def games(as_json: bool):
    """List games, most recently played first."""
    with _notebook() as nb:
        all_games = nb.journal.list_games()

    if as_json:
        click.echo(json.dumps([g.to_dict() for g in all_games], indent=2, ensure_ascii=False))
        return

    if not all_games:
        click.echo("No games yet. Add one with 'gamepad-notes add-game'.")
        return

    for game in all_games:
        count = len(game.entries)
        click.echo(f"{game.id}  {_cover_label(game)} {game.title}  (LAST: {game.last_entry}, {count} entries)")


@main.command()
@click.argument("game_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(game_id: int, as_json: bool):
    """Show a game's journal."""
    with _notebook() as nb:
        game = nb.journal.get_game(game_id)

    if game is None:
        _fail(f"No game with id {game_id}")

    if as_json:
        click.echo(json.dumps(game.to_dict(), indent=2, ensure_ascii=False))
        return

    click.echo(f"{_cover_label(game)} {game.title}  (LAST: {game.last_entry})\n")
    if not game.entries:
        click.echo("No entries yet.")
        return

    # Display newest date first; same-day entries keep their stored order.
    for entry in sorted(game.entries, key=lambda e: e.date, reverse=True):
        shown = date.fromisoformat(entry.date).strftime("%A, %b %d %Y")
        click.echo(f"### {shown}  [{entry.id}]")
        click.echo(entry.text)
        for photo in entry.images:
            click.echo(f"  📷 {photo.id}  {photo.filename or photo.uri}")
        click.echo()


@main.command("add-game")
@click.argument("title")
@click.option("--preset", default=None, help="Preset cover id (see 'presets')")
@click.option("--image", "image_path", default=None, type=click.Path(exists=True, dir_okay=False),
              help="Image file to use as the cover")
def add_game(title: str, preset: str | None, image_path: str | None):
    """Add a game to the library."""
    if preset and image_path:
        _fail("Use either --preset or --image, not both")

    cover = None
    if preset:
        try:
            cover = preset_cover(preset)
        except KeyError:
            _fail(f"Unknown preset '{preset}'")

    with _notebook() as nb:
        if image_path:
            cover = import_cover(nb, image_path)
        try:
            game_id = nb.journal.add_game(title, cover)
        except ValueError as e:
            _fail(str(e))

    click.echo(f"✓ Added {title.strip()} ({game_id})")


@main.command("delete-game")
@click.argument("game_id", type=int)
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
def delete_game(game_id: int, yes: bool):
    """Delete a game and all of its entries."""
    with _notebook() as nb:
        game = nb.journal.get_game(game_id)
        if game is None:
            click.echo(f"No game with id {game_id}.")
            return
        if not _confirm_delete(nb, f"Delete {game.title} and its {len(game.entries)} entries?", yes):
            return
        nb.journal.delete_game(game_id)

    click.echo(f"✓ Deleted {game.title}")


@main.command()
def presets():
    """List preset cover icons."""
    for preset in PRESET_COVERS:
        click.echo(f"{preset.emoji}  {preset.id:10} {preset.name}")


# ============== Entries ==============


@main.command("add-entry")
@click.argument("game_id", type=int)
@click.argument("text")
def add_entry(game_id: int, text: str):
    """Add today's entry to a game."""
    with _notebook() as nb:
        try:
            entry_id = nb.journal.add_entry(game_id, text)
        except ValueError as e:
            _fail(str(e))

    if entry_id is None:
        _fail(f"No game with id {game_id}")
    click.echo(f"✓ Added entry {entry_id}")


@main.command("edit-entry")
@click.argument("game_id", type=int)
@click.argument("entry_id", type=int)
@click.argument("text")
def edit_entry(game_id: int, entry_id: int, text: str):
    """Replace the text of an entry."""
    with _notebook() as nb:
        try:
            updated = nb.journal.edit_entry(game_id, entry_id, text)
        except ValueError as e:
            _fail(str(e))

    if not updated:
        _fail(f"No entry {entry_id} in game {game_id}")
    click.echo(f"✓ Updated entry {entry_id}")


@main.command("delete-entry")
@click.argument("game_id", type=int)
@click.argument("entry_id", type=int)
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
def delete_entry(game_id: int, entry_id: int, yes: bool):
    """Delete an entry and its photos."""
    with _notebook() as nb:
        if not _confirm_delete(nb, f"Delete entry {entry_id}?", yes):
            return
        deleted = nb.journal.delete_entry(game_id, entry_id)

    if deleted:
        click.echo(f"✓ Deleted entry {entry_id}")
    else:
        click.echo(f"No entry {entry_id} in game {game_id}.")


# ============== Photos ==============


@main.command("add-photo")
@click.argument("game_id", type=int)
@click.argument("entry_id", type=int)
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def add_photo(game_id: int, entry_id: int, path: str):
    """Attach an image file to an entry."""
    with _notebook() as nb:
        try:
            photo_id = attach_photo(nb, game_id, entry_id, path)
        except OSError as e:
            _fail(f"Could not copy photo: {e}")

    if photo_id is None:
        _fail(f"No entry {entry_id} in game {game_id}")
    click.echo(f"✓ Added photo {photo_id}")


@main.command("delete-photo")
@click.argument("game_id", type=int)
@click.argument("entry_id", type=int)
@click.argument("photo_id", type=int)
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
def delete_photo(game_id: int, entry_id: int, photo_id: int, yes: bool):
    """Remove a photo from an entry."""
    with _notebook() as nb:
        if not _confirm_delete(nb, "Delete this photo?", yes):
            return
        deleted = nb.journal.delete_photo_from_entry(game_id, entry_id, photo_id)

    if deleted:
        click.echo(f"✓ Deleted photo {photo_id}")
    else:
        click.echo(f"No photo {photo_id} on entry {entry_id}.")


# ============== Settings ==============


@main.group(invoke_without_command=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def settings(ctx, as_json: bool):
    """Show or change preferences."""
    if ctx.invoked_subcommand is not None:
        return

    with _notebook() as nb:
        current = nb.settings.get_settings()

    if as_json:
        click.echo(json.dumps(current.to_dict(), indent=2))
        return

    click.echo(f"dark-mode        {'on' if current.dark_mode else 'off'}")
    click.echo(f"text-size        {current.text_size.value}")
    click.echo(f"confirm-deletes  {'on' if current.show_confirm_deletes else 'off'}")
    click.echo(f"auto-save        {'on' if current.auto_save else 'off'}")


@settings.command("set")
@click.argument("name", type=click.Choice(sorted(SETTING_NAMES)))
@click.argument("value")
def settings_set(name: str, value: str):
    """Change one preference (booleans take on/off)."""
    field_name = SETTING_NAMES[name]
    if field_name == "text_size":
        parsed = value.lower()
    elif value.lower() in ("on", "true", "yes", "1"):
        parsed = True
    elif value.lower() in ("off", "false", "no", "0"):
        parsed = False
    else:
        _fail(f"{name} takes on or off")

    with _notebook() as nb:
        try:
            nb.settings.update_settings(**{field_name: parsed})
        except ValueError as e:
            _fail(str(e))

    click.echo(f"✓ {name} = {value}")


# ============== Backup ==============


@main.command("export")
@click.option("--output", "-o", "output_dir", default=None, type=click.Path(file_okay=False),
              help="Directory to write the backup to")
def export_cmd(output_dir: str | None):
    """Export all games and settings to a backup file."""
    config = load_config()
    with _notebook() as nb:
        try:
            path = nb.backup.export_to_file(output_dir or config.backup_path)
        except OSError as e:
            _fail(f"Could not write backup: {e}")
        total_games = len(nb.journal.snapshot())
        total_entries = nb.journal.count_entries()

    click.echo(f"✓ Exported {total_games} games and {total_entries} entries to {path}")


@main.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
def import_cmd(path: str, yes: bool):
    """Restore games and settings from a backup file (replaces everything)."""

    def confirm(summary) -> bool:
        click.echo(summary.describe())
        return yes or click.confirm("Continue?")

    with _notebook() as nb:
        try:
            result = restore_backup_file(nb, path, confirm)
        except BackupValidationError as e:
            _fail(f"Invalid backup: {e.reason}")
        except PersistenceError as e:
            _fail(f"Restore failed, existing data kept: {e}")

    if not result.applied:
        click.echo("Restore cancelled.")
        return
    click.echo(f"✓ Restored {result.summary.games} games and {result.summary.entries} entries")


@main.command()
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
def clear(yes: bool):
    """Delete ALL games and entries (settings are kept)."""
    if not yes and not click.confirm("Delete ALL games and notes? This cannot be undone!"):
        return

    with _notebook() as nb:
        nb.journal.clear_all()

    click.echo("✓ All data has been cleared.")


if __name__ == "__main__":
    main()
