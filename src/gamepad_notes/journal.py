"""Journal store - the single owner of the games collection.

Every mutation updates memory first, then hands the whole collection to the
snapshot writer. Unknown ids are no-ops returning None/False.
"""

import copy
import json
import logging
from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator

from .core.ids import IdGenerator
from .core.models import Cover, CustomCover, Entry, Game, Id, Photo, sort_for_display, today_str
from .core.samples import sample_games
from .persistence import SnapshotWriter
from .ports.file_storage import FileStorage
from .ports.key_value_store import KeyValueStore, PersistenceError

logger = logging.getLogger(__name__)

GAMES_KEY = "@gamepad_notes_games"


class StoreBusyError(RuntimeError):
    """A mutation was attempted while the store is suspended for an import."""


def _require_text(value: str, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{what} cannot be empty")
    return value.strip()


class JournalStore:
    """
    In-memory games collection with write-through persistence.

    Storage order is newest-created first; ``list_games`` gives the display
    order (most recently played first).
    """

    def __init__(
        self,
        kv: KeyValueStore,
        files: FileStorage | None = None,
        writer: SnapshotWriter | None = None,
        ids: IdGenerator | None = None,
        today: Callable[[], date] = date.today,
        seed_samples: bool = True,
    ):
        self.kv = kv
        self.files = files
        self.writer = writer or SnapshotWriter(kv)
        self.ids = ids or IdGenerator()
        self.today = today
        self.seed_samples = seed_samples
        self._games: list[Game] = []
        self._suspended = False
        self.load_error: PersistenceError | None = None

    # ============== Loading ==============

    def load(self) -> None:
        """
        Replace the in-memory collection with what storage holds.

        Samples are seeded only when nothing is stored. If the stored games
        cannot be read or decoded the store starts empty and refuses
        mutations (see ``load_error``) so the stored value is never replaced.
        """
        self.load_error = None
        try:
            raw = self.kv.get(GAMES_KEY)
        except PersistenceError as e:
            logger.error(f"Failed to load games: {e}")
            self._games = []
            self.load_error = e
            return

        if raw is None:
            self._games = sample_games() if self.seed_samples else []
            logger.info(f"No saved games, starting with {len(self._games)} sample games")
        else:
            try:
                self._games = self._decode(raw)
            except ValueError as e:
                logger.error(f"Stored games are unreadable, starting empty: {e}")
                self._games = []
                self.load_error = PersistenceError(f"Stored games are unreadable: {e}")
                return

        for game in self._games:
            self.ids.observe(game.id)
            for entry in game.entries:
                self.ids.observe(entry.id, *(p.id for p in entry.images))

    def reload(self) -> None:
        """Wait for pending writes, then re-read storage."""
        self.flush()
        self.load()

    @staticmethod
    def _decode(raw: str) -> list[Game]:
        # JSONDecodeError is a ValueError.
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("stored games are not a list")
        return [Game.from_dict(item) for item in data]

    # ============== Queries ==============

    def get_game(self, game_id: Id) -> Game | None:
        """A copy of the game, or None if there is no such game."""
        game = self._find_game(game_id)
        return copy.deepcopy(game) if game else None

    def list_games(self) -> list[Game]:
        """Games ordered by most recent entry."""
        return copy.deepcopy(sort_for_display(self._games))

    def snapshot(self) -> list[Game]:
        """Games in storage order."""
        return copy.deepcopy(self._games)

    def count_entries(self) -> int:
        return sum(len(g.entries) for g in self._games)

    # ============== Games ==============

    def add_game(self, title: str, image: Cover | None = None) -> Id:
        """Create a game. Raises ValueError for a blank title."""
        self._check_writable()
        title = _require_text(title, "Game title")
        game = Game(
            id=self.ids.next_id(),
            title=title,
            last_entry=today_str(self.today()),
            image=image,
        )
        self._games.insert(0, game)
        self._persist()
        logger.debug(f"Added game {game.id} ({title})")
        return game.id

    def delete_game(self, game_id: Id) -> bool:
        """Delete a game and its media. Deleting an unknown id does nothing."""
        self._check_writable()
        game = self._find_game(game_id)
        if game is None:
            return False

        self._games = [g for g in self._games if g.id != game_id]
        self._persist()

        uris = [p.uri for p in game.photos()]
        if isinstance(game.image, CustomCover):
            uris.append(game.image.uri)
        self._delete_files(uris)
        return True

    def clear_all(self) -> None:
        """Delete every game. Settings are stored separately and untouched."""
        self._check_writable()
        removed, self._games = self._games, []
        self._persist()

        uris = []
        for game in removed:
            uris.extend(p.uri for p in game.photos())
            if isinstance(game.image, CustomCover):
                uris.append(game.image.uri)
        self._delete_files(uris)

    # ============== Entries ==============

    def add_entry(self, game_id: Id, text: str) -> Id | None:
        """Add an entry dated today at the top of the game's journal."""
        self._check_writable()
        text = _require_text(text, "Entry text")
        game = self._find_game(game_id)
        if game is None:
            return None

        today = self.today()
        entry = Entry(id=self.ids.next_id(), date=today_str(today), text=text)
        game.entries.insert(0, entry)
        game.refresh_last_entry(today)
        self._persist()
        return entry.id

    def edit_entry(self, game_id: Id, entry_id: Id, new_text: str) -> bool:
        """Replace an entry's text. The date is left as it was."""
        self._check_writable()
        new_text = _require_text(new_text, "Entry text")
        entry = self._find_entry(game_id, entry_id)
        if entry is None:
            return False

        entry.text = new_text
        self._persist()
        return True

    def delete_entry(self, game_id: Id, entry_id: Id) -> bool:
        """Remove an entry and its photos."""
        self._check_writable()
        game = self._find_game(game_id)
        entry = game.find_entry(entry_id) if game else None
        if entry is None:
            return False

        game.entries = [e for e in game.entries if e.id != entry_id]
        game.refresh_last_entry(self.today())
        self._persist()
        self._delete_files(p.uri for p in entry.images)
        return True

    # ============== Photos ==============

    def add_photo_to_entry(self, game_id: Id, entry_id: Id, photo: Photo) -> Id | None:
        """Attach a photo. A photo without an id, or reusing one on this entry, is given a new id."""
        self._check_writable()
        entry = self._find_entry(game_id, entry_id)
        if entry is None:
            return None

        photo = copy.copy(photo)
        if photo.id is None or entry.find_photo(photo.id) is not None:
            photo.id = self.ids.next_id()
        else:
            self.ids.observe(photo.id)
        entry.images.append(photo)
        self._persist()
        return photo.id

    def delete_photo_from_entry(self, game_id: Id, entry_id: Id, photo_id: Id) -> bool:
        """
        Detach a photo, then try to delete its file.

        The list is updated even when the file delete fails; a stray file is
        preferred over a reference the user cannot remove.
        """
        self._check_writable()
        entry = self._find_entry(game_id, entry_id)
        photo = entry.find_photo(photo_id) if entry else None
        if photo is None:
            return False

        entry.images = [p for p in entry.images if p.id != photo_id]
        self._persist()
        self._delete_files([photo.uri])
        return True

    # ============== Persistence ==============

    def flush(self) -> None:
        """Block until all queued writes are durable."""
        self.writer.flush()

    @property
    def persistence_error(self) -> PersistenceError | None:
        """The last failed write, if the most recent one failed."""
        return self.writer.last_error

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Refuse mutations for the duration (used while a backup is restored)."""
        self.flush()
        self._suspended = True
        try:
            yield
        finally:
            self._suspended = False

    def _check_writable(self) -> None:
        if self._suspended:
            raise StoreBusyError("Journal is being restored from a backup")
        if self.load_error is not None:
            raise PersistenceError(
                f"Stored games could not be loaded, refusing to overwrite them ({self.load_error})"
            )

    def _find_game(self, game_id: Id) -> Game | None:
        for game in self._games:
            if game.id == game_id:
                return game
        return None

    def _find_entry(self, game_id: Id, entry_id: Id) -> Entry | None:
        game = self._find_game(game_id)
        return game.find_entry(entry_id) if game else None

    def _persist(self) -> None:
        # Serialize now so the queued write reflects this exact state.
        payload = json.dumps([g.to_dict() for g in self._games], ensure_ascii=False)
        self.writer.submit(GAMES_KEY, payload)

    def _delete_files(self, uris) -> None:
        if self.files is None:
            return
        for uri in uris:
            try:
                self.files.delete(uri)
            except Exception as e:
                logger.warning(f"Could not delete media file {uri}: {e}")
