"""Local filesystem adapter for photo and cover files."""

import logging
import shutil
from pathlib import Path
from urllib.parse import unquote, urlparse

logger = logging.getLogger(__name__)


class LocalFileStorage:
    """
    Local file storage for media.

    Implements FileStorage protocol. Files are copied into ``media_dir`` and
    referenced by their absolute path (``file://`` uris are accepted too).
    Only files inside ``media_dir`` are ever deleted.
    """

    def __init__(self, media_dir: Path | str):
        self.media_dir = Path(media_dir).expanduser()

    def _path_for_uri(self, uri: str) -> Path:
        if uri.startswith("file://"):
            return Path(unquote(urlparse(uri).path))
        return Path(uri).expanduser()

    def save(self, source: Path | str, filename: str) -> str:
        """Copy a file into the media directory. Returns the new path."""
        self.media_dir.mkdir(parents=True, exist_ok=True)
        target = self.media_dir / filename
        shutil.copyfile(Path(source).expanduser(), target)
        return str(target)

    def delete(self, uri: str) -> None:
        """Delete a media file. A file that is already gone is fine."""
        if uri.startswith("data:"):
            # Embedded image, nothing on disk.
            return
        path = self._path_for_uri(uri).resolve()
        if not path.is_relative_to(self.media_dir.resolve()):
            logger.warning(f"Not deleting {uri}: outside media directory {self.media_dir}")
            return
        path.unlink(missing_ok=True)
