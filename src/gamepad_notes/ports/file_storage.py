"""Media file storage interface."""

from pathlib import Path
from typing import Protocol


class FileStorage(Protocol):
    """Interface for the bytes behind photo and cover uris."""

    def save(self, source: Path | str, filename: str) -> str:
        """Copy a file into managed storage. Returns its uri."""
        ...

    def delete(self, uri: str) -> None:
        """Delete the file behind a uri. Raises OSError on failure."""
        ...
