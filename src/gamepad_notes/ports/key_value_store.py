"""Key-value storage interface."""

from typing import Iterable, Protocol


class PersistenceError(RuntimeError):
    """The storage backend failed to read or write a key."""


class KeyValueStore(Protocol):
    """Interface for a flat string-keyed store of UTF-8 JSON text.

    A value is durable once ``set`` returns. Failures raise PersistenceError.
    """

    def get(self, key: str) -> str | None:
        """Read a value. Returns None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Write/overwrite a value."""
        ...

    def remove(self, key: str) -> None:
        """Delete a key. Removing an absent key is not an error."""
        ...

    def remove_many(self, keys: Iterable[str]) -> None:
        """Delete several keys."""
        ...
