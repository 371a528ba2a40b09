"""Ports - interfaces/protocols for external dependencies."""

from .key_value_store import KeyValueStore, PersistenceError
from .file_storage import FileStorage

__all__ = [
    "KeyValueStore",
    "PersistenceError",
    "FileStorage",
]
