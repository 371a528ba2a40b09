"""Adapters - I/O implementations of ports."""

from .file_store import FileKeyValueStore
from .memory_store import MemoryKeyValueStore
from .local_files import LocalFileStorage

__all__ = [
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "LocalFileStorage",
]
