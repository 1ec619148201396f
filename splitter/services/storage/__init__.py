"""
Storage Services Package

Provides the abstract persistence interface and its implementations.
Local JSON files are the default backend; the in-memory store is swappable
in for tests.
"""

from splitter.services.storage.interface import (
    CorruptStateError,
    PersistenceWriteError,
    StateStorageInterface,
    StorageError,
)
from splitter.services.storage.json_file import JsonFileStateStorage
from splitter.services.storage.memory import InMemoryStateStorage

__all__ = [
    # Interface
    "StateStorageInterface",
    # Exceptions
    "CorruptStateError",
    "PersistenceWriteError",
    "StorageError",
    # Implementations
    "InMemoryStateStorage",
    "JsonFileStateStorage",
]
