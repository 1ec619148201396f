"""
Abstract Storage Interface

DESIGN DECISION: The splitter's persistence is a mirror of in-memory state.
The session owns the roster and expense list; storage only receives a full
copy after every mutation and hands it back at startup.

The interface is intentionally tiny - two keys, each holding a list of
JSON-ready records. Validating those records into models is the session's
job, not the storage's.

Implementations:
1. JsonFileStateStorage - one JSON file per key on local disk
2. InMemoryStateStorage - for tests and throwaway sessions
"""

from abc import ABC, abstractmethod
from typing import Optional


class StateStorageInterface(ABC):
    """
    Abstract interface for roster/expense persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[list[dict]]:
        """
        Load the records stored under a key.

        Args:
            key: Storage key (e.g. the roster key)

        Returns:
            The stored list, or None if nothing was ever saved

        Raises:
            CorruptStateError: If stored data exists but is not a JSON list
        """
        pass

    @abstractmethod
    def save(self, key: str, records: list[dict]) -> None:
        """
        Replace the records stored under a key.

        Args:
            key: Storage key
            records: JSON-ready records (full list, not a delta)

        Raises:
            PersistenceWriteError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceWriteError(StorageError):
    """Could not write to the storage backend."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)


class CorruptStateError(StorageError):
    """Stored data exists but cannot be read back."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)
