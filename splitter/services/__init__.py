"""Services package."""

from splitter.services.sharing import (
    CallableClipboard,
    ClipboardError,
    ClipboardWriter,
    CommandClipboard,
    DecodeError,
)
from splitter.services.storage import (
    CorruptStateError,
    InMemoryStateStorage,
    JsonFileStateStorage,
    PersistenceWriteError,
    StateStorageInterface,
    StorageError,
)

__all__ = [
    # Sharing services
    "CallableClipboard",
    "ClipboardError",
    "ClipboardWriter",
    "CommandClipboard",
    "DecodeError",
    # Storage services
    "CorruptStateError",
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    "PersistenceWriteError",
    "StateStorageInterface",
    "StorageError",
]
