"""In-memory storage, for tests and sessions that should not touch disk."""

import copy
from typing import Optional

from splitter.services.storage.interface import StateStorageInterface


class InMemoryStateStorage(StateStorageInterface):
    """Keeps deep copies of saved records in a dict."""

    def __init__(self, initial: Optional[dict[str, list[dict]]] = None):
        self._data: dict[str, list[dict]] = copy.deepcopy(initial or {})

    def load(self, key: str) -> Optional[list[dict]]:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def save(self, key: str, records: list[dict]) -> None:
        self._data[key] = copy.deepcopy(records)

    def keys(self) -> list[str]:
        return list(self._data)
