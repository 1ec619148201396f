"""
JSON File Storage Implementation

DESIGN DECISION: Local JSON files stand in for the browser's cookies:
1. One file per key, so the roster and expenses are mirrored independently
2. Human-readable, easy to inspect or delete by hand
3. No server-side database (durable shared storage is out of scope)

Writes go to a temporary file in the same directory and are renamed into
place, so a crash never leaves a half-written list behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from splitter.config import get_settings
from splitter.services.storage.interface import (
    CorruptStateError,
    PersistenceWriteError,
    StateStorageInterface,
)


class JsonFileStateStorage(StateStorageInterface):
    """
    Stores each key as `<data_dir>/<key>.json`.

    Transient OS errors on write (locked file, full buffer) are retried
    with exponential backoff before surfacing as PersistenceWriteError.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        write_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir) if data_dir is not None else settings.data_dir
        self._write_attempts = write_attempts or settings.write_attempts

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """File path backing a key."""
        return self._data_dir / f"{key}.json"

    def load(self, key: str) -> Optional[list[dict]]:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CorruptStateError(key, f"Cannot read {path}: {e}")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStateError(key, f"Invalid JSON in {path}: {e}")

        if not isinstance(data, list):
            raise CorruptStateError(
                key, f"Expected a JSON list in {path}, got {type(data).__name__}"
            )
        return data

    def save(self, key: str, records: list[dict]) -> None:
        payload = json.dumps(records, ensure_ascii=False, indent=2)
        try:
            self._write_with_retry(self.path_for(key), payload)
        except OSError as e:
            raise PersistenceWriteError(key, f"Failed to write '{key}': {e}")

    def _write_with_retry(self, path: Path, payload: str) -> None:
        retrying = retry(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            reraise=True,
        )
        retrying(self._write_atomic)(path, payload)

    def _write_atomic(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}-", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(payload)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
