"""
Key/value storage backends for version history and the job tracker.

Stores only ever talk to a backend through ``get``/``set``/``remove`` on
string values, so any host persistence can be plugged in.
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import quote

from src.logging import logger


class KeyValueStorage:
    """Interface for string key/value persistence."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class InMemoryStorage(KeyValueStorage):
    """Dictionary backed storage, mostly useful for tests."""

    def __init__(self, initial: Dict[str, str] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """Stores each key as a ``<key>.json`` file inside a directory."""

    def __init__(self, storage_dir: Path = None):
        """
        Initialize the file storage.

        Args:
            storage_dir: Directory holding one file per key
        """
        self.storage_dir = Path(storage_dir or Path("data_folder") / "storage")
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        # Percent-encoding is reversible, so distinct keys never share a file.
        return self.storage_dir / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read storage file {path}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.storage_dir, prefix='.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote storage key {key} to {path}")

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()
            logger.debug(f"Removed storage key {key}")
