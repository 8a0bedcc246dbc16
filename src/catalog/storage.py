"""Key-value persistence for saved session fields.

The session stores a handful of string fields (server address, account id,
credential, salt) behind the KeyValueStore interface; two
implementations are provided:
    - MemoryStore: process-local dictionary, used by tests and one-off runs
    - JsonFileStore: JSON document on disk, used by the command-line client
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Interface for string key-value persistence."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value under key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; a missing key is not an error."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored value."""


class MemoryStore(KeyValueStore):
    """In-memory store.

    Attributes:
        data: Dictionary of stored values
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.data.clear()


class JsonFileStore(KeyValueStore):
    """Store backed by a single JSON file.

    The file is read lazily on first access and rewritten atomically on each
    change (write to a temporary file in the same directory, then replace).
    A missing or unreadable file is treated as an empty store.

    Example:
        >>> store = JsonFileStore("~/.config/catalog-client/session.json")
        >>> store.set("account", "alice")
        >>> store.get("account")
        'alice'
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self._data: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data

        self._data = {}
        if self.path.exists():
            try:
                content = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            else:
                if isinstance(content, dict):
                    self._data = {str(k): str(v) for k, v in content.items()}
        return self._data

    def _save(self) -> None:
        data = self._load()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".session-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug(f"Saved {len(data)} session fields to {self.path}")

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._save()

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save()

    def clear(self) -> None:
        self._data = {}
        if self.path.exists():
            self.path.unlink()
            logger.debug(f"Removed session file {self.path}")
