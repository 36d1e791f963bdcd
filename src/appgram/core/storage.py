"""
Durable key-value storage for client-side state.

Only the anonymous identity token is persisted. FileStorage keeps a small JSON
document on disk; MemoryStorage lives for the process only.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class KeyValueStorage(ABC):
    """String key-value storage. Implementations may raise on any call."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value under key."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key if present."""


class MemoryStorage(KeyValueStorage):
    """Process-local storage."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(KeyValueStorage):
    """
    JSON file storage.

    The whole document is read on every access and rewritten on every change.
    Writes go to a sibling temp file first and are then renamed into place.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            logger.warning("storage_document_invalid", path=str(self.path))
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(data, fh)
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
