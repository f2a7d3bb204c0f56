"""
String key-value storage used to persist coordinate templates.

Classes:
    KeyValueStore: Abstract get/set/remove interface over string values
    InMemoryKeyValueStore: Process-local store
    JsonFileKeyValueStore: All keys kept in one JSON document on disk
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Minimal string key-value interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""

    @abstractmethod
    def keys(self) -> List[str]:
        """All stored keys."""


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = str(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data.keys())


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store backed by a single JSON file.

    The file holds one object mapping keys to string values. It is read on
    every access so several stores may share a path; a missing or unreadable
    file reads as empty.

    Args:
        path: Location of the JSON document (created on first write)
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to read key-value store {self.path}: {e}")
            return {}

        if not isinstance(payload, dict):
            logger.error(f"Key-value store {self.path} does not contain a JSON object")
            return {}
        return {str(k): str(v) for k, v in payload.items()}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = str(value)
            self._save(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._load().keys())
