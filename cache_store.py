"""Key-value stores for previously validated data.

The store itself enforces no policy (no TTL, no validation). Callers decide
when to invalidate; see ``UserService``.
"""
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class CACHE_KEYS:
    """Logical keys used by this application."""
    USERS = "users"


class CacheStore(ABC):
    """Abstract key-value store. Values must be JSON-serialisable."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove ``key``; removing a missing key is a no-op."""


class MemoryCacheStore(CacheStore):
    """Process-local store backed by a dict."""

    def __init__(self):
        self._items: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._items.get(key)

    def set(self, key: str, value: Any) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileCacheStore(CacheStore):
    """
    Store persisted as a single JSON object on disk.

    An unreadable or undecodable file is treated as an empty store so a
    corrupted cache never prevents a fresh fetch. Writes go to a temporary
    file first and are moved into place with ``os.replace``; a write that
    fails (for example a missing directory) is logged and skipped.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable cache file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring cache file {self.path}: top level is not an object")
            return {}
        return data

    def _save(self, data: Dict[str, Any]) -> bool:
        """Write ``data`` to disk. Returns False, after logging, when the file cannot be written."""
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".cache-", suffix=".json")
        except OSError as e:
            logger.warning(f"Cannot write cache file {self.path}: {e}")
            return False
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning(f"Cannot write cache file {self.path}: {e}")
            return False
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
        return True

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        """Store ``value``. A failed write is logged and leaves the previous contents in place."""
        with self._lock:
            data = self._load()
            data[key] = value
            if self._save(data):
                logger.debug(f"Cache write: {key} -> {self.path}")

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                if self._save(data):
                    logger.debug(f"Cache entry removed: {key}")
