"""
Hueprint Last-Palette Persistence
Key-value store backends (in-memory, JSON file, Redis) and the best-effort
cache that keeps the most recent extraction result.
"""
import json
import time
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional
import logging

import redis
from pydantic import ValidationError

from hueprint.schemas import ExtractionResult

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised by a store backend that cannot complete an operation."""
    pass


class KeyValueStore(ABC):
    """Abstract base class for string key-value stores."""

    name = "abstract"

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get value, or None when missing."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key if present."""
        pass


class InMemoryStore(KeyValueStore):
    """Process-local store with optional TTL."""

    name = "memory"

    def __init__(self, ttl: Optional[int] = None):
        self.ttl = ttl
        self._lock = Lock()
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry['expires'] is not None and entry['expires'] <= time.time():
                # Expired
                del self._data[key]
                return None
            return entry['value']

    def set(self, key: str, value: str) -> None:
        expires = time.time() + self.ttl if self.ttl else None
        with self._lock:
            self._data[key] = {'value': value, 'expires': expires}

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Store backed by a single JSON document on disk."""

    name = "file"

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StoreError(f"Unreadable store file {self.path}: {e}")
        if not isinstance(data, dict):
            raise StoreError(f"Store file {self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise StoreError(f"Failed to write store file {self.path}: {e}")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)


class RedisStore(KeyValueStore):
    """Redis store backend."""

    name = "redis"

    def __init__(self, redis_url: str = "redis://localhost:6379", ttl: Optional[int] = None):
        self.ttl = ttl
        self.redis_client = redis.from_url(redis_url, decode_responses=True)
        self._test_connection()

    def _test_connection(self):
        """Test Redis connection."""
        try:
            self.redis_client.ping()
            logger.info("Redis connection established")
        except redis.RedisError as e:
            logger.error(f"Redis connection failed: {e}")
            raise StoreError(str(e))

    def get(self, key: str) -> Optional[str]:
        try:
            return self.redis_client.get(key)
        except redis.RedisError as e:
            raise StoreError(f"Redis get failed for key {key}: {e}")

    def set(self, key: str, value: str) -> None:
        try:
            if self.ttl:
                self.redis_client.setex(key, self.ttl, value)
            else:
                self.redis_client.set(key, value)
        except redis.RedisError as e:
            raise StoreError(f"Redis set failed for key {key}: {e}")

    def remove(self, key: str) -> None:
        try:
            self.redis_client.delete(key)
        except redis.RedisError as e:
            raise StoreError(f"Redis delete failed for key {key}: {e}")


def build_store(redis_url: Optional[str] = None,
                file_path: Optional[str] = None,
                ttl: Optional[int] = None) -> KeyValueStore:
    """
    Pick a store backend: Redis when reachable, then a JSON file, then memory.
    """
    if redis_url:
        try:
            store = RedisStore(redis_url, ttl=ttl)
            logger.info("Using Redis store for last palette")
            return store
        except StoreError as e:
            logger.warning(f"Redis unavailable, falling back: {e}")

    if file_path:
        logger.info(f"Using JSON file store at {file_path}")
        return JsonFileStore(file_path)

    logger.info("Using in-memory store only")
    return InMemoryStore(ttl=ttl)


class PaletteCache:
    """
    Keeps the most recent ExtractionResult in an injected store.

    Every operation is best-effort: store failures and corrupt entries are
    logged and treated as an empty cache.
    """

    KEY = "lastPalette"

    def __init__(self, store: KeyValueStore):
        self.store = store

    @property
    def backend_name(self) -> str:
        return self.store.name

    def save(self, result: ExtractionResult) -> bool:
        """Persist result as JSON; returns False if the store failed."""
        try:
            self.store.set(self.KEY, result.model_dump_json())
            return True
        except Exception as e:
            logger.warning(f"Failed to persist last palette: {e}")
            return False

    def load(self) -> Optional[ExtractionResult]:
        """Return the cached result, or None when missing, unreadable or corrupt."""
        try:
            raw = self.store.get(self.KEY)
        except Exception as e:
            logger.warning(f"Failed to load last palette: {e}")
            return None

        if raw is None:
            return None

        try:
            return ExtractionResult.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding corrupt cached palette: {e}")
            return None

    def clear(self) -> bool:
        """Remove the cached result; returns False if the store failed."""
        try:
            self.store.remove(self.KEY)
            return True
        except Exception as e:
            logger.warning(f"Failed to clear last palette: {e}")
            return False
