"""
Persistent key/value stores backing the catalog cache
Redis when available, a JSON file otherwise, with graceful degradation
"""

import json
import os
import threading
import logging
from typing import Dict, Optional

from constants import CATALOG_CACHE_FILE
from utils import safe_write_json

logger = logging.getLogger(__name__)


class RedisStore:
    """String values in Redis under a common prefix"""

    name = "redis"

    def __init__(self, client, prefix: str = "storefront:"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, redis_url: str, prefix: str = "storefront:") -> Optional["RedisStore"]:
        """Connect and ping; None when Redis is unavailable"""
        try:
            import redis

            client = redis.from_url(redis_url, decode_responses=True)
            client.ping()
            logger.info(f"Redis store initialized at {redis_url}")
            return cls(client, prefix)
        except ImportError:
            logger.warning("Redis module not installed. Redis store disabled.")
        except Exception as e:
            logger.warning(f"Redis store initialization failed: {e}. Redis store disabled.")
        return None

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(self._key(key))
            logger.debug(f"Store {'HIT' if value else 'MISS'}: {key}")
            return value
        except Exception as e:
            logger.warning(f"Store get error for {key}: {e}")
            return None

    def set(self, key: str, value: str) -> bool:
        try:
            self.client.set(self._key(key), value)
            logger.debug(f"Store SET: {key}")
            return True
        except Exception as e:
            logger.warning(f"Store set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            return self.client.delete(self._key(key)) > 0
        except Exception as e:
            logger.warning(f"Store delete error for {key}: {e}")
            return False

    def info(self) -> Dict:
        try:
            keys = len(list(self.client.scan_iter(match=f"{self.prefix}*")))
            return {"backend": self.name, "status": "enabled", "keys": keys}
        except Exception as e:
            return {"backend": self.name, "status": "error", "error": str(e)}


class JsonFileStore:
    """All keys in a single JSON object on disk, rewritten atomically"""

    name = "file"

    def __init__(self, path: str = CATALOG_CACHE_FILE):
        self.path = path
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except Exception as e:
            logger.error(f"Failed to read store file {self.path}: {e}")
            return {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> bool:
        with self._lock:
            data = self._read_all()
            data[key] = value
            try:
                safe_write_json(self.path, data)
                return True
            except Exception as e:
                logger.warning(f"Store set error for {key}: {e}")
                return False

    def delete(self, key: str) -> bool:
        with self._lock:
            data = self._read_all()
            if key not in data:
                return False
            del data[key]
            try:
                safe_write_json(self.path, data)
                return True
            except Exception as e:
                logger.warning(f"Store delete error for {key}: {e}")
                return False

    def info(self) -> Dict:
        with self._lock:
            return {"backend": self.name, "status": "enabled", "path": self.path, "keys": len(self._read_all())}


class MemoryStore:
    """Process-local store for development and tests"""

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    def delete(self, key: str) -> bool:
        return self.data.pop(key, None) is not None

    def info(self) -> Dict:
        return {"backend": self.name, "status": "enabled", "keys": len(self.data)}


def create_store(settings: Dict):
    """Build the configured store, falling back to the JSON file"""
    storage = settings.get("storage", {})
    backend = storage.get("backend", "redis")
    file_path = storage.get("file_path") or CATALOG_CACHE_FILE

    if backend == "memory":
        return MemoryStore()

    if backend == "redis":
        store = RedisStore.from_url(storage.get("redis_url", "redis://localhost:6379/0"))
        if store is not None:
            return store
        logger.warning(f"Falling back to file store at {file_path}")

    return JsonFileStore(file_path)
