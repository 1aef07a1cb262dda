"""
Persistent key-value store for the products and avatars collections.

Backends move raw bytes and raise StorageError; PersistentStore owns
JSON (de)serialization and degrades every failure to a logged default.
"""
import copy
import json
import os
import tempfile
from typing import Any, Dict, List, Optional

import redis

from adcraft.errors import ConfigError, StorageError, SerializationError
from adcraft.logger import logger
from adcraft.sentry import capture_storage_failure


class BaseStorage:
    """Base interface for a durable key-value substrate."""
    name = "base"

    def read(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def write(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    def ping(self) -> bool:
        return True


class MemoryStorage(BaseStorage):
    """Dict-backed storage. Lives as long as the process."""
    name = "memory"

    def __init__(self):
        self.data: Dict[str, bytes] = {}

    def read(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def write(self, key: str, data: bytes) -> None:
        self.data[key] = bytes(data)


class FileStorage(BaseStorage):
    """One ``<key>.json`` file per key, replaced atomically on write."""
    name = "file"

    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key: str) -> str:
        safe_key = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return os.path.join(self.directory, f"{safe_key}.json")

    def read(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def write(self, key: str, data: bytes) -> None:
        path = self._path(key)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    def ping(self) -> bool:
        return os.access(self.directory, os.W_OK)


class RedisStorage(BaseStorage):
    """Redis-backed storage, shared by every process pointing at the same URL."""
    name = "redis"

    def __init__(self, url: str, prefix: str = "adcraft:", client: Optional[redis.Redis] = None):
        self.prefix = prefix
        self.redis = client or redis.Redis.from_url(url)

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def read(self, key: str) -> Optional[bytes]:
        try:
            data = self.redis.get(self._make_key(key))
        except redis.RedisError as e:
            raise StorageError(f"Failed to read '{key}' from redis: {e}") from e
        if isinstance(data, str):
            return data.encode("utf-8")
        return data

    def write(self, key: str, data: bytes) -> None:
        try:
            self.redis.set(self._make_key(key), data)
        except redis.RedisError as e:
            raise StorageError(f"Failed to write '{key}' to redis: {e}") from e

    def ping(self) -> bool:
        try:
            return bool(self.redis.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False


def create_storage(config) -> BaseStorage:
    """Build the backend named by ``config.STORE_BACKEND``."""
    backend = config.STORE_BACKEND
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return FileStorage(config.STORE_PATH)
    if backend == "redis":
        return RedisStorage(config.REDIS_URL, prefix=config.REDIS_KEY_PREFIX)
    raise ConfigError(f"Unknown STORE_BACKEND '{backend}' (expected file, redis or memory)")


class PersistentStore:
    """
    Fail-soft collection store.

    Readers never see an exception: absent or corrupted data loads as the
    default. Writers get ``False`` when the backend refuses a write; the
    failure is logged and reported, and the in-memory attempt simply does
    not persist.
    """

    def __init__(self, backend: BaseStorage):
        self.backend = backend

    def load_collection(self, key: str, default: Optional[List[Any]] = None) -> List[Any]:
        fallback = copy.deepcopy(default) if default is not None else []
        try:
            raw = self.backend.read(key)
        except StorageError as e:
            logger.error(f"Failed to read collection '{key}': {e}")
            capture_storage_failure(key, "read", str(e))
            return fallback

        if raw is None:
            return fallback

        try:
            data = self._decode(raw)
        except SerializationError as e:
            logger.error(f"Corrupted collection '{key}', using default: {e}")
            capture_storage_failure(key, "decode", str(e))
            return fallback

        if not isinstance(data, list):
            logger.warning(f"Collection '{key}' is not a list ({type(data).__name__}), using default")
            return fallback
        return data

    def save_collection(self, key: str, items: List[Any]) -> bool:
        try:
            self.backend.write(key, self._encode(items))
            return True
        except StorageError as e:
            logger.error(f"Failed to save collection '{key}': {e}")
            capture_storage_failure(key, "write", str(e))
            return False

    @staticmethod
    def _encode(items: List[Any]) -> bytes:
        try:
            return json.dumps(items, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot serialize collection: {e}") from e

    @staticmethod
    def _decode(raw: bytes) -> Any:
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise SerializationError(f"Cannot deserialize collection: {e}") from e
