"""
In-memory storage driver for tests and local development.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone

from blobmirror.core.exceptions import ResourceNotFoundError
from blobmirror.drivers.base import Driver, StoragePath, directory_prefix, normalize_path


@dataclass(frozen=True)
class StoredObject:
    """An object held by the in-memory driver."""

    content: bytes
    last_modified: datetime


class InMemoryDriver(Driver):
    """
    Dictionary-backed driver.

    Thread-safe via a lock. The map is only reachable through the driver
    methods; ``clone()`` returns a driver holding a copy of the current state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._objects: dict[str, StoredObject] = {}

    def _get(self, key: str) -> StoredObject:
        with self._lock:
            stored = self._objects.get(key)
        if stored is None:
            raise ResourceNotFoundError(details={"path": key})
        return stored

    async def read(self, path: StoragePath) -> bytes:
        return self._get(normalize_path(path)).content

    async def file_exists(self, path: StoragePath) -> bool:
        key = normalize_path(path)
        with self._lock:
            return key in self._objects

    async def write(self, path: StoragePath, content: bytes) -> None:
        key = normalize_path(path)
        stored = StoredObject(content=bytes(content), last_modified=datetime.now(timezone.utc))
        with self._lock:
            self._objects[key] = stored

    async def delete(self, path: StoragePath) -> None:
        key = normalize_path(path)
        with self._lock:
            if self._objects.pop(key, None) is None:
                raise ResourceNotFoundError(details={"path": key})

    async def delete_directory(self, path: StoragePath) -> None:
        prefix = directory_prefix(path)
        with self._lock:
            matching = [key for key in self._objects if key.startswith(prefix)]
            if not matching:
                raise ResourceNotFoundError(details={"path": prefix.rstrip("/")})
            for key in matching:
                del self._objects[key]

    async def last_modified(self, path: StoragePath) -> datetime:
        return self._get(normalize_path(path)).last_modified

    def clone(self) -> "InMemoryDriver":
        duplicate = InMemoryDriver()
        with self._lock:
            duplicate._objects = dict(self._objects)
        return duplicate

    def keys(self) -> list[str]:
        """Sorted keys currently stored (test utility)."""
        with self._lock:
            return sorted(self._objects)

    def clear(self) -> None:
        """Remove all stored objects (test utility)."""
        with self._lock:
            self._objects.clear()
