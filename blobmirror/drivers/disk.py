"""
Local filesystem storage driver.
Stores objects as files under a root directory.
"""

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path

import aiofiles
import aiofiles.os

from blobmirror.core.exceptions import (
    DriverError,
    GenericDriverError,
    NetworkError,
    ResourceNotFoundError,
)
from blobmirror.drivers.base import Driver, StoragePath, directory_prefix, normalize_path

logger = logging.getLogger(__name__)


def translate_os_error(error: OSError, path: str) -> DriverError:
    """Map a filesystem error onto the driver error taxonomy."""
    details = {"path": path}
    # IsADirectoryError / NotADirectoryError are path conflicts, not missing objects
    if isinstance(error, FileNotFoundError):
        return ResourceNotFoundError(details=details)
    if isinstance(error, (TimeoutError, ConnectionError)):
        return NetworkError(str(error), details=details)
    return GenericDriverError(str(error), details=details)


class DiskDriver(Driver):
    """
    Local filesystem driver.

    Objects live under ``base_path``; directories are created on write and
    pruned when they become empty after a delete.
    """

    def __init__(self, base_path: str | Path):
        """
        Initialize the disk driver.

        Args:
            base_path: Root directory for storage. Created if missing.

        Raises:
            DriverError: If the root directory cannot be created
        """
        self.base_path = Path(base_path)
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise translate_os_error(e, str(self.base_path)) from e
        logger.info(f"Disk driver ready at {self.base_path}")

    def _get_full_path(self, key: str) -> Path:
        """Get full filesystem path for a storage key."""
        return self.base_path / key

    def _prune_empty_parents(self, full_path: Path) -> None:
        parent = full_path.parent
        while parent != self.base_path and self.base_path in parent.parents:
            try:
                parent.rmdir()  # Only removes if empty
            except OSError:
                break
            parent = parent.parent

    async def read(self, path: StoragePath) -> bytes:
        key = normalize_path(path)
        full_path = self._get_full_path(key)

        try:
            if not full_path.is_file():
                raise ResourceNotFoundError(details={"path": key})
            async with aiofiles.open(full_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise translate_os_error(e, key) from e

    async def file_exists(self, path: StoragePath) -> bool:
        key = normalize_path(path)
        try:
            return self._get_full_path(key).is_file()
        except OSError as e:
            raise translate_os_error(e, key) from e

    async def write(self, path: StoragePath, content: bytes) -> None:
        key = normalize_path(path)
        full_path = self._get_full_path(key)

        try:
            # Ensure parent directory exists
            full_path.parent.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(full_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise translate_os_error(e, key) from e

    async def delete(self, path: StoragePath) -> None:
        key = normalize_path(path)
        full_path = self._get_full_path(key)

        try:
            if not full_path.is_file():
                raise ResourceNotFoundError(details={"path": key})
            await aiofiles.os.remove(full_path)
        except OSError as e:
            raise translate_os_error(e, key) from e

        self._prune_empty_parents(full_path)

    async def delete_directory(self, path: StoragePath) -> None:
        key = directory_prefix(path).rstrip("/")
        full_path = self._get_full_path(key)

        try:
            if not full_path.is_dir() or not any(p.is_file() for p in full_path.rglob("*")):
                raise ResourceNotFoundError(details={"path": key})
            shutil.rmtree(full_path)
        except OSError as e:
            raise translate_os_error(e, key) from e

        self._prune_empty_parents(full_path)

    async def last_modified(self, path: StoragePath) -> datetime:
        key = normalize_path(path)
        full_path = self._get_full_path(key)

        try:
            if not full_path.is_file():
                raise ResourceNotFoundError(details={"path": key})
            stat = await aiofiles.os.stat(full_path)
        except OSError as e:
            raise translate_os_error(e, key) from e
        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

    def clone(self) -> "DiskDriver":
        return DiskDriver(self.base_path)
