"""
Abstract storage driver interface.
Defines the contract every backend implementation must satisfy.
"""

import os
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import PurePosixPath

from blobmirror.core.exceptions import InvalidPathError

StoragePath = str | os.PathLike


def normalize_path(path: StoragePath) -> str:
    """
    Convert a caller path into a relative POSIX key.

    Empty segments and "." are dropped. Absolute paths, ".." segments and
    text that cannot be encoded as UTF-8 are rejected.

    Raises:
        InvalidPathError: If the path cannot be used as a storage key
    """
    try:
        raw = os.fspath(path)
    except TypeError as e:
        raise InvalidPathError(details={"path": repr(path)}) from e
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidPathError(details={"path": repr(path)}) from e

    try:
        raw.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidPathError(details={"path": repr(path)}) from e

    pure = PurePosixPath(raw)
    if pure.is_absolute():
        raise InvalidPathError(
            message="Storage paths must be relative",
            details={"path": raw},
        )

    parts = [part for part in pure.parts if part != "."]
    if not parts:
        raise InvalidPathError(message="Storage path is empty", details={"path": raw})
    if ".." in parts:
        raise InvalidPathError(
            message="Storage paths may not contain '..'",
            details={"path": raw},
        )
    return "/".join(parts)


def directory_prefix(path: StoragePath) -> str:
    """Key prefix matching every object stored under a directory path."""
    return normalize_path(path) + "/"


class Driver(ABC):
    """
    Abstract base class for storage drivers.

    All drivers (Disk, InMemory, S3, Azure, GCS) implement these methods
    and translate their native failures into blobmirror DriverErrors.
    """

    @abstractmethod
    async def read(self, path: StoragePath) -> bytes:
        """
        Read the object stored at a path.

        Args:
            path: Relative path of the object

        Returns:
            The raw object content

        Raises:
            ResourceNotFoundError: If nothing is stored at the path
            DriverError: For any other failure
        """
        pass

    @abstractmethod
    async def file_exists(self, path: StoragePath) -> bool:
        """
        Check whether an object exists at a path.

        Args:
            path: Relative path of the object

        Returns:
            True if the object exists, False otherwise. A missing object
            is never an error.

        Raises:
            DriverError: Only for infrastructure failures (network, auth)
        """
        pass

    @abstractmethod
    async def write(self, path: StoragePath, content: bytes) -> None:
        """
        Store content at a path.

        Missing parent structure is created; existing content is overwritten.

        Args:
            path: Relative path of the object
            content: Raw bytes to store

        Raises:
            DriverError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, path: StoragePath) -> None:
        """
        Delete the object stored at a path.

        Args:
            path: Relative path of the object

        Raises:
            ResourceNotFoundError: If nothing is stored at the path
            DriverError: For any other failure
        """
        pass

    @abstractmethod
    async def delete_directory(self, path: StoragePath) -> None:
        """
        Recursively delete every object stored under a directory path.

        Args:
            path: Relative directory path

        Raises:
            ResourceNotFoundError: If no object is stored under the path
            DriverError: For any other failure
        """
        pass

    @abstractmethod
    async def last_modified(self, path: StoragePath) -> datetime:
        """
        Get the last modification time of an object.

        Args:
            path: Relative path of the object

        Returns:
            Timezone-aware UTC timestamp

        Raises:
            ResourceNotFoundError: If nothing is stored at the path
            DriverError: For any other failure
        """
        pass

    @abstractmethod
    def clone(self) -> "Driver":
        """
        Duplicate this driver.

        Networked drivers share their SDK client; the in-memory driver
        copies its state. Operations already running on the original
        handle are unaffected.
        """
        pass
