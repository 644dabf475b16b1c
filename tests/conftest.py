"""
Pytest configuration and fixtures for blobmirror tests.
"""

from collections.abc import Callable

import pytest

from blobmirror.core.exceptions import DriverError
from blobmirror.drivers.base import Driver, StoragePath
from blobmirror.drivers.disk import DiskDriver
from blobmirror.drivers.inmem import InMemoryDriver
from blobmirror.store import Store


class FailingDriver(Driver):
    """Driver whose every operation raises the configured error."""

    def __init__(self, error: DriverError):
        self.error = error
        self.calls: list[str] = []

    async def read(self, path: StoragePath) -> bytes:
        self.calls.append("read")
        raise self.error

    async def file_exists(self, path: StoragePath) -> bool:
        self.calls.append("file_exists")
        raise self.error

    async def write(self, path: StoragePath, content: bytes) -> None:
        self.calls.append("write")
        raise self.error

    async def delete(self, path: StoragePath) -> None:
        self.calls.append("delete")
        raise self.error

    async def delete_directory(self, path: StoragePath) -> None:
        self.calls.append("delete_directory")
        raise self.error

    async def last_modified(self, path: StoragePath):
        self.calls.append("last_modified")
        raise self.error

    def clone(self) -> "FailingDriver":
        return FailingDriver(self.error)


class RecordingDriver(InMemoryDriver):
    """In-memory driver that logs its name into a shared journal on each write/delete."""

    def __init__(self, name: str, journal: list[str]):
        super().__init__()
        self.name = name
        self.journal = journal

    async def write(self, path: StoragePath, content: bytes) -> None:
        self.journal.append(self.name)
        await super().write(path, content)

    async def delete(self, path: StoragePath) -> None:
        self.journal.append(self.name)
        await super().delete(path)

    async def delete_directory(self, path: StoragePath) -> None:
        self.journal.append(self.name)
        await super().delete_directory(path)


@pytest.fixture
def memory_store() -> Store:
    """Create an in-memory store."""
    return Store(InMemoryDriver())


@pytest.fixture
def disk_store(tmp_path) -> Store:
    """Create a disk store rooted in a temporary directory."""
    return Store(DiskDriver(base_path=tmp_path / "store"))


@pytest.fixture(params=["disk", "memory"])
def store(request, tmp_path) -> Store:
    """Every locally runnable driver behind a Store."""
    if request.param == "disk":
        return Store(DiskDriver(base_path=tmp_path / "store"))
    return Store(InMemoryDriver())


@pytest.fixture
def failing_store() -> Callable[[DriverError], Store]:
    """Factory for stores whose driver always raises the given error."""

    def _make(error: DriverError) -> Store:
        return Store(FailingDriver(error))

    return _make


@pytest.fixture
def journal() -> list[str]:
    """Shared journal of store names, in the order they were called."""
    return []


@pytest.fixture
def recording_store(journal) -> Callable[[str], Store]:
    """Factory for in-memory stores that record calls into the journal."""

    def _make(name: str) -> Store:
        return Store(RecordingDriver(name, journal))

    return _make
