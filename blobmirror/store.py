"""
Uniform facade over a single storage driver.
"""

from datetime import datetime

from blobmirror.core.contents import Contents
from blobmirror.drivers.base import Driver, StoragePath


class Store:
    """
    One named storage endpoint.

    Every operation is forwarded to the wrapped driver unchanged; the store
    only converts written values to bytes and offers a text view on read.

    Example:
        store = Store(InMemoryDriver())
        await store.write("docs/readme.txt", "my content")
        assert await store.read_text("docs/readme.txt") == "my content"
    """

    def __init__(self, driver: Driver):
        self._driver = driver

    @property
    def driver(self) -> Driver:
        return self._driver

    def clone(self) -> "Store":
        """Return a Store wrapping a duplicate of the driver."""
        return Store(self._driver.clone())

    async def file_exists(self, path: StoragePath) -> bool:
        """
        Check if a file exists at the given path.

        Raises:
            DriverError: Only on infrastructure failures
        """
        return await self._driver.file_exists(path)

    async def write(self, path: StoragePath, content: bytes | bytearray | memoryview | str) -> None:
        """
        Write content to the given path, overwriting any existing file.

        Args:
            path: Relative path of the file
            content: Bytes-like value, or text encoded as UTF-8
        """
        await self._driver.write(path, Contents.from_value(content).to_bytes())

    async def read(self, path: StoragePath) -> bytes:
        """Read the raw bytes stored at the given path."""
        return Contents(await self._driver.read(path)).to_bytes()

    async def read_text(self, path: StoragePath) -> str:
        """
        Read the file at the given path as UTF-8 text.

        Raises:
            DecodeError: If the stored bytes are not valid UTF-8
        """
        return Contents(await self._driver.read(path)).to_text()

    async def delete(self, path: StoragePath) -> None:
        """
        Delete the file at the given path.

        Raises:
            ResourceNotFoundError: If the file does not exist
        """
        await self._driver.delete(path)

    async def delete_directory(self, path: StoragePath) -> None:
        """
        Delete every file under the given directory.

        Raises:
            ResourceNotFoundError: If the directory holds no files
        """
        await self._driver.delete_directory(path)

    async def last_modified(self, path: StoragePath) -> datetime:
        """
        Get the last modification time of the file at the given path.

        Raises:
            ResourceNotFoundError: If the file does not exist
        """
        return await self._driver.last_modified(path)

    def __repr__(self) -> str:
        return f"Store({type(self._driver).__name__})"
