"""
Tests for the Google Cloud Storage driver against a mocked storage.Client.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests
from google.api_core.exceptions import Forbidden, InternalServerError, NotFound, Unauthorized

from blobmirror.core.exceptions import (
    AuthenticationFailedError,
    GenericDriverError,
    InvalidPathError,
    NetworkError,
    ResourceNotFoundError,
)
from blobmirror.drivers.gcs import GCSDriver


def listed_blob(name: str) -> MagicMock:
    blob = MagicMock()
    blob.name = name
    return blob


@pytest.fixture
def client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def bucket(client) -> MagicMock:
    return client.bucket.return_value


@pytest.fixture
def blob(bucket) -> MagicMock:
    return bucket.blob.return_value


@pytest.fixture
def driver(client) -> GCSDriver:
    return GCSDriver(bucket_name="assets", client=client)


class TestGCSOperations:

    def test_missing_credentials_file(self, tmp_path):
        with pytest.raises(InvalidPathError):
            GCSDriver(bucket_name="assets", credentials_file=str(tmp_path / "missing.json"))

    def test_binds_bucket(self, client: MagicMock):
        GCSDriver(bucket_name="assets", client=client)

        client.bucket.assert_called_once_with("assets")

    @pytest.mark.asyncio
    async def test_read(self, driver: GCSDriver, bucket: MagicMock, blob: MagicMock):
        blob.download_as_bytes.return_value = b"data"

        assert await driver.read("a/b.txt") == b"data"
        bucket.blob.assert_called_with("a/b.txt")

    @pytest.mark.asyncio
    async def test_write(self, driver: GCSDriver, blob: MagicMock):
        await driver.write("a.txt", b"data")

        blob.upload_from_string.assert_called_once_with(b"data")

    @pytest.mark.asyncio
    async def test_file_exists(self, driver: GCSDriver, blob: MagicMock):
        blob.exists.return_value = True

        assert await driver.file_exists("a.txt") is True

    @pytest.mark.asyncio
    async def test_delete(self, driver: GCSDriver, blob: MagicMock):
        await driver.delete("a.txt")

        blob.delete.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_delete_directory(self, driver: GCSDriver, client: MagicMock):
        first, second = listed_blob("bar/1.txt"), listed_blob("bar/sub/2.txt")
        client.list_blobs.return_value = iter([first, second])

        await driver.delete_directory("bar")

        client.list_blobs.assert_called_once_with("assets", prefix="bar/")
        first.delete.assert_called_once_with()
        second.delete.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_delete_directory_empty(self, driver: GCSDriver, client: MagicMock):
        client.list_blobs.return_value = iter([])

        with pytest.raises(ResourceNotFoundError):
            await driver.delete_directory("bar")

    @pytest.mark.asyncio
    async def test_delete_directory_failure_names_blob(self, driver: GCSDriver, client: MagicMock):
        broken = listed_blob("bar/1.txt")
        broken.delete.side_effect = Forbidden("denied")
        client.list_blobs.return_value = iter([broken])

        with pytest.raises(GenericDriverError) as exc_info:
            await driver.delete_directory("bar")

        assert exc_info.value.details["path"] == "bar/1.txt"

    @pytest.mark.asyncio
    async def test_last_modified(self, driver: GCSDriver, bucket: MagicMock):
        stamp = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
        bucket.get_blob.return_value = MagicMock(updated=stamp)

        assert await driver.last_modified("a.txt") == stamp

    @pytest.mark.asyncio
    async def test_last_modified_missing_blob(self, driver: GCSDriver, bucket: MagicMock):
        bucket.get_blob.return_value = None

        with pytest.raises(ResourceNotFoundError):
            await driver.last_modified("a.txt")

    def test_clone_shares_client(self, driver: GCSDriver, client: MagicMock):
        duplicate = driver.clone()

        assert duplicate is not driver
        assert duplicate.client is client


class TestGCSErrorTranslation:

    @pytest.mark.asyncio
    async def test_not_found(self, driver: GCSDriver, blob: MagicMock):
        blob.download_as_bytes.side_effect = NotFound("No such object: assets/a.txt")

        with pytest.raises(ResourceNotFoundError):
            await driver.read("a.txt")

    @pytest.mark.asyncio
    async def test_delete_missing(self, driver: GCSDriver, blob: MagicMock):
        blob.delete.side_effect = NotFound("No such object: assets/a.txt")

        with pytest.raises(ResourceNotFoundError):
            await driver.delete("a.txt")

    @pytest.mark.asyncio
    async def test_unauthorized(self, driver: GCSDriver, blob: MagicMock):
        blob.upload_from_string.side_effect = Unauthorized("invalid credentials")

        with pytest.raises(AuthenticationFailedError):
            await driver.write("a.txt", b"x")

    @pytest.mark.asyncio
    async def test_connection_failure(self, driver: GCSDriver, blob: MagicMock):
        blob.exists.side_effect = requests.exceptions.ConnectionError("Connection refused")

        with pytest.raises(NetworkError):
            await driver.file_exists("a.txt")

    @pytest.mark.asyncio
    async def test_server_error(self, driver: GCSDriver, blob: MagicMock):
        original = InternalServerError("backend error")
        blob.upload_from_string.side_effect = original

        with pytest.raises(GenericDriverError) as exc_info:
            await driver.write("a.txt", b"x")

        assert exc_info.value.__cause__ is original
