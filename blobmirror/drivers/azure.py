"""
Azure Blob Storage driver.
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Any

from azure.core.credentials import AzureNamedKeyCredential
from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    HttpResponseError,
    ResourceNotFoundError as AzureResourceNotFoundError,
    ServiceRequestError,
    ServiceResponseError,
)
from azure.storage.blob import BlobServiceClient

from blobmirror.core.exceptions import (
    AuthenticationFailedError,
    DriverError,
    GenericDriverError,
    InvalidPathError,
    NetworkError,
    ResourceNotFoundError,
    StoreConfigurationError,
)
from blobmirror.drivers.base import Driver, StoragePath, directory_prefix, normalize_path

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"BlobNotFound", "ContainerNotFound", "ResourceNotFound"}
AUTH_FAILURE_CODES = {"AuthenticationFailed", "InvalidAuthenticationInfo", "NoAuthenticationInformation"}
INVALID_NAME_CODES = {"InvalidResourceName", "InvalidUri"}


def translate_azure_error(error: AzureError, key: str, container: str) -> DriverError:
    """Map an azure-core failure onto the driver error taxonomy."""
    details = {"path": key, "container": container}

    if isinstance(error, AzureResourceNotFoundError):
        return ResourceNotFoundError(details=details)
    if isinstance(error, ClientAuthenticationError):
        return AuthenticationFailedError(str(error), details=details)
    if isinstance(error, HttpResponseError):
        error_code = getattr(error, "error_code", None) or ""
        status = getattr(error, "status_code", None)
        if error_code in NOT_FOUND_CODES or status == 404:
            return ResourceNotFoundError(details=details)
        if error_code in AUTH_FAILURE_CODES or status == 401:
            return AuthenticationFailedError(str(error), details=details)
        if error_code in INVALID_NAME_CODES:
            return InvalidPathError(str(error), details=details)
        return GenericDriverError(str(error), details=details)
    if isinstance(error, (ServiceRequestError, ServiceResponseError)):
        return NetworkError(str(error), details=details)
    return GenericDriverError(str(error), details=details)


class AzureDriver(Driver):
    """
    Azure Blob Storage driver.

    Authenticates with a connection string or an account name and access key.
    """

    def __init__(
        self,
        container_name: str,
        connection_string: str | None = None,
        account_name: str | None = None,
        access_key: str | None = None,
        service_client: Any | None = None,
        create_container: bool = False,
    ):
        """
        Initialize the Azure Blob driver.

        Args:
            container_name: Blob container name
            connection_string: Azure Storage connection string
            account_name: Storage account name (used with access_key)
            access_key: Storage account access key
            service_client: Pre-built BlobServiceClient; skips client construction
            create_container: Create the container if it does not exist

        Raises:
            StoreConfigurationError: If no way to authenticate was given
        """
        self.container_name = container_name

        if service_client is None:
            if connection_string:
                service_client = BlobServiceClient.from_connection_string(connection_string)
            elif account_name and access_key:
                service_client = BlobServiceClient(
                    account_url=f"https://{account_name}.blob.core.windows.net",
                    credential=AzureNamedKeyCredential(account_name, access_key),
                )
            else:
                raise StoreConfigurationError(
                    message="Azure credentials not configured",
                    details={"required": "connection_string or account_name + access_key"},
                )
        self.blob_service_client = service_client

        if create_container:
            self._ensure_container_exists()
        logger.info(f"Azure driver ready for container {self.container_name}")

    def _ensure_container_exists(self) -> None:
        """Create container if it doesn't exist."""
        try:
            container_client = self.blob_service_client.get_container_client(self.container_name)
            if not container_client.exists():
                container_client.create_container()
        except AzureError as e:
            raise translate_azure_error(e, "", self.container_name) from e

    def _get_blob_client(self, key: str):
        """Get blob client for a key."""
        return self.blob_service_client.get_blob_client(
            container=self.container_name,
            blob=key,
        )

    async def read(self, path: StoragePath) -> bytes:
        key = normalize_path(path)
        try:
            return self._get_blob_client(key).download_blob().readall()
        except AzureError as e:
            raise translate_azure_error(e, key, self.container_name) from e

    async def file_exists(self, path: StoragePath) -> bool:
        key = normalize_path(path)
        try:
            return self._get_blob_client(key).exists()
        except AzureError as e:
            error = translate_azure_error(e, key, self.container_name)
            if isinstance(error, ResourceNotFoundError):
                return False
            raise error from e

    async def write(self, path: StoragePath, content: bytes) -> None:
        key = normalize_path(path)
        try:
            self._get_blob_client(key).upload_blob(content, overwrite=True)
        except AzureError as e:
            raise translate_azure_error(e, key, self.container_name) from e

    async def delete(self, path: StoragePath) -> None:
        key = normalize_path(path)
        try:
            self._get_blob_client(key).delete_blob()
        except AzureError as e:
            raise translate_azure_error(e, key, self.container_name) from e

    async def delete_directory(self, path: StoragePath) -> None:
        prefix = directory_prefix(path)
        try:
            container_client = self.blob_service_client.get_container_client(self.container_name)
            names = [blob.name for blob in container_client.list_blobs(name_starts_with=prefix)]
        except AzureError as e:
            raise translate_azure_error(e, prefix, self.container_name) from e

        if not names:
            raise ResourceNotFoundError(details={"path": prefix, "container": self.container_name})

        for name in names:
            try:
                container_client.delete_blob(name)
            except AzureError as e:
                raise translate_azure_error(e, name, self.container_name) from e

    async def last_modified(self, path: StoragePath) -> datetime:
        key = normalize_path(path)
        try:
            properties = self._get_blob_client(key).get_blob_properties()
        except AzureError as e:
            raise translate_azure_error(e, key, self.container_name) from e

        modified = properties.last_modified
        if modified.tzinfo is None:
            return modified.replace(tzinfo=timezone.utc)
        return modified.astimezone(timezone.utc)

    def clone(self) -> "AzureDriver":
        return copy.copy(self)
