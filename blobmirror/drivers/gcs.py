"""
Google Cloud Storage driver.
"""

import copy
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import requests
from google.api_core.exceptions import GoogleAPIError, NotFound, RetryError, Unauthorized
from google.auth.exceptions import GoogleAuthError, TransportError
from google.cloud import storage

from blobmirror.core.exceptions import (
    AuthenticationFailedError,
    DriverError,
    GenericDriverError,
    InvalidPathError,
    NetworkError,
    ResourceNotFoundError,
)
from blobmirror.drivers.base import Driver, StoragePath, directory_prefix, normalize_path

logger = logging.getLogger(__name__)

GCS_ERRORS = (GoogleAPIError, GoogleAuthError, requests.exceptions.RequestException)


def translate_gcs_error(error: Exception, key: str, bucket: str) -> DriverError:
    """Map a Google Cloud client failure onto the driver error taxonomy."""
    details = {"path": key, "bucket": bucket}

    if isinstance(error, NotFound):
        return ResourceNotFoundError(details=details)
    if isinstance(error, Unauthorized):
        return AuthenticationFailedError(str(error), details=details)
    if isinstance(error, TransportError):
        return NetworkError(str(error), details=details)
    if isinstance(error, GoogleAuthError):
        return AuthenticationFailedError(str(error), details=details)
    if isinstance(error, (RetryError, requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return NetworkError(str(error), details=details)
    return GenericDriverError(str(error), details=details)


class GCSDriver(Driver):
    """
    Google Cloud Storage driver.

    Uses an anonymous client unless a service account credentials file is given.
    """

    def __init__(
        self,
        bucket_name: str,
        project_id: str | None = None,
        credentials_file: str | None = None,
        client: Any | None = None,
    ):
        """
        Initialize the GCS driver.

        Args:
            bucket_name: GCS bucket name
            project_id: Google Cloud project owning the bucket
            credentials_file: Path to a service account JSON key file
            client: Pre-built storage.Client; skips client construction

        Raises:
            InvalidPathError: If the credentials file does not exist
            DriverError: If the credentials file cannot be loaded
        """
        self.bucket_name = bucket_name
        self.project_id = project_id

        if client is None:
            if credentials_file:
                if not Path(credentials_file).is_file():
                    raise InvalidPathError(
                        message="Credentials file not found",
                        details={"path": credentials_file},
                    )
                try:
                    client = storage.Client.from_service_account_json(
                        credentials_file, project=project_id
                    )
                except (ValueError, GoogleAuthError) as e:
                    raise GenericDriverError(str(e), details={"path": credentials_file}) from e
            else:
                client = storage.Client.create_anonymous_client()
        self.client = client
        self.bucket = client.bucket(bucket_name)
        logger.info(f"GCS driver ready for bucket {self.bucket_name}")

    async def read(self, path: StoragePath) -> bytes:
        key = normalize_path(path)
        try:
            return self.bucket.blob(key).download_as_bytes()
        except GCS_ERRORS as e:
            raise translate_gcs_error(e, key, self.bucket_name) from e

    async def file_exists(self, path: StoragePath) -> bool:
        key = normalize_path(path)
        try:
            return self.bucket.blob(key).exists()
        except GCS_ERRORS as e:
            error = translate_gcs_error(e, key, self.bucket_name)
            if isinstance(error, ResourceNotFoundError):
                return False
            raise error from e

    async def write(self, path: StoragePath, content: bytes) -> None:
        key = normalize_path(path)
        try:
            self.bucket.blob(key).upload_from_string(content)
        except GCS_ERRORS as e:
            raise translate_gcs_error(e, key, self.bucket_name) from e

    async def delete(self, path: StoragePath) -> None:
        key = normalize_path(path)
        try:
            self.bucket.blob(key).delete()
        except GCS_ERRORS as e:
            raise translate_gcs_error(e, key, self.bucket_name) from e

    async def delete_directory(self, path: StoragePath) -> None:
        prefix = directory_prefix(path)
        try:
            blobs = list(self.client.list_blobs(self.bucket_name, prefix=prefix))
        except GCS_ERRORS as e:
            raise translate_gcs_error(e, prefix, self.bucket_name) from e

        if not blobs:
            raise ResourceNotFoundError(details={"path": prefix, "bucket": self.bucket_name})

        for blob in blobs:
            try:
                blob.delete()
            except GCS_ERRORS as e:
                raise translate_gcs_error(e, blob.name, self.bucket_name) from e

    async def last_modified(self, path: StoragePath) -> datetime:
        key = normalize_path(path)
        try:
            blob = self.bucket.get_blob(key)
        except GCS_ERRORS as e:
            raise translate_gcs_error(e, key, self.bucket_name) from e

        if blob is None:
            raise ResourceNotFoundError(details={"path": key, "bucket": self.bucket_name})

        modified = blob.updated or blob.time_created
        if modified is None:
            raise GenericDriverError(
                "last modified is missing",
                details={"path": key, "bucket": self.bucket_name},
            )
        if modified.tzinfo is None:
            return modified.replace(tzinfo=timezone.utc)
        return modified.astimezone(timezone.utc)

    def clone(self) -> "GCSDriver":
        return copy.copy(self)
