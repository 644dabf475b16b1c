"""
S3-compatible storage driver.
Supports AWS S3 and S3-compatible services like MinIO.
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    CredentialRetrievalError,
    HTTPClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

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

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}
AUTH_FAILURE_CODES = {
    "401",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
    "TokenRefreshRequired",
    "InvalidClientTokenId",
}
INVALID_KEY_CODES = {"KeyTooLongError", "InvalidObjectName"}

S3_ERRORS = (ClientError, BotoCoreError)

# delete_objects accepts at most 1000 keys per request
DELETE_BATCH_SIZE = 1000


def translate_s3_error(error: Exception, key: str, bucket: str) -> DriverError:
    """Map a botocore failure onto the driver error taxonomy."""
    details = {"path": key, "bucket": bucket}

    if isinstance(error, ClientError):
        error_code = str(error.response.get("Error", {}).get("Code", ""))
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        if error_code in NOT_FOUND_CODES or status == 404:
            return ResourceNotFoundError(details=details)
        if error_code in AUTH_FAILURE_CODES or status == 401:
            return AuthenticationFailedError(str(error), details=details)
        if error_code in INVALID_KEY_CODES:
            return InvalidPathError(str(error), details=details)
        return GenericDriverError(str(error), details=details)

    if isinstance(error, (NoCredentialsError, PartialCredentialsError, CredentialRetrievalError)):
        return AuthenticationFailedError(str(error), details=details)
    if isinstance(error, (BotoConnectionError, HTTPClientError)):
        return NetworkError(str(error), details=details)
    return GenericDriverError(str(error), details=details)


class S3Driver(Driver):
    """
    S3-compatible object storage driver.

    Directory semantics are emulated with "/"-separated key prefixes.
    """

    def __init__(
        self,
        bucket_name: str,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        session_token: str | None = None,
        region: str | None = None,
        client: Any | None = None,
        create_bucket: bool = False,
    ):
        """
        Initialize the S3 driver.

        Args:
            bucket_name: S3 bucket name
            endpoint_url: S3 endpoint URL (for MinIO, custom S3-compatible services)
            access_key: AWS access key ID
            secret_key: AWS secret access key
            session_token: Optional session token for temporary credentials
            region: AWS region
            client: Pre-built boto3 S3 client; skips client construction
            create_bucket: Create the bucket if it does not exist
        """
        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url
        self.region = region

        if client is None:
            config = Config(
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "standard"},
                s3={"addressing_style": "path"},
            )
            client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                aws_session_token=session_token,
                region_name=region,
                config=config,
            )
        self.client = client

        if create_bucket:
            self._ensure_bucket_exists()
        logger.info(f"S3 driver ready for bucket {self.bucket_name}")

    def _ensure_bucket_exists(self) -> None:
        """Create bucket if it doesn't exist."""
        try:
            self.client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            if error_code not in NOT_FOUND_CODES:
                raise translate_s3_error(e, "", self.bucket_name) from e
            try:
                if self.region and self.region != "us-east-1":
                    self.client.create_bucket(
                        Bucket=self.bucket_name,
                        CreateBucketConfiguration={"LocationConstraint": self.region},
                    )
                else:
                    self.client.create_bucket(Bucket=self.bucket_name)
            except ClientError as create_error:
                raise translate_s3_error(create_error, "", self.bucket_name) from create_error

    def _list_keys(self, prefix: str) -> list[str]:
        keys = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
            keys.extend(item["Key"] for item in page.get("Contents", []))
        return keys

    async def read(self, path: StoragePath) -> bytes:
        key = normalize_path(path)
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except S3_ERRORS as e:
            raise translate_s3_error(e, key, self.bucket_name) from e

    async def file_exists(self, path: StoragePath) -> bool:
        key = normalize_path(path)
        try:
            self.client.head_object(Bucket=self.bucket_name, Key=key)
            return True
        except S3_ERRORS as e:
            error = translate_s3_error(e, key, self.bucket_name)
            if isinstance(error, ResourceNotFoundError):
                return False
            raise error from e

    async def write(self, path: StoragePath, content: bytes) -> None:
        key = normalize_path(path)
        try:
            self.client.put_object(Bucket=self.bucket_name, Key=key, Body=content)
        except S3_ERRORS as e:
            raise translate_s3_error(e, key, self.bucket_name) from e

    async def delete(self, path: StoragePath) -> None:
        key = normalize_path(path)
        # S3 deletes are idempotent, so existence is checked first
        if not await self.file_exists(key):
            raise ResourceNotFoundError(details={"path": key, "bucket": self.bucket_name})

        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
        except S3_ERRORS as e:
            raise translate_s3_error(e, key, self.bucket_name) from e

    async def delete_directory(self, path: StoragePath) -> None:
        prefix = directory_prefix(path)
        try:
            keys = self._list_keys(prefix)
        except S3_ERRORS as e:
            raise translate_s3_error(e, prefix, self.bucket_name) from e

        if not keys:
            raise ResourceNotFoundError(details={"path": prefix, "bucket": self.bucket_name})

        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start:start + DELETE_BATCH_SIZE]
            try:
                response = self.client.delete_objects(
                    Bucket=self.bucket_name,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                )
            except S3_ERRORS as e:
                raise translate_s3_error(e, prefix, self.bucket_name) from e

            errors = response.get("Errors") or []
            if errors:
                raise GenericDriverError(
                    f"Failed to delete {len(errors)} objects under {prefix}",
                    details={"path": prefix, "bucket": self.bucket_name, "errors": errors},
                )

    async def last_modified(self, path: StoragePath) -> datetime:
        key = normalize_path(path)
        try:
            response = self.client.head_object(Bucket=self.bucket_name, Key=key)
        except S3_ERRORS as e:
            raise translate_s3_error(e, key, self.bucket_name) from e

        modified = response.get("LastModified")
        if modified is None:
            raise GenericDriverError(
                "last modified is missing",
                details={"path": key, "bucket": self.bucket_name},
            )
        if modified.tzinfo is None:
            return modified.replace(tzinfo=timezone.utc)
        return modified.astimezone(timezone.utc)

    def clone(self) -> "S3Driver":
        # The copy shares the boto3 client
        return copy.copy(self)
