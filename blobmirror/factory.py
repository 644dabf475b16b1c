"""
Store factory.
Builds stores from typed backend configurations or from environment settings.
"""

import logging
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from blobmirror.config import BackendName, Settings, get_settings
from blobmirror.core.exceptions import StoreConfigurationError
from blobmirror.drivers.azure import AzureDriver
from blobmirror.drivers.base import Driver
from blobmirror.drivers.disk import DiskDriver
from blobmirror.drivers.gcs import GCSDriver
from blobmirror.drivers.inmem import InMemoryDriver
from blobmirror.drivers.s3 import S3Driver
from blobmirror.multi_store import MultiStore
from blobmirror.store import Store

logger = logging.getLogger(__name__)


# ===================
# Backend configurations
# ===================

class DiskConfig(BaseModel):
    """Local filesystem store rooted at a directory."""

    backend: Literal["local"] = "local"
    location: Path = Field(..., description="Root directory, created if missing")


class InMemoryConfig(BaseModel):
    """Process-local in-memory store."""

    backend: Literal["memory"] = "memory"


class S3Credentials(BaseModel):
    access_key: str
    secret_key: str
    session_token: str | None = None


class S3Config(BaseModel):
    """AWS S3 or S3-compatible (MinIO) store."""

    backend: Literal["s3"] = "s3"
    bucket: str
    region: str = "us-east-1"
    endpoint_url: str | None = None
    credentials: S3Credentials | None = Field(
        default=None,
        description="Explicit credentials; the default AWS chain is used when omitted",
    )
    create_bucket: bool = False


class AzureConfig(BaseModel):
    """Azure Blob Storage store."""

    backend: Literal["azure"] = "azure"
    container: str
    connection_string: str | None = None
    account: str | None = None
    access_key: str | None = None
    create_container: bool = False


class GCSConfig(BaseModel):
    """Google Cloud Storage store."""

    backend: Literal["gcs"] = "gcs"
    bucket: str
    project_id: str | None = None
    credentials_file: str | None = Field(
        default=None,
        description="Service account JSON key; anonymous access when omitted",
    )


StoreConfig = Annotated[
    Union[DiskConfig, InMemoryConfig, S3Config, AzureConfig, GCSConfig],
    Field(discriminator="backend"),
]


def _build_driver(config: StoreConfig) -> Driver:
    if isinstance(config, DiskConfig):
        return DiskDriver(config.location)
    if isinstance(config, InMemoryConfig):
        return InMemoryDriver()
    if isinstance(config, S3Config):
        credentials = config.credentials
        return S3Driver(
            bucket_name=config.bucket,
            endpoint_url=config.endpoint_url,
            access_key=credentials.access_key if credentials else None,
            secret_key=credentials.secret_key if credentials else None,
            session_token=credentials.session_token if credentials else None,
            region=config.region,
            create_bucket=config.create_bucket,
        )
    if isinstance(config, AzureConfig):
        return AzureDriver(
            container_name=config.container,
            connection_string=config.connection_string,
            account_name=config.account,
            access_key=config.access_key,
            create_container=config.create_container,
        )
    if isinstance(config, GCSConfig):
        return GCSDriver(
            bucket_name=config.bucket,
            project_id=config.project_id,
            credentials_file=config.credentials_file,
        )
    raise StoreConfigurationError(
        message=f"Unknown store configuration: {type(config).__name__}",
    )


def build_store(config: StoreConfig) -> Store:
    """
    Build a Store from a backend configuration.

    Args:
        config: One of DiskConfig, InMemoryConfig, S3Config, AzureConfig, GCSConfig

    Returns:
        Store wrapping a freshly constructed driver

    Raises:
        DriverError: If the driver cannot be initialized
        StoreConfigurationError: If the configuration is incomplete
    """
    logger.info(f"Building {config.backend} store")
    return Store(_build_driver(config))


def with_driver(driver: Driver) -> Store:
    """Wrap an already constructed driver."""
    return Store(driver)


def store_config_from_settings(backend: BackendName, settings: Settings | None = None) -> StoreConfig:
    """
    Build the configuration for a backend from environment settings.

    Raises:
        StoreConfigurationError: If the backend name is unknown
    """
    settings = settings or get_settings()
    backend = backend.lower()

    if backend == "local":
        return DiskConfig(location=Path(settings.LOCAL_STORAGE_PATH))
    elif backend == "memory":
        return InMemoryConfig()
    elif backend == "s3":
        credentials = None
        if settings.S3_ACCESS_KEY and settings.S3_SECRET_KEY:
            credentials = S3Credentials(
                access_key=settings.S3_ACCESS_KEY,
                secret_key=settings.S3_SECRET_KEY,
                session_token=settings.S3_SESSION_TOKEN,
            )
        return S3Config(
            bucket=settings.S3_BUCKET_NAME,
            region=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            credentials=credentials,
        )
    elif backend == "azure":
        return AzureConfig(
            container=settings.AZURE_CONTAINER_NAME,
            connection_string=settings.AZURE_STORAGE_CONNECTION_STRING,
            account=settings.AZURE_ACCOUNT_NAME,
            access_key=settings.AZURE_ACCESS_KEY,
        )
    elif backend == "gcs":
        return GCSConfig(
            bucket=settings.GCS_BUCKET_NAME,
            project_id=settings.GCS_PROJECT_ID,
            credentials_file=settings.GCS_CREDENTIALS_FILE,
        )
    else:
        raise StoreConfigurationError(
            message=f"Unknown storage backend: {backend}",
            details={"backend": backend},
        )


def build_multi_store(settings: Settings | None = None) -> MultiStore:
    """
    Assemble a MultiStore from environment settings.

    The primary store comes from STORAGE_BACKEND; each entry of
    SECONDARY_STORES is registered under its backend name.
    """
    settings = settings or get_settings()

    primary = build_store(store_config_from_settings(settings.STORAGE_BACKEND, settings))
    multi_store = MultiStore(primary)
    multi_store.add_stores({
        backend: build_store(store_config_from_settings(backend, settings))
        for backend in settings.SECONDARY_STORES
    })
    multi_store.set_mirrors_policy(settings.MIRROR_POLICY)

    logger.info(
        f"Multi store ready: primary={settings.STORAGE_BACKEND}, "
        f"secondaries={multi_store.store_names}, policy={multi_store.policy.value}"
    )
    return multi_store
