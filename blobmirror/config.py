"""
Configuration management for blobmirror.
Uses pydantic-settings for environment-based configuration.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

BackendName = Literal["local", "memory", "s3", "azure", "gcs"]


class Settings(BaseSettings):
    """Settings loaded from environment variables (or a .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Store selection
    STORAGE_BACKEND: BackendName = "local"
    # Secondary stores, registered under their backend name (JSON list in env)
    SECONDARY_STORES: list[BackendName] = []
    MIRROR_POLICY: Literal["continue_on_failure", "stop_on_failure"] = "continue_on_failure"

    # Local Storage Settings
    LOCAL_STORAGE_PATH: str = "./storage"

    # S3/MinIO Settings
    S3_ENDPOINT_URL: str | None = None
    S3_ACCESS_KEY: str | None = None
    S3_SECRET_KEY: str | None = None
    S3_SESSION_TOKEN: str | None = None
    S3_BUCKET_NAME: str = "blobmirror"
    S3_REGION: str = "us-east-1"

    # Azure Blob Settings
    AZURE_STORAGE_CONNECTION_STRING: str | None = None
    AZURE_ACCOUNT_NAME: str | None = None
    AZURE_ACCESS_KEY: str | None = None
    AZURE_CONTAINER_NAME: str = "blobmirror"

    # Google Cloud Storage Settings
    GCS_BUCKET_NAME: str = "blobmirror"
    GCS_PROJECT_ID: str | None = None
    GCS_CREDENTIALS_FILE: str | None = None

    # Logging
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings.
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging from LOG_LEVEL."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
