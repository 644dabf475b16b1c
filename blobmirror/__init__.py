"""
blobmirror

Backend-agnostic object storage with mirroring of writes and deletes
across a primary store and any number of secondary stores.
"""

from blobmirror.core.contents import Contents
from blobmirror.factory import (
    AzureConfig,
    DiskConfig,
    GCSConfig,
    InMemoryConfig,
    S3Config,
    S3Credentials,
    StoreConfig,
    build_multi_store,
    build_store,
    with_driver,
)
from blobmirror.multi_store import Mirror, MultiStore, Policy
from blobmirror.store import Store

__version__ = "0.1.0"

__all__ = [
    "Contents",
    "Store",
    "MultiStore",
    "Mirror",
    "Policy",
    "StoreConfig",
    "DiskConfig",
    "InMemoryConfig",
    "S3Config",
    "S3Credentials",
    "AzureConfig",
    "GCSConfig",
    "build_store",
    "build_multi_store",
    "with_driver",
]
