"""
Storage drivers for blobmirror.
Supports multiple backends: Local filesystem, in-memory, S3/MinIO, Azure Blob, GCS.
"""

from blobmirror.drivers.base import Driver, StoragePath, directory_prefix, normalize_path
from blobmirror.drivers.disk import DiskDriver
from blobmirror.drivers.inmem import InMemoryDriver
from blobmirror.drivers.s3 import S3Driver
from blobmirror.drivers.azure import AzureDriver
from blobmirror.drivers.gcs import GCSDriver

__all__ = [
    "Driver",
    "StoragePath",
    "normalize_path",
    "directory_prefix",
    "DiskDriver",
    "InMemoryDriver",
    "S3Driver",
    "AzureDriver",
    "GCSDriver",
]
