"""Core types and exceptions for blobmirror."""

from blobmirror.core.contents import Contents
from blobmirror.core.exceptions import (
    AuthenticationFailedError,
    DecodeError,
    DriverError,
    ErrorKind,
    GenericDriverError,
    InvalidPathError,
    MirrorError,
    MirrorFailedOnStoreError,
    MirrorFailedOnStoresError,
    NetworkError,
    ResourceNotFoundError,
    StorageError,
    StoreConfigurationError,
    UnknownStoresError,
)

__all__ = [
    "Contents",
    "ErrorKind",
    "StorageError",
    "DriverError",
    "ResourceNotFoundError",
    "InvalidPathError",
    "DecodeError",
    "NetworkError",
    "AuthenticationFailedError",
    "GenericDriverError",
    "MirrorError",
    "MirrorFailedOnStoresError",
    "MirrorFailedOnStoreError",
    "UnknownStoresError",
    "StoreConfigurationError",
]
