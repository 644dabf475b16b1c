"""
Error taxonomy for blobmirror.

Every backend driver translates its native failures into one of the
DriverError subclasses below, so callers can branch on the kind of
failure without matching on messages. Mirror fan-out failures wrap the
per-store DriverErrors.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Backend-independent classification of a driver failure."""

    RESOURCE_NOT_FOUND = "resource_not_found"
    INVALID_PATH = "invalid_path"
    DECODE_ERROR = "decode_error"
    NETWORK = "network_error"
    AUTHENTICATION_FAILED = "authentication_failed"
    ANY = "driver_error"


class StorageError(Exception):
    """Base exception for all blobmirror errors."""

    def __init__(
        self,
        error: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.error = error
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dictionary."""
        response = {
            "error": self.error,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


# ===================
# Driver errors
# ===================

class DriverError(StorageError):
    """A single storage operation failed on one backend."""

    kind: ErrorKind = ErrorKind.ANY
    default_message = "Storage driver error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            error=self.kind.value,
            message=message or self.default_message,
            details=details,
        )


class ResourceNotFoundError(DriverError):
    """Nothing exists at the requested path."""

    kind = ErrorKind.RESOURCE_NOT_FOUND
    default_message = "Resource not found"


class InvalidPathError(DriverError):
    """The path cannot be represented as a key of the backend."""

    kind = ErrorKind.INVALID_PATH
    default_message = "The provided path contains invalid characters"


class DecodeError(DriverError):
    """Stored content could not be decoded."""

    kind = ErrorKind.DECODE_ERROR
    default_message = "Failed to decode file contents"


class NetworkError(DriverError):
    """Connection, timeout or dispatch failure talking to the backend."""

    kind = ErrorKind.NETWORK
    default_message = "Network error"


class AuthenticationFailedError(DriverError):
    """The backend rejected or could not obtain credentials."""

    kind = ErrorKind.AUTHENTICATION_FAILED
    default_message = "Authentication failed"


class GenericDriverError(DriverError):
    """
    Any other backend failure.

    The original message is kept verbatim; drivers chain the native
    exception as ``__cause__``.
    """

    kind = ErrorKind.ANY


# ===================
# Mirror errors
# ===================

class MirrorError(StorageError):
    """A mirrored operation failed on one or more stores."""


class MirrorFailedOnStoresError(MirrorError):
    """Raised under ContinueOnFailure with every store that failed."""

    def __init__(self, failures: dict[str, DriverError]):
        self.failures = dict(sorted(failures.items()))
        super().__init__(
            error="mirror_failed",
            message=f"Mirror failed on stores: {', '.join(self.failures)}",
            details={
                "stores": {name: err.to_dict() for name, err in self.failures.items()},
            },
        )


class MirrorFailedOnStoreError(MirrorError):
    """Raised under StopOnFailure with the first store that failed."""

    def __init__(self, store_name: str, cause: DriverError):
        self.store_name = store_name
        self.cause = cause
        super().__init__(
            error="mirror_failed",
            message=f"Mirror failed on store '{store_name}': {cause.message}",
            details={"store": store_name, "cause": cause.to_dict()},
        )


# ===================
# Registry / configuration errors
# ===================

class UnknownStoresError(StorageError):
    """A mirror group references stores that are not registered."""

    def __init__(self, names: list[str]):
        self.names = list(names)
        super().__init__(
            error="unknown_stores",
            message=f"the stores: {','.join(self.names)} not defined",
            details={"stores": self.names},
        )


class StoreConfigurationError(StorageError):
    """A store could not be built from its configuration."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="configuration_error",
            message=message,
            details=details,
        )
