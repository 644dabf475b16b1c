"""
Byte buffer holder with a fallible UTF-8 text projection.
"""

from blobmirror.core.exceptions import DecodeError


class Contents:
    """Opaque byte content read from or written to a store."""

    __slots__ = ("_data",)

    def __init__(self, data: bytes = b""):
        self._data = bytes(data)

    @classmethod
    def from_value(cls, value: "bytes | bytearray | memoryview | str | Contents") -> "Contents":
        """
        Build Contents from caller input.

        Strings are encoded as UTF-8; any bytes-like object is copied.

        Raises:
            TypeError: If the value is neither text nor bytes-like
        """
        if isinstance(value, Contents):
            return value
        if isinstance(value, str):
            return cls(value.encode("utf-8"))
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(bytes(value))
        raise TypeError(f"Unsupported content type: {type(value).__name__}")

    def to_bytes(self) -> bytes:
        return self._data

    def to_text(self) -> str:
        """
        Decode the content as UTF-8.

        Raises:
            DecodeError: If the bytes are not valid UTF-8
        """
        try:
            return self._data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(details={"reason": str(e)}) from e

    def __bytes__(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Contents):
            return self._data == other._data
        if isinstance(other, (bytes, bytearray)):
            return self._data == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._data)

    def __repr__(self) -> str:
        return f"Contents({len(self._data)} bytes)"
