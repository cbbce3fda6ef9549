"""Errors raised while decoding and encoding Modbus frames."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """What went wrong in the codec."""

    INVALID_DATA = "invalid data"
    INVALID_VERSION = "invalid protocol version"
    BUFFER_TOO_SMALL = "buffer too small"
    INVALID_CRC = "invalid crc"
    OTHER = "other error"


class CodecError(Exception):
    """A frame could not be decoded or encoded."""

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind

    @classmethod
    def from_exception(cls, exc: BaseException) -> CodecError:
        """Classify an arbitrary exception as a codec error."""
        if isinstance(exc, CodecError):
            return exc
        if isinstance(exc, EOFError):
            kind = ErrorKind.BUFFER_TOO_SMALL
        elif isinstance(exc, ValueError):
            kind = ErrorKind.INVALID_DATA
        else:
            kind = ErrorKind.OTHER
        error = cls(kind, str(exc))
        error.__cause__ = exc
        return error


class IncompleteFrame(EOFError):
    """Not enough bytes have arrived yet to finish reading a frame."""