"""Cursors for reading and writing frame bytes."""

from __future__ import annotations

from mbslave.codec.errors import CodecError, ErrorKind, IncompleteFrame

# Register payloads are stored little-endian (see mbslave.data).
_STORED_ORDER = "little"


class ReadContext:
    """Reads values from a byte buffer, tracking the position.

    Reads past the end raise :class:`IncompleteFrame` and leave the
    position unchanged.
    """

    def __init__(self, buffer: bytes) -> None:
        self.buffer = bytes(buffer)
        self._pos = 0

    def read_bytes(self, size: int) -> bytes:
        """Read ``size`` bytes."""
        self.require(size)
        chunk = self.buffer[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def read_u8(self) -> int:
        """Read one byte."""
        return self.read_bytes(1)[0]

    def read_u16(self) -> int:
        """Read a 16-bit value in stored (little-endian) order."""
        return int.from_bytes(self.read_bytes(2), _STORED_ORDER)

    def read_u16_be(self) -> int:
        """Read a big-endian 16-bit value."""
        return int.from_bytes(self.read_bytes(2), "big")

    def remaining(self) -> int:
        """Number of bytes not yet read."""
        return len(self.buffer) - self._pos

    def processed(self) -> int:
        """Number of bytes already read."""
        return self._pos

    def require(self, size: int) -> None:
        """Raise IncompleteFrame unless ``size`` more bytes are available."""
        if self.remaining() < size:
            raise IncompleteFrame(
                f"need {size} bytes, {self.remaining()} available"
            )


class WriteContext:
    """Writes values into a fixed-size buffer.

    Writes that do not fit raise :class:`CodecError` with
    ``BUFFER_TOO_SMALL`` and write nothing.
    """

    def __init__(self, size: int) -> None:
        self._buffer = bytearray(size)
        self._pos = 0

    def _reserve(self, size: int) -> None:
        if self.remaining() < size:
            raise CodecError(
                ErrorKind.BUFFER_TOO_SMALL,
                f"need {size} bytes, {self.remaining()} free",
            )

    def write_bytes(self, data: bytes) -> None:
        """Write raw bytes."""
        data = bytes(data)
        self._reserve(len(data))
        self._buffer[self._pos : self._pos + len(data)] = data
        self._pos += len(data)

    def write_u8(self, value: int) -> None:
        """Write one byte."""
        self.write_bytes(bytes((value,)))

    def write_u16(self, value: int) -> None:
        """Write a 16-bit value in stored (little-endian) order."""
        self.write_bytes(value.to_bytes(2, _STORED_ORDER))

    def write_u16_be(self, value: int) -> None:
        """Write a big-endian 16-bit value."""
        self.write_bytes(value.to_bytes(2, "big"))

    def write_registers_be(self, data: bytes) -> None:
        """Write stored-order registers as big-endian values."""
        data = bytes(data)
        if len(data) % 2:
            raise ValueError("register data must have an even length")
        swapped = bytearray(len(data))
        swapped[0::2] = data[1::2]
        swapped[1::2] = data[0::2]
        self.write_bytes(swapped)

    def remaining(self) -> int:
        """Free space left in the buffer."""
        return len(self._buffer) - self._pos

    def processed(self) -> int:
        """Number of bytes written."""
        return self._pos

    def getvalue(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buffer[: self._pos])