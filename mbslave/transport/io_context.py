"""Input and output buffers of a transport, bound to a codec."""

from __future__ import annotations

from typing import Optional

from mbslave.codec.errors import CodecError, ErrorKind
from mbslave.codec.slave import SlaveCodec
from mbslave.frame import RequestFrame, ResponseFrame


class FrameError(ValueError):
    """Received or outgoing data could not be framed."""


class IoContext:
    """Buffers incoming bytes and holds the last encoded response."""

    def __init__(self, codec: SlaveCodec) -> None:
        self.codec = codec
        self.input = bytearray()
        self.output = b""

    def decode(self) -> Optional[RequestFrame]:
        """Decode a request from the input buffer, or None if incomplete."""
        try:
            return self.codec.decode(self.input)
        except CodecError as err:
            message = "bad CRC" if err.kind is ErrorKind.INVALID_CRC else "bad input"
            raise FrameError(message) from err

    def encode(self, response: ResponseFrame) -> None:
        """Encode ``response`` into the output buffer."""
        try:
            self.output = self.codec.encode(response)
        except CodecError as err:
            raise FrameError("codec error") from err

    def reset(self) -> None:
        """Discard both buffers."""
        self.input.clear()
        self.output = b""