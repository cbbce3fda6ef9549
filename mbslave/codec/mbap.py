"""The MBAP header used by Modbus over TCP and UDP."""

from __future__ import annotations

from dataclasses import dataclass

from mbslave.codec.context import ReadContext, WriteContext
from mbslave.codec.errors import CodecError, ErrorKind
from mbslave.data import MAX_DATA_SIZE
from mbslave.frame import ResponseFrame


@dataclass(frozen=True)
class Mbap:
    """A decoded MBAP header."""

    id: int
    proto: int
    length: int
    slave: int


def read_mbap(ctx: ReadContext) -> Mbap:
    """Read and validate an MBAP header.

    Raises IncompleteFrame if the header is not complete, and CodecError
    if it is invalid.
    """
    mbap = Mbap(
        id=ctx.read_u16_be(),
        proto=ctx.read_u16_be(),
        length=ctx.read_u16_be(),
        slave=ctx.read_u8(),
    )
    _validate(mbap)
    return mbap


def write_mbap(ctx: WriteContext, frame: ResponseFrame) -> None:
    """Write the header fields that precede the slave byte."""
    ctx.write_u16_be(frame.id)
    ctx.write_u16_be(0)
    ctx.write_u16_be(len(frame.pdu) + 1)


def _validate(mbap: Mbap) -> None:
    if mbap.proto != 0:
        raise CodecError(ErrorKind.INVALID_VERSION, f"protocol {mbap.proto}")
    if mbap.length < 2 or mbap.length > MAX_DATA_SIZE:
        raise CodecError(ErrorKind.INVALID_DATA, f"length {mbap.length}")