"""Framing of Modbus slave traffic in RTU and TCP/UDP (MBAP) form."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mbslave.codec.context import ReadContext, WriteContext
from mbslave.codec.crc import calc_crc_be
from mbslave.codec.errors import CodecError, ErrorKind, IncompleteFrame
from mbslave.codec.mbap import read_mbap, write_mbap
from mbslave.codec.pdu import read_pdu, write_pdu
from mbslave.frame import RequestFrame, ResponseFrame

_RTU_OVERHEAD = 3  # slave byte and CRC
_NET_OVERHEAD = 7  # MBAP header including the slave byte


class CodecMode(Enum):
    """Wire format of the frames."""

    RTU = "rtu"
    NET = "net"


class FlowType(Enum):
    """Whether input arrives as whole packets or as a byte stream."""

    PACKET = "packet"
    STREAM = "stream"


def _read_crc(ctx: ReadContext) -> int:
    crc = ctx.read_u16_be()
    if calc_crc_be(ctx.buffer[: ctx.processed()]) != 0:
        raise CodecError(ErrorKind.INVALID_CRC)
    return crc


def write_crc(ctx: WriteContext) -> int:
    """Append the CRC of everything written so far; return the CRC value."""
    crc = calc_crc_be(ctx.getvalue())
    ctx.write_u16_be(crc)
    return crc


def read_rtu_frame(ctx: ReadContext) -> RequestFrame:
    """Read an RTU request frame: slave byte, PDU and CRC.

    Raises IncompleteFrame if more bytes are needed and CodecError if the
    frame is invalid.
    """
    slave = ctx.read_u8()
    pdu = read_pdu(ctx)
    _read_crc(ctx)
    return RequestFrame(slave, pdu, id=0)


def read_net_frame(ctx: ReadContext) -> RequestFrame:
    """Read a request frame with an MBAP header."""
    header = read_mbap(ctx)
    pdu = read_pdu(ctx)
    return RequestFrame(header.slave, pdu, id=header.id)


def _write_rtu_frame(ctx: WriteContext, frame: ResponseFrame) -> None:
    ctx.write_u8(frame.slave)
    write_pdu(ctx, frame.pdu)
    write_crc(ctx)


def _write_net_frame(ctx: WriteContext, frame: ResponseFrame) -> None:
    write_mbap(ctx, frame)
    ctx.write_u8(frame.slave)
    write_pdu(ctx, frame.pdu)


@dataclass(frozen=True)
class SlaveCodec:
    """Decodes request frames and encodes response frames."""

    mode: CodecMode
    flow: FlowType

    @classmethod
    def rtu(cls) -> SlaveCodec:
        """Codec for a serial RTU line."""
        return cls(CodecMode.RTU, FlowType.STREAM)

    @classmethod
    def tcp(cls) -> SlaveCodec:
        """Codec for a TCP connection."""
        return cls(CodecMode.NET, FlowType.STREAM)

    @classmethod
    def udp(cls) -> SlaveCodec:
        """Codec for UDP datagrams."""
        return cls(CodecMode.NET, FlowType.PACKET)

    def decode(self, buffer: bytearray) -> Optional[RequestFrame]:
        """Decode one frame from the front of ``buffer``.

        On success the frame's bytes are removed from ``buffer``. Returns
        None if the frame is not complete yet; in packet mode the buffer is
        then discarded. On a CodecError the buffer is cleared.
        """
        ctx = ReadContext(buffer)
        reader = read_rtu_frame if self.mode is CodecMode.RTU else read_net_frame
        try:
            frame = reader(ctx)
        except IncompleteFrame:
            if self.flow is FlowType.PACKET:
                buffer.clear()
            return None
        except CodecError:
            buffer.clear()
            raise
        except ValueError as exc:
            buffer.clear()
            raise CodecError.from_exception(exc) from exc
        del buffer[: ctx.processed()]
        return frame

    def encode(self, frame: ResponseFrame) -> bytes:
        """Encode a response frame into wire bytes."""
        if self.mode is CodecMode.RTU:
            ctx = WriteContext(len(frame.pdu) + _RTU_OVERHEAD)
            _write_rtu_frame(ctx, frame)
        else:
            ctx = WriteContext(len(frame.pdu) + _NET_OVERHEAD)
            _write_net_frame(ctx, frame)
        return ctx.getvalue()