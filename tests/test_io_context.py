import pytest

from mbslave.codec.slave import SlaveCodec
from mbslave.data import Data, PackedCoils
from mbslave.frame import ResponseFrame
from mbslave.pdu import RawResponse, ReadCoilsRequest, read_coils_response
from mbslave.transport.io_context import FrameError, IoContext

RTU_FC1 = bytes([0x11, 0x01, 0x00, 0x13, 0x00, 0x25, 0x0E, 0x84])


def test_decode_complete_frame():
    ctx = IoContext(SlaveCodec.rtu())
    ctx.input += RTU_FC1
    frame = ctx.decode()
    assert frame.pdu == ReadCoilsRequest(0x13, 37)
    assert ctx.input == bytearray()


def test_decode_incomplete_keeps_input():
    ctx = IoContext(SlaveCodec.rtu())
    ctx.input += RTU_FC1[:-1]
    assert ctx.decode() is None
    assert bytes(ctx.input) == RTU_FC1[:-1]


def test_decode_bad_crc():
    ctx = IoContext(SlaveCodec.rtu())
    ctx.input += bytes([0x11, 0x01, 0x00, 0x13, 0x00, 0x25, 0x0E, 0x85])
    with pytest.raises(FrameError, match="bad CRC"):
        ctx.decode()
    assert ctx.input == bytearray()


def test_decode_bad_input():
    ctx = IoContext(SlaveCodec.tcp())
    ctx.input += bytes([0x0, 0x1, 0x0, 0x1, 0x0, 0x6, 0x11])
    with pytest.raises(FrameError, match="bad input"):
        ctx.decode()


def test_encode_sets_output():
    ctx = IoContext(SlaveCodec.rtu())
    coils = PackedCoils(bytes([0xCD, 0x6B, 0xB2, 0x0E, 0x1B]), 37)
    ctx.encode(ResponseFrame(0x11, read_coils_response(coils)))
    assert ctx.output == bytes(
        [0x11, 0x01, 0x05, 0xCD, 0x6B, 0xB2, 0x0E, 0x1B, 0x45, 0xE6]
    )


def test_encode_unsupported_pdu():
    ctx = IoContext(SlaveCodec.rtu())
    with pytest.raises(FrameError, match="codec error"):
        ctx.encode(ResponseFrame(1, RawResponse(0x41, Data.raw(b"\x01"))))


def test_reset_clears_buffers():
    ctx = IoContext(SlaveCodec.rtu())
    ctx.input += RTU_FC1[:3]
    ctx.encode(
        ResponseFrame(0x11, read_coils_response(PackedCoils(b"\x01", 1)))
    )
    ctx.reset()
    assert ctx.input == bytearray()
    assert ctx.output == b""