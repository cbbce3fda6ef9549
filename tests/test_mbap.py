import pytest

from mbslave.codec.context import ReadContext, WriteContext
from mbslave.codec.errors import CodecError, ErrorKind, IncompleteFrame
from mbslave.codec.mbap import Mbap, read_mbap, write_mbap
from mbslave.data import PackedCoils
from mbslave.frame import ResponseFrame
from mbslave.pdu import read_coils_response


def test_read_net_mbap():
    mbap = read_mbap(ReadContext(bytes([0x0, 0x1, 0x0, 0x0, 0x0, 0x6, 0x11])))
    assert mbap == Mbap(id=0x1, proto=0x0, length=0x6, slave=0x11)


@pytest.mark.parametrize(
    "buffer, kind",
    [
        ([0x0, 0x1, 0x0, 0x1, 0x0, 0x6, 0x11], ErrorKind.INVALID_VERSION),
        ([0x0, 0x1, 0x0, 0x0, 0xFF, 0x6, 0x11], ErrorKind.INVALID_DATA),
    ],
)
def test_read_net_mbap_invalid(buffer, kind):
    with pytest.raises(CodecError) as info:
        read_mbap(ReadContext(bytes(buffer)))
    assert info.value.kind is kind


@pytest.mark.parametrize("buffer", [[0x0, 0x1, 0x0, 0x0], [0x0, 0x1, 0x0, 0x3]])
def test_read_mbap_partial(buffer):
    with pytest.raises(IncompleteFrame):
        read_mbap(ReadContext(bytes(buffer)))


def test_write_mbap():
    pdu = read_coils_response(PackedCoils(bytes([0xCD, 0x6B, 0xB2, 0x0E, 0x1B]), 37))
    frame = ResponseFrame(slave=0x11, pdu=pdu, id=0x1)
    ctx = WriteContext(6)
    write_mbap(ctx, frame)
    assert ctx.getvalue() == bytes([0x0, 0x1, 0x0, 0x0, 0x0, 0x8])


def test_write_then_read_round_trip():
    pdu = read_coils_response(PackedCoils(bytes([0xCD, 0x6B, 0xB2, 0x0E, 0x1B]), 37))
    frame = ResponseFrame(slave=0x11, pdu=pdu, id=0x42)
    ctx = WriteContext(7)
    write_mbap(ctx, frame)
    ctx.write_u8(frame.slave)
    mbap = read_mbap(ReadContext(ctx.getvalue()))
    assert mbap.id == 0x42
    assert mbap.slave == 0x11
    assert mbap.length == len(pdu) + 1