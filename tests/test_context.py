import pytest

from mbslave.codec.context import ReadContext, WriteContext
from mbslave.codec.errors import CodecError, ErrorKind, IncompleteFrame
from mbslave.data import Data


def test_read_ctx():
    ctx = ReadContext(bytes([0x00, 0x01]))
    assert ctx.processed() == 0
    assert ctx.remaining() == 2
    ctx.read_u8()
    assert ctx.processed() == 1
    assert ctx.remaining() == 1
    ctx.read_u8()
    assert ctx.processed() == 2
    assert ctx.remaining() == 0
    with pytest.raises(IncompleteFrame):
        ctx.read_u8()


def test_read_ctx_underflow():
    ctx = ReadContext(bytes([0x01]))
    with pytest.raises(IncompleteFrame):
        ctx.read_u16()
    assert ctx.processed() == 0


def test_read_u16_orders():
    assert ReadContext(bytes([0x00, 0x0A])).read_u16_be() == 0x0A
    assert ReadContext(bytes([0x0A, 0x00])).read_u16() == 0x0A


def test_read_bytes_and_require():
    ctx = ReadContext(bytes([1, 2, 3]))
    assert ctx.read_bytes(2) == bytes([1, 2])
    ctx.require(1)
    with pytest.raises(IncompleteFrame):
        ctx.require(2)


def test_write_ctx():
    ctx = WriteContext(2)
    assert ctx.processed() == 0
    assert ctx.remaining() == 2
    ctx.write_u8(1)
    assert ctx.processed() == 1
    assert ctx.remaining() == 1
    ctx.write_u8(2)
    assert ctx.processed() == 2
    assert ctx.remaining() == 0
    with pytest.raises(CodecError) as info:
        ctx.write_u8(3)
    assert info.value.kind is ErrorKind.BUFFER_TOO_SMALL
    assert ctx.getvalue() == bytes([0x1, 0x2])


def test_write_u16_be():
    ctx = WriteContext(4)
    ctx.write_u16_be(0x00AC)
    ctx.write_u16_be(0xFF00)
    assert ctx.getvalue() == bytes([0x00, 0xAC, 0xFF, 0x00])


def test_write_u16_round_trip():
    ctx = WriteContext(2)
    ctx.write_u16(0x1234)
    assert ReadContext(ctx.getvalue()).read_u16() == 0x1234


def test_write_registers_be():
    data = Data.registers([0xAE41, 0x5652, 0x4340])
    ctx = WriteContext(6)
    ctx.write_registers_be(bytes(data))
    assert ctx.getvalue() == bytes([0xAE, 0x41, 0x56, 0x52, 0x43, 0x40])


def test_write_registers_be_odd_length():
    with pytest.raises(ValueError):
        WriteContext(4).write_registers_be(b"\x01\x02\x03")


def test_write_bytes_overflow_writes_nothing():
    ctx = WriteContext(2)
    with pytest.raises(CodecError):
        ctx.write_bytes(b"\x01\x02\x03")
    assert ctx.processed() == 0