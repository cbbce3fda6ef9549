import pytest

from mbslave.codec.crc import calc_crc_be, crc16


@pytest.mark.parametrize(
    "data, expected",
    [
        ([0x11, 0x01, 0x00, 0x13, 0x00, 0x25], 0x0E84),
        ([0x11, 0x01, 0x00, 0x13, 0x00, 0x25, 0x0E, 0x84], 0x0),
        ([0x11, 0x04, 0x00, 0x08, 0x00, 0x01, 0xB2, 0x98], 0x0),
    ],
)
def test_crc_values(data, expected):
    assert calc_crc_be(bytes(data)) == expected


def test_crc16_is_low_byte_first_on_wire():
    crc = crc16(bytes([0x11, 0x01, 0x00, 0x13, 0x00, 0x25]))
    assert crc.to_bytes(2, "little") == bytes([0x0E, 0x84])


@pytest.mark.parametrize(
    "payload",
    [b"\x01", b"\x11\x03\x00\x6b\x00\x03", bytes(range(40))],
)
def test_appended_crc_checks_to_zero(payload):
    framed = payload + calc_crc_be(payload).to_bytes(2, "big")
    assert calc_crc_be(framed) == 0