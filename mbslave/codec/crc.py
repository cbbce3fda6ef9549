"""The CRC-16 checksum used by Modbus RTU."""

from __future__ import annotations

_CRC_INIT = 0xFFFF
_POLY = 0xA001


def _make_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ _POLY if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_TABLE = _make_table()


def crc16(data: bytes) -> int:
    """Return the Modbus CRC-16 of ``data``."""
    crc = _CRC_INIT
    for byte in data:
        crc = (crc >> 8) ^ _TABLE[(crc ^ byte) & 0xFF]
    return crc


def calc_crc_be(data: bytes) -> int:
    """Return the CRC with its bytes swapped, ready to write big-endian.

    Writing this value big-endian puts the CRC on the wire low byte first,
    as Modbus RTU requires. A frame that carries a valid CRC yields 0.
    """
    crc = crc16(data)
    return ((crc & 0xFF) << 8) | (crc >> 8)