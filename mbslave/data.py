"""Storage for Modbus payloads: coils, registers and raw bytes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional, Union

MAX_PDU_SIZE = 253
"""Maximum size of a protocol data unit."""
MAX_NREGS = 125
"""Maximum number of registers in one request."""
MAX_NCOILS = MAX_NREGS * 16
"""Maximum number of coils in one request."""
MAX_DATA_SIZE = 256
"""Capacity of a payload buffer; an even number so registers fit whole."""

_U16_ORDER = "little"


def check_coils_count(nobjs: int) -> bool:
    """Return True if ``nobjs`` is a valid number of coils."""
    return 0 < nobjs <= MAX_NCOILS


def check_registers_count(nobjs: int) -> bool:
    """Return True if ``nobjs`` is a valid number of registers."""
    return 0 < nobjs <= MAX_NREGS


def check_bytes_count(nobjs: int) -> bool:
    """Return True if ``nobjs`` is a valid number of payload bytes."""
    return 0 < nobjs <= MAX_DATA_SIZE


def coils_len(nobjs: int) -> int:
    """Number of bytes needed to pack ``nobjs`` coils."""
    return (nobjs - 1) // 8 + 1 if nobjs > 0 else 0


def registers_len(nobjs: int) -> int:
    """Number of bytes occupied by ``nobjs`` registers."""
    return nobjs * 2


def get_bit(buffer: bytes, idx: int) -> Optional[bool]:
    """Return bit ``idx`` of ``buffer`` (LSB first), or None if out of range."""
    if 0 <= idx < len(buffer) * 8:
        return bool(buffer[idx // 8] & (1 << (idx % 8)))
    return None


def bits_from_bytes(data: bytes, nbits: int) -> list[bool]:
    """Unpack the first ``nbits`` bits of ``data`` into a list of booleans."""
    if nbits > len(data) * 8:
        raise IndexError(f"{nbits} bits requested from {len(data)} bytes")
    return [bool(data[i // 8] & (1 << (i % 8))) for i in range(nbits)]


@dataclass(frozen=True)
class PackedCoils:
    """Coils already packed into bytes, LSB first, with their count."""

    data: bytes
    nobjs: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))
        if len(self.data) < coils_len(self.nobjs):
            raise ValueError(
                f"{len(self.data)} bytes cannot hold {self.nobjs} coils"
            )

    def __len__(self) -> int:
        return self.nobjs


CoilsSource = Union[PackedCoils, Iterable[bool]]
RegistersSource = Union[bytes, bytearray, memoryview, Iterable[int]]


class Data:
    """A bounded byte buffer holding a Modbus payload.

    Registers are kept as 16-bit values in little-endian order.
    """

    __slots__ = ("_buffer",)

    def __init__(self, buffer: bytes = b"") -> None:
        if len(buffer) > MAX_DATA_SIZE:
            raise ValueError(
                f"payload of {len(buffer)} bytes exceeds {MAX_DATA_SIZE}"
            )
        self._buffer = bytearray(buffer)

    @classmethod
    def raw(cls, data: bytes) -> Data:
        """Copy raw bytes into a new payload."""
        return cls(data)

    @classmethod
    def zeros(cls, size: int) -> Data:
        """Create a payload of ``size`` zero bytes."""
        if not 0 <= size <= MAX_DATA_SIZE:
            raise ValueError(f"invalid payload size {size}")
        return cls(bytes(size))

    @classmethod
    def coils(cls, coils: CoilsSource) -> Data:
        """Pack coils (booleans or :class:`PackedCoils`) into a payload."""
        if isinstance(coils, PackedCoils):
            if not check_coils_count(coils.nobjs):
                raise ValueError(f"invalid number of coils: {coils.nobjs}")
            return cls(coils.data[: coils_len(coils.nobjs)])

        bits = [bool(value) for value in coils]
        if not check_coils_count(len(bits)):
            raise ValueError(f"invalid number of coils: {len(bits)}")
        packed = bytearray(coils_len(len(bits)))
        for idx, bit in enumerate(bits):
            if bit:
                packed[idx // 8] |= 1 << (idx % 8)
        return cls(packed)

    @classmethod
    def registers(cls, registers: RegistersSource) -> Data:
        """Store registers given as 16-bit integers or as stored-order bytes."""
        if isinstance(registers, (bytes, bytearray, memoryview)):
            raw = bytes(registers)
            count = len(raw) // 2
            if not check_registers_count(count):
                raise ValueError(f"invalid number of registers: {count}")
            return cls(raw[: registers_len(count)])

        values = list(registers)
        if not check_registers_count(len(values)):
            raise ValueError(f"invalid number of registers: {len(values)}")
        buffer = bytearray()
        for value in values:
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"register value out of range: {value}")
            buffer += value.to_bytes(2, _U16_ORDER)
        return cls(buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def __bytes__(self) -> bytes:
        return bytes(self._buffer)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Data):
            return NotImplemented
        return self._buffer == other._buffer

    def __hash__(self) -> int:
        return hash(bytes(self._buffer))

    def __repr__(self) -> str:
        return f"Data({bytes(self._buffer)!r})"

    def get_u8(self, idx: int) -> Optional[int]:
        """Return byte ``idx``, or None if out of range."""
        if 0 <= idx < len(self._buffer):
            return self._buffer[idx]
        return None

    def set_u8(self, idx: int, value: int) -> None:
        """Set byte ``idx``; raises IndexError if out of range."""
        if not 0 <= idx < len(self._buffer):
            raise IndexError(f"byte index {idx} out of range")
        self._buffer[idx] = value

    def get_bit(self, idx: int) -> Optional[bool]:
        """Return bit ``idx``, or None if out of range."""
        return get_bit(self._buffer, idx)

    def set_bit(self, idx: int, value: bool) -> None:
        """Set bit ``idx``; raises IndexError if out of range."""
        if not 0 <= idx < len(self._buffer) * 8:
            raise IndexError(f"bit index {idx} out of range")
        mask = 1 << (idx % 8)
        if value:
            self._buffer[idx // 8] |= mask
        else:
            self._buffer[idx // 8] &= ~mask & 0xFF

    def get_u16(self, idx: int) -> Optional[int]:
        """Return register ``idx``, or None if out of range."""
        start = idx * 2
        if idx >= 0 and start + 1 < len(self._buffer):
            return int.from_bytes(self._buffer[start : start + 2], _U16_ORDER)
        return None

    def set_u16(self, idx: int, value: int) -> None:
        """Set register ``idx``; raises IndexError if out of range."""
        start = idx * 2
        if idx < 0 or start + 1 >= len(self._buffer):
            raise IndexError(f"register index {idx} out of range")
        self._buffer[start : start + 2] = value.to_bytes(2, _U16_ORDER)

    def extend(self, data: bytes) -> None:
        """Append bytes to the payload."""
        self._buffer += data