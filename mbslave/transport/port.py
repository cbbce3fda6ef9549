"""Serial port settings of the form ``name:speed-databits-parity-stopbits``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

import serial

_SPEED = re.compile(r"\+?[0-9]+")
_MAX_SPEED = 0xFFFFFFFF


class Parity(Enum):
    """Serial parity."""

    NONE = "N"
    EVEN = "E"
    ODD = "O"


class StopBits(Enum):
    """Number of serial stop bits."""

    ONE = 1
    TWO = 2


@dataclass(frozen=True)
class PortSettings:
    """Settings needed to open a serial port."""

    name: str
    speed: int
    parity: Parity
    stop_bits: StopBits

    @classmethod
    def parse(cls, text: str) -> PortSettings:
        """Parse ``/dev/ttyUSB0:9600-8-N-1``; raises ValueError if invalid.

        The data-bits field is required but not used.
        """
        name, _, params = text.partition(":")
        info = params.split("-")

        if len(name) < 4:
            raise ValueError("name is too short")
        if len(info) < 4:
            raise ValueError("not enough port parameters")

        speed_text, _, parity_text, stop_text = info[:4]
        if not _SPEED.fullmatch(speed_text) or int(speed_text) > _MAX_SPEED:
            raise ValueError("invalid speed")

        try:
            parity = Parity(parity_text)
        except ValueError:
            raise ValueError("invalid parity") from None

        stop_bits = {"1": StopBits.ONE, "2": StopBits.TWO}.get(stop_text)
        if stop_bits is None:
            raise ValueError("invalid stop bits")

        return cls(name, int(speed_text), parity, stop_bits)


def open_port(settings: PortSettings) -> serial.Serial:
    """Open the serial port and discard anything already buffered."""
    port = serial.Serial(
        port=settings.name,
        baudrate=settings.speed,
        bytesize=serial.EIGHTBITS,
        parity=settings.parity.value,
        stopbits=settings.stop_bits.value,
    )
    port.reset_input_buffer()
    port.reset_output_buffer()
    return port