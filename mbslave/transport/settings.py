"""Transport addresses of the form ``kind:address``."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TransportKind(Enum):
    """The kind of transport a slave listens on."""

    TCP = "tcp"
    UDP = "udp"
    SERIAL = "serial"


@dataclass(frozen=True)
class TransportAddress:
    """A transport kind together with its address string."""

    kind: TransportKind
    address: str

    @classmethod
    def parse(cls, text: str) -> TransportAddress:
        """Parse ``tcp:host:port``, ``udp:host:port`` or ``serial:port-spec``.

        Raises ValueError if the text is not a valid address.
        """
        prefix, _, remain = text.partition(":")
        if len(prefix) + 1 >= len(text):
            raise ValueError(f"invalid transport address: {text!r}")
        try:
            kind = TransportKind(prefix)
        except ValueError:
            raise ValueError(f"unknown transport kind: {prefix!r}") from None
        return cls(kind, remain)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.address}"


def _default_address() -> TransportAddress:
    return TransportAddress(TransportKind.TCP, "0.0.0.0:502")


@dataclass
class Settings:
    """Settings of one slave transport."""

    address: TransportAddress = field(default_factory=_default_address)