"""Modbus frames: a PDU addressed to a slave, with a transaction id."""

from __future__ import annotations

from dataclasses import dataclass

from mbslave.pdu import RequestPdu, ResponsePdu


@dataclass
class RequestFrame:
    """An incoming request; ``id`` is the transaction id (0 for RTU)."""

    slave: int
    pdu: RequestPdu
    id: int = 0


@dataclass
class ResponseFrame:
    """An outgoing response; ``id`` is the transaction id (0 for RTU)."""

    slave: int
    pdu: ResponsePdu
    id: int = 0