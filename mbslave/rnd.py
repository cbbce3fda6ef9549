"""A slave that answers reads with random values."""

from __future__ import annotations

import asyncio
import logging
import os
import random
import sys
from collections.abc import Sequence
from typing import Optional

from mbslave.exception_code import ExceptionCode
from mbslave.pdu import (
    EncapsulatedInterfaceTransportRequest,
    RawRequest,
    ReadCoilsRequest,
    ReadDiscreteInputsRequest,
    ReadHoldingRegistersRequest,
    ReadInputRegistersRequest,
    WriteMultipleCoilsRequest,
    WriteMultipleCoilsResponse,
    WriteMultipleRegistersRequest,
    WriteMultipleRegistersResponse,
    WriteSingleCoilRequest,
    WriteSingleCoilResponse,
    WriteSingleRegisterRequest,
    WriteSingleRegisterResponse,
    encapsulated_interface_transport_response,
    exception_response,
    read_coils_response,
    read_discrete_inputs_response,
    read_holding_registers_response,
    read_input_registers_response,
)
from mbslave.transport.builder import build_slave
from mbslave.transport.messages import Request, Response
from mbslave.transport.settings import Settings, TransportAddress

logger = logging.getLogger(__name__)

DEVICE_ID = b"modbus-imit"

USAGE = """mbslave-rnd [address]

Parameters:
    address - optional parameter for binding server socket. 0.0.0.0:502 by default

Env. variables:
    MBSLAVE_LOG - changes output verbosity. Values [error,warn,info,debug,trace]. info by default

Examples:
    mbslave-rnd - run with default parameters

    MBSLAVE_LOG=debug mbslave-rnd - run app with extended output

    mbslave-rnd tcp:0.0.0.0:8888 - run app on port 8888. TCP mode.

    mbslave-rnd udp:0.0.0.0:8888 - run app on port 8888. UDP mode.
"""


def _random_coils(count: int) -> list[bool]:
    return [bool(random.getrandbits(1)) for _ in range(count)]


def _random_registers(count: int) -> list[int]:
    return [random.getrandbits(16) for _ in range(count)]


def make_answer(request: Request) -> Response:
    """Answer a request with random data or an echo of the write."""
    match request.pdu:
        case ReadCoilsRequest(nobjs=nobjs):
            pdu = read_coils_response(_random_coils(nobjs))
        case ReadDiscreteInputsRequest(nobjs=nobjs):
            pdu = read_discrete_inputs_response(_random_coils(nobjs))
        case ReadHoldingRegistersRequest(nobjs=nobjs):
            pdu = read_holding_registers_response(_random_registers(nobjs))
        case ReadInputRegistersRequest(nobjs=nobjs):
            pdu = read_input_registers_response(_random_registers(nobjs))
        case WriteSingleCoilRequest(address=address, value=value):
            pdu = WriteSingleCoilResponse(address, value)
        case WriteSingleRegisterRequest(address=address, value=value):
            pdu = WriteSingleRegisterResponse(address, value)
        case WriteMultipleCoilsRequest(address=address, nobjs=nobjs):
            pdu = WriteMultipleCoilsResponse(address, nobjs)
        case WriteMultipleRegistersRequest(address=address, nobjs=nobjs):
            pdu = WriteMultipleRegistersResponse(address, nobjs)
        case EncapsulatedInterfaceTransportRequest(mei_type=mei_type, data=data):
            if mei_type == 0xE and data.get_u8(0) in (0, 1, 2):
                pdu = encapsulated_interface_transport_response(mei_type, DEVICE_ID)
            else:
                pdu = exception_response(0x2B, ExceptionCode.ILLEGAL_DATA_VALUE)
        case RawRequest(func=func):
            pdu = exception_response(func, ExceptionCode.ILLEGAL_FUNCTION)
        case _:
            pdu = exception_response(
                request.pdu.function, ExceptionCode.ILLEGAL_FUNCTION
            )
    return Response.make(request, pdu)


def read_args(argv: Sequence[str]) -> Optional[Settings]:
    """Settings from the first argument, or None after printing help.

    Raises ValueError if the address is invalid.
    """
    arg = argv[0] if argv else ""
    if arg in ("--help", "-h"):
        print(USAGE)
        return None
    settings = Settings()
    if arg:
        settings.address = TransportAddress.parse(arg)
    return settings


def _init_logging() -> None:
    name = os.environ.get("MBSLAVE_LOG", "info").strip().upper()
    levels = {"TRACE": 5, "WARN": logging.WARNING}
    level = levels.get(name, logging.getLevelName(name))
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level)


async def _serve(settings: Settings) -> None:
    await build_slave(settings, lambda request: make_answer(request).send())
    logger.info("press Ctrl+C to exit")
    await asyncio.Event().wait()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the random-data slave."""
    args = sys.argv[1:] if argv is None else list(argv)
    settings = read_args(args)
    if settings is None:
        return 0
    _init_logging()
    try:
        asyncio.run(_serve(settings))
    except KeyboardInterrupt:
        logger.info("stopping...")
    return 0


if __name__ == "__main__":
    sys.exit(main())