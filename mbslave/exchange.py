"""A slave that stores written values in memory and returns them on reads."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from typing import Optional

from mbslave.data import Data
from mbslave.exception_code import ExceptionCode
from mbslave.pdu import (
    ExceptionResponse,
    ReadCoilsRequest,
    ReadCoilsResponse,
    ReadDiscreteInputsRequest,
    ReadDiscreteInputsResponse,
    ReadHoldingRegistersRequest,
    ReadHoldingRegistersResponse,
    ReadInputRegistersRequest,
    ReadInputRegistersResponse,
    WriteMultipleCoilsRequest,
    WriteMultipleCoilsResponse,
    WriteMultipleRegistersRequest,
    WriteMultipleRegistersResponse,
    WriteSingleCoilRequest,
    WriteSingleCoilResponse,
    WriteSingleRegisterRequest,
    WriteSingleRegisterResponse,
)
from mbslave.transport.builder import build_slave
from mbslave.transport.messages import Request, Response
from mbslave.transport.settings import Settings, TransportAddress

logger = logging.getLogger(__name__)

_COILS_FUNC = 0x1
_REGISTERS_FUNC = 0x3

USAGE = """mbslave-exchange [addresses]

Parameters:
    addresses - One or more addresses on which application should work

Env. variables:
    MBSLAVE_LOG - changes output verbosity. Values [error,warn,info,debug,trace]. info by default

Examples:
    mbslave-exchange - run with default parameters

    MBSLAVE_LOG=debug mbslave-exchange - run app with extended output

    mbslave-exchange tcp:0.0.0.0:8888 - run app on port 8888. TCP mode.

    mbslave-exchange tcp:0.0.0.0:1502 udp:0.0.0.0:1502 serial:/dev/ttyUSB0:9600-8-N-1 - run app on TCP/UDP ports #1502 and serial port /dev/ttyUSB0
"""


def _key(slave: int, func: int, address: int, offset: int) -> tuple[int, int, int]:
    return slave, func, (address + offset) & 0xFFFF


class Memory:
    """Values keyed by slave, function and address."""

    def __init__(self) -> None:
        self.values: dict[tuple[int, int, int], int] = {}

    def read_coils(self, slave: int, func: int, address: int, count: int) -> list[bool]:
        """Read ``count`` coils; unset coils are off."""
        return [
            self.values.get(_key(slave, func, address, i), 0) != 0
            for i in range(count)
        ]

    def read_registers(
        self, slave: int, func: int, address: int, count: int
    ) -> list[int]:
        """Read ``count`` registers; unset registers are zero."""
        return [self.values.get(_key(slave, func, address, i), 0) for i in range(count)]

    def write_coils(
        self, slave: int, func: int, address: int, values: Sequence[bool]
    ) -> int:
        """Store coils starting at ``address``; return how many were stored."""
        for i, value in enumerate(values):
            self.values[_key(slave, func, address, i)] = int(bool(value))
        return len(values)

    def write_registers(
        self, slave: int, func: int, address: int, values: Sequence[int]
    ) -> int:
        """Store registers starting at ``address``; return how many were stored."""
        for i, value in enumerate(values):
            self.values[_key(slave, func, address, i)] = value
        return len(values)

    def process(self, request: Request) -> Response:
        """Carry out a request and build its response."""
        slave = request.slave
        func = request.pdu.function
        pdu = request.pdu

        match pdu:
            case ReadCoilsRequest(address=address, nobjs=nobjs):
                coils = self.read_coils(slave, func, address, nobjs)
                answer = ReadCoilsResponse(nobjs, Data.coils(coils))
            case ReadDiscreteInputsRequest(address=address, nobjs=nobjs):
                coils = self.read_coils(slave, func, address, nobjs)
                answer = ReadDiscreteInputsResponse(nobjs, Data.coils(coils))
            case ReadHoldingRegistersRequest(address=address, nobjs=nobjs):
                regs = self.read_registers(slave, func, address, nobjs)
                answer = ReadHoldingRegistersResponse(nobjs, Data.registers(regs))
            case ReadInputRegistersRequest(address=address, nobjs=nobjs):
                regs = self.read_registers(slave, func, address, nobjs)
                answer = ReadInputRegistersResponse(nobjs, Data.registers(regs))
            case WriteSingleCoilRequest(address=address, value=value):
                self.write_coils(slave, _COILS_FUNC, address, [value])
                answer = WriteSingleCoilResponse(address, value)
            case WriteSingleRegisterRequest(address=address, value=value):
                self.write_registers(slave, _REGISTERS_FUNC, address, [value])
                answer = WriteSingleRegisterResponse(address, value)
            case WriteMultipleCoilsRequest(address=address, nobjs=nobjs, data=data):
                coils = [bool(data.get_bit(i)) for i in range(nobjs)]
                self.write_coils(slave, _COILS_FUNC, address, coils)
                answer = WriteMultipleCoilsResponse(address, nobjs)
            case WriteMultipleRegistersRequest(address=address, nobjs=nobjs, data=data):
                regs = [data.get_u16(i) for i in range(nobjs)]
                self.write_registers(slave, _REGISTERS_FUNC, address, regs)
                answer = WriteMultipleRegistersResponse(address, nobjs)
            case _:
                answer = ExceptionResponse(func, ExceptionCode.ILLEGAL_FUNCTION)

        return Response.make(request, answer)


def read_args(argv: Sequence[str]) -> list[Settings]:
    """Settings for every argument that is a valid transport address."""
    settings = []
    for arg in argv:
        try:
            settings.append(Settings(TransportAddress.parse(arg)))
        except ValueError:
            continue
    return settings


def _init_logging() -> None:
    name = os.environ.get("MBSLAVE_LOG", "info").strip().upper()
    levels = {"TRACE": 5, "WARN": logging.WARNING}
    level = levels.get(name, logging.getLevelName(name))
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level)


async def _serve(settings: list[Settings]) -> None:
    memory = Memory()
    for record in settings:
        await build_slave(record, lambda request: memory.process(request).send())
    logger.info("press Ctrl+C to exit")
    await asyncio.Event().wait()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the exchange slave on the addresses given as arguments."""
    args = sys.argv[1:] if argv is None else list(argv)
    _init_logging()
    settings = read_args(args)
    if not settings:
        print(USAGE)
        return 0
    try:
        asyncio.run(_serve(settings))
    except KeyboardInterrupt:
        logger.info("stopping...")
    return 0


if __name__ == "__main__":
    sys.exit(main())