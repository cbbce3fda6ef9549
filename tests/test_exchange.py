import asyncio

import pytest

from mbslave.data import Data
from mbslave.exception_code import ExceptionCode
from mbslave.exchange import Memory, main, read_args
from mbslave.pdu import (
    EncapsulatedInterfaceTransportRequest,
    ExceptionResponse,
    ReadCoilsRequest,
    ReadCoilsResponse,
    ReadDiscreteInputsRequest,
    ReadHoldingRegistersRequest,
    ReadInputRegistersRequest,
    WriteMultipleCoilsResponse,
    WriteSingleCoilRequest,
    WriteSingleCoilResponse,
    WriteSingleRegisterRequest,
    write_multiple_coils_request,
    write_multiple_registers_request,
)
from mbslave.transport.messages import Request
from mbslave.transport.settings import TransportKind


def _process(memory, slave, pdu):
    return memory.process(Request(slave, pdu)).pdu


def test_unset_values_read_as_zero():
    memory = Memory()
    assert memory.read_coils(1, 1, 0, 3) == [False, False, False]
    assert memory.read_registers(1, 3, 0, 2) == [0, 0]


def test_write_then_read_registers():
    memory = Memory()
    assert memory.write_registers(1, 3, 10, [7, 8, 9]) == 3
    assert memory.read_registers(1, 3, 10, 3) == [7, 8, 9]
    assert memory.read_registers(2, 3, 10, 3) == [0, 0, 0]


def test_write_then_read_coils():
    memory = Memory()
    assert memory.write_coils(1, 1, 5, [True, False, True]) == 3
    assert memory.read_coils(1, 1, 5, 3) == [True, False, True]


def test_single_coil_visible_to_read_coils_only():
    memory = Memory()
    answer = _process(memory, 0x11, WriteSingleCoilRequest(0xAC, True))
    assert answer == WriteSingleCoilResponse(0xAC, True)
    coils = _process(memory, 0x11, ReadCoilsRequest(0xAC, 1))
    assert coils == ReadCoilsResponse(1, Data.coils([True]))
    inputs = _process(memory, 0x11, ReadDiscreteInputsRequest(0xAC, 1))
    assert inputs.data.get_bit(0) is False


def test_single_register_visible_to_holding_registers():
    memory = Memory()
    _process(memory, 1, WriteSingleRegisterRequest(3, 0x123))
    holding = _process(memory, 1, ReadHoldingRegistersRequest(3, 1))
    assert holding.data.get_u16(0) == 0x123
    inputs = _process(memory, 1, ReadInputRegistersRequest(3, 1))
    assert inputs.data.get_u16(0) == 0


def test_multiple_coils_and_registers():
    memory = Memory()
    answer = _process(memory, 1, write_multiple_coils_request(0x13, [True, False, True]))
    assert answer == WriteMultipleCoilsResponse(0x13, 3)
    assert memory.read_coils(1, 1, 0x13, 3) == [True, False, True]
    _process(memory, 1, write_multiple_registers_request(0x20, [1, 2, 0xFFFF]))
    assert memory.read_registers(1, 3, 0x20, 3) == [1, 2, 0xFFFF]


def test_unsupported_function_gives_exception():
    memory = Memory()
    pdu = EncapsulatedInterfaceTransportRequest(0xE, Data.raw(b"\x01"))
    answer = _process(memory, 1, pdu)
    assert answer == ExceptionResponse(pdu.function, ExceptionCode.ILLEGAL_FUNCTION)


def test_response_reaches_request_queue():
    memory = Memory()
    queue = asyncio.Queue()
    request = Request(1, ReadCoilsRequest(0, 1), response_tx=queue)
    response = memory.process(request)
    response.send()
    assert queue.get_nowait() is response
    assert response.uuid == request.uuid


def test_read_args_skips_invalid():
    settings = read_args(["tcp:0.0.0.0:1502", "bogus", "udp:0.0.0.0:1502"])
    assert [s.address.kind for s in settings] == [TransportKind.TCP, TransportKind.UDP]
    assert settings[0].address.address == "0.0.0.0:1502"


def test_main_without_addresses_prints_usage(capsys):
    assert main([]) == 0
    assert "mbslave-exchange [addresses]" in capsys.readouterr().out


def test_process_rejects_nothing_valid():
    memory = Memory()
    with pytest.raises(ValueError):
        _process(memory, 1, ReadCoilsRequest(0, 0))