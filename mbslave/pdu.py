"""Modbus protocol data units for requests and responses."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar, Union

from mbslave.data import (
    CoilsSource,
    Data,
    PackedCoils,
    RegistersSource,
    check_bytes_count,
    check_coils_count,
    check_registers_count,
)
from mbslave.exception_code import ExceptionCode


def _require_coils(nobjs: int) -> None:
    if not check_coils_count(nobjs):
        raise ValueError(f"invalid number of coils: {nobjs}")


def _require_registers(nobjs: int) -> None:
    if not check_registers_count(nobjs):
        raise ValueError(f"invalid number of registers: {nobjs}")


def _require_bytes(nobjs: int) -> None:
    if not check_bytes_count(nobjs):
        raise ValueError(f"invalid number of bytes: {nobjs}")


def _payload_len(pdu: object) -> int:
    data = getattr(pdu, "data", None)
    return len(data) if data is not None else 0


# Requests


@dataclass(frozen=True)
class RequestPdu:
    """Base of all request PDUs."""

    FUNCTION: ClassVar[int] = 0
    _HEADER: ClassVar[int] = 5

    @property
    def function(self) -> int:
        """The Modbus function code of this request."""
        return self.FUNCTION

    def __len__(self) -> int:
        return self._HEADER + _payload_len(self)


@dataclass(frozen=True)
class ReadCoilsRequest(RequestPdu):
    """Function 0x1."""

    address: int
    nobjs: int
    FUNCTION: ClassVar[int] = 0x1

    def __post_init__(self) -> None:
        _require_coils(self.nobjs)


@dataclass(frozen=True)
class ReadDiscreteInputsRequest(RequestPdu):
    """Function 0x2."""

    address: int
    nobjs: int
    FUNCTION: ClassVar[int] = 0x2

    def __post_init__(self) -> None:
        _require_coils(self.nobjs)


@dataclass(frozen=True)
class ReadHoldingRegistersRequest(RequestPdu):
    """Function 0x3."""

    address: int
    nobjs: int
    FUNCTION: ClassVar[int] = 0x3

    def __post_init__(self) -> None:
        _require_registers(self.nobjs)


@dataclass(frozen=True)
class ReadInputRegistersRequest(RequestPdu):
    """Function 0x4."""

    address: int
    nobjs: int
    FUNCTION: ClassVar[int] = 0x4

    def __post_init__(self) -> None:
        _require_registers(self.nobjs)


@dataclass(frozen=True)
class WriteSingleCoilRequest(RequestPdu):
    """Function 0x5."""

    address: int
    value: bool
    FUNCTION: ClassVar[int] = 0x5


@dataclass(frozen=True)
class WriteSingleRegisterRequest(RequestPdu):
    """Function 0x6."""

    address: int
    value: int
    FUNCTION: ClassVar[int] = 0x6


@dataclass(frozen=True)
class WriteMultipleCoilsRequest(RequestPdu):
    """Function 0xF."""

    address: int
    nobjs: int
    data: Data
    FUNCTION: ClassVar[int] = 0xF
    _HEADER: ClassVar[int] = 6


@dataclass(frozen=True)
class WriteMultipleRegistersRequest(RequestPdu):
    """Function 0x10."""

    address: int
    nobjs: int
    data: Data
    FUNCTION: ClassVar[int] = 0x10
    _HEADER: ClassVar[int] = 6


@dataclass(frozen=True)
class EncapsulatedInterfaceTransportRequest(RequestPdu):
    """Function 0x2b."""

    mei_type: int
    data: Data
    FUNCTION: ClassVar[int] = 0x2B
    _HEADER: ClassVar[int] = 2


@dataclass(frozen=True)
class RawRequest(RequestPdu):
    """A request with an unsupported function code, kept as raw bytes."""

    func: int
    data: Data
    _HEADER: ClassVar[int] = 1

    @property
    def function(self) -> int:
        return self.func


def _coils_count(coils: CoilsSource) -> tuple[CoilsSource, int]:
    if isinstance(coils, PackedCoils):
        return coils, coils.nobjs
    bits = [bool(bit) for bit in coils]
    return bits, len(bits)


def _registers_count(registers: RegistersSource) -> tuple[RegistersSource, int]:
    if isinstance(registers, (bytes, bytearray, memoryview)):
        raw = bytes(registers)
        return raw, len(raw) // 2
    values = list(registers)
    return values, len(values)


def write_multiple_coils_request(
    address: int, coils: CoilsSource
) -> WriteMultipleCoilsRequest:
    """Build a function 0xF request from coils."""
    coils, nobjs = _coils_count(coils)
    _require_coils(nobjs)
    return WriteMultipleCoilsRequest(address, nobjs, Data.coils(coils))


def write_multiple_registers_request(
    address: int, registers: RegistersSource
) -> WriteMultipleRegistersRequest:
    """Build a function 0x10 request from registers."""
    registers, nobjs = _registers_count(registers)
    _require_registers(nobjs)
    return WriteMultipleRegistersRequest(address, nobjs, Data.registers(registers))


def encapsulated_interface_transport_request(
    mei_type: int, data: bytes
) -> EncapsulatedInterfaceTransportRequest:
    """Build a function 0x2b request carrying ``data``."""
    data = bytes(data)
    _require_bytes(len(data))
    return EncapsulatedInterfaceTransportRequest(mei_type, Data.raw(data))


# Responses


@dataclass(frozen=True)
class ResponsePdu:
    """Base of all response PDUs."""

    _HEADER: ClassVar[int] = 2

    def __len__(self) -> int:
        return self._HEADER + _payload_len(self)


@dataclass(frozen=True)
class ReadCoilsResponse(ResponsePdu):
    """Function 0x1."""

    nobjs: int
    data: Data


@dataclass(frozen=True)
class ReadDiscreteInputsResponse(ResponsePdu):
    """Function 0x2."""

    nobjs: int
    data: Data


@dataclass(frozen=True)
class ReadHoldingRegistersResponse(ResponsePdu):
    """Function 0x3."""

    nobjs: int
    data: Data


@dataclass(frozen=True)
class ReadInputRegistersResponse(ResponsePdu):
    """Function 0x4."""

    nobjs: int
    data: Data


@dataclass(frozen=True)
class WriteSingleCoilResponse(ResponsePdu):
    """Function 0x5."""

    address: int
    value: bool
    _HEADER: ClassVar[int] = 5


@dataclass(frozen=True)
class WriteSingleRegisterResponse(ResponsePdu):
    """Function 0x6."""

    address: int
    value: int
    _HEADER: ClassVar[int] = 5


@dataclass(frozen=True)
class WriteMultipleCoilsResponse(ResponsePdu):
    """Function 0xF."""

    address: int
    nobjs: int
    _HEADER: ClassVar[int] = 5

    def __post_init__(self) -> None:
        _require_coils(self.nobjs)


@dataclass(frozen=True)
class WriteMultipleRegistersResponse(ResponsePdu):
    """Function 0x10."""

    address: int
    nobjs: int
    _HEADER: ClassVar[int] = 5

    def __post_init__(self) -> None:
        _require_registers(self.nobjs)


@dataclass(frozen=True)
class EncapsulatedInterfaceTransportResponse(ResponsePdu):
    """Function 0x2b."""

    mei_type: int
    data: Data


@dataclass(frozen=True)
class RawResponse(ResponsePdu):
    """A response with arbitrary function code and payload."""

    function: int
    data: Data
    _HEADER: ClassVar[int] = 1


@dataclass(frozen=True)
class ExceptionResponse(ResponsePdu):
    """An error response; ``function`` is stored as given."""

    function: int
    code: ExceptionCode


_ReadCoils = Union[type[ReadCoilsResponse], type[ReadDiscreteInputsResponse]]
_ReadRegisters = Union[
    type[ReadHoldingRegistersResponse], type[ReadInputRegistersResponse]
]


def _read_coils(kind: _ReadCoils, coils: CoilsSource):
    coils, nobjs = _coils_count(coils)
    _require_coils(nobjs)
    return kind(nobjs, Data.coils(coils))


def _read_registers(kind: _ReadRegisters, registers: RegistersSource):
    registers, nobjs = _registers_count(registers)
    _require_registers(nobjs)
    return kind(nobjs, Data.registers(registers))


def read_coils_response(coils: CoilsSource) -> ReadCoilsResponse:
    """Build a function 0x1 response from coils."""
    return _read_coils(ReadCoilsResponse, coils)


def read_discrete_inputs_response(coils: CoilsSource) -> ReadDiscreteInputsResponse:
    """Build a function 0x2 response from coils."""
    return _read_coils(ReadDiscreteInputsResponse, coils)


def read_holding_registers_response(
    registers: RegistersSource,
) -> ReadHoldingRegistersResponse:
    """Build a function 0x3 response from registers."""
    return _read_registers(ReadHoldingRegistersResponse, registers)


def read_input_registers_response(
    registers: RegistersSource,
) -> ReadInputRegistersResponse:
    """Build a function 0x4 response from registers."""
    return _read_registers(ReadInputRegistersResponse, registers)


def encapsulated_interface_transport_response(
    mei_type: int, data: bytes
) -> EncapsulatedInterfaceTransportResponse:
    """Build a function 0x2b response carrying ``data``."""
    data = bytes(data)
    _require_bytes(len(data))
    return EncapsulatedInterfaceTransportResponse(mei_type, Data.raw(data))


def exception_response(function: int, code: ExceptionCode) -> ExceptionResponse:
    """Build an exception response; the error bit is set on ``function``."""
    return ExceptionResponse(function | 0x80, ExceptionCode(code))


__all__: Iterable[str] = (
    "RequestPdu",
    "ReadCoilsRequest",
    "ReadDiscreteInputsRequest",
    "ReadHoldingRegistersRequest",
    "ReadInputRegistersRequest",
    "WriteSingleCoilRequest",
    "WriteSingleRegisterRequest",
    "WriteMultipleCoilsRequest",
    "WriteMultipleRegistersRequest",
    "EncapsulatedInterfaceTransportRequest",
    "RawRequest",
    "ResponsePdu",
    "ReadCoilsResponse",
    "ReadDiscreteInputsResponse",
    "ReadHoldingRegistersResponse",
    "ReadInputRegistersResponse",
    "WriteSingleCoilResponse",
    "WriteSingleRegisterResponse",
    "WriteMultipleCoilsResponse",
    "WriteMultipleRegistersResponse",
    "EncapsulatedInterfaceTransportResponse",
    "RawResponse",
    "ExceptionResponse",
    "write_multiple_coils_request",
    "write_multiple_registers_request",
    "encapsulated_interface_transport_request",
    "read_coils_response",
    "read_discrete_inputs_response",
    "read_holding_registers_response",
    "read_input_registers_response",
    "encapsulated_interface_transport_response",
    "exception_response",
)