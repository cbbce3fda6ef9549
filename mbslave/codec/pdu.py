"""Reading request PDUs from and writing response PDUs to frame bytes."""

from __future__ import annotations

from mbslave.codec.context import ReadContext, WriteContext
from mbslave.codec.errors import CodecError, ErrorKind
from mbslave.data import (
    MAX_DATA_SIZE,
    Data,
    PackedCoils,
    check_coils_count,
    check_registers_count,
    coils_len,
    registers_len,
)
from mbslave.pdu import (
    EncapsulatedInterfaceTransportRequest,
    EncapsulatedInterfaceTransportResponse,
    ExceptionResponse,
    RawRequest,
    ReadCoilsRequest,
    ReadCoilsResponse,
    ReadDiscreteInputsRequest,
    ReadDiscreteInputsResponse,
    ReadHoldingRegistersRequest,
    ReadHoldingRegistersResponse,
    ReadInputRegistersRequest,
    ReadInputRegistersResponse,
    RequestPdu,
    ResponsePdu,
    WriteMultipleCoilsRequest,
    WriteMultipleCoilsResponse,
    WriteMultipleRegistersRequest,
    WriteMultipleRegistersResponse,
    WriteSingleCoilRequest,
    WriteSingleCoilResponse,
    WriteSingleRegisterRequest,
    WriteSingleRegisterResponse,
)

COIL_ON = 0xFF00
COIL_OFF = 0x0000

_MEI_READ_DEVICE_ID = 0xE
_MEI_CANOPEN = 0xD

_READ_BITS = {0x1: ReadCoilsRequest, 0x2: ReadDiscreteInputsRequest}
_READ_REGISTERS = {0x3: ReadHoldingRegistersRequest, 0x4: ReadInputRegistersRequest}


def _invalid(message: str) -> CodecError:
    return CodecError(ErrorKind.INVALID_DATA, message)


def _check_coils(nobjs: int) -> None:
    if not check_coils_count(nobjs):
        raise _invalid(f"invalid number of coils: {nobjs}")


def _check_registers(nobjs: int) -> None:
    if not check_registers_count(nobjs):
        raise _invalid(f"invalid number of registers: {nobjs}")


def _check_matching(requested: int, actual: int) -> None:
    if requested != actual:
        raise _invalid(f"byte count {actual} does not match expected {requested}")


def _raw_to_coil(value: int) -> bool:
    if value not in (COIL_ON, COIL_OFF):
        raise _invalid(f"invalid coil value: {value:#06x}")
    return value == COIL_ON


def _coil_to_raw(value: bool) -> int:
    return COIL_ON if value else COIL_OFF


def _read_write_multiple_coils(ctx: ReadContext) -> RequestPdu:
    address = ctx.read_u16_be()
    nobjs = ctx.read_u16_be()
    nbytes = ctx.read_u8()
    _check_coils(nobjs)
    _check_matching(coils_len(nobjs), nbytes)
    ctx.require(nbytes)
    packed = PackedCoils(ctx.read_bytes(nbytes), nobjs)
    return WriteMultipleCoilsRequest(address, nobjs, Data.coils(packed))


def _read_write_multiple_registers(ctx: ReadContext) -> RequestPdu:
    address = ctx.read_u16_be()
    nobjs = ctx.read_u16_be()
    nbytes = ctx.read_u8()
    _check_registers(nobjs)
    _check_matching(registers_len(nobjs), nbytes)
    ctx.require(nbytes)
    values = [ctx.read_u16_be() for _ in range(nobjs)]
    return WriteMultipleRegistersRequest(address, nobjs, Data.registers(values))


def _read_encapsulated(ctx: ReadContext) -> RequestPdu:
    mei_type = ctx.read_u8()
    if mei_type not in (_MEI_READ_DEVICE_ID, _MEI_CANOPEN):
        raise _invalid(f"unsupported MEI type: {mei_type:#04x}")
    ctx.require(1)
    size = 1 if mei_type == _MEI_READ_DEVICE_ID else ctx.remaining()
    if size > MAX_DATA_SIZE:
        raise _invalid(f"payload of {size} bytes exceeds {MAX_DATA_SIZE}")
    return EncapsulatedInterfaceTransportRequest(mei_type, Data.raw(ctx.read_bytes(size)))


def read_pdu(ctx: ReadContext) -> RequestPdu:
    """Read one request PDU.

    Raises IncompleteFrame if more bytes are needed, and CodecError with
    ``INVALID_DATA`` if the PDU is malformed. Unknown function codes give a
    :class:`RawRequest` holding the rest of the buffer.
    """
    func = ctx.read_u8()

    if func in _READ_BITS:
        address = ctx.read_u16_be()
        nobjs = ctx.read_u16_be()
        _check_coils(nobjs)
        return _READ_BITS[func](address, nobjs)

    if func in _READ_REGISTERS:
        address = ctx.read_u16_be()
        nobjs = ctx.read_u16_be()
        _check_registers(nobjs)
        return _READ_REGISTERS[func](address, nobjs)

    if func == 0x5:
        address = ctx.read_u16_be()
        value = _raw_to_coil(ctx.read_u16_be())
        return WriteSingleCoilRequest(address, value)

    if func == 0x6:
        address = ctx.read_u16_be()
        value = ctx.read_u16_be()
        return WriteSingleRegisterRequest(address, value)

    if func == 0xF:
        return _read_write_multiple_coils(ctx)

    if func == 0x10:
        return _read_write_multiple_registers(ctx)

    if func == 0x2B:
        return _read_encapsulated(ctx)

    size = min(ctx.remaining(), MAX_DATA_SIZE)
    return RawRequest(func, Data.raw(ctx.read_bytes(size)))


def write_pdu(ctx: WriteContext, pdu: ResponsePdu) -> None:
    """Write one response PDU.

    Raises CodecError with ``BUFFER_TOO_SMALL`` if it does not fit, and
    with ``OTHER`` for PDUs that cannot be encoded.
    """
    if ctx.remaining() < len(pdu):
        raise CodecError(
            ErrorKind.BUFFER_TOO_SMALL,
            f"need {len(pdu)} bytes, {ctx.remaining()} free",
        )

    match pdu:
        case ReadCoilsResponse(data=data) | ReadDiscreteInputsResponse(data=data):
            ctx.write_u8(0x1 if isinstance(pdu, ReadCoilsResponse) else 0x2)
            ctx.write_u8(len(data))
            ctx.write_bytes(bytes(data))
        case ReadHoldingRegistersResponse(data=data) | ReadInputRegistersResponse(
            data=data
        ):
            ctx.write_u8(0x3 if isinstance(pdu, ReadHoldingRegistersResponse) else 0x4)
            ctx.write_u8(len(data))
            ctx.write_registers_be(bytes(data))
        case WriteSingleCoilResponse(address=address, value=value):
            ctx.write_u8(0x5)
            ctx.write_u16_be(address)
            ctx.write_u16_be(_coil_to_raw(value))
        case WriteSingleRegisterResponse(address=address, value=value):
            ctx.write_u8(0x6)
            ctx.write_u16_be(address)
            ctx.write_u16_be(value)
        case WriteMultipleCoilsResponse(address=address, nobjs=nobjs):
            ctx.write_u8(0xF)
            ctx.write_u16_be(address)
            ctx.write_u16_be(nobjs)
        case WriteMultipleRegistersResponse(address=address, nobjs=nobjs):
            ctx.write_u8(0x10)
            ctx.write_u16_be(address)
            ctx.write_u16_be(nobjs)
        case ExceptionResponse(function=function, code=code):
            ctx.write_u8(function | 0x80)
            ctx.write_u8(int(code))
        case EncapsulatedInterfaceTransportResponse(mei_type=mei_type, data=data):
            ctx.write_u8(0x2B)
            ctx.write_u8(mei_type)
            ctx.write_bytes(bytes(data))
        case _:
            raise CodecError(
                ErrorKind.OTHER, f"cannot encode {type(pdu).__name__}"
            )