# mbslave

An asyncio Modbus slave (server) library. It decodes Modbus requests, hands
them to your code, and encodes your responses back onto the wire. Supported
transports are:

- Modbus TCP (`tcp:HOST:PORT`)
- Modbus over UDP (`udp:HOST:PORT`)
- Modbus RTU over a serial line (`serial:DEVICE:SPEED-DATABITS-PARITY-STOPBITS`,
  for example `serial:/dev/ttyUSB0:9600-8-N-1`; parity is `N`, `E` or `O`,
  stop bits `1` or `2`)

Supported function codes: read coils (0x01), read discrete inputs (0x02),
read holding registers (0x03), read input registers (0x04), write single
coil (0x05), write single register (0x06), write multiple coils (0x0F),
write multiple registers (0x10) and encapsulated interface transport
(0x2B, MEI types 0x0D and 0x0E). Any other function code reaches your
handler as a `RawRequest`, so you can answer it with an exception.

## Installation

```
pip install mbslave
```

## Command-line tools

Two ready-made slaves come with the package.

`mbslave-exchange` keeps one in-memory table of values shared by every
address it listens on. Coils written with 0x05/0x0F can be read back with
read coils (0x01), and registers written with 0x06/0x10 can be read back
with read holding registers (0x03). Unset values read as off / zero. Other
functions are answered with an illegal-function exception.

```
mbslave-exchange tcp:0.0.0.0:1502 udp:0.0.0.0:1502 serial:/dev/ttyUSB0:9600-8-N-1
```

Arguments that are not valid addresses are ignored; with no valid address
it prints its usage and exits.

`mbslave-rnd` answers every read with random values, echoes every write,
answers a read-device-identification request (MEI type 0x0E) with
`modbus-imit`, and listens on `tcp:0.0.0.0:502` by default:

```
mbslave-rnd tcp:0.0.0.0:8888
mbslave-rnd --help
```

Both tools log at `info` level by default. Set `MBSLAVE_LOG` to one of
`error`, `warn`, `info`, `debug` or `trace` to change that. Stop them with
Ctrl+C.

## Using the library

A handler receives each `Request` and answers it by building a `Response`
and sending it:

```python
import asyncio

from mbslave.exception_code import ExceptionCode
from mbslave.pdu import (
    ReadHoldingRegistersRequest,
    exception_response,
    read_holding_registers_response,
)
from mbslave.transport.builder import build_slave
from mbslave.transport.messages import Response
from mbslave.transport.settings import Settings, TransportAddress


def handle(request):
    pdu = request.pdu
    if isinstance(pdu, ReadHoldingRegistersRequest):
        answer = read_holding_registers_response(list(range(pdu.nobjs)))
    else:
        answer = exception_response(pdu.function, ExceptionCode.ILLEGAL_FUNCTION)
    Response.make(request, answer).send()


async def run():
    settings = Settings(address=TransportAddress.parse("tcp:127.0.0.1:1502"))
    await build_slave(settings, handle)
    await asyncio.Event().wait()


asyncio.run(run())
```

A `Response` can be sent only once. If you would rather pull requests
yourself, `mbslave.transport.builder.build` returns a `Handler`, which is an
asynchronous iterator of `Request` objects:

```python
handler = await build(settings)
async for request in handler:
    ...
```

### Codec

The frame codec can be used without any transport. `SlaveCodec.rtu()`,
`SlaveCodec.tcp()` and `SlaveCodec.udp()` create a codec for each framing.
`decode` takes a `bytearray`, removes one complete frame from its front and
returns a `RequestFrame`; it returns `None` while the frame is incomplete
(in UDP mode the buffer is then discarded), and raises `CodecError` on
malformed input such as a bad CRC, after clearing the buffer. `encode`
turns a `ResponseFrame` into bytes:

```python
from mbslave.codec.slave import SlaveCodec
from mbslave.frame import ResponseFrame
from mbslave.pdu import read_coils_response

codec = SlaveCodec.rtu()
buffer = bytearray(b"\x11\x01\x00\x13\x00\x25\x0e\x84")
frame = codec.decode(buffer)      # frame.pdu == ReadCoilsRequest(address=0x13, nobjs=37)

reply = ResponseFrame(slave=0x11, pdu=read_coils_response([True, False, True]))
wire = codec.encode(reply)
```

`mbslave.codec.crc.crc16` calculates the Modbus RTU checksum. The
`mbslave.data.Data` container holds coil bits and register words for PDUs.

## What it does not do

The package is a slave only: it contains no Modbus master (client) for
sending requests to other devices. The memory kept by `mbslave-exchange`
lives only as long as the process and is not saved anywhere.

## Running the tests

```
pip install mbslave[test]
pytest
```