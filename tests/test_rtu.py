import asyncio
import queue
from unittest.mock import patch

import pytest

from mbslave.data import PackedCoils
from mbslave.pdu import ReadCoilsRequest, read_coils_response
from mbslave.transport.messages import Response
from mbslave.transport.rtu import RtuSlaveChannel
from mbslave.transport.settings import Settings, TransportAddress, TransportKind

RTU_FC1 = bytes([0x11, 0x01, 0x00, 0x13, 0x00, 0x25, 0x0E, 0x84])
COILS = bytes([0xCD, 0x6B, 0xB2, 0x0E, 0x1B])


class FakePort:
    def __init__(self):
        self.timeout = None
        self.in_waiting = 0
        self._incoming = queue.Queue()
        self.written = queue.Queue()

    def feed(self, data):
        self._incoming.put(bytes(data))

    def read(self, size=1):
        try:
            return self._incoming.get(timeout=self.timeout or 0.05)
        except queue.Empty:
            return b""

    def write(self, data):
        self.written.put(bytes(data))
        return len(data)

    def reset_input_buffer(self):
        pass

    def reset_output_buffer(self):
        pass


def _settings(name="/dev/ttyUSB0:9600-8-N-1"):
    return Settings(TransportAddress(TransportKind.SERIAL, name))


async def _build(fake):
    with patch("serial.Serial", return_value=fake):
        return await RtuSlaveChannel.build(_settings())


@pytest.mark.asyncio
async def test_request_and_response():
    fake = FakePort()
    handler = await _build(fake)
    fake.feed(RTU_FC1)
    request = await asyncio.wait_for(handler.__anext__(), 2)
    assert request.slave == 0x11
    assert request.pdu == ReadCoilsRequest(0x13, 37)

    Response.make(request, read_coils_response(PackedCoils(COILS, 37))).send()
    written = await asyncio.to_thread(fake.written.get, True, 2)
    assert written == bytes([0x11, 0x01, 0x05, 0xCD, 0x6B, 0xB2, 0x0E, 0x1B, 0x45, 0xE6])


@pytest.mark.asyncio
async def test_frame_split_across_chunks():
    fake = FakePort()
    handler = await _build(fake)
    fake.feed(RTU_FC1[:4])
    fake.feed(RTU_FC1[4:])
    request = await asyncio.wait_for(handler.__anext__(), 2)
    assert request.pdu == ReadCoilsRequest(0x13, 37)


@pytest.mark.asyncio
async def test_bad_crc_frame_is_dropped():
    fake = FakePort()
    handler = await _build(fake)
    fake.feed(bytes([0x11, 0x01, 0x00, 0x13, 0x00, 0x25, 0x0E, 0x85]))
    await asyncio.sleep(0.1)
    fake.feed(RTU_FC1)
    request = await asyncio.wait_for(handler.__anext__(), 2)
    assert request.pdu == ReadCoilsRequest(0x13, 37)


@pytest.mark.asyncio
async def test_partial_frame_discarded_after_silence():
    fake = FakePort()
    handler = await _build(fake)
    fake.feed(RTU_FC1[:3])
    await asyncio.sleep(0.5)
    fake.feed(RTU_FC1)
    request = await asyncio.wait_for(handler.__anext__(), 2)
    assert request.slave == 0x11
    assert request.pdu == ReadCoilsRequest(0x13, 37)


@pytest.mark.asyncio
async def test_invalid_port_settings():
    with pytest.raises(OSError, match="invalid port settings"):
        await RtuSlaveChannel.build(_settings("/dev/ttyUSB0:9600"))