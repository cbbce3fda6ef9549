"""A Modbus slave serving requests over UDP."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from mbslave.codec.slave import SlaveCodec
from mbslave.frame import RequestFrame, ResponseFrame
from mbslave.transport.events import (
    log_error,
    log_input,
    log_output,
    log_request,
    log_response,
    log_warning,
)
from mbslave.transport.io_context import FrameError, IoContext
from mbslave.transport.messages import Handler, Request, Response
from mbslave.transport.queue import FixedQueue
from mbslave.transport.settings import Settings

MAX_BUFFER_SIZE = 512
MAX_REQUESTS_NUM = 256

_background_tasks: set[asyncio.Task] = set()


def _split_host_port(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid socket address: {address!r}")
    return host.strip("[]") or "0.0.0.0", int(port)


@dataclass(frozen=True)
class _MsgInfo:
    uuid: UUID
    mbid: int
    address: Any


class _UdpProtocol(asyncio.DatagramProtocol):
    def __init__(self, server: UdpServer) -> None:
        self._server = server

    def datagram_received(self, data: bytes, addr: Any) -> None:
        self._server._on_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:
        log_error("UDP server", exc)


class UdpServer:
    """Receives requests in datagrams and answers each sender."""

    def __init__(self, handler: Handler) -> None:
        self._handler = handler
        self._context = IoContext(SlaveCodec.udp())
        self._responses: asyncio.Queue = asyncio.Queue()
        self._pending: FixedQueue[_MsgInfo] = FixedQueue(MAX_REQUESTS_NUM)
        self._transport: Optional[asyncio.DatagramTransport] = None

    @classmethod
    async def build(cls, settings: Settings) -> Handler:
        """Bind to the settings' address and return the stream of requests."""
        host, port = _split_host_port(settings.address.address)
        handler = Handler()
        server = cls(handler)
        loop = asyncio.get_running_loop()
        transport, _ = await loop.create_datagram_endpoint(
            lambda: _UdpProtocol(server), local_addr=(host, port)
        )
        server._transport = transport
        task = loop.create_task(server._serve_responses())
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        return handler

    def _on_datagram(self, data: bytes, address: Any) -> None:
        if not data:
            return
        self._context.input = bytearray(data[:MAX_BUFFER_SIZE])
        log_input(address, self._context.input)
        try:
            frame = self._context.decode()
        except FrameError as err:
            log_error(address, err)
            return
        if frame is not None:
            self._on_request(address, frame)

    def _on_request(self, address: Any, frame: RequestFrame) -> None:
        request = Request(frame.slave, frame.pdu, response_tx=self._responses)
        log_request(address, request)
        self._handler.submit(request)
        self._pending.push_replace(_MsgInfo(request.uuid, frame.id, address))

    async def _serve_responses(self) -> None:
        try:
            while True:
                response = await self._responses.get()
                self._on_response(response)
        finally:
            if self._transport is not None:
                self._transport.close()

    def _on_response(self, response: Response) -> None:
        info = self._pending.take_if(lambda rec: rec.uuid == response.uuid)
        if info is None:
            log_warning(response.uuid, "uuid is missing/expired")
            return
        log_response(info.address, response)
        frame = ResponseFrame(response.slave, response.pdu, id=info.mbid)
        try:
            self._context.encode(frame)
        except FrameError as err:
            log_error(info.address, err)
            return
        log_output(info.address, self._context.output)
        self._transport.sendto(self._context.output, info.address)