"""A Modbus slave serving requests over TCP."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from mbslave.codec.slave import SlaveCodec
from mbslave.frame import RequestFrame, ResponseFrame
from mbslave.transport.events import (
    log_error,
    log_info,
    log_input,
    log_output,
    log_request,
    log_warning,
)
from mbslave.transport.io_context import FrameError, IoContext
from mbslave.transport.messages import Handler, Request, Response
from mbslave.transport.settings import Settings

INACTIVE_TIMEOUT = 30.0
"""Seconds without traffic after which a client is disconnected."""

_READ_SIZE = 4096

_servers: set[asyncio.AbstractServer] = set()


def _split_host_port(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid socket address: {address!r}")
    return host.strip("[]") or "0.0.0.0", int(port)


def _format_peer(peer: Any) -> str:
    if isinstance(peer, tuple) and len(peer) >= 2:
        return f"{peer[0]}:{peer[1]}"
    return str(peer)


@dataclass(frozen=True)
class _MsgInfo:
    uuid: UUID
    mbid: int


class _Client:
    """One connected client; serves one request at a time."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        handler: Handler,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._handler = handler
        self._address = _format_peer(writer.get_extra_info("peername"))
        self._context = IoContext(SlaveCodec.tcp())
        self._responses: asyncio.Queue = asyncio.Queue()
        self._wait_for: Optional[_MsgInfo] = None

    async def serve(self) -> None:
        log_info(self._address, "connected")
        try:
            while await self._step():
                pass
        finally:
            log_info(self._address, "close")
            self._writer.close()
            with contextlib.suppress(OSError):
                await self._writer.wait_closed()

    async def _step(self) -> bool:
        read = asyncio.ensure_future(self._reader.read(_READ_SIZE))
        response = asyncio.ensure_future(self._responses.get())
        done, pending = await asyncio.wait(
            {read, response},
            timeout=INACTIVE_TIMEOUT,
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending)

        if not done:
            log_warning(self._address, "inactive timeout")
            return False

        if read in done:
            try:
                data = read.result()
            except OSError as err:
                log_error(self._address, err)
                return False
            if not data:
                return False
            try:
                self._on_input(data)
            except FrameError as err:
                log_error(self._address, err)
                return False

        if response in done:
            try:
                await self._on_response(response.result())
            except (FrameError, OSError) as err:
                log_error(self._address, err)
                return False
        return True

    def _on_input(self, data: bytes) -> None:
        self._context.input += data
        log_input(self._address, self._context.input)
        frame = self._context.decode()
        if frame is not None:
            self._on_request(frame)

    def _on_request(self, frame: RequestFrame) -> None:
        request = Request(frame.slave, frame.pdu, response_tx=self._responses)
        log_request(self._address, request)
        self._handler.submit(request)
        self._wait_for = _MsgInfo(request.uuid, frame.id)

    async def _on_response(self, response: Response) -> None:
        info = self._wait_for
        if info is None or info.uuid != response.uuid:
            log_warning(self._address, "unknown response uuid")
            return
        self._wait_for = None
        frame = ResponseFrame(response.slave, response.pdu, id=info.mbid)
        self._context.encode(frame)
        log_output(self._address, self._context.output)
        self._writer.write(self._context.output)
        await self._writer.drain()
        self._context.reset()


class TcpServer:
    """Accepts TCP clients and passes their requests to one handler."""

    def __init__(self, handler: Handler) -> None:
        self._handler = handler

    @classmethod
    async def build(cls, settings: Settings) -> Handler:
        """Listen on the settings' address and return the stream of requests."""
        host, port = _split_host_port(settings.address.address)
        handler = Handler()
        server = cls(handler)
        listener = await asyncio.start_server(server._on_client, host, port)
        _servers.add(listener)
        return handler

    async def _on_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        await _Client(reader, writer, self._handler).serve()