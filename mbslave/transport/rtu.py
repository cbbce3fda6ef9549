"""A Modbus slave serving requests on a serial RTU line."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

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
from mbslave.transport.io_context import IoContext
from mbslave.transport.messages import Handler, Request, Response
from mbslave.transport.port import PortSettings, open_port
from mbslave.transport.settings import Settings

INACTIVE_TIMEOUT = 0.25
"""Seconds of silence after which a partial frame is discarded."""

_READ_POLL = 0.05

_background_tasks: set[asyncio.Task] = set()


class RtuSlaveChannel:
    """Reads request frames from a serial port and writes responses back."""

    def __init__(self, port: Any, name: str, handler: Handler) -> None:
        self._port = port
        self._name = name
        self._handler = handler
        self._context = IoContext(SlaveCodec.rtu())
        # Incoming chunks, read errors and responses all arrive here.
        self._events: asyncio.Queue = asyncio.Queue()

    @classmethod
    async def build(cls, settings: Settings) -> Handler:
        """Open the serial port named in the settings; return the request stream.

        Raises OSError if the port settings are invalid or the port fails
        to open.
        """
        name = settings.address.address
        try:
            parameters = PortSettings.parse(name)
        except ValueError as err:
            raise OSError("invalid port settings") from err
        port = await asyncio.to_thread(open_port, parameters)
        port.timeout = _READ_POLL
        handler = Handler()
        channel = cls(port, name, handler)
        channel._spawn()
        return handler

    def _spawn(self) -> None:
        loop = asyncio.get_running_loop()
        reader = threading.Thread(target=self._read_port, args=(loop,), daemon=True)
        reader.start()
        task = loop.create_task(self._serve())
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)

    def _post(self, loop: asyncio.AbstractEventLoop, item: Any) -> bool:
        try:
            loop.call_soon_threadsafe(self._events.put_nowait, item)
        except RuntimeError:
            return False
        return True

    def _read_port(self, loop: asyncio.AbstractEventLoop) -> None:
        while True:
            try:
                chunk = self._port.read(max(1, self._port.in_waiting))
            except Exception as err:  # reported to the serving task
                self._post(loop, err)
                return
            if chunk and not self._post(loop, bytes(chunk)):
                return
            if loop.is_closed():
                return

    async def _serve(self) -> None:
        while True:
            try:
                await self._step()
            except Exception as err:
                self._context.reset()
                log_error(self._name, err)

    async def _step(self) -> None:
        try:
            event = await asyncio.wait_for(self._events.get(), INACTIVE_TIMEOUT)
        except asyncio.TimeoutError:
            self._reset("reset by timeout")
            return
        if isinstance(event, BaseException):
            raise event
        if isinstance(event, Response):
            await self._on_response(event)
        else:
            self._on_input(event)

    def _reset(self, reason: str) -> None:
        if self._context.input:
            log_warning(self._name, reason)
        self._context.reset()

    def _on_input(self, chunk: bytes) -> None:
        self._context.input += chunk
        log_input(self._name, self._context.input)
        frame = self._context.decode()
        if frame is not None:
            self._on_request(frame)

    def _on_request(self, frame: RequestFrame) -> None:
        request = Request(frame.slave, frame.pdu, response_tx=self._events)
        log_request(self._name, request)
        self._handler.submit(request)

    async def _on_response(self, response: Response) -> None:
        log_response(self._name, response)
        self._context.encode(ResponseFrame(response.slave, response.pdu, id=0))
        log_output(self._name, self._context.output)
        await asyncio.to_thread(self._port.write, self._context.output)