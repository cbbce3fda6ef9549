"""Requests passed to a handler and the responses sent back."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID, uuid4

from mbslave.pdu import RequestPdu, ResponsePdu

_CLOSED = object()


@dataclass
class Request:
    """A decoded request, carrying the queue its response goes to."""

    slave: int
    pdu: RequestPdu
    response_tx: Optional[asyncio.Queue] = field(default=None, repr=False)
    uuid: UUID = field(default_factory=uuid4)

    def __str__(self) -> str:
        return f"request id:{self.uuid} slave:{self.slave} pdu:{self.pdu!r}"


@dataclass
class Response:
    """A response to a request; build it with :meth:`make`."""

    uuid: UUID
    slave: int
    pdu: ResponsePdu
    _response_tx: Optional[asyncio.Queue] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __str__(self) -> str:
        return f"response id:{self.uuid} slave:{self.slave} pdu:{self.pdu!r}"

    @classmethod
    def make(cls, request: Request, pdu: ResponsePdu) -> Response:
        """Answer ``request`` with ``pdu``; the request's queue moves over."""
        response = cls(request.uuid, request.slave, pdu)
        response._response_tx = request.response_tx
        request.response_tx = None
        return response

    def send(self) -> None:
        """Deliver the response; it can be sent only once."""
        queue = self._response_tx
        if queue is None:
            raise RuntimeError("response has no destination or was already sent")
        self._response_tx = None
        queue.put_nowait(self)


class Handler:
    """An asynchronous stream of incoming requests."""

    def __init__(self) -> None:
        self.request_queue: asyncio.Queue = asyncio.Queue()

    def submit(self, request: Request) -> None:
        """Queue a request for the consumer."""
        self.request_queue.put_nowait(request)

    def close(self) -> None:
        """End the stream once queued requests are consumed."""
        self.request_queue.put_nowait(_CLOSED)

    def __aiter__(self) -> Handler:
        return self

    async def __anext__(self) -> Request:
        item = await self.request_queue.get()
        if item is _CLOSED:
            self.request_queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item