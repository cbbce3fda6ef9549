"""Starting slave transports from their settings."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from mbslave.transport.messages import Handler, Request
from mbslave.transport.rtu import RtuSlaveChannel
from mbslave.transport.settings import Settings, TransportKind
from mbslave.transport.tcp import TcpServer
from mbslave.transport.udp import UdpServer

logger = logging.getLogger(__name__)

_tasks: set[asyncio.Task] = set()


async def build(settings: Settings) -> Handler:
    """Start the transport named by ``settings``; return its request stream."""
    address = settings.address
    if address.kind is TransportKind.TCP:
        logger.info("start tcp server %s", address.address)
        return await TcpServer.build(settings)
    if address.kind is TransportKind.UDP:
        logger.info("start udp server %s", address.address)
        return await UdpServer.build(settings)
    logger.info("start rtu slave %s", address.address)
    return await RtuSlaveChannel.build(settings)


@dataclass
class SlaveTransport:
    """A running transport; ``task`` feeds its requests to the handler."""

    task: asyncio.Task


async def _dispatch(stream: Handler, handler: Callable[[Request], None]) -> None:
    async for request in stream:
        try:
            handler(request)
        except Exception:
            logger.exception("request handler failed")


async def build_slave(
    settings: Settings, handler: Callable[[Request], None]
) -> SlaveTransport:
    """Start a transport and call ``handler`` for every request it receives."""
    stream = await build(settings)
    task = asyncio.get_running_loop().create_task(_dispatch(stream, handler))
    _tasks.add(task)
    task.add_done_callback(_tasks.discard)
    return SlaveTransport(task)