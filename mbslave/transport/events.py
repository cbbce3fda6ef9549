"""Logging of transport events."""

from __future__ import annotations

import logging
from typing import Any

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

logger = logging.getLogger("mbslave.transport")


def log_input(name: Any, data: bytes) -> None:
    """Log bytes received on a transport."""
    logger.log(TRACE, "Input(%r, %s)", name, list(bytes(data)))


def log_output(name: Any, data: bytes) -> None:
    """Log bytes sent on a transport."""
    logger.log(TRACE, "Output(%r, %s)", name, list(bytes(data)))


def log_request(name: Any, request: Any) -> None:
    """Log a decoded request."""
    logger.debug(
        "Request(%r, %d, %r, %r)", name, request.uuid.int, request.slave, request.pdu
    )


def log_response(name: Any, response: Any) -> None:
    """Log a response about to be sent."""
    logger.debug(
        "Response(%r, %d, %r, %r)",
        name,
        response.uuid.int,
        response.slave,
        response.pdu,
    )


def log_warning(name: Any, message: Any) -> None:
    """Log a warning about a transport."""
    logger.warning("Warning(%r, %r)", name, message)


def log_error(name: Any, error: Any) -> None:
    """Log an error on a transport."""
    logger.error("Error(%r, %r)", name, error)


def log_info(name: Any, message: Any) -> None:
    """Log a notice about a transport."""
    logger.info("Info(%r, %r)", name, message)