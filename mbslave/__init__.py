"""Modbus slave library: frame codecs, PDUs, RTU/TCP/UDP transports and example slaves."""

__version__ = "0.1.0"