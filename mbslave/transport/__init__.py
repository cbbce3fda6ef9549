"""Asyncio transports that serve Modbus requests over TCP, UDP and serial lines."""