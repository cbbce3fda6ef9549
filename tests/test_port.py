from unittest import mock

import pytest

from mbslave.transport.port import Parity, PortSettings, StopBits, open_port


@pytest.mark.parametrize(
    "text",
    [
        ":",
        "",
        "/dev/ttyUSB0",
        "/dev/ttyUSB0:",
        "/dev/ttyUSB0:9600",
        "/dev/ttyUSB0:9600-8",
        "/dev/ttyUSB0:9600-8-N",
    ],
)
def test_read_settings_invalid(text):
    with pytest.raises(ValueError):
        PortSettings.parse(text)


def test_read_settings():
    correct = PortSettings.parse("/dev/ttyUSB0:9600-8-N-1")
    assert correct.name == "/dev/ttyUSB0"
    assert correct.speed == 9600
    assert correct.parity is Parity.NONE
    assert correct.stop_bits is StopBits.ONE


def test_read_settings_even_two_stop_bits():
    settings = PortSettings.parse("/dev/ttyS1:19200-8-E-2")
    assert settings.parity is Parity.EVEN
    assert settings.stop_bits is StopBits.TWO


def test_read_settings_odd():
    assert PortSettings.parse("COM10:9600-8-O-1").parity is Parity.ODD


@pytest.mark.parametrize(
    "text, message",
    [
        ("/dev/ttyUSB0:fast-8-N-1", "invalid speed"),
        ("/dev/ttyUSB0:9600-8-X-1", "invalid parity"),
        ("/dev/ttyUSB0:9600-8-N-3", "invalid stop bits"),
        ("COM:9600-8-N-1", "name is too short"),
    ],
)
def test_read_settings_errors(text, message):
    with pytest.raises(ValueError, match=message):
        PortSettings.parse(text)


def test_open_port():
    settings = PortSettings.parse("/dev/ttyUSB0:9600-8-N-1")
    with mock.patch("serial.Serial") as serial_cls:
        port = open_port(settings)
    serial_cls.assert_called_once_with(
        port="/dev/ttyUSB0", baudrate=9600, bytesize=8, parity="N", stopbits=1
    )
    assert port is serial_cls.return_value
    port.reset_input_buffer.assert_called_once_with()
    port.reset_output_buffer.assert_called_once_with()