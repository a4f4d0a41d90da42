# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Pytest configuration and shared fixtures."""

from typing import Callable, List, Optional

import pytest

from uartboot_protocol.framing import build_frame, parse_frame
from uartboot_protocol.transport import Transport


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--device",
        action="store",
        default=None,
        help="Serial port of a device running the bootloader (e.g., /dev/ttyUSB0)",
    )
    parser.addoption(
        "--image",
        action="store",
        default=None,
        help="Hex image to flash during integration tests",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless a device is given."""
    if config.getoption("--device"):
        return
    skip = pytest.mark.skip(reason="needs --device")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


Responder = Callable[[bytes], Optional[bytes]]


class MockSerial:
    """
    Mock serial port playing the device.

    Every write is recorded. When a responder is set, it receives the
    decoded command and may return raw bytes that are fed straight back
    into the attached transport, as the reader thread would.
    """

    def __init__(self, responder: Optional[Responder] = None):
        self.responder = responder
        self.writes: List[bytes] = []
        self.is_open = True
        self.port = "/dev/ttyTEST"
        self.transport: Optional[Transport] = None

    @property
    def commands(self) -> List[bytes]:
        """Written frames decoded back to command bytes."""
        return [parse_frame(w) for w in self.writes]

    def write(self, data: bytes) -> int:
        self.writes.append(bytes(data))
        if self.responder is not None and self.transport is not None:
            reply = self.responder(parse_frame(data))
            if reply is not None:
                self.transport.feed(reply)
        return len(data)

    def flush(self):
        pass

    def close(self):
        self.is_open = False


class MockTransport(Transport):
    """Transport whose open() attaches a MockSerial instead of a real port."""

    def __init__(self, ser: MockSerial):
        super().__init__()
        self.mock_serial = ser
        self.opened = []
        ser.transport = self

    def open(self, port, baudrate=115200):
        self.opened.append((port, baudrate))
        self.mock_serial.port = port
        self.mock_serial.is_open = True
        self.attach(self.mock_serial, start_reader=False)


def ack(command: bytes) -> bytes:
    """Device reply echoing the command tag."""
    return build_frame(command[:1])


@pytest.fixture
def mock_serial():
    return MockSerial()


@pytest.fixture
def transport(mock_serial):
    """Transport attached to a MockSerial, without a reader thread."""
    t = Transport()
    t.attach(mock_serial, start_reader=False)
    mock_serial.transport = t
    yield t
    t.close()


@pytest.fixture
def device_port(request):
    """Get the device port from command line."""
    return request.config.getoption("--device")


@pytest.fixture
def image_path(request):
    """Get the image path from command line."""
    return request.config.getoption("--image")
