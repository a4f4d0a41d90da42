# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
UART Bootloader Protocol - Python client library.

This package provides a Python interface to flash hex firmware images
onto a microcontroller running the UART bootloader and start them.

Example usage:
    from uartboot_protocol import BootloaderClient, Progress

    with BootloaderClient("/dev/ttyUSB0") as client:
        client.connect()

        # Get version
        print(f"Bootloader version: {client.version()}")

        # Upload firmware
        client.add_observer(
            lambda e: isinstance(e, Progress) and print(f"{e.percent:.0%}")
        )
        client.upload_file("firmware.hex")

        # Run
        client.run()
"""

import logging

from .channel import CommandChannel
from .client import BootloaderClient, ConnectionState
from .crc16 import crc16, crc16_bytes
from .events import Completed, Failed, Progress, ObserverRegistry
from .exceptions import (
    BootloaderError,
    TransportError,
    NotConnectedError,
    WriteFailedError,
    FrameError,
    BadDelimitersError,
    UnterminatedEscapeError,
    CrcMismatchError,
    CommandError,
    CommandTimeoutError,
    CommandNotConnectedError,
    ChannelBusyError,
    UploadError,
    InvalidFormatError,
    DeviceTimeoutError,
    ProtocolError,
    UnexpectedResponseError,
)
from .framing import (
    SOH,
    EOT,
    ESC,
    ReceivedFrame,
    escape,
    unescape,
    build_frame,
    decode_frame,
    parse_frame,
    is_frame_complete,
)
from .image import read_image
from .ports import find_port
from .protocol import Command, CommandType, decode_version
from .transport import Transport
from .upload import UploadEngine, UploadJob, parse_line

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # CRC
    "crc16",
    "crc16_bytes",
    # Framing
    "SOH",
    "EOT",
    "ESC",
    "ReceivedFrame",
    "escape",
    "unescape",
    "build_frame",
    "decode_frame",
    "parse_frame",
    "is_frame_complete",
    # Protocol
    "Command",
    "CommandType",
    "decode_version",
    # Transport and channel
    "Transport",
    "CommandChannel",
    "find_port",
    # Upload
    "UploadEngine",
    "UploadJob",
    "parse_line",
    "read_image",
    "Progress",
    "Completed",
    "Failed",
    "ObserverRegistry",
    # Client
    "BootloaderClient",
    "ConnectionState",
    # Errors
    "BootloaderError",
    "TransportError",
    "NotConnectedError",
    "WriteFailedError",
    "FrameError",
    "BadDelimitersError",
    "UnterminatedEscapeError",
    "CrcMismatchError",
    "CommandError",
    "CommandTimeoutError",
    "CommandNotConnectedError",
    "ChannelBusyError",
    "UploadError",
    "InvalidFormatError",
    "DeviceTimeoutError",
    "ProtocolError",
    "UnexpectedResponseError",
]
