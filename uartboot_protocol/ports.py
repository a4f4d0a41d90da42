# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Serial port discovery."""

from serial.tools import list_ports

from .exceptions import NotConnectedError


def find_port() -> str:
    """
    Return the first USB serial port.

    Raises:
        NotConnectedError: If no USB serial port is present
    """
    for info in sorted(list_ports.comports(), key=lambda p: p.device):
        if "USB" in info.device:
            return info.device
    raise NotConnectedError("No USB serial port found")
