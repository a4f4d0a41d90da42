# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
UART bootloader protocol definitions.

This module defines the command tags understood by the bootloader,
builders for the raw command bytes, and decoding of the replies the
client interprets.
"""

from enum import IntEnum

from .exceptions import UnexpectedResponseError

DEFAULT_BAUDRATE = 115200
DEFAULT_RESPONSE_TIMEOUT = 2.0  # seconds
CONNECT_POLL_INTERVAL = 0.1  # seconds


class CommandType(IntEnum):
    """Command tag bytes."""
    VERSION = 0x01
    FLASH_LINE = 0x03
    RUN = 0x05


class Command:
    """Command builder for bootloader protocol."""

    @staticmethod
    def version() -> bytes:
        """Create a version query command."""
        return encode_version()

    @staticmethod
    def flash_line(data: bytes) -> bytes:
        """Create a command that flashes one image line."""
        return encode_flash_line(data)

    @staticmethod
    def run() -> bytes:
        """Create a run program command."""
        return encode_run()


def encode_version() -> bytes:
    return bytes([CommandType.VERSION])


def encode_flash_line(data: bytes) -> bytes:
    return bytes([CommandType.FLASH_LINE]) + bytes(data)


def encode_run() -> bytes:
    return bytes([CommandType.RUN])


def decode_version(payload: bytes) -> str:
    """
    Decode a version reply.

    The reply echoes the VERSION tag followed by one version byte whose
    high and low nibbles are the major and minor numbers.

    Args:
        payload: Response payload (CRC already stripped)

    Returns:
        Version string such as "1.2"

    Raises:
        UnexpectedResponseError: If the reply is not a version reply
    """
    if len(payload) != 2 or payload[0] != CommandType.VERSION:
        raise UnexpectedResponseError(
            f"Expected version reply, got {bytes(payload).hex() or '(empty)'}"
        )

    value = payload[1]
    return f"{value >> 4}.{value & 0x0F}"
