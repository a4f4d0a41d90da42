# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Exception hierarchy for the UART bootloader client.

Every error raised by the library derives from BootloaderError so that
callers can catch the whole family in one place.
"""


class BootloaderError(Exception):
    """Base exception for all bootloader client errors."""
    pass


# Transport

class TransportError(BootloaderError):
    """Base exception for byte-stream transport errors."""
    pass


class NotConnectedError(TransportError):
    """The serial connection is not open."""
    pass


class WriteFailedError(TransportError):
    """The serial port rejected a write."""
    pass


# Framing

class FrameError(BootloaderError):
    """Base exception for malformed frames."""
    pass


class BadDelimitersError(FrameError):
    """Frame does not start with SOH and end with EOT."""
    pass


class UnterminatedEscapeError(FrameError):
    """Escaped data ends with a lone ESC byte."""
    pass


class CrcMismatchError(FrameError):
    """Received CRC does not match the CRC of the received payload."""
    pass


# Command channel

class CommandError(BootloaderError):
    """Base exception for command round-trip errors."""
    pass


class CommandTimeoutError(CommandError):
    """No response arrived before the deadline."""
    pass


class CommandNotConnectedError(CommandError):
    """Command could not be written because the connection is closed."""
    pass


class ChannelBusyError(CommandError):
    """A command is already awaiting its response."""
    pass


# Upload

class UploadError(BootloaderError):
    """Base exception for firmware upload errors."""
    pass


class InvalidFormatError(UploadError):
    """Firmware image line is malformed."""
    pass


class DeviceTimeoutError(UploadError):
    """Device stopped answering during an upload."""
    pass


# Protocol

class ProtocolError(BootloaderError):
    """Protocol-level error (unexpected response, etc.)."""
    pass


class UnexpectedResponseError(ProtocolError):
    """Response does not match the command that was sent."""
    pass
