# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Frame encoding and decoding for the UART bootloader.

A frame is SOH, the escaped payload followed by its CRC-16, then EOT:

    SOH | escape(payload + crc16(payload)) | EOT

Any SOH, EOT or ESC byte inside the body is preceded by an ESC byte so
the delimiters can never appear unescaped.
"""

from dataclasses import dataclass

from .crc16 import crc16_bytes
from .exceptions import BadDelimitersError, UnterminatedEscapeError

SOH = 0x01
EOT = 0x04
ESC = 0x10

CONTROL_BYTES = frozenset((SOH, EOT, ESC))

CRC_SIZE = 2
MIN_FRAME_SIZE = 4  # SOH + CRC + EOT


@dataclass(frozen=True)
class ReceivedFrame:
    """Decoded inbound frame: the payload and the CRC bytes that followed it."""
    payload: bytes
    crc: bytes

    @property
    def crc_ok(self) -> bool:
        return crc16_bytes(self.payload) == self.crc


def escape(data: bytes) -> bytes:
    """
    Escape control bytes.

    Args:
        data: Raw bytes

    Returns:
        Bytes with every SOH, EOT and ESC preceded by ESC
    """
    output = bytearray()
    for byte in data:
        if byte in CONTROL_BYTES:
            output.append(ESC)
        output.append(byte)
    return bytes(output)


def unescape(data: bytes) -> bytes:
    """
    Remove control byte escaping.

    Args:
        data: Escaped bytes

    Returns:
        Original bytes

    Raises:
        UnterminatedEscapeError: If data ends with a lone ESC
    """
    output = bytearray()
    escaping = False

    for byte in data:
        if escaping:
            output.append(byte)
            escaping = False
        elif byte == ESC:
            escaping = True
        else:
            output.append(byte)

    if escaping:
        raise UnterminatedEscapeError("Escaped data ends with a lone ESC byte")

    return bytes(output)


def build_frame(command: bytes) -> bytes:
    """Wrap a command in SOH/EOT with its escaped CRC."""
    return bytes([SOH]) + escape(command + crc16_bytes(command)) + bytes([EOT])


def decode_frame(raw: bytes) -> ReceivedFrame:
    """
    Decode a complete frame.

    Args:
        raw: Bytes from SOH through EOT inclusive

    Returns:
        ReceivedFrame with the payload and the received CRC bytes

    Raises:
        BadDelimitersError: If delimiters are missing or the frame is truncated
        UnterminatedEscapeError: If the body ends with a lone ESC
    """
    if len(raw) < 2 or raw[0] != SOH or raw[-1] != EOT:
        raise BadDelimitersError(f"Frame not delimited by SOH/EOT: {bytes(raw).hex()}")

    body = unescape(raw[1:-1])
    if len(body) < CRC_SIZE:
        raise BadDelimitersError(f"Truncated frame: {bytes(raw).hex()}")

    return ReceivedFrame(payload=bytes(body[:-CRC_SIZE]), crc=bytes(body[-CRC_SIZE:]))


def parse_frame(raw: bytes) -> bytes:
    """Decode a complete frame and return its payload with the CRC stripped."""
    return decode_frame(raw).payload


def is_frame_complete(buffer: bytes) -> bool:
    """
    Check whether buffer holds a complete frame.

    The final EOT only terminates the frame if it is not escaped, that is
    if it is preceded by an even number of ESC bytes.
    """
    if len(buffer) < MIN_FRAME_SIZE or buffer[-1] != EOT:
        return False

    run = 0
    i = len(buffer) - 2
    while i > 0 and buffer[i] == ESC:
        run += 1
        i -= 1
    return run % 2 == 0
