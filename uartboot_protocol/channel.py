# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Command/response correlation for the UART bootloader.

The device buffers at most one frame, so only one command may be in
flight. The next frame received after a command is its response.
"""

import logging
import queue
import threading
from typing import Optional

from .exceptions import (
    ChannelBusyError,
    CommandNotConnectedError,
    CommandTimeoutError,
    CrcMismatchError,
    FrameError,
    NotConnectedError,
)
from .framing import build_frame
from .protocol import DEFAULT_RESPONSE_TIMEOUT

_logger = logging.getLogger(__name__)


def _check_command(command: bytes):
    if not command:
        raise ValueError("Command must start with a tag byte")


class CommandChannel:
    """
    Sends commands through a Transport and waits for their responses.

    A second send() while a response is pending raises ChannelBusyError.
    """

    def __init__(
        self,
        transport,
        timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        verify_crc: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            transport: Transport used to write frames and receive responses
            timeout: Response deadline in seconds (default 2.0)
            verify_crc: Reject responses whose CRC does not match
            logger: Logger to use instead of the module logger
        """
        self._transport = transport
        self.timeout = timeout
        self.verify_crc = verify_crc
        self._log = logger or _logger
        self._busy = threading.Lock()
        self._waiting = threading.Event()
        self._responses: queue.Queue = queue.Queue(maxsize=1)
        transport.set_listener(self._on_frame)

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def send(self, command: bytes, timeout: Optional[float] = None) -> bytes:
        """
        Send a command and wait for its response.

        Args:
            command: Command bytes (tag plus arguments)
            timeout: Override of the channel deadline in seconds

        Returns:
            Response payload with the CRC stripped

        Raises:
            ValueError: If the command is empty
            ChannelBusyError: If another command is awaiting its response
            CommandNotConnectedError: If the transport is not connected
            CommandTimeoutError: If no response arrived before the deadline
            FrameError: If the response frame is malformed or fails the CRC check
            WriteFailedError: If the serial layer rejects the write
        """
        _check_command(command)
        if not self._busy.acquire(blocking=False):
            raise ChannelBusyError("A command is already awaiting its response")

        try:
            return self._round_trip(command, self.timeout if timeout is None else timeout)
        finally:
            self._waiting.clear()
            self._busy.release()

    def post(self, command: bytes):
        """
        Send a command without waiting for a response.

        Raises:
            ValueError: If the command is empty
            ChannelBusyError: If another command is awaiting its response
            CommandNotConnectedError: If the transport is not connected
        """
        _check_command(command)
        if not self._busy.acquire(blocking=False):
            raise ChannelBusyError("A command is already awaiting its response")

        try:
            self._write(command)
        finally:
            self._busy.release()

    def _round_trip(self, command: bytes, timeout: float) -> bytes:
        self._drain()
        self._waiting.set()
        self._write(command)

        try:
            item = self._responses.get(timeout=timeout)
        except queue.Empty:
            self._transport.reset()
            raise CommandTimeoutError(
                f"No response to command 0x{command[:1].hex()} within {timeout}s"
            ) from None

        self._transport.reset()

        if isinstance(item, FrameError):
            raise item

        if self.verify_crc and not item.crc_ok:
            raise CrcMismatchError(
                f"Response CRC mismatch: payload {item.payload.hex()}, crc {item.crc.hex()}"
            )

        return item.payload

    def _write(self, command: bytes):
        try:
            self._transport.write(build_frame(command))
        except NotConnectedError as e:
            raise CommandNotConnectedError(str(e)) from e

    def _drain(self):
        """Drop a response that arrived after its command timed out."""
        try:
            stale = self._responses.get_nowait()
        except queue.Empty:
            return
        self._log.warning("Discarding stale response %r", stale)

    def _on_frame(self, item):
        if not self._waiting.is_set():
            self._log.warning("Unsolicited frame dropped: %r", item)
            return

        try:
            self._responses.put_nowait(item)
        except queue.Full:
            self._log.warning("Response already pending, dropping %r", item)
