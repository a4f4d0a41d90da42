# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
High-level client for the UART bootloader.

Combines Transport, CommandChannel and UploadEngine behind one object
that tracks the connection state.
"""

import logging
import threading
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from .channel import CommandChannel
from .events import Observer, ObserverRegistry
from .exceptions import NotConnectedError
from .image import read_image
from .ports import find_port
from .protocol import (
    CONNECT_POLL_INTERVAL,
    DEFAULT_BAUDRATE,
    DEFAULT_RESPONSE_TIMEOUT,
    Command,
    decode_version,
)
from .transport import Transport
from .upload import MIN_LINE_LENGTH, UploadEngine, UploadJob

_logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle. STOPPED is terminal."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value


class BootloaderClient:
    """
    UART bootloader client.

    Can be used as a context manager:
        with BootloaderClient("/dev/ttyUSB0") as client:
            client.connect()
            print(client.version())
            client.upload_file("firmware.hex")
            client.run()
    """

    def __init__(
        self,
        port: Optional[str] = None,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        port_finder: Callable[[], str] = find_port,
        transport: Optional[Transport] = None,
        min_line_length: int = MIN_LINE_LENGTH,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            port: Serial port path; discovered with port_finder when None
            baudrate: Baud rate (default 115200)
            timeout: Response deadline in seconds (default 2.0)
            port_finder: Callable returning a port path
            transport: Transport to use instead of a new one
            min_line_length: Shortest accepted image line
            logger: Logger to use instead of the module loggers
        """
        self._port = port
        self.baudrate = baudrate
        self._port_finder = port_finder
        self._log = logger or _logger
        self._transport = transport or Transport(logger=logger)
        self._transport.set_loss_listener(self._connection_lost)
        self._channel = CommandChannel(self._transport, timeout=timeout, logger=logger)
        self._engine = UploadEngine(self._channel, min_line_length=min_line_length, logger=logger)
        self._observers = ObserverRegistry()
        self._state = ConnectionState.DISCONNECTED
        self._state_changed = threading.Condition()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED and self._transport.is_open

    @property
    def port(self) -> Optional[str]:
        """Return the serial port name."""
        return self._transport.port or self._port

    def _set_state(self, state: ConnectionState):
        with self._state_changed:
            self._state = state
            self._state_changed.notify_all()
        self._log.debug("Connection state: %s", state)

    def _connection_lost(self, exc: Exception):
        # Called from the reader thread
        with self._state_changed:
            if self._state is ConnectionState.CONNECTED:
                self._set_state(ConnectionState.DISCONNECTED)
        self._log.warning("Disconnected from %s: %s", self.port, exc)

    def connect(self) -> str:
        """
        Open the serial connection.

        Returns:
            The port that was opened

        Raises:
            NotConnectedError: If the client was stopped or no port was found
            TransportError: If the port cannot be opened
        """
        with self._state_changed:
            if self._state is ConnectionState.STOPPED:
                raise NotConnectedError("Client has been stopped")
            if self.connected:
                return self.port
            self._set_state(ConnectionState.CONNECTING)

        try:
            port = self._port or self._port_finder()
            self._transport.open(port, self.baudrate)
        except Exception:
            self._set_state(ConnectionState.DISCONNECTED)
            raise

        self._set_state(ConnectionState.CONNECTED)
        self._log.info("Connected to %s", port)
        return port

    def wait_connected(self, timeout: Optional[float] = None):
        """
        Block until the client is connected.

        Args:
            timeout: Maximum wait in seconds, None to wait until stop()

        Raises:
            NotConnectedError: If the client is stopped or the wait times out
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._state_changed:
            while True:
                if self._state is ConnectionState.STOPPED:
                    raise NotConnectedError("Client has been stopped")
                if self.connected:
                    return

                wait = CONNECT_POLL_INTERVAL
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise NotConnectedError(f"Not connected after {timeout}s")
                    wait = min(wait, remaining)
                self._state_changed.wait(wait)

    def stop(self):
        """Close the connection for good and release any waiter."""
        self._set_state(ConnectionState.STOPPED)
        self._transport.close()

    def close(self):
        """Close the connection; connect() may be called again."""
        if self._state is not ConnectionState.STOPPED:
            self._set_state(ConnectionState.DISCONNECTED)
        self._transport.close()

    def add_observer(self, observer: Observer):
        """Register a callback for Progress, Completed and Failed events."""
        self._observers.add(observer)

    def remove_observer(self, observer: Observer):
        self._observers.remove(observer)

    def version(self) -> str:
        """
        Query the bootloader version.

        Returns:
            Version string such as "1.2"

        Raises:
            UnexpectedResponseError: If the reply is not a version reply
            CommandTimeoutError: If the device does not answer
        """
        version = decode_version(self._channel.send(Command.version()))
        self._log.info("Bootloader version %s", version)
        return version

    def run(self):
        """Start the flashed program. The device does not acknowledge this."""
        self._channel.post(Command.run())
        self._log.info("Run command sent")

    def upload(self, lines: Iterable[str]) -> UploadJob:
        """
        Upload an image given as lines.

        Raises:
            InvalidFormatError: If any line is malformed (nothing is sent)
            DeviceTimeoutError: If the device stops answering
        """
        return self._engine.upload(lines, observer=self._observers)

    def upload_file(self, path: Union[str, Path]) -> UploadJob:
        """
        Upload an image file.

        Raises:
            FileNotFoundError: If the image file does not exist
        """
        return self.upload(read_image(path))
