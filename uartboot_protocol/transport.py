# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Transport layer for UART bootloader communication.

Owns the serial port, runs a pyserial reader thread, and reassembles the
received bytes into SOH/EOT frames.
"""

import logging
import threading
import time
from typing import Callable, Optional, Union

import serial
import serial.threaded

from .exceptions import (
    FrameError,
    NotConnectedError,
    TransportError,
    WriteFailedError,
)
from .framing import ReceivedFrame, decode_frame, is_frame_complete
from .protocol import DEFAULT_BAUDRATE

_logger = logging.getLogger(__name__)

READ_TIMEOUT = 1.0  # seconds
SETTLE_DELAY = 0.1  # seconds
MAX_PENDING = 4096  # bytes kept while waiting for EOT

FrameListener = Callable[[Union[ReceivedFrame, FrameError]], None]
LossListener = Callable[[Exception], None]


class _FrameReader(serial.threaded.Protocol):
    """Reader thread protocol forwarding serial data to a Transport."""

    def __init__(self, transport: "Transport"):
        self._transport = transport

    def data_received(self, data):
        self._transport.feed(data)

    def connection_lost(self, exc):
        self._transport._connection_lost(exc)


class Transport:
    """
    Serial transport for the UART bootloader.

    Received frames (or the FrameError raised while decoding them) are
    delivered to a single listener, normally a CommandChannel.

    Can be used as a context manager:
        with Transport() as t:
            t.open("/dev/ttyUSB0")
            t.write(build_frame(Command.version()))
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._log = logger or _logger
        self._ser = None
        self._reader: Optional[serial.threaded.ReaderThread] = None
        self._buffer = bytearray()
        self._buffer_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._listener: Optional[FrameListener] = None
        self._loss_listener: Optional[LossListener] = None
        self._lost = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def open(self, port: str, baudrate: int = DEFAULT_BAUDRATE):
        """
        Open a serial port and start reading from it.

        Args:
            port: Serial port path or pyserial URL (e.g., "/dev/ttyUSB0", "loop://")
            baudrate: Baud rate (default 115200)

        Raises:
            TransportError: If the port cannot be opened
        """
        self.close()  # a port left over from a lost connection
        try:
            ser = serial.serial_for_url(port, baudrate, timeout=READ_TIMEOUT)
        except serial.SerialException as e:
            raise TransportError(f"Error opening {port}: {e}") from e

        time.sleep(SETTLE_DELAY)  # Let the device settle
        self.attach(ser)
        self._log.info("Port '%s' opened at %d baud", port, baudrate)

    def attach(self, ser, start_reader: bool = True):
        """
        Use an already open serial port.

        Args:
            ser: Open pyserial port (or compatible object)
            start_reader: Start a reader thread feeding this transport.
                When False, received bytes must be passed to feed().
        """
        self._ser = ser
        self._lost = False
        self.reset()
        if start_reader:
            self._reader = serial.threaded.ReaderThread(ser, lambda: _FrameReader(self))
            self._reader.start()

    def close(self):
        """Stop the reader thread and close the serial port."""
        reader, self._reader = self._reader, None
        if reader is not None:
            reader.close()
        elif self._ser is not None and self._ser.is_open:
            self._ser.close()

    @property
    def is_open(self) -> bool:
        return self._ser is not None and self._ser.is_open and not self._lost

    @property
    def port(self) -> Optional[str]:
        """Return the serial port name."""
        return self._ser.port if self._ser is not None else None

    def set_listener(self, listener: Optional[FrameListener]):
        """Register the callback receiving decoded frames."""
        self._listener = listener

    def set_loss_listener(self, listener: Optional[LossListener]):
        """Register the callback told when the reader thread loses the port."""
        self._loss_listener = listener

    def write(self, data: bytes):
        """
        Write raw bytes.

        Returns once the serial layer has accepted and flushed the data.

        Raises:
            NotConnectedError: If the port is not open
            WriteFailedError: If the serial layer rejects the write
        """
        if not self.is_open:
            raise NotConnectedError("Serial port is not open")

        try:
            with self._write_lock:
                self._ser.write(data)
                self._ser.flush()
        except serial.SerialException as e:
            raise WriteFailedError(f"Write failed: {e}") from e

        self._log.debug("TX %s", bytes(data).hex())

    def feed(self, data: bytes):
        """
        Accumulate received bytes and emit every completed frame.

        Partial frames are kept until more data arrives. A partial frame
        growing past MAX_PENDING bytes is discarded as noise.
        """
        completed = []
        with self._buffer_lock:
            for byte in data:
                self._buffer.append(byte)
                if is_frame_complete(self._buffer):
                    completed.append(bytes(self._buffer))
                    self._buffer.clear()
                elif len(self._buffer) >= MAX_PENDING:
                    self._log.warning("No EOT after %d bytes, discarding", len(self._buffer))
                    self._buffer.clear()

        for raw in completed:
            self._log.debug("RX %s", raw.hex())
            try:
                item = decode_frame(raw)
            except FrameError as e:
                self._log.warning("Malformed frame: %s", e)
                item = e
            self._emit(item)

    def reset(self):
        """Discard any partially received frame."""
        with self._buffer_lock:
            self._buffer.clear()

    @property
    def pending(self) -> bytes:
        """Bytes received since the last complete frame."""
        with self._buffer_lock:
            return bytes(self._buffer)

    def _emit(self, item):
        listener = self._listener
        if listener is None:
            self._log.warning("No listener, dropping %r", item)
            return
        listener(item)

    def _connection_lost(self, exc):
        if exc is not None:
            self._lost = True
            self._log.error("Connection lost: %s", exc)
            if self._loss_listener is not None:
                self._loss_listener(exc)
