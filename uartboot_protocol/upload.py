# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Firmware upload over a CommandChannel.

The image is a sequence of text lines, each a one-character marker
followed by hex digit pairs. Every line is shipped verbatim as the
argument of one FLASH_LINE command; record types are not interpreted.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .exceptions import CommandTimeoutError, DeviceTimeoutError, InvalidFormatError
from .events import Completed, Failed, Observer, Progress
from .protocol import Command

_logger = logging.getLogger(__name__)

MIN_LINE_LENGTH = 7  # marker + at least 3 bytes of hex
PROGRESS_STEP = 1  # percentage points

_HEX_RE = re.compile(r"[0-9A-Fa-f]*")


@dataclass
class UploadJob:
    """State of one upload."""
    total_bytes: int
    bytes_sent: int = 0
    line_index: int = 0
    last_reported: int = 0  # percentage points

    @property
    def percent(self) -> float:
        if self.total_bytes == 0:
            return 1.0
        return self.bytes_sent / self.total_bytes


def parse_line(line: str, number: int = 1, min_length: int = MIN_LINE_LENGTH) -> bytes:
    """
    Convert one image line to the bytes it encodes.

    Args:
        line: Marker character followed by hex digit pairs
        number: 1-based line number used in error messages
        min_length: Shortest accepted line, marker included

    Returns:
        Decoded payload bytes

    Raises:
        InvalidFormatError: If the line is too short or not valid hex
    """
    if len(line) < min_length:
        raise InvalidFormatError(
            f"Line {number}: expected at least {min_length} characters, got {len(line)}"
        )

    digits = line[1:]
    if len(digits) % 2:
        raise InvalidFormatError(f"Line {number}: odd number of hex digits")
    if not _HEX_RE.fullmatch(digits):
        raise InvalidFormatError(f"Line {number}: invalid hex data {digits!r}")

    return bytes.fromhex(digits)


class UploadEngine:
    """Streams an image to the device one line per command."""

    def __init__(
        self,
        channel,
        min_line_length: int = MIN_LINE_LENGTH,
        logger: Optional[logging.Logger] = None,
    ):
        self._channel = channel
        self.min_line_length = min_line_length
        self._log = logger or _logger

    def prepare(self, lines: Iterable[str]) -> List[bytes]:
        """
        Validate and decode every line before anything is sent.

        Raises:
            InvalidFormatError: On the first malformed line
        """
        return [
            parse_line(line.strip(), number, self.min_line_length)
            for number, line in enumerate(lines, start=1)
        ]

    def upload(self, lines: Iterable[str], observer: Optional[Observer] = None) -> UploadJob:
        """
        Upload an image.

        Lines are sent strictly in order, each after the previous one was
        acknowledged. All lines are sent, including the last one.

        Args:
            lines: Image lines in file order
            observer: Optional callback receiving Progress, Completed and Failed

        Returns:
            The finished UploadJob

        Raises:
            InvalidFormatError: If any line is malformed (nothing is sent)
            DeviceTimeoutError: If the device stops answering
        """
        notify = observer if observer is not None else (lambda event: None)

        try:
            payloads = self.prepare(lines)
        except InvalidFormatError as e:
            notify(Failed(e))
            raise

        job = UploadJob(total_bytes=sum(len(p) for p in payloads))
        self._log.info("Uploading %d lines (%d bytes)", len(payloads), job.total_bytes)

        try:
            for index, payload in enumerate(payloads):
                job.line_index = index
                self._send_line(job, payload)
                self._report(job, notify)
        except CommandTimeoutError as e:
            error = DeviceTimeoutError(
                f"Device timeout at line {job.line_index + 1} "
                f"({job.bytes_sent}/{job.total_bytes} bytes sent)"
            )
            self._log.error("%s", error)
            notify(Failed(error))
            raise error from e
        except Exception as e:
            self._log.error("Upload failed at line %d: %s", job.line_index + 1, e)
            notify(Failed(e))
            raise

        self._log.info("Upload complete: %d bytes", job.total_bytes)
        notify(Completed(job.total_bytes))
        return job

    def _send_line(self, job: UploadJob, payload: bytes):
        response = self._channel.send(Command.flash_line(payload))
        self._log.debug("Line %d acknowledged: %s", job.line_index + 1, response.hex())
        job.bytes_sent += len(payload)

    def _report(self, job: UploadJob, notify: Observer):
        percent = job.percent
        points = job.bytes_sent * 100 // job.total_bytes
        if points - job.last_reported >= PROGRESS_STEP or percent >= 1.0:
            job.last_reported = points
            notify(Progress(total=job.total_bytes, sent=job.bytes_sent, percent=percent))
