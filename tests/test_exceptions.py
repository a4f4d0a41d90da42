# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Tests for exception classes."""

import pytest

from uartboot_protocol.exceptions import (
    BadDelimitersError,
    BootloaderError,
    ChannelBusyError,
    CommandError,
    CommandNotConnectedError,
    CommandTimeoutError,
    CrcMismatchError,
    DeviceTimeoutError,
    FrameError,
    InvalidFormatError,
    NotConnectedError,
    ProtocolError,
    TransportError,
    UnexpectedResponseError,
    UnterminatedEscapeError,
    UploadError,
    WriteFailedError,
)


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_base_is_exception(self):
        assert issubclass(BootloaderError, Exception)

    @pytest.mark.parametrize("error, parent", [
        (TransportError, BootloaderError),
        (NotConnectedError, TransportError),
        (WriteFailedError, TransportError),
        (FrameError, BootloaderError),
        (BadDelimitersError, FrameError),
        (UnterminatedEscapeError, FrameError),
        (CrcMismatchError, FrameError),
        (CommandError, BootloaderError),
        (CommandTimeoutError, CommandError),
        (CommandNotConnectedError, CommandError),
        (ChannelBusyError, CommandError),
        (UploadError, BootloaderError),
        (InvalidFormatError, UploadError),
        (DeviceTimeoutError, UploadError),
        (ProtocolError, BootloaderError),
        (UnexpectedResponseError, ProtocolError),
    ])
    def test_hierarchy(self, error, parent):
        assert issubclass(error, parent)

    def test_timeout_does_not_shadow_builtin(self):
        """Command timeouts are not the builtin TimeoutError."""
        assert not issubclass(CommandTimeoutError, TimeoutError)

    def test_exceptions_can_have_message(self):
        assert str(TransportError("test")) == "test"
        assert str(CommandTimeoutError("timeout msg")) == "timeout msg"
        assert str(InvalidFormatError("format msg")) == "format msg"
        assert str(UnexpectedResponseError("proto msg")) == "proto msg"
