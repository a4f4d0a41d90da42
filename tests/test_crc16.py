# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Tests for CRC-16 calculation."""

from uartboot_protocol.crc16 import crc16, crc16_bytes, _CRC16_TABLE


class TestCrc16:
    """Tests for crc16 function."""

    def test_empty_data(self):
        """CRC of empty data is the initial value."""
        assert crc16(b"") == 0x0000

    def test_reference_vector(self):
        """21-byte reference vector from the bootloader test data."""
        data = bytes(range(0x01, 0x15)) + b"\x01"
        assert len(data) == 21
        assert crc16(data) == 0x9FB5

    def test_single_byte(self):
        """Known single byte values."""
        assert crc16(b"\x00") == 0x0000
        assert crc16(b"\x01") == 0x1021
        assert crc16(b"\x04") == 0x4084
        assert crc16(b"\x05") == 0x50A5
        assert crc16(b"\x10") == 0x1231

    def test_known_values(self):
        """Known multi-byte values."""
        assert crc16(b"123456789") == 0x3D81
        assert crc16(b"\x01\x12") == 0x0142
        assert crc16(b"\x03\x01\x02") == 0x4A23
        assert crc16(b"\x03\x03\x04") == 0x4C87

    def test_order_matters(self):
        """Byte order affects CRC."""
        assert crc16(b"ab") != crc16(b"ba")

    def test_returns_16bit_unsigned(self):
        """Result is always 16-bit unsigned."""
        for data in [b"", b"test", bytes(range(256)), b"\xFF" * 1000]:
            result = crc16(data)
            assert 0 <= result <= 0xFFFF
            assert isinstance(result, int)

    def test_deterministic(self):
        data = bytes(range(256)) * 4
        assert crc16(data) == crc16(data)


class TestCrc16Bytes:
    """Tests for crc16_bytes function."""

    def test_low_byte_first(self):
        """CRC bytes are little-endian."""
        assert crc16_bytes(b"\x01") == b"\x21\x10"
        assert crc16_bytes(bytes(range(0x01, 0x15)) + b"\x01") == b"\xB5\x9F"

    def test_length(self):
        assert len(crc16_bytes(b"")) == 2
        assert len(crc16_bytes(bytes(range(256)))) == 2


class TestCrc16Table:
    """Tests for the nibble lookup table."""

    def test_table_size(self):
        assert len(_CRC16_TABLE) == 16

    def test_table_values(self):
        """Entries match the bootloader firmware table."""
        assert _CRC16_TABLE[0] == 0x0000
        assert _CRC16_TABLE[1] == 0x1021
        assert _CRC16_TABLE[14] == 0xE1C1
        assert _CRC16_TABLE[15] == 0xF1EF
