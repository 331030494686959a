"""Byte-level packing and unpacking utilities.

This module provides the low-level buffer handling for the wire format.
Integers are little-endian and fixed-width. Every read checks the remaining
length first and raises TruncatedInput instead of reading out of bounds.
"""

from __future__ import annotations

from ..exceptions import TruncatedInput


class BytePacker:
    """Appends encoded values to a growing byte buffer.

    Example:
        >>> packer = BytePacker()
        >>> packer.write_byte(1)
        >>> packer.write_uint(7, 4)
        >>> packer.to_bytes()
        b'\\x01\\x07\\x00\\x00\\x00'
    """

    def __init__(self) -> None:
        self._buf = bytearray()

    def write_byte(self, value: int) -> None:
        """Write a single byte.

        Raises:
            ValueError: If value is outside 0-255
        """
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Byte value must be 0-255, got {value}")
        self._buf.append(value)

    def write_uint(self, value: int, num_bytes: int) -> None:
        """Write an unsigned integer as ``num_bytes`` little-endian bytes.

        Raises:
            ValueError: If value is negative or doesn't fit in num_bytes
        """
        if value < 0:
            raise ValueError(f"write_uint requires non-negative value, got {value}")
        if value >> (8 * num_bytes):
            raise ValueError(f"Value {value} requires more than {num_bytes} bytes")
        self._buf += value.to_bytes(num_bytes, "little")

    def write_int(self, value: int, num_bytes: int) -> None:
        """Write a signed integer in two's complement, little-endian.

        Raises:
            ValueError: If value doesn't fit in num_bytes
        """
        bits = 8 * num_bytes
        if not -(1 << (bits - 1)) <= value < (1 << (bits - 1)):
            raise ValueError(f"Value {value} doesn't fit in {num_bytes} signed bytes")
        self._buf += value.to_bytes(num_bytes, "little", signed=True)

    def write_bytes(self, data: bytes) -> None:
        self._buf += data

    def __len__(self) -> int:
        return len(self._buf)

    def to_bytes(self) -> bytes:
        return bytes(self._buf)


class ByteUnpacker:
    """Reads values from a byte buffer starting at an offset.

    Example:
        >>> unpacker = ByteUnpacker(b"\\x01\\x07\\x00\\x00\\x00")
        >>> unpacker.read_byte()
        1
        >>> unpacker.read_uint(4)
        7
    """

    def __init__(self, data: bytes, offset: int = 0) -> None:
        if not 0 <= offset <= len(data):
            raise ValueError(f"Offset {offset} outside buffer of {len(data)} bytes")
        self._data = memoryview(data)
        self._start = offset
        self._position = offset

    def _take(self, num_bytes: int, what: str) -> memoryview:
        remaining = len(self._data) - self._position
        if num_bytes > remaining:
            raise TruncatedInput(
                f"Not enough bytes for {what}: need {num_bytes}, have {remaining}",
                offset=self._position,
            )
        chunk = self._data[self._position : self._position + num_bytes]
        self._position += num_bytes
        return chunk

    def peek_byte(self) -> int:
        """Return the next byte without consuming it.

        Raises:
            TruncatedInput: If no bytes remain
        """
        if self._position >= len(self._data):
            raise TruncatedInput("Not enough bytes: buffer exhausted", offset=self._position)
        return self._data[self._position]

    def read_byte(self) -> int:
        return self._take(1, "byte")[0]

    def read_uint(self, num_bytes: int) -> int:
        return int.from_bytes(self._take(num_bytes, f"{num_bytes}-byte integer"), "little")

    def read_int(self, num_bytes: int) -> int:
        chunk = self._take(num_bytes, f"{num_bytes}-byte integer")
        return int.from_bytes(chunk, "little", signed=True)

    def read_bytes(self, num_bytes: int) -> bytes:
        return bytes(self._take(num_bytes, f"{num_bytes} bytes"))

    def bytes_remaining(self) -> int:
        return len(self._data) - self._position

    def position(self) -> int:
        """Absolute offset of the next unread byte."""
        return self._position

    def consumed(self) -> int:
        """Number of bytes read since the starting offset."""
        return self._position - self._start
