"""Compact (variable-width) unsigned integers.

Used for every size prefix on the wire (sequence lengths, text lengths) and
for enum discriminants of very large enums. The two low bits of the first
byte select the width:

- ``0b00``: single byte, values below 2**6
- ``0b01``: two bytes, values below 2**14
- ``0b10``: four bytes, values below 2**30
- ``0b11``: big-integer mode; the upper six bits hold ``byte_count - 4`` and
  the value follows as ``byte_count`` little-endian bytes (up to 2**536 - 1)

Small collections therefore cost a single prefix byte while arbitrarily
large ones remain representable.
"""

from __future__ import annotations

from ..exceptions import EncodeError, TruncatedInput
from .bytepack import BytePacker, ByteUnpacker

SINGLE_BYTE_MAX = (1 << 6) - 1
TWO_BYTE_MAX = (1 << 14) - 1
FOUR_BYTE_MAX = (1 << 30) - 1
BIG_INTEGER_MAX_BYTES = 4 + 0x3F
COMPACT_MAX = (1 << (8 * BIG_INTEGER_MAX_BYTES)) - 1


def compact_size(value: int) -> int:
    """Number of bytes the compact encoding of ``value`` occupies."""
    if value <= SINGLE_BYTE_MAX:
        return 1
    if value <= TWO_BYTE_MAX:
        return 2
    if value <= FOUR_BYTE_MAX:
        return 4
    return 1 + max(4, (value.bit_length() + 7) // 8)


def write_compact(packer: BytePacker, value: int) -> None:
    """Append the compact encoding of ``value``.

    Raises:
        EncodeError: If value is negative or larger than COMPACT_MAX
    """
    if value < 0:
        raise EncodeError(f"Compact integers are unsigned, got {value}")
    if value <= SINGLE_BYTE_MAX:
        packer.write_uint(value << 2, 1)
    elif value <= TWO_BYTE_MAX:
        packer.write_uint((value << 2) | 0b01, 2)
    elif value <= FOUR_BYTE_MAX:
        packer.write_uint((value << 2) | 0b10, 4)
    elif value <= COMPACT_MAX:
        num_bytes = max(4, (value.bit_length() + 7) // 8)
        packer.write_byte(((num_bytes - 4) << 2) | 0b11)
        packer.write_uint(value, num_bytes)
    else:
        raise EncodeError(f"Value {value} too large for a compact integer")


def read_compact(unpacker: ByteUnpacker) -> int:
    """Read a compact integer.

    Raises:
        TruncatedInput: If the mode bits imply more bytes than remain
    """
    start = unpacker.position()
    first = unpacker.peek_byte()
    mode = first & 0b11
    if mode == 0b00:
        width = 1
    elif mode == 0b01:
        width = 2
    elif mode == 0b10:
        width = 4
    else:
        width = 1 + (first >> 2) + 4
    if width > unpacker.bytes_remaining():
        raise TruncatedInput(
            f"Compact integer needs {width} bytes, have {unpacker.bytes_remaining()}",
            offset=start,
            constructor="Compact",
        )
    if mode == 0b11:
        unpacker.read_byte()
        return unpacker.read_uint(width - 1)
    return unpacker.read_uint(width) >> 2


def encode_compact(value: int) -> bytes:
    """Return the compact encoding of ``value`` as bytes."""
    packer = BytePacker()
    write_compact(packer, value)
    return packer.to_bytes()


def decode_compact(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a compact integer at ``offset``; returns ``(value, bytes_consumed)``."""
    unpacker = ByteUnpacker(data, offset)
    value = read_compact(unpacker)
    return value, unpacker.consumed()
