"""Hex string helpers using the ``0x`` prefix convention of node RPC."""

from __future__ import annotations


def to_hex(data: bytes) -> str:
    """Format bytes as a lowercase ``0x``-prefixed hex string.

    Example:
        >>> to_hex(b"\\x01\\xff")
        '0x01ff'
    """
    return "0x" + bytes(data).hex()


def from_hex(text: str) -> bytes:
    """Parse a hex string, with or without the ``0x`` prefix.

    Raises:
        ValueError: If ``text`` is not an even-length hex string
    """
    digits = text.strip()
    if digits[:2] in ("0x", "0X"):
        digits = digits[2:]
    if len(digits) % 2:
        raise ValueError(f"Hex string has odd length: {text!r}")
    return bytes.fromhex(digits)
