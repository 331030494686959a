"""Binary codec for scalecomm.

This module provides encoding and decoding of schema values to and from the
compact wire format, plus the compact integer helpers used for size prefixes.
"""

from __future__ import annotations

from .compact import decode_compact, encode_compact
from .decoder import decode, decode_all
from .encoder import encode

__all__ = [
    "encode",
    "decode",
    "decode_all",
    "encode_compact",
    "decode_compact",
]
