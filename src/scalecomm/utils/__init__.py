"""Utility functions for scalecomm.

This module provides static size calculation and hex helpers.
"""

from __future__ import annotations

from .hexutil import from_hex, to_hex
from .sizing import static_size, type_sizes

__all__ = [
    # Sizing functions
    "static_size",
    "type_sizes",
    # Hex helpers
    "from_hex",
    "to_hex",
]
