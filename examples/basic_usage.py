#!/usr/bin/env python3
"""Basic usage example for scalecomm.

This example demonstrates:
1. Registering type definitions
2. Encoding plain Python data to the compact wire format
3. Decoding back to values
4. Calculating static sizes
"""

from __future__ import annotations

from scalecomm import (
    Enum,
    Struct,
    TypeRegistry,
    coerce,
    decode_all,
    encode,
    static_size,
    to_hex,
    to_python,
)
from scalecomm.types import FixedArray


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("scalecomm Basic Usage Example")
    print("=" * 60)
    print()

    # Build a registry
    print("1. Registering types...")
    registry = TypeRegistry()
    registry.register("Ticker", FixedArray(elem="u8", length=12))
    registry.register("Transfer", Struct(fields={"name": "Text", "amount": "u64"}))
    registry.register("Permission", Enum(variants=["Full", "Admin", "Operator"]))
    registry.freeze()
    print(f"   {registry!r}")
    print()

    # Encode
    print("2. Encoding a transfer...")
    value = coerce(registry, "Transfer", {"name": "Alice", "amount": 100})
    data = encode(registry, "Transfer", value)
    print(f"   Value: {to_python(value)}")
    print(f"   Encoded: {to_hex(data)} ({len(data)} bytes)")
    print()

    # Decode
    print("3. Decoding...")
    decoded = decode_all(registry, "Transfer", data)
    print(f"   Decoded: {to_python(decoded)}")
    print(f"   Round-trip: {'OK' if decoded == value else 'MISMATCH'}")
    print()

    # Static sizes
    print("4. Static sizes...")
    for name in ("Ticker", "Permission", "Transfer"):
        size = static_size(registry, name)
        print(f"   {name}: {'variable' if size is None else f'{size} bytes'}")
    print()


if __name__ == "__main__":
    main()
