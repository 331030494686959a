#!/usr/bin/env python3
"""RPC dispatch example for scalecomm.

Loads the example schema, plays the node with a mock transport and calls
``identity_getAssetDid`` with and without the optional block hash.
"""

from __future__ import annotations

import logging
from pathlib import Path

from scalecomm import Dispatcher, coerce, encode, load_schema_file, to_hex, to_python
from scalecomm.transport import MockTransport

SCHEMA = Path(__file__).with_name("polymesh_schema.json")


def main() -> None:
    """Run the RPC dispatch example."""
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    registry, methods = load_schema_file(SCHEMA)
    did = coerce(registry, "IdentityId", bytes(range(32)))

    transport = MockTransport()
    transport.add_handler(
        "identity_getAssetDid", lambda args: encode(registry, "IdentityId", did)
    )
    rpc = Dispatcher(methods, transport)

    ticker = b"ACME".ljust(12, b"\x00")
    result = rpc.invoke("identity_getAssetDid", ticker=ticker)
    print(f"DID: {to_hex(bytes(to_python(result)))}")

    rpc.invoke("identity_getAssetDid", ticker=ticker, blockHash=bytes(32))
    for method_name, args in transport.requests:
        print(f"{method_name}: {[to_hex(arg) for arg in args]}")


if __name__ == "__main__":
    main()
