"""Main CLI entry point for scalecomm."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .. import __version__
from ..codec.decoder import decode_all
from ..codec.encoder import encode
from ..exceptions import ScalecommError
from ..registry import TypeRegistry
from ..schema.source import load_schema_file
from ..types.coerce import coerce
from ..types.values import to_python
from ..utils.hexutil import from_hex, to_hex
from .check import check_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the scalecomm CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        prog="scalecomm",
        description="scalecomm: schema-driven binary codec and RPC binder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  scalecomm --check schema.json                          Validate a schema
  scalecomm --encode Ticker '"ACME"' --schema schema.json
  scalecomm --decode u32 0x07000000                      Decode a builtin type
  scalecomm --version                                    Show version
        """,
    )

    parser.add_argument(
        "--check",
        metavar="FILE",
        type=str,
        help="Load a schema source and show its types, sizes and methods",
    )

    parser.add_argument(
        "--encode",
        nargs=2,
        metavar=("TYPE", "JSON"),
        help="Encode a JSON value as TYPE and print it as hex",
    )

    parser.add_argument(
        "--decode",
        nargs=2,
        metavar=("TYPE", "HEX"),
        help="Decode hex bytes as TYPE and print the value as JSON",
    )

    parser.add_argument(
        "--schema",
        metavar="FILE",
        type=str,
        help="Schema source used by --encode and --decode (builtin types only if omitted)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"scalecomm {__version__}",
    )

    args = parser.parse_args(argv)

    # Handle --check
    if args.check:
        file_path = Path(args.check)
        if not file_path.exists():
            print(f"Error: File not found: {file_path}", file=sys.stderr)
            return 1

        try:
            check_file(file_path)
            return 0
        except ScalecommError as e:
            print(f"Error checking schema: {e}", file=sys.stderr)
            return 1

    if args.encode or args.decode:
        try:
            registry = _load_registry(args.schema)
            if args.encode:
                type_name, text = args.encode
                value = coerce(registry, type_name, json.loads(text))
                print(to_hex(encode(registry, type_name, value)))
            else:
                type_name, text = args.decode
                value = decode_all(registry, type_name, from_hex(text))
                print(json.dumps(to_python(value)))
            return 0
        except (ScalecommError, ValueError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    # If no command specified, show help
    parser.print_help()
    return 0


def _load_registry(schema: str | None) -> TypeRegistry:
    if schema is None:
        return TypeRegistry().freeze()
    registry, _methods = load_schema_file(schema)
    return registry


if __name__ == "__main__":
    sys.exit(main())
