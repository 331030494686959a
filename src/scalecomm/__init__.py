"""scalecomm: Schema-driven binary codec and RPC binder

A Python library for talking to blockchain-style nodes whose custom types are
only known at runtime. Type definitions are registered by name, values are
encoded to and decoded from a compact little-endian wire format (SCALE), and
remote methods are bound to typed parameters so each call is encoded,
transported and decoded in one step.

Key Features:
- Runtime type registry with eager validation (pydantic type definitions)
- Compact wire format: fixed-width integers, compact length prefixes,
  tagged enums and options
- Method binding with required and optional parameters
- Blocking and asyncio dispatchers over a pluggable transport

Quick Start:
    >>> from scalecomm import Struct, TypeRegistry, coerce, encode, decode_all
    >>>
    >>> registry = TypeRegistry()
    >>> registry.register("Transfer", Struct(fields={"name": "Text", "amount": "u64"}))
    >>> registry.freeze()
    >>>
    >>> value = coerce(registry, "Transfer", {"name": "Alice", "amount": 100})
    >>> data = encode(registry, "Transfer", value)
    >>> data.hex()
    '14416c6963656400000000000000'
    >>> decode_all(registry, "Transfer", data) == value
    True
"""

from __future__ import annotations

from .codec import decode, decode_all, decode_compact, encode, encode_compact
from .config import DEFAULT_CONFIG, CodecConfig
from .exceptions import (
    AliasCycle,
    ArgumentTypeMismatch,
    BindingError,
    DecodeError,
    DuplicateMethod,
    DuplicateType,
    EncodeError,
    InvalidBoolean,
    InvalidOptionTag,
    InvalidUtf8,
    LimitExceeded,
    MissingArgument,
    RegistryFrozen,
    ScalecommError,
    SchemaError,
    SchemaSourceError,
    ShapeMismatch,
    TrailingBytes,
    TransportCancelled,
    TransportError,
    TransportTimeout,
    TruncatedInput,
    UnexpectedArgument,
    UnknownMethod,
    UnknownType,
    UnknownVariant,
    UnresolvedReference,
    ValueShapeError,
)
from .registry import TypeRegistry
from .rpc import AsyncDispatcher, BoundArgument, Dispatcher, MethodSignature, MethodTable, Param
from .schema import load_schema, load_schema_file, parse_type_expression
from .types import (
    NONE,
    Alias,
    Bool,
    Enum,
    EnumValue,
    FixedArray,
    FixedList,
    Int,
    Map2,
    Option,
    OptionValue,
    Primitive,
    PrimitiveKind,
    Record,
    SeqValue,
    Sequence,
    Struct,
    Text,
    Tuple,
    TupleValue,
    some,
    to_python,
)
from .types.coerce import coerce
from .utils import from_hex, static_size, to_hex, type_sizes

__version__ = "0.1.0"

__all__ = [
    # Core API
    "TypeRegistry",
    "encode",
    "decode",
    "decode_all",
    "coerce",
    "to_python",
    "encode_compact",
    "decode_compact",
    "CodecConfig",
    "DEFAULT_CONFIG",
    # Type definitions
    "Alias",
    "Primitive",
    "PrimitiveKind",
    "FixedArray",
    "Sequence",
    "Tuple",
    "Struct",
    "Enum",
    "Option",
    "Map2",
    # Values
    "Int",
    "Bool",
    "Text",
    "FixedList",
    "SeqValue",
    "TupleValue",
    "Record",
    "EnumValue",
    "OptionValue",
    "NONE",
    "some",
    # RPC
    "Param",
    "MethodSignature",
    "MethodTable",
    "BoundArgument",
    "Dispatcher",
    "AsyncDispatcher",
    # Schema sources
    "load_schema",
    "load_schema_file",
    "parse_type_expression",
    # Utilities
    "static_size",
    "type_sizes",
    "to_hex",
    "from_hex",
    # Exceptions
    "ScalecommError",
    "SchemaError",
    "DuplicateType",
    "UnknownType",
    "UnresolvedReference",
    "AliasCycle",
    "RegistryFrozen",
    "SchemaSourceError",
    "ValueShapeError",
    "EncodeError",
    "ShapeMismatch",
    "DecodeError",
    "TruncatedInput",
    "InvalidBoolean",
    "InvalidUtf8",
    "InvalidOptionTag",
    "TrailingBytes",
    "LimitExceeded",
    "UnknownVariant",
    "BindingError",
    "UnknownMethod",
    "DuplicateMethod",
    "MissingArgument",
    "UnexpectedArgument",
    "ArgumentTypeMismatch",
    "TransportError",
    "TransportCancelled",
    "TransportTimeout",
]
