"""Schema type definitions and the in-memory value model.

``scalecomm.types.coerce`` (plain Python data -> Value) depends on the
registry and is imported from its own module.
"""

from __future__ import annotations

from .typedefs import (
    Alias,
    Enum,
    EnumVariant,
    FixedArray,
    Map2,
    Option,
    Primitive,
    PrimitiveKind,
    Sequence,
    Struct,
    StructField,
    Tuple,
    TypeDef,
    TypeName,
    parse_typedef,
)
from .values import (
    NONE,
    Bool,
    EnumValue,
    FixedList,
    Int,
    OptionValue,
    Record,
    SeqValue,
    Text,
    TupleValue,
    Value,
    some,
    to_python,
)

__all__ = [
    # Type definitions
    "Alias",
    "Enum",
    "EnumVariant",
    "FixedArray",
    "Map2",
    "Option",
    "Primitive",
    "PrimitiveKind",
    "Sequence",
    "Struct",
    "StructField",
    "Tuple",
    "TypeDef",
    "TypeName",
    "parse_typedef",
    # Values
    "Bool",
    "EnumValue",
    "FixedList",
    "Int",
    "NONE",
    "OptionValue",
    "Record",
    "SeqValue",
    "Text",
    "TupleValue",
    "Value",
    "some",
    "to_python",
]
