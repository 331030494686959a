"""Binary encoder driven by registered type definitions.

This module provides the encode() function that converts a Value into the
compact wire format described by a TypeDef. Composite definitions are
resolved through the registry one level at a time, so recursive types
(through sequences, options and enum payloads) encode to any depth the value
actually has.
"""

from __future__ import annotations

from typing import Any

from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import EncodeError, ShapeMismatch
from ..registry import TypeRegistry
from ..types.typedefs import (
    Alias,
    Enum,
    FixedArray,
    Map2,
    Option,
    Primitive,
    PrimitiveKind,
    Sequence,
    Struct,
    Tuple,
)
from ..types.values import (
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
)
from .bytepack import BytePacker
from .compact import write_compact


def encode(
    registry: TypeRegistry,
    type_ref: str | Any,
    value: Value,
    *,
    config: CodecConfig = DEFAULT_CONFIG,
) -> bytes:
    """Encode ``value`` according to a type name or TypeDef.

    Fields, members and elements are written in declared order with no
    separators; integers are little-endian; sizes use compact prefixes.

    Args:
        registry: Registry used to resolve type names
        type_ref: Registered type name, or a TypeDef whose references are
            registered
        value: Value built against that type
        config: Encoding limits

    Returns:
        Encoded bytes

    Raises:
        UnknownType: If a referenced type is not registered
        ShapeMismatch: If the value does not fit the type definition
        EncodeError: If the value nests deeper than ``config.max_depth``

    Examples:
        ```python
        from scalecomm import Int, Record, Struct, Text, TypeRegistry, encode

        registry = TypeRegistry()
        registry.register("Payment", Struct(fields=[("name", "Text"), ("amount", "u64")]))
        registry.freeze()

        value = Record((("name", Text("Alice")), ("amount", Int(100))))
        encode(registry, "Payment", value)
        # b'\\x14Alice' + (100).to_bytes(8, "little")
        ```
    """
    typedef, label = resolve_ref(registry, type_ref)
    packer = BytePacker()
    try:
        _Encoder(registry, packer, config).encode(typedef, value, label, 0)
    except RecursionError as e:
        raise EncodeError(
            f"{label}: nesting exceeds the interpreter recursion limit "
            f"(max_depth={config.max_depth})"
        ) from e
    return packer.to_bytes()


def resolve_ref(registry: TypeRegistry, type_ref: str | Any) -> tuple[Any, str]:
    """Resolve a type name or TypeDef to ``(terminal_typedef, label)``."""
    if isinstance(type_ref, str):
        return registry.resolve(type_ref), type_ref
    if isinstance(type_ref, Alias):
        return registry.resolve(type_ref.target), type_ref.target
    return type_ref, type_ref.constructor


class _Encoder:
    def __init__(self, registry: TypeRegistry, packer: BytePacker, config: CodecConfig) -> None:
        self.registry = registry
        self.packer = packer
        self.config = config

    def encode_ref(self, name: str, value: Value, path: str, depth: int) -> None:
        self.encode(self.registry.resolve(name), value, path, depth)

    def encode(self, typedef: Any, value: Value, path: str, depth: int) -> None:
        if depth > self.config.max_depth:
            raise EncodeError(f"{path}: nesting exceeds max_depth={self.config.max_depth}")

        if isinstance(typedef, Primitive):
            self._encode_primitive(typedef.primitive, value, path)
            return

        if isinstance(typedef, FixedArray):
            items = _expect(value, FixedList, typedef, path).items
            if len(items) != typedef.length:
                raise ShapeMismatch(
                    f"{path}: expected {typedef.length} elements, got {len(items)}"
                )
            for index, item in enumerate(items):
                self.encode_ref(typedef.elem, item, f"{path}[{index}]", depth + 1)
            return

        if isinstance(typedef, Sequence):
            items = _expect(value, SeqValue, typedef, path).items
            write_compact(self.packer, len(items))
            for index, item in enumerate(items):
                self.encode_ref(typedef.elem, item, f"{path}[{index}]", depth + 1)
            return

        if isinstance(typedef, (Tuple, Map2)):
            members = typedef.references()
            items = _expect(value, TupleValue, typedef, path).items
            if len(items) != len(members):
                raise ShapeMismatch(
                    f"{path}: expected {len(members)} members, got {len(items)}"
                )
            for index, (member, item) in enumerate(zip(members, items)):
                self.encode_ref(member, item, f"{path}.{index}", depth + 1)
            return

        if isinstance(typedef, Struct):
            record = _expect(value, Record, typedef, path)
            if record.names() != typedef.field_names:
                raise ShapeMismatch(
                    f"{path}: expected fields {list(typedef.field_names)}, "
                    f"got {list(record.names())}"
                )
            for struct_field, (_, item) in zip(typedef.fields, record.fields):
                self.encode_ref(struct_field.type, item, f"{path}.{struct_field.name}", depth + 1)
            return

        if isinstance(typedef, Enum):
            self._encode_enum(typedef, _expect(value, EnumValue, typedef, path), path, depth)
            return

        if isinstance(typedef, Option):
            option = _expect(value, OptionValue, typedef, path)
            if option.payload is None:
                self.packer.write_byte(0)
            else:
                self.packer.write_byte(1)
                self.encode_ref(typedef.inner, option.payload, path, depth + 1)
            return

        raise EncodeError(f"{path}: cannot encode with {typedef!r}")

    def _encode_primitive(self, kind: PrimitiveKind, value: Value, path: str) -> None:
        if kind is PrimitiveKind.BOOL:
            flag = _expect(value, Bool, kind, path).value
            self.packer.write_byte(1 if flag else 0)
            return

        if kind is PrimitiveKind.TEXT:
            text = _expect(value, Text, kind, path).value
            try:
                raw = text.encode("utf-8")
            except UnicodeEncodeError as e:
                raise ShapeMismatch(f"{path}: text is not encodable as UTF-8: {e}") from e
            write_compact(self.packer, len(raw))
            self.packer.write_bytes(raw)
            return

        number = _expect(value, Int, kind, path).value
        if isinstance(number, bool) or not isinstance(number, int):
            raise ShapeMismatch(f"{path}: expected an integer, got {type(number).__name__}")
        low, high = kind.bounds()
        if not low <= number <= high:
            raise ShapeMismatch(f"{path}: value {number} out of bounds for {kind.value} [{low}, {high}]")
        width = kind.byte_width or 0
        if kind.signed:
            self.packer.write_int(number, width)
        else:
            self.packer.write_uint(number, width)

    def _encode_enum(self, typedef: Enum, value: EnumValue, path: str, depth: int) -> None:
        count = len(typedef.variants)
        if not 0 <= value.index < count:
            raise ShapeMismatch(f"{path}: variant index {value.index} out of range for {count} variants")
        variant = typedef.variants[value.index]
        if value.name != variant.name:
            raise ShapeMismatch(
                f"{path}: variant {value.index} is {variant.name!r}, value names {value.name!r}"
            )
        if count > 255:
            write_compact(self.packer, value.index)
        else:
            self.packer.write_byte(value.index)
        if variant.payload is None:
            if value.payload is not None:
                raise ShapeMismatch(f"{path}: unit variant {variant.name!r} carries a payload")
            return
        if value.payload is None:
            raise ShapeMismatch(f"{path}: variant {variant.name!r} requires a payload")
        self.encode_ref(variant.payload, value.payload, f"{path}::{variant.name}", depth + 1)


def _expect(value: Any, value_class: type, expected: Any, path: str) -> Any:
    if not isinstance(value, value_class):
        what = expected.value if isinstance(expected, PrimitiveKind) else expected.constructor
        raise ShapeMismatch(
            f"{path}: {what} expects {value_class.__name__}, got {type(value).__name__}"
        )
    return value
