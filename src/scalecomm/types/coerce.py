"""Coercion of plain Python data into schema values.

Callers rarely want to assemble Value trees by hand. ``coerce()`` walks a
type definition and converts ints, bools, strings, bytes, lists, dicts and
None into the matching Value, validating shape as it goes. Existing Value
instances are passed through unchanged at any level.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..exceptions import ShapeMismatch, UnknownVariant
from ..registry import TypeRegistry
from .typedefs import (
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
from .values import (
    VALUE_CLASSES,
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


def coerce(registry: TypeRegistry, type_ref: str | Any, obj: Any, path: str | None = None) -> Value:
    """Convert ``obj`` into a Value of the given type.

    Conversions:
        - integers: ``int`` within the declared width
        - bool: ``bool``
        - Text: ``str`` (or UTF-8 ``bytes``)
        - u8 arrays and sequences: ``bytes``, a ``0x``-prefixed hex string or
          a plain string (UTF-8), as well as lists of ints
        - other arrays, sequences, tuples and Map2 pairs: lists or tuples
        - Struct: a mapping with exactly the declared field names
        - Enum: a variant name (unit), a variant index (unit) or a one-item
          mapping ``{name: payload}``
        - Option: None (absent) or the inner value (present)

    Raises:
        ShapeMismatch: If ``obj`` cannot represent a value of the type
        UnknownVariant: If an enum variant name or index is not declared
        UnknownType: If a referenced type is not registered
    """
    if isinstance(type_ref, str):
        typedef = registry.resolve(type_ref)
        label = path or type_ref
    elif isinstance(type_ref, Alias):
        typedef = registry.resolve(type_ref.target)
        label = path or type_ref.target
    else:
        typedef = type_ref
        label = path or typedef.constructor
    return _coerce(registry, typedef, obj, label)


def _coerce(registry: TypeRegistry, typedef: Any, obj: Any, path: str) -> Value:
    if isinstance(typedef, Option) and not isinstance(obj, OptionValue):
        if obj is None:
            return OptionValue()
        return OptionValue(_coerce(registry, registry.resolve(typedef.inner), obj, path))

    if isinstance(obj, VALUE_CLASSES):
        return obj

    if isinstance(typedef, Primitive):
        return _coerce_primitive(typedef.primitive, obj, path)

    if isinstance(typedef, (FixedArray, Sequence)):
        items = _as_items(registry, typedef.elem, obj, path)
        if isinstance(typedef, FixedArray) and len(items) != typedef.length:
            raise ShapeMismatch(f"{path}: expected {typedef.length} elements, got {len(items)}")
        values = tuple(
            _coerce(registry, registry.resolve(typedef.elem), item, f"{path}[{index}]")
            for index, item in enumerate(items)
        )
        return FixedList(values) if isinstance(typedef, FixedArray) else SeqValue(values)

    if isinstance(typedef, (Tuple, Map2)):
        members = typedef.references()
        if not isinstance(obj, (list, tuple)) or len(obj) != len(members):
            raise ShapeMismatch(f"{path}: expected a {len(members)}-item list or tuple, got {obj!r}")
        return TupleValue(
            tuple(
                _coerce(registry, registry.resolve(member), item, f"{path}.{index}")
                for index, (member, item) in enumerate(zip(members, obj))
            )
        )

    if isinstance(typedef, Struct):
        if not isinstance(obj, Mapping):
            raise ShapeMismatch(f"{path}: expected a mapping of fields, got {type(obj).__name__}")
        missing = [name for name in typedef.field_names if name not in obj]
        extra = [name for name in obj if name not in typedef.field_names]
        if missing or extra:
            raise ShapeMismatch(f"{path}: missing fields {missing}, unexpected fields {extra}")
        return Record.build(
            typedef,
            {
                f.name: _coerce(registry, registry.resolve(f.type), obj[f.name], f"{path}.{f.name}")
                for f in typedef.fields
            },
        )

    if isinstance(typedef, Enum):
        return _coerce_enum(registry, typedef, obj, path)

    raise ShapeMismatch(f"{path}: cannot coerce into {typedef!r}")


def _coerce_primitive(kind: PrimitiveKind, obj: Any, path: str) -> Value:
    if kind is PrimitiveKind.BOOL:
        if not isinstance(obj, bool):
            raise ShapeMismatch(f"{path}: expected bool, got {type(obj).__name__}")
        return Bool(obj)

    if kind is PrimitiveKind.TEXT:
        if isinstance(obj, (bytes, bytearray)):
            try:
                obj = bytes(obj).decode("utf-8")
            except UnicodeDecodeError as e:
                raise ShapeMismatch(f"{path}: bytes are not valid UTF-8 text") from e
        if not isinstance(obj, str):
            raise ShapeMismatch(f"{path}: expected str, got {type(obj).__name__}")
        return Text(obj)

    if isinstance(obj, bool) or not isinstance(obj, int):
        raise ShapeMismatch(f"{path}: expected int for {kind.value}, got {type(obj).__name__}")
    low, high = kind.bounds()
    if not low <= obj <= high:
        raise ShapeMismatch(f"{path}: value {obj} out of bounds for {kind.value} [{low}, {high}]")
    return Int(obj)


def _as_items(registry: TypeRegistry, elem: str, obj: Any, path: str) -> list[Any]:
    elem_def = registry.resolve(elem)
    is_byte = isinstance(elem_def, Primitive) and elem_def.primitive is PrimitiveKind.U8
    if is_byte and isinstance(obj, str):
        if obj.startswith("0x"):
            try:
                return list(bytes.fromhex(obj[2:]))
            except ValueError as e:
                raise ShapeMismatch(f"{path}: invalid hex string {obj!r}") from e
        return list(obj.encode("utf-8"))
    if is_byte and isinstance(obj, (bytes, bytearray)):
        return list(obj)
    if isinstance(obj, (list, tuple)):
        return list(obj)
    raise ShapeMismatch(f"{path}: expected a list, got {type(obj).__name__}")


def _coerce_enum(registry: TypeRegistry, typedef: Enum, obj: Any, path: str) -> Value:
    if isinstance(obj, Mapping):
        if len(obj) != 1:
            raise ShapeMismatch(f"{path}: enum mapping must have exactly one variant key")
        ((name, payload),) = obj.items()
        try:
            declared = typedef.variants[typedef.index_of(name)]
        except KeyError:
            raise UnknownVariant(
                f"{path}: unknown variant {name!r}; expected one of {list(typedef.variant_names)}"
            ) from None
        if declared.payload is None:
            if payload is not None:
                raise ShapeMismatch(f"{path}: unit variant {name!r} takes no payload")
            return EnumValue.build(typedef, name)
        inner = _coerce(registry, registry.resolve(declared.payload), payload, f"{path}::{name}")
        return EnumValue.build(typedef, name, inner)
    if isinstance(obj, (str, int)) and not isinstance(obj, bool):
        return EnumValue.build(typedef, obj)
    raise ShapeMismatch(f"{path}: expected a variant name or {{name: payload}}, got {obj!r}")
