"""Encoded size calculation utilities.

This module computes the encoded size of registered types without encoding
a value. Only types whose every value encodes to the same number of bytes
have a static size; anything carrying a length prefix or a presence tag is
variable.
"""

from __future__ import annotations

from typing import Any

from ..codec.encoder import resolve_ref
from ..registry import TypeRegistry
from ..types.typedefs import (
    Alias,
    Enum,
    FixedArray,
    Map2,
    Primitive,
    PrimitiveKind,
    Struct,
    Tuple,
)


def static_size(registry: TypeRegistry, type_ref: str | Any) -> int | None:
    """Calculate the fixed encoded size of a type in bytes.

    Args:
        registry: Registry used to resolve type names
        type_ref: Registered type name or TypeDef

    Returns:
        Size in bytes, or None if the encoded size depends on the value
        (Text, Vec, Option, enums whose variants differ in size, enums with
        more than 255 variants, and recursive types)

    Raises:
        UnknownType: If a referenced name is not registered

    Example:
        >>> static_size(registry, "[u8; 12]")
        12
        >>> static_size(registry, "Text") is None
        True
    """
    typedef, _label = resolve_ref(registry, type_ref)
    return _size(registry, typedef, frozenset())


def type_sizes(registry: TypeRegistry) -> dict[str, int | None]:
    """Get the static size of every registered type.

    Returns:
        Dictionary mapping type names to their size in bytes (None when
        variable)

    Example:
        >>> sizes = type_sizes(registry)
        >>> sizes["u32"], sizes["Bytes"]
        (4, None)
    """
    return {name: static_size(registry, name) for name in registry.names()}


def _size(registry: TypeRegistry, typedef: Any, visiting: frozenset[str]) -> int | None:
    if isinstance(typedef, Alias):
        return _size_ref(registry, typedef.target, visiting)
    if isinstance(typedef, Primitive):
        if typedef.primitive is PrimitiveKind.BOOL:
            return 1
        return typedef.primitive.byte_width
    if isinstance(typedef, FixedArray):
        if typedef.length == 0:
            return 0
        elem = _size_ref(registry, typedef.elem, visiting)
        return None if elem is None else elem * typedef.length
    if isinstance(typedef, Tuple):
        return _sum(registry, typedef.members, visiting)
    if isinstance(typedef, Struct):
        return _sum(registry, [field.type for field in typedef.fields], visiting)
    if isinstance(typedef, Map2):
        return _sum(registry, [typedef.key, typedef.value], visiting)
    if isinstance(typedef, Enum):
        if len(typedef.variants) > 255:
            return None
        sizes = {
            0 if variant.payload is None else _size_ref(registry, variant.payload, visiting)
            for variant in typedef.variants
        }
        if len(sizes) != 1 or None in sizes:
            return None
        return 1 + sizes.pop()
    # Sequence and Option
    return None


def _size_ref(registry: TypeRegistry, name: str, visiting: frozenset[str]) -> int | None:
    if name in visiting:
        return None
    return _size(registry, registry.lookup(name), visiting | {name})


def _sum(registry: TypeRegistry, names: Any, visiting: frozenset[str]) -> int | None:
    total = 0
    for name in names:
        size = _size_ref(registry, name, visiting)
        if size is None:
            return None
        total += size
    return total
