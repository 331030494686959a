"""Binary decoder driven by registered type definitions.

This module provides decode(), which reconstructs a Value from bytes and
reports how many bytes it consumed. Input is treated as untrusted: every read
is bounds-checked, every tag byte is validated, and every failure carries the
byte offset, the constructor being decoded and the path of the value.
"""

from __future__ import annotations

from typing import Any

from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import (
    DecodeError,
    InvalidBoolean,
    InvalidOptionTag,
    InvalidUtf8,
    LimitExceeded,
    TrailingBytes,
    TruncatedInput,
    UnknownVariant,
)
from ..registry import TypeRegistry
from ..types.typedefs import (
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
from .bytepack import ByteUnpacker
from .compact import read_compact
from .encoder import resolve_ref


def decode(
    registry: TypeRegistry,
    type_ref: str | Any,
    data: bytes,
    offset: int = 0,
    *,
    config: CodecConfig = DEFAULT_CONFIG,
) -> tuple[Value, int]:
    """Decode one value of the given type starting at ``offset``.

    Args:
        registry: Registry used to resolve type names
        type_ref: Registered type name, or a TypeDef whose references are
            registered
        data: Buffer to decode from
        offset: Byte offset of the value within ``data``
        config: Decoding limits

    Returns:
        Tuple of (value, bytes_consumed)

    Raises:
        UnknownType: If a referenced type is not registered
        TruncatedInput: If the buffer ends before the value does
        InvalidBoolean, InvalidOptionTag, InvalidUtf8, UnknownVariant:
            If a byte sequence is not valid for its type
        LimitExceeded: If nesting, an array length or a length prefix
            exceeds ``config``

    Examples:
        ```python
        value, used = decode(registry, "Option<u32>", b"\\x01\\x07\\x00\\x00\\x00")
        # value == OptionValue(Int(7)), used == 5
        ```
    """
    typedef, label = resolve_ref(registry, type_ref)
    if not 0 <= offset <= len(data):
        raise TruncatedInput(
            f"Offset {offset} is outside a buffer of {len(data)} bytes",
            offset=offset,
            constructor=typedef.constructor,
            path=label,
        )
    unpacker = ByteUnpacker(data, offset)
    try:
        value = _Decoder(registry, unpacker, config).decode(typedef, label, 0)
    except RecursionError as e:
        # max_depth above what the interpreter stack allows
        raise LimitExceeded(
            f"Nesting exceeds the interpreter recursion limit (max_depth={config.max_depth})",
            offset=unpacker.position(),
            constructor=typedef.constructor,
            path=label,
        ) from e
    return value, unpacker.consumed()


def decode_all(
    registry: TypeRegistry,
    type_ref: str | Any,
    data: bytes,
    *,
    config: CodecConfig = DEFAULT_CONFIG,
) -> Value:
    """Decode a value that must span the whole buffer.

    Raises:
        TrailingBytes: If bytes remain after the value
        DecodeError: Any error decode() raises
    """
    value, used = decode(registry, type_ref, data, 0, config=config)
    if used != len(data):
        _, label = resolve_ref(registry, type_ref)
        raise TrailingBytes(
            f"{len(data) - used} unexpected bytes after value",
            offset=used,
            path=label,
        )
    return value


class _Decoder:
    def __init__(self, registry: TypeRegistry, unpacker: ByteUnpacker, config: CodecConfig) -> None:
        self.registry = registry
        self.unpacker = unpacker
        self.config = config

    def decode_ref(self, name: str, path: str, depth: int) -> Value:
        return self.decode(self.registry.resolve(name), path, depth)

    def decode(self, typedef: Any, path: str, depth: int) -> Value:
        if depth > self.config.max_depth:
            raise LimitExceeded(
                f"Nesting exceeds max_depth={self.config.max_depth}",
                offset=self.unpacker.position(),
                constructor=typedef.constructor,
                path=path,
            )
        try:
            return self._decode(typedef, path, depth)
        except DecodeError as e:
            # Attach context once, at the innermost frame that saw the error.
            if e.path is None:
                raise type(e)(
                    e.reason,
                    offset=e.offset if e.offset is not None else self.unpacker.position(),
                    constructor=typedef.constructor,
                    path=path,
                ) from e
            raise

    def _decode(self, typedef: Any, path: str, depth: int) -> Value:
        if isinstance(typedef, Primitive):
            return self._decode_primitive(typedef.primitive)

        if isinstance(typedef, FixedArray):
            self._check_length("array length", typedef.length, self.unpacker.position())
            items = []
            for index in range(typedef.length):
                items.append(self.decode_ref(typedef.elem, f"{path}[{index}]", depth + 1))
            return FixedList(tuple(items))

        if isinstance(typedef, Sequence):
            count = self._read_length("sequence length")
            items = []
            for index in range(count):
                items.append(self.decode_ref(typedef.elem, f"{path}[{index}]", depth + 1))
            return SeqValue(tuple(items))

        if isinstance(typedef, (Tuple, Map2)):
            items = []
            for index, member in enumerate(typedef.references()):
                items.append(self.decode_ref(member, f"{path}.{index}", depth + 1))
            return TupleValue(tuple(items))

        if isinstance(typedef, Struct):
            fields = []
            for f in typedef.fields:
                fields.append((f.name, self.decode_ref(f.type, f"{path}.{f.name}", depth + 1)))
            return Record(tuple(fields))

        if isinstance(typedef, Enum):
            return self._decode_enum(typedef, path, depth)

        if isinstance(typedef, Option):
            start = self.unpacker.position()
            tag = self.unpacker.read_byte()
            if tag == 0:
                return OptionValue()
            if tag == 1:
                return OptionValue(self.decode_ref(typedef.inner, path, depth + 1))
            raise InvalidOptionTag(f"Invalid option tag {tag:#04x}", offset=start)

        raise DecodeError(f"Cannot decode with {typedef!r}")

    def _decode_primitive(self, kind: PrimitiveKind) -> Value:
        if kind is PrimitiveKind.BOOL:
            start = self.unpacker.position()
            byte = self.unpacker.read_byte()
            if byte > 1:
                raise InvalidBoolean(f"Invalid boolean byte {byte:#04x}", offset=start)
            return Bool(byte == 1)

        if kind is PrimitiveKind.TEXT:
            length = self._read_length("text length")
            start = self.unpacker.position()
            raw = self.unpacker.read_bytes(length)
            try:
                return Text(raw.decode("utf-8"))
            except UnicodeDecodeError as e:
                raise InvalidUtf8(f"Invalid UTF-8 text: {e.reason}", offset=start + e.start) from e

        width = kind.byte_width or 0
        if kind.signed:
            return Int(self.unpacker.read_int(width))
        return Int(self.unpacker.read_uint(width))

    def _decode_enum(self, typedef: Enum, path: str, depth: int) -> Value:
        start = self.unpacker.position()
        count = len(typedef.variants)
        index = read_compact(self.unpacker) if count > 255 else self.unpacker.read_byte()
        if index >= count:
            raise UnknownVariant(
                f"Variant index {index} out of range for {count} variants", offset=start
            )
        variant = typedef.variants[index]
        if variant.payload is None:
            return EnumValue(index, variant.name)
        payload = self.decode_ref(variant.payload, f"{path}::{variant.name}", depth + 1)
        return EnumValue(index, variant.name, payload)

    def _read_length(self, what: str) -> int:
        start = self.unpacker.position()
        length = read_compact(self.unpacker)
        self._check_length(what, length, start)
        return length

    def _check_length(self, what: str, length: int, offset: int) -> None:
        if length > self.config.max_collection_length:
            raise LimitExceeded(
                f"{what} {length} exceeds max_collection_length="
                f"{self.config.max_collection_length}",
                offset=offset,
            )
