"""In-memory value model.

Values are tagged, immutable data mirroring the TypeDef constructors. A Value
only has meaning together with the TypeDef it was built against; the codec
never infers a type from a bare Value. Equality is structural, which makes
values directly comparable in round-trip tests.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterator, Union

from ..exceptions import ShapeMismatch, UnknownVariant
from .typedefs import Enum, Struct


@dataclass(frozen=True)
class Int:
    value: int


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class FixedList:
    items: tuple[Value, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)


@dataclass(frozen=True)
class SeqValue:
    items: tuple[Value, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)


@dataclass(frozen=True)
class TupleValue:
    """Members of a Tuple, or the key/value pair of a Map2 entry."""

    items: tuple[Value, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)


@dataclass(frozen=True)
class Record:
    """Struct value: ``(name, value)`` pairs in declared field order."""

    fields: tuple[tuple[str, Value], ...]

    @classmethod
    def build(cls, struct: Struct, values: Mapping[str, Value]) -> Record:
        """Build a record for ``struct``, ordering fields as declared.

        Raises:
            ShapeMismatch: If the field names or count differ from the struct
        """
        expected = struct.field_names
        if len(values) != len(expected) or set(values) != set(expected):
            missing = [n for n in expected if n not in values]
            extra = [n for n in values if n not in expected]
            raise ShapeMismatch(
                f"Struct expects fields {list(expected)}, "
                f"missing {missing}, unexpected {extra}"
            )
        return cls(tuple((name, values[name]) for name in expected))

    def __getitem__(self, name: str) -> Value:
        for field_name, value in self.fields:
            if field_name == name:
                return value
        raise KeyError(name)

    def names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.fields)


@dataclass(frozen=True)
class EnumValue:
    index: int
    name: str
    payload: Value | None = None

    @classmethod
    def build(cls, enum_def: Enum, variant: int | str, payload: Value | None = None) -> EnumValue:
        """Build an instance of ``enum_def`` by variant index or name.

        Raises:
            UnknownVariant: If the index is out of range or the name unknown
            ShapeMismatch: If payload presence disagrees with the variant
        """
        if isinstance(variant, str):
            try:
                index = enum_def.index_of(variant)
            except KeyError:
                raise UnknownVariant(
                    f"Unknown variant {variant!r}; expected one of {list(enum_def.variant_names)}"
                ) from None
        else:
            index = variant
            if not 0 <= index < len(enum_def.variants):
                raise UnknownVariant(
                    f"Variant index {index} out of range for {len(enum_def.variants)} variants"
                )
        declared = enum_def.variants[index]
        if declared.payload is None and payload is not None:
            raise ShapeMismatch(f"Variant {declared.name!r} is a unit variant and takes no payload")
        if declared.payload is not None and payload is None:
            raise ShapeMismatch(f"Variant {declared.name!r} requires a {declared.payload} payload")
        return cls(index, declared.name, payload)


@dataclass(frozen=True)
class OptionValue:
    payload: Value | None = None

    @property
    def present(self) -> bool:
        return self.payload is not None


NONE = OptionValue()

Value = Union[Int, Bool, Text, FixedList, SeqValue, TupleValue, Record, EnumValue, OptionValue]

VALUE_CLASSES = (Int, Bool, Text, FixedList, SeqValue, TupleValue, Record, EnumValue, OptionValue)


def some(payload: Value) -> OptionValue:
    """Shorthand for a present option."""
    return OptionValue(payload)


def to_python(value: Value) -> Any:
    """Convert a value into plain Python data.

    Integers, booleans and text become ``int``/``bool``/``str``; lists and
    sequences become lists; tuples become lists; records become dicts; enum
    instances become the variant name (unit) or ``{name: payload}``; options
    become None or their payload.
    """
    if isinstance(value, (Int, Bool, Text)):
        return value.value
    if isinstance(value, (FixedList, SeqValue, TupleValue)):
        return [to_python(item) for item in value.items]
    if isinstance(value, Record):
        return {name: to_python(item) for name, item in value.fields}
    if isinstance(value, EnumValue):
        if value.payload is None:
            return value.name
        return {value.name: to_python(value.payload)}
    if isinstance(value, OptionValue):
        return None if value.payload is None else to_python(value.payload)
    raise TypeError(f"Not a scalecomm value: {type(value).__name__}")
