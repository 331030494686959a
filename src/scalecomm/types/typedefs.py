"""Type definitions for the scalecomm schema.

A TypeDef is one of a closed set of constructors. Definitions refer to other
types by name only; names are resolved through a TypeRegistry. All
definitions are immutable Pydantic models discriminated by their ``kind``
field, so a schema can be validated from plain data as well as built in code.

Example:
    >>> from scalecomm.types import Struct
    >>> Struct(fields=[("name", "Text"), ("amount", "u64")])
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

TypeName = Annotated[str, Field(min_length=1)]

U32_MAX = (1 << 32) - 1


class PrimitiveKind(str, enum.Enum):
    """Primitive value kinds with a fixed wire representation (except text)."""

    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    I128 = "i128"
    BOOL = "bool"
    TEXT = "text"

    @property
    def is_integer(self) -> bool:
        return self not in (PrimitiveKind.BOOL, PrimitiveKind.TEXT)

    @property
    def signed(self) -> bool:
        return self.value.startswith("i")

    @property
    def byte_width(self) -> int | None:
        """Fixed width in bytes, or None for text."""
        if self is PrimitiveKind.BOOL:
            return 1
        if self is PrimitiveKind.TEXT:
            return None
        return int(self.value[1:]) // 8

    def bounds(self) -> tuple[int, int]:
        """Inclusive integer range for this kind.

        Raises:
            ValueError: If the kind is not an integer kind
        """
        if not self.is_integer:
            raise ValueError(f"{self.value} is not an integer kind")
        bits = int(self.value[1:])
        if self.signed:
            return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        return 0, (1 << bits) - 1


class _TypeDefBase(BaseModel):
    """Common configuration for every TypeDef constructor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def constructor(self) -> str:
        """Constructor name used in error messages (e.g. "Struct")."""
        return type(self).__name__

    def references(self) -> tuple[str, ...]:
        """Return every type name this definition refers to, in order."""
        return ()


class Alias(_TypeDefBase):
    """A pure rename of another type."""

    kind: Literal["alias"] = "alias"
    target: TypeName

    def references(self) -> tuple[str, ...]:
        return (self.target,)


class Primitive(_TypeDefBase):
    kind: Literal["primitive"] = "primitive"
    primitive: PrimitiveKind


class FixedArray(_TypeDefBase):
    """Exactly ``length`` elements, encoded without a length prefix."""

    kind: Literal["fixed_array"] = "fixed_array"
    elem: TypeName
    length: int = Field(ge=0, le=U32_MAX)

    def references(self) -> tuple[str, ...]:
        return (self.elem,)


class Sequence(_TypeDefBase):
    """Variable-length list, encoded with a compact length prefix."""

    kind: Literal["sequence"] = "sequence"
    elem: TypeName

    def references(self) -> tuple[str, ...]:
        return (self.elem,)


class Tuple(_TypeDefBase):
    kind: Literal["tuple"] = "tuple"
    members: tuple[TypeName, ...]

    def references(self) -> tuple[str, ...]:
        return self.members


class StructField(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    type: TypeName


class Struct(_TypeDefBase):
    """Named fields; declaration order is the wire order.

    Fields may be given as StructField models, ``(name, type)`` pairs or a
    mapping of name to type.
    """

    kind: Literal["struct"] = "struct"
    fields: tuple[StructField, ...]

    @field_validator("fields", mode="before")
    @classmethod
    def _coerce_fields(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return tuple({"name": name, "type": type_} for name, type_ in value.items())
        if isinstance(value, (list, tuple)):
            return tuple(
                {"name": item[0], "type": item[1]} if isinstance(item, (list, tuple)) else item
                for item in value
            )
        return value

    @model_validator(mode="after")
    def _check_unique_names(self) -> Struct:
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate struct field names: {duplicates}")
        return self

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def references(self) -> tuple[str, ...]:
        return tuple(f.type for f in self.fields)


class EnumVariant(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    payload: TypeName | None = None


class Enum(_TypeDefBase):
    """Tagged union; each variant's discriminant is its 0-based position.

    Variants may be given as EnumVariant models, bare names (unit variants),
    ``(name, payload)`` pairs or a mapping of name to payload (None for unit).
    """

    kind: Literal["enum"] = "enum"
    variants: tuple[EnumVariant, ...]

    @field_validator("variants", mode="before")
    @classmethod
    def _coerce_variants(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return tuple({"name": name, "payload": payload} for name, payload in value.items())
        if isinstance(value, (list, tuple)):
            coerced = []
            for item in value:
                if isinstance(item, str):
                    coerced.append({"name": item})
                elif isinstance(item, (list, tuple)):
                    coerced.append({"name": item[0], "payload": item[1]})
                else:
                    coerced.append(item)
            return tuple(coerced)
        return value

    @model_validator(mode="after")
    def _check_variants(self) -> Enum:
        if not self.variants:
            raise ValueError("enum must declare at least one variant")
        names = [v.name for v in self.variants]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate enum variant names: {duplicates}")
        return self

    @property
    def variant_names(self) -> tuple[str, ...]:
        return tuple(v.name for v in self.variants)

    def index_of(self, name: str) -> int:
        """Return the discriminant of the variant called ``name``.

        Raises:
            KeyError: If no variant has that name
        """
        for index, variant in enumerate(self.variants):
            if variant.name == name:
                return index
        raise KeyError(name)

    def references(self) -> tuple[str, ...]:
        return tuple(v.payload for v in self.variants if v.payload is not None)


class Option(_TypeDefBase):
    kind: Literal["option"] = "option"
    inner: TypeName

    def references(self) -> tuple[str, ...]:
        return (self.inner,)


class Map2(_TypeDefBase):
    """A key/value pair encoded like a two-member tuple."""

    kind: Literal["map2"] = "map2"
    key: TypeName
    value: TypeName

    def references(self) -> tuple[str, ...]:
        return (self.key, self.value)


TypeDef = Annotated[
    Union[Alias, Primitive, FixedArray, Sequence, Tuple, Struct, Enum, Option, Map2],
    Field(discriminator="kind"),
]

_TYPEDEF_ADAPTER: TypeAdapter[Any] = TypeAdapter(TypeDef)

TYPEDEF_CLASSES = (Alias, Primitive, FixedArray, Sequence, Tuple, Struct, Enum, Option, Map2)


def parse_typedef(data: Any) -> Any:
    """Validate a TypeDef from plain data (e.g. ``{"kind": "option", "inner": "u32"}``).

    Raises:
        pydantic.ValidationError: If the data does not describe a TypeDef
    """
    return _TYPEDEF_ADAPTER.validate_python(data)
