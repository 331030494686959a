"""Method signatures and the binding table.

A MethodSignature names a remote operation, its ordered parameters and its
return type. The MethodTable owns the signatures of one schema and binds
call arguments to them: each argument is matched by name, coerced into a
Value of the declared type and encoded, so a bad argument fails before
anything reaches the transport.
Optional parameters travel on the wire as ``Option<T>``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..codec.encoder import encode
from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import (
    ArgumentTypeMismatch,
    DuplicateMethod,
    EncodeError,
    MissingArgument,
    RegistryFrozen,
    UnexpectedArgument,
    UnknownMethod,
    UnknownType,
    ValueShapeError,
)
from ..registry import TypeRegistry
from ..types.coerce import coerce
from ..types.typedefs import Option, TypeName
from ..types.values import Value

log = logging.getLogger("scalecomm.rpc")


class Param(BaseModel):
    """One declared parameter of a remote method."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    type: TypeName
    required: bool = True

    def wire_type(self) -> Any:
        """Type the argument is encoded with: ``Option<type>`` unless required."""
        return Option(inner=self.type) if not self.required else self.type


class MethodSignature(BaseModel):
    """Immutable description of a remote operation.

    Example:
        >>> MethodSignature(
        ...     name="identity_getAssetDid",
        ...     params=[Param(name="ticker", type="[u8; 12]"),
        ...             Param(name="blockHash", type="Hash", required=False)],
        ...     returns="IdentityId",
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    params: tuple[Param, ...] = ()
    returns: TypeName
    description: str = ""

    @model_validator(mode="after")
    def _check_unique_params(self) -> MethodSignature:
        names = [p.name for p in self.params]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate parameter names: {duplicates}")
        return self

    def param(self, name: str) -> Param:
        for param in self.params:
            if param.name == name:
                return param
        raise KeyError(name)


@dataclass(frozen=True)
class BoundArgument:
    """An argument matched to its parameter, coerced and encoded.

    Attributes:
        param: The declared parameter
        wire_type: Type name or TypeDef used to encode ``value``
        value: The coerced value (an OptionValue for optional parameters)
        encoded: The wire encoding of ``value``
    """

    param: Param
    wire_type: Any
    value: Value
    encoded: bytes


class MethodTable:
    """Maps method names to signatures for one schema.

    Args:
        registry: Registry that every parameter and return type must exist in
        config: Limits used when encoding bound arguments
    """

    def __init__(self, registry: TypeRegistry, config: CodecConfig = DEFAULT_CONFIG) -> None:
        self.registry = registry
        self.config = config
        self._methods: dict[str, MethodSignature] = {}
        self.frozen = False

    def register(self, signature: MethodSignature) -> None:
        """Register a signature.

        Raises:
            DuplicateMethod: If the name is already registered
            UnknownType: If a parameter or return type is not in the registry
            RegistryFrozen: If the table has been frozen
        """
        if self.frozen:
            raise RegistryFrozen(f"Cannot register {signature.name!r}: method table is frozen")
        if signature.name in self._methods:
            raise DuplicateMethod(f"Method {signature.name!r} is already registered")
        for type_name in [p.type for p in signature.params] + [signature.returns]:
            if type_name not in self.registry:
                raise UnknownType(f"Method {signature.name!r} uses unknown type {type_name!r}")
        self._methods[signature.name] = signature
        log.debug("registered method %s(%d params)", signature.name, len(signature.params))

    def lookup(self, name: str) -> MethodSignature:
        """Return the signature registered under ``name``.

        Raises:
            UnknownMethod: If no such method is registered
        """
        try:
            return self._methods[name]
        except KeyError:
            raise UnknownMethod(f"Unknown method {name!r}") from None

    def freeze(self) -> MethodTable:
        self.frozen = True
        return self

    def bind_arguments(
        self,
        signature: MethodSignature,
        args: Mapping[str, Any] | Iterable[tuple[str, Any]],
    ) -> list[BoundArgument]:
        """Match arguments to parameters in declared order.

        Args:
            signature: The method being called
            args: ``(name, value)`` pairs or a mapping; values may be Values
                or plain Python data

        Returns:
            One BoundArgument per declared parameter, in declared order, each
            carrying its encoded bytes

        Raises:
            UnexpectedArgument: If a name is not a parameter or is repeated
            MissingArgument: If a required parameter is absent
            ArgumentTypeMismatch: If a value does not fit its parameter type
        """
        pairs = list(args.items()) if isinstance(args, Mapping) else list(args)
        supplied: dict[str, Any] = {}
        declared = {p.name for p in signature.params}
        for name, value in pairs:
            if name not in declared:
                raise UnexpectedArgument(f"{signature.name}() got an unexpected argument {name!r}")
            if name in supplied:
                raise UnexpectedArgument(f"{signature.name}() got argument {name!r} more than once")
            supplied[name] = value

        bound = []
        for param in signature.params:
            if param.required and supplied.get(param.name) is None:
                raise MissingArgument(
                    f"{signature.name}() missing required argument {param.name!r}"
                )
            wire_type = param.wire_type()
            try:
                value = coerce(
                    self.registry,
                    wire_type,
                    supplied.get(param.name),
                    path=f"{signature.name}.{param.name}",
                )
                encoded = encode(self.registry, wire_type, value, config=self.config)
            except (ValueShapeError, EncodeError) as e:
                raise ArgumentTypeMismatch(
                    f"{signature.name}() argument {param.name!r} does not fit {param.type}: {e}"
                ) from e
            bound.append(BoundArgument(param, wire_type, value, encoded))
        return bound

    def names(self) -> list[str]:
        return list(self._methods)

    def __iter__(self) -> Iterator[MethodSignature]:
        return iter(self._methods.values())

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def __len__(self) -> int:
        return len(self._methods)
