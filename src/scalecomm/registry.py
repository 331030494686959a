"""Schema registry: the mapping from type name to type definition.

A registry is explicitly constructed, populated with a batch of definitions,
validated and then frozen. Forward references are allowed during
registration; ``validate()`` checks every reference eagerly so malformed
schemas fail before any encode/decode attempt. A frozen registry is
read-only and may be shared by concurrent callers without locking.

Example:
    >>> registry = TypeRegistry()
    >>> registry.register("Ticker", FixedArray(elem="u8", length=12))
    >>> registry.register("Amount", Alias(target="u128"))
    >>> registry.freeze()
    >>> registry.resolve("Amount")
    Primitive(kind='primitive', primitive=<PrimitiveKind.U128: 'u128'>)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from .exceptions import (
    AliasCycle,
    DuplicateType,
    RegistryFrozen,
    UnknownType,
    UnresolvedReference,
)
from .types.typedefs import TYPEDEF_CLASSES, Alias, FixedArray, Primitive, PrimitiveKind, Sequence

log = logging.getLogger("scalecomm.registry")

PRIMITIVE_NAMES: dict[str, PrimitiveKind] = {
    "u8": PrimitiveKind.U8,
    "u16": PrimitiveKind.U16,
    "u32": PrimitiveKind.U32,
    "u64": PrimitiveKind.U64,
    "u128": PrimitiveKind.U128,
    "i8": PrimitiveKind.I8,
    "i16": PrimitiveKind.I16,
    "i32": PrimitiveKind.I32,
    "i64": PrimitiveKind.I64,
    "i128": PrimitiveKind.I128,
    "bool": PrimitiveKind.BOOL,
    "Text": PrimitiveKind.TEXT,
}


def builtin_types() -> dict[str, Any]:
    """Definitions every registry starts with unless ``builtins=False``.

    Besides the primitives this includes the common chain aliases that node
    schemas take for granted (hashes, balances, timestamps, raw bytes).
    """
    defs: dict[str, Any] = {name: Primitive(primitive=kind) for name, kind in PRIMITIVE_NAMES.items()}
    defs.update(
        {
            "[u8; 32]": FixedArray(elem="u8", length=32),
            "[u8; 64]": FixedArray(elem="u8", length=64),
            "Vec<u8>": Sequence(elem="u8"),
            "H256": Alias(target="[u8; 32]"),
            "H512": Alias(target="[u8; 64]"),
            "Hash": Alias(target="H256"),
            "AccountId": Alias(target="[u8; 32]"),
            "Signature": Alias(target="H512"),
            "Balance": Alias(target="u128"),
            "Moment": Alias(target="u64"),
            "BlockNumber": Alias(target="u32"),
            "Bytes": Alias(target="Vec<u8>"),
        }
    )
    return defs


class TypeRegistry:
    """Owns every TypeDef of one schema version.

    Attributes:
        frozen: True once ``freeze()`` succeeded; registration is then rejected
    """

    def __init__(self, *, builtins: bool = True) -> None:
        self._defs: dict[str, Any] = {}
        self._validated = False
        self.frozen = False
        if builtins:
            self.register_many(builtin_types())

    # -- registration -----------------------------------------------------

    def register(self, name: str, typedef: Any) -> None:
        """Register ``typedef`` under ``name``.

        References are not checked here; call ``validate()`` after the batch.

        Raises:
            RegistryFrozen: If the registry has been frozen
            DuplicateType: If the name is already registered
            TypeError: If ``typedef`` is not a TypeDef
        """
        if self.frozen:
            raise RegistryFrozen(f"Cannot register {name!r}: registry is frozen")
        if not isinstance(typedef, TYPEDEF_CLASSES):
            raise TypeError(f"Expected a TypeDef for {name!r}, got {type(typedef).__name__}")
        if name in self._defs:
            raise DuplicateType(f"Type {name!r} is already registered")
        self._defs[name] = typedef
        self._validated = False
        log.debug("registered %s as %s", name, typedef.constructor)

    def register_many(self, defs: Mapping[str, Any]) -> None:
        """Register a batch of definitions; order within the batch is irrelevant."""
        for name, typedef in defs.items():
            self.register(name, typedef)

    # -- lookup -----------------------------------------------------------

    def lookup(self, name: str) -> Any:
        """Return the definition registered under ``name`` without following aliases.

        Raises:
            UnknownType: If the name is not registered
        """
        try:
            return self._defs[name]
        except KeyError:
            raise UnknownType(f"Unknown type {name!r}") from None

    def resolve(self, name: str) -> Any:
        """Return the terminal (non-alias) definition for ``name``.

        Raises:
            UnknownType: If ``name`` or an alias target is not registered
            AliasCycle: If the alias chain revisits a name
        """
        chain = [name]
        typedef = self.lookup(name)
        while isinstance(typedef, Alias):
            target = typedef.target
            if target in chain:
                raise AliasCycle(chain + [target])
            chain.append(target)
            typedef = self.lookup(target)
        return typedef

    def validate(self) -> None:
        """Check every reference and alias chain in the registry.

        Idempotent: the outcome only depends on the registered definitions.

        Raises:
            UnresolvedReference: If a definition names an unregistered type
            AliasCycle: If an alias chain loops
        """
        for name, typedef in self._defs.items():
            for reference in typedef.references():
                if reference not in self._defs:
                    raise UnresolvedReference(name, reference)
        for name, typedef in self._defs.items():
            if isinstance(typedef, Alias):
                self.resolve(name)
        self._validated = True
        log.debug("validated %d types", len(self._defs))

    def freeze(self) -> TypeRegistry:
        """Validate and make the registry read-only. Returns self for chaining."""
        if not self._validated:
            self.validate()
        self.frozen = True
        return self

    # -- container protocol -----------------------------------------------

    def names(self) -> list[str]:
        return list(self._defs)

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(self._defs.items())

    def __contains__(self, name: object) -> bool:
        return name in self._defs

    def __len__(self) -> int:
        return len(self._defs)

    def __repr__(self) -> str:
        state = "frozen" if self.frozen else "open"
        return f"TypeRegistry({len(self._defs)} types, {state})"
