"""Loading a schema from a structured source document.

A schema source describes types and RPC methods as plain data, in the shape
node client libraries conventionally use:

```json
{
  "types": {
    "Ticker": "[u8; 12]",
    "Document": {"name": "Text", "uri": "Text", "content_hash": "Text"},
    "Permission": {"_enum": ["Full", "Admin", "Operator", "SpendFunds"]},
    "Signatory": {"_enum": {"Identity": "IdentityId", "AccountKey": "AccountKey"}}
  },
  "rpc": {
    "identity": {
      "getAssetDid": {
        "description": "query the DID of a ticker",
        "params": [
          {"name": "ticker", "type": "[u8; 12]", "isOptional": false},
          {"name": "blockHash", "type": "Hash", "isOptional": true}
        ],
        "type": "IdentityId"
      }
    }
  }
}
```

A string definition is an alias of the (possibly composite) expression; an
object is a struct whose key order is the wire order; ``{"_enum": [...]}``
lists unit variants and ``{"_enum": {...}}`` maps variant names to payload
expressions (``""`` or ``"Null"`` for unit variants). Methods are registered
as ``<section>_<method>``. Source definitions take precedence over the
registry's built-in aliases of the same name.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import SchemaSourceError
from ..registry import TypeRegistry, builtin_types
from ..rpc.methods import MethodSignature, MethodTable, Param
from ..types.typedefs import Alias, Enum, Struct
from .expressions import parse_type_expression

log = logging.getLogger("scalecomm.schema")

_UNIT_PAYLOADS = ("", "Null", "()")


class RpcParamSource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    is_optional: bool = Field(default=False, alias="isOptional")


class RpcMethodSource(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str = ""
    params: list[RpcParamSource] = []
    type: str = Field(min_length=1)


class SchemaSource(BaseModel):
    """Validated schema source document."""

    model_config = ConfigDict(extra="forbid")

    types: dict[str, Union[str, dict[str, Any]]] = {}
    rpc: dict[str, dict[str, RpcMethodSource]] = {}


def load_schema(
    document: Mapping[str, Any] | SchemaSource,
    *,
    config: CodecConfig = DEFAULT_CONFIG,
) -> tuple[TypeRegistry, MethodTable]:
    """Build a frozen registry and method table from a schema source.

    Args:
        document: Source document (plain data or a validated SchemaSource)
        config: Codec limits for the returned method table

    Returns:
        Tuple of (registry, methods), both frozen

    Raises:
        SchemaSourceError: If the document or a type expression is malformed
        SchemaError: If the resulting schema has unresolved references or
            alias cycles

    Example:
        >>> registry, methods = load_schema({"types": {"Ticker": "[u8; 12]"}})
        >>> registry.resolve("Ticker")
        FixedArray(kind='fixed_array', elem='u8', length=12)
    """
    if isinstance(document, SchemaSource):
        source = document
    else:
        try:
            source = SchemaSource.model_validate(document)
        except ValidationError as e:
            raise SchemaSourceError(f"Invalid schema source: {e}") from e

    synthesized: dict[str, Any] = {}
    named: dict[str, Any] = {}
    for name, definition in source.types.items():
        named[name] = _definition(name, definition, synthesized)

    signatures = []
    for section, methods in source.rpc.items():
        for method, entry in methods.items():
            params = tuple(
                Param(
                    name=p.name,
                    type=_expression(p.type, synthesized),
                    required=not p.is_optional,
                )
                for p in entry.params
            )
            signatures.append(
                MethodSignature(
                    name=f"{section}_{method}",
                    params=params,
                    returns=_expression(entry.type, synthesized),
                    description=entry.description,
                )
            )

    registry = TypeRegistry(builtins=False)
    registry.register_many({k: v for k, v in builtin_types().items() if k not in named})
    registry.register_many(named)
    for name, typedef in synthesized.items():
        if name not in registry:
            registry.register(name, typedef)
    registry.freeze()

    table = MethodTable(registry, config)
    for signature in signatures:
        table.register(signature)
    table.freeze()

    log.debug(
        "loaded schema: %d types (%d synthesized), %d methods",
        len(registry),
        len(synthesized),
        len(table),
    )
    return registry, table


def load_schema_file(
    path: str | Path, *, config: CodecConfig = DEFAULT_CONFIG
) -> tuple[TypeRegistry, MethodTable]:
    """Load a JSON schema source file (see load_schema).

    Raises:
        SchemaSourceError: If the file is not valid JSON
        OSError: If the file cannot be read
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaSourceError(f"{path}: invalid JSON: {e}") from e
    return load_schema(document, config=config)


def _expression(text: str, synthesized: dict[str, Any]) -> str:
    return parse_type_expression(text, synthesized)


def _definition(name: str, definition: str | dict[str, Any], synthesized: dict[str, Any]) -> Any:
    if isinstance(definition, str):
        return Alias(target=_expression(definition, synthesized))

    if "_enum" in definition:
        if len(definition) != 1:
            raise SchemaSourceError(f"Type {name!r}: _enum cannot be combined with other keys")
        variants = definition["_enum"]
        if isinstance(variants, list):
            if not all(isinstance(v, str) for v in variants):
                raise SchemaSourceError(f"Type {name!r}: _enum list must contain variant names")
            return _build(name, Enum, variants=variants)
        if isinstance(variants, dict):
            return _build(
                name,
                Enum,
                variants=[
                    (variant, _payload(name, variant, payload, synthesized))
                    for variant, payload in variants.items()
                ],
            )
        raise SchemaSourceError(f"Type {name!r}: _enum must be a list or an object")

    special = [key for key in definition if key.startswith("_")]
    if special:
        raise SchemaSourceError(f"Type {name!r}: unsupported directive {special[0]!r}")
    fields = []
    for field_name, expression in definition.items():
        if not isinstance(expression, str):
            raise SchemaSourceError(f"Type {name!r}: field {field_name!r} must be a type expression")
        fields.append((field_name, _expression(expression, synthesized)))
    return _build(name, Struct, fields=fields)


def _payload(name: str, variant: str, payload: Any, synthesized: dict[str, Any]) -> str | None:
    if payload is None or payload in _UNIT_PAYLOADS:
        return None
    if not isinstance(payload, str):
        raise SchemaSourceError(f"Type {name!r}: payload of {variant!r} must be a type expression")
    return _expression(payload, synthesized)


def _build(name: str, typedef_class: type, **kwargs: Any) -> Any:
    try:
        return typedef_class(**kwargs)
    except ValidationError as e:
        raise SchemaSourceError(f"Type {name!r}: {e}") from e
