"""Parser for type expressions such as ``Vec<(IdentityId, Balance)>``.

Schema sources refer to anonymous composite types inline. Each composite
expression is given a canonical name (whitespace normalised, e.g.
``[u8; 12]``) and a synthesized definition, so two spellings of the same
expression share one registry entry.

Supported forms:

- ``Name``
- ``Vec<T>``
- ``Option<T>``
- ``[T; N]``
- ``(A, B, ...)`` and ``()``
- ``BTreeMap<K, V>`` / ``HashMap<K, V>``: a ``Vec`` of ``Map2<K, V>`` entries
- ``Map2<K, V>``
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import ValidationError

from ..exceptions import SchemaSourceError
from ..types.typedefs import FixedArray, Map2, Option, Sequence, Tuple

_TOKEN = re.compile(r"\s*(?:([A-Za-z_][A-Za-z0-9_]*)|(\d+)|([<>\[\];(),]))")

_MAP_NAMES = ("BTreeMap", "HashMap")


def parse_type_expression(text: str, defs: dict[str, Any] | None = None) -> str:
    """Parse ``text`` and return its canonical type name.

    Args:
        text: The type expression
        defs: Mapping that receives a definition for every composite
            sub-expression, keyed by canonical name

    Raises:
        SchemaSourceError: If the expression is malformed or unsupported

    Example:
        >>> defs = {}
        >>> parse_type_expression("Vec<(IdentityId,Balance)>", defs)
        'Vec<(IdentityId, Balance)>'
        >>> sorted(defs)
        ['(IdentityId, Balance)', 'Vec<(IdentityId, Balance)>']
    """
    parser = _ExpressionParser(text, defs if defs is not None else {})
    name = parser.parse_type()
    if parser.peek() is not None:
        parser.fail(f"unexpected {parser.peek()!r}")
    return name


class _ExpressionParser:
    def __init__(self, text: str, defs: dict[str, Any]) -> None:
        self.text = text
        self.defs = defs
        self.tokens = self._tokenize(text)
        self.index = 0

    def _tokenize(self, text: str) -> list[str]:
        tokens = []
        position = 0
        stripped = text.rstrip()
        while position < len(stripped):
            match = _TOKEN.match(stripped, position)
            if match is None:
                raise SchemaSourceError(
                    f"Invalid type expression {text!r}: unexpected character at {position}"
                )
            tokens.append(match.group(match.lastindex or 0))
            position = match.end()
        return tokens

    def fail(self, message: str) -> None:
        raise SchemaSourceError(f"Invalid type expression {self.text!r}: {message}")

    def peek(self) -> str | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def take(self, expected: str | None = None) -> str:
        token = self.peek()
        if token is None:
            self.fail("unexpected end of expression")
        if expected is not None and token != expected:
            self.fail(f"expected {expected!r}, got {token!r}")
        self.index += 1
        return token  # type: ignore[return-value]

    def define(self, name: str, typedef: Any) -> str:
        self.defs.setdefault(name, typedef)
        return name

    def build(self, typedef_class: type, **kwargs: Any) -> Any:
        try:
            return typedef_class(**kwargs)
        except ValidationError as e:
            self.fail(f"invalid {typedef_class.__name__}: {e}")

    def parse_type(self) -> str:
        token = self.take()
        if token == "[":
            elem = self.parse_type()
            self.take(";")
            length = self.take()
            if not length.isdigit():
                self.fail(f"array length must be a number, got {length!r}")
            self.take("]")
            array = self.build(FixedArray, elem=elem, length=int(length))
            return self.define(f"[{elem}; {int(length)}]", array)

        if token == "(":
            members: list[str] = []
            if self.peek() != ")":
                members.append(self.parse_type())
                while self.peek() == ",":
                    self.take(",")
                    members.append(self.parse_type())
            self.take(")")
            return self.define(f"({', '.join(members)})", Tuple(members=tuple(members)))

        if not (token[0].isalpha() or token[0] == "_"):
            self.fail(f"unexpected {token!r}")

        if self.peek() != "<":
            return token

        self.take("<")
        args = [self.parse_type()]
        while self.peek() == ",":
            self.take(",")
            args.append(self.parse_type())
        self.take(">")

        if token == "Vec" and len(args) == 1:
            return self.define(f"Vec<{args[0]}>", Sequence(elem=args[0]))
        if token == "Option" and len(args) == 1:
            return self.define(f"Option<{args[0]}>", Option(inner=args[0]))
        if token == "Map2" and len(args) == 2:
            return self.define(f"Map2<{args[0]}, {args[1]}>", Map2(key=args[0], value=args[1]))
        if token in _MAP_NAMES and len(args) == 2:
            entry = self.define(f"Map2<{args[0]}, {args[1]}>", Map2(key=args[0], value=args[1]))
            return self.define(f"Vec<{entry}>", Sequence(elem=entry))
        self.fail(f"unsupported generic {token}<{', '.join(args)}>")
        return token
