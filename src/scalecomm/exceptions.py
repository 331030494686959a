"""Exception hierarchy for scalecomm.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from ScalecommError for easy catching of any
scalecomm-specific error. Errors are grouped by category so callers can
catch a whole family (e.g. every wire error via DecodeError).
"""

from __future__ import annotations


class ScalecommError(Exception):
    """Base exception for all scalecomm errors."""

    pass


# ---------------------------------------------------------------------------
# Schema errors: fatal to setup, never retried
# ---------------------------------------------------------------------------


class SchemaError(ScalecommError):
    """Raised when a schema is malformed or a type name cannot be used.

    Examples:
        - A type name registered twice
        - A definition referencing a name that was never registered
        - An alias chain that loops back on itself
    """

    pass


class DuplicateType(SchemaError):
    """A type name is already registered."""


class UnknownType(SchemaError):
    """A type name is not present in the registry."""


class UnresolvedReference(SchemaError):
    """A definition references a type name that was never registered."""

    def __init__(self, owner: str, reference: str) -> None:
        self.owner = owner
        self.reference = reference
        super().__init__(f"Type {owner!r} references unknown type {reference!r}")


class AliasCycle(SchemaError):
    """An alias chain revisits a name without reaching a terminal definition."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = list(chain)
        super().__init__("Alias cycle: " + " -> ".join(self.chain))


class RegistryFrozen(SchemaError):
    """Registration attempted on a frozen registry."""


class SchemaSourceError(SchemaError):
    """A schema source document or type expression is invalid."""


# ---------------------------------------------------------------------------
# Value-shape errors: caller bugs
# ---------------------------------------------------------------------------


class ValueShapeError(ScalecommError):
    """Raised when a value does not fit the type definition it is used with."""

    pass


class EncodeError(ScalecommError):
    """Raised when encoding a value fails.

    Examples:
        - Integer out of range for its declared width
        - Fixed array with the wrong number of elements
        - Value of the wrong kind for the type definition
    """

    pass


class ShapeMismatch(ValueShapeError, EncodeError):
    """A value's shape is incompatible with its type definition."""


class DecodeError(ScalecommError):
    """Raised when decoding binary data fails.

    Wire errors indicate either a corrupted byte stream or a schema mismatch
    between caller and peer. They carry enough context to find the failing
    field.

    Attributes:
        reason: The message without the location context
        offset: Byte offset at which the failure was detected
        constructor: The TypeDef constructor being decoded (e.g. "Option")
        path: Dotted/indexed path of the value being decoded
    """

    def __init__(
        self,
        message: str,
        *,
        offset: int | None = None,
        constructor: str | None = None,
        path: str | None = None,
    ) -> None:
        self.reason = message
        self.offset = offset
        self.constructor = constructor
        self.path = path
        context = []
        if path:
            context.append(f"at {path}")
        if constructor:
            context.append(f"expected {constructor}")
        if offset is not None:
            context.append(f"offset {offset}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class TruncatedInput(DecodeError):
    """Not enough bytes remain to decode the expected value."""


class InvalidBoolean(DecodeError):
    """A boolean byte was neither 0 nor 1."""


class InvalidUtf8(DecodeError):
    """Text bytes are not valid UTF-8."""


class InvalidOptionTag(DecodeError):
    """An option tag byte was neither 0 nor 1."""


class TrailingBytes(DecodeError):
    """Bytes remain after decoding a value that should span the whole buffer."""


class LimitExceeded(DecodeError):
    """Decoded data exceeds a configured nesting or length limit."""


class UnknownVariant(ValueShapeError, DecodeError):
    """An enum variant index or name is outside the declared variants.

    Raised at value construction time (caller bug) and at decode time (wire
    error), so it belongs to both categories.
    """


# ---------------------------------------------------------------------------
# Binding errors: caller-facing, synchronous
# ---------------------------------------------------------------------------


class BindingError(ScalecommError):
    """Raised when call arguments cannot be bound to a method signature."""

    pass


class UnknownMethod(BindingError):
    """No method is registered under the requested name."""


class DuplicateMethod(BindingError):
    """A method name is already registered."""


class MissingArgument(BindingError):
    """A required parameter was not supplied."""


class UnexpectedArgument(BindingError):
    """An argument does not match any declared parameter, or is repeated."""


class ArgumentTypeMismatch(BindingError):
    """An argument value is incompatible with the parameter's declared type."""


# ---------------------------------------------------------------------------
# Transport errors: opaque, wrapped and re-surfaced
# ---------------------------------------------------------------------------


class TransportError(ScalecommError):
    """Raised when the transport collaborator fails to complete a request."""

    pass


class TransportCancelled(TransportError):
    """The transport reported that the request was cancelled."""


class TransportTimeout(TransportError):
    """The transport gave up waiting for a response."""
