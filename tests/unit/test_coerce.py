"""Tests for coercing plain Python data into values."""

from __future__ import annotations

import pytest

from scalecomm import ShapeMismatch, TypeRegistry, UnknownVariant, coerce
from scalecomm.types import (
    NONE,
    Bool,
    EnumValue,
    FixedList,
    Int,
    Option,
    OptionValue,
    Record,
    SeqValue,
    Text,
    TupleValue,
)


class TestPrimitiveCoercion:
    """Tests for primitives."""

    def test_integers(self, registry: TypeRegistry) -> None:
        """Test ints within bounds."""
        assert coerce(registry, "u8", 255) == Int(255)
        assert coerce(registry, "i16", -5) == Int(-5)

    def test_integer_bounds(self, registry: TypeRegistry) -> None:
        """Test out-of-range ints are rejected with the path."""
        with pytest.raises(ShapeMismatch, match=r"out of bounds for u8"):
            coerce(registry, "u8", 256)

    def test_bool_is_not_an_integer(self, registry: TypeRegistry) -> None:
        """Test True is not accepted for an integer type."""
        with pytest.raises(ShapeMismatch, match="expected int"):
            coerce(registry, "u32", True)
        with pytest.raises(ShapeMismatch, match="expected bool"):
            coerce(registry, "bool", 1)

    def test_text(self, registry: TypeRegistry) -> None:
        """Test str and UTF-8 bytes for text."""
        assert coerce(registry, "Text", "Alice") == Text("Alice")
        assert coerce(registry, "Text", b"Alice") == Text("Alice")
        with pytest.raises(ShapeMismatch, match="UTF-8"):
            coerce(registry, "Text", b"\xff")


class TestCompositeCoercion:
    """Tests for composite types."""

    def test_byte_array_inputs(self, registry: TypeRegistry, ticker: bytes) -> None:
        """Test bytes, hex and str are accepted for u8 arrays."""
        expected = FixedList(tuple(Int(b) for b in ticker))
        assert coerce(registry, "Ticker", ticker) == expected
        assert coerce(registry, "Ticker", "0x" + ticker.hex()) == expected
        assert coerce(registry, "Ticker", "ACME" + "\x00" * 8) == expected
        assert coerce(registry, "Ticker", list(ticker)) == expected

    def test_fixed_array_length(self, registry: TypeRegistry) -> None:
        """Test the element count must match exactly."""
        with pytest.raises(ShapeMismatch, match="expected 12 elements, got 4"):
            coerce(registry, "Ticker", b"ACME")

    def test_invalid_hex(self, registry: TypeRegistry) -> None:
        """Test malformed hex strings."""
        with pytest.raises(ShapeMismatch, match="invalid hex"):
            coerce(registry, "Bytes", "0xzz")

    def test_sequence(self, registry: TypeRegistry) -> None:
        """Test lists become sequences."""
        assert coerce(registry, "Vec<Text>", ["a", "b"]) == SeqValue((Text("a"), Text("b")))
        assert coerce(registry, "Bytes", b"\x01") == SeqValue((Int(1),))

    def test_tuple(self, registry: TypeRegistry) -> None:
        """Test tuples need the exact member count."""
        assert coerce(registry, "(u8, bool)", (1, True)) == TupleValue((Int(1), Bool(True)))
        with pytest.raises(ShapeMismatch, match="2-item"):
            coerce(registry, "(u8, bool)", [1])

    def test_struct(self, registry: TypeRegistry) -> None:
        """Test mappings become records in declared order."""
        value = coerce(registry, "Transfer", {"amount": 100, "name": "Alice"})
        assert value == Record((("name", Text("Alice")), ("amount", Int(100))))

    def test_struct_missing_field(self, registry: TypeRegistry) -> None:
        """Test missing and unexpected struct fields."""
        with pytest.raises(ShapeMismatch, match=r"missing fields \['amount'\]"):
            coerce(registry, "Transfer", {"name": "Alice"})
        with pytest.raises(ShapeMismatch, match=r"unexpected fields \['memo'\]"):
            coerce(registry, "Transfer", {"name": "Alice", "amount": 1, "memo": ""})

    def test_nested_error_path(self, registry: TypeRegistry) -> None:
        """Test errors name the nested location."""
        with pytest.raises(ShapeMismatch, match=r"Transfer\.amount"):
            coerce(registry, "Transfer", {"name": "Alice", "amount": -1})

    def test_option(self, registry: TypeRegistry) -> None:
        """Test None is absent and anything else is present."""
        assert coerce(registry, "Option<u32>", None) == NONE
        assert coerce(registry, "Option<u32>", 7) == OptionValue(Int(7))
        assert coerce(registry, "Option<u32>", OptionValue(Int(7))) == OptionValue(Int(7))

    def test_option_typedef(self, registry: TypeRegistry) -> None:
        """Test an unregistered Option definition."""
        assert coerce(registry, Option(inner="Text"), "x") == OptionValue(Text("x"))


class TestEnumCoercion:
    """Tests for enums."""

    def test_unit_by_name_and_index(self, registry: TypeRegistry) -> None:
        """Test unit variants by name or index."""
        assert coerce(registry, "Permission", "Admin") == EnumValue(1, "Admin")
        assert coerce(registry, "Permission", 2) == EnumValue(2, "Operator")
        assert coerce(registry, "Permission", {"Full": None}) == EnumValue(0, "Full")

    def test_payload_variant(self, registry: TypeRegistry) -> None:
        """Test {name: payload} for payload variants."""
        value = coerce(registry, "Signatory", {"Identity": bytes(32)})
        assert value == EnumValue(0, "Identity", FixedList((Int(0),) * 32))

    def test_unknown_variant(self, registry: TypeRegistry) -> None:
        """Test undeclared variant names."""
        with pytest.raises(UnknownVariant, match="Root"):
            coerce(registry, "Permission", "Root")
        with pytest.raises(UnknownVariant):
            coerce(registry, "Signatory", {"Multisig": 1})

    def test_payload_required(self, registry: TypeRegistry) -> None:
        """Test a payload variant named without its payload."""
        with pytest.raises(ShapeMismatch):
            coerce(registry, "Signatory", "Identity")

    def test_unit_with_payload(self, registry: TypeRegistry) -> None:
        """Test a unit variant given a payload."""
        with pytest.raises(ShapeMismatch, match="takes no payload"):
            coerce(registry, "Permission", {"Full": 1})

    def test_values_pass_through(self, registry: TypeRegistry) -> None:
        """Test existing values are returned unchanged."""
        value = EnumValue(1, "Admin")
        assert coerce(registry, "Permission", value) is value
