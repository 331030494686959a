"""Tests for encoding and decoding values."""

from __future__ import annotations

import pytest

from scalecomm import (
    CodecConfig,
    Enum,
    InvalidBoolean,
    InvalidOptionTag,
    InvalidUtf8,
    LimitExceeded,
    ShapeMismatch,
    Struct,
    TrailingBytes,
    TruncatedInput,
    TypeRegistry,
    UnknownType,
    UnknownVariant,
    coerce,
    decode,
    decode_all,
    encode,
)
from scalecomm.exceptions import EncodeError
from scalecomm.types import (
    NONE,
    Bool,
    EnumValue,
    FixedArray,
    FixedList,
    Int,
    Option,
    OptionValue,
    Primitive,
    PrimitiveKind,
    Record,
    SeqValue,
    Sequence,
    Text,
    Tuple,
    TupleValue,
)


@pytest.fixture
def tree_registry() -> TypeRegistry:
    """Registry with a tree whose children are a Vec of itself."""
    reg = TypeRegistry()
    reg.register("Node", Struct(fields={"children": "Vec<Node>"}))
    reg.register("Vec<Node>", Sequence(elem="Node"))
    return reg.freeze()


class TestPrimitives:
    """Tests for primitive encodings."""

    @pytest.mark.parametrize(
        ("type_name", "value", "expected"),
        [
            ("u8", 255, b"\xff"),
            ("u16", 0x0102, b"\x02\x01"),
            ("u32", 7, b"\x07\x00\x00\x00"),
            ("u64", 100, b"\x64" + bytes(7)),
            ("u128", 1, b"\x01" + bytes(15)),
            ("i8", -1, b"\xff"),
            ("i16", -2, b"\xfe\xff"),
            ("i32", -(1 << 31), b"\x00\x00\x00\x80"),
            ("i64", 1, b"\x01" + bytes(7)),
        ],
    )
    def test_integers(self, registry: TypeRegistry, type_name: str, value: int, expected: bytes) -> None:
        """Test fixed-width little-endian integers."""
        assert encode(registry, type_name, Int(value)) == expected
        assert decode_all(registry, type_name, expected) == Int(value)

    def test_bool(self, registry: TypeRegistry) -> None:
        """Test booleans are a single 0/1 byte."""
        assert encode(registry, "bool", Bool(True)) == b"\x01"
        assert encode(registry, "bool", Bool(False)) == b"\x00"
        assert decode_all(registry, "bool", b"\x01") == Bool(True)

    def test_text(self, registry: TypeRegistry) -> None:
        """Test text is a compact byte length followed by UTF-8."""
        assert encode(registry, "Text", Text("Alice")) == b"\x14Alice"
        assert encode(registry, "Text", Text("")) == b"\x00"
        data = encode(registry, "Text", Text("häh"))
        assert data == b"\x10h\xc3\xa4h"
        assert decode_all(registry, "Text", data) == Text("häh")

    def test_integer_out_of_range(self, registry: TypeRegistry) -> None:
        """Test encoding an integer too wide for its type."""
        with pytest.raises(ShapeMismatch, match="u8"):
            encode(registry, "u8", Int(256))
        with pytest.raises(ShapeMismatch):
            encode(registry, "u32", Int(-1))

    def test_wrong_value_class(self, registry: TypeRegistry) -> None:
        """Test encoding a value of the wrong kind."""
        with pytest.raises(ShapeMismatch, match="expects Int"):
            encode(registry, "u32", Text("7"))
        with pytest.raises(EncodeError):
            encode(registry, "bool", Int(1))


class TestScenarios:
    """Tests for the documented encodings."""

    def test_struct_text_and_u64(self, registry: TypeRegistry) -> None:
        """Test Struct{name: Text, amount: u64} with ("Alice", 100)."""
        value = coerce(registry, "Transfer", {"name": "Alice", "amount": 100})
        data = encode(registry, "Transfer", value)

        assert data == bytes([0x14]) + b"Alice" + bytes([0x64, 0, 0, 0, 0, 0, 0, 0])
        assert decode_all(registry, "Transfer", data) == value

    def test_option_present_and_absent(self, registry: TypeRegistry) -> None:
        """Test Option<u32>: present 7 and absent."""
        assert encode(registry, "Option<u32>", OptionValue(Int(7))) == bytes([1, 7, 0, 0, 0])
        assert encode(registry, "Option<u32>", NONE) == bytes([0])

        value, used = decode(registry, "Option<u32>", bytes([1, 7, 0, 0, 0]))
        assert value == OptionValue(Int(7))
        assert used == 5

    def test_sequence(self, registry: TypeRegistry) -> None:
        """Test sequences carry a compact element count."""
        value = SeqValue((Int(1), Int(2)))
        data = encode(registry, "Vec<u32>", value)
        assert data == b"\x08\x01\x00\x00\x00\x02\x00\x00\x00"
        assert decode_all(registry, "Vec<u32>", data) == value

    def test_fixed_array_has_no_prefix(self, registry: TypeRegistry, ticker: bytes) -> None:
        """Test fixed arrays are their elements back to back."""
        value = coerce(registry, "Ticker", ticker)
        assert encode(registry, "Ticker", value) == ticker

    def test_tuple(self, registry: TypeRegistry) -> None:
        """Test tuple members are encoded in order."""
        value = TupleValue((Int(9), Bool(True)))
        assert encode(registry, "(u8, bool)", value) == b"\x09\x01"

    def test_unit_enum(self, registry: TypeRegistry) -> None:
        """Test a unit variant is its one-byte discriminant."""
        assert encode(registry, "Permission", EnumValue(1, "Admin")) == b"\x01"
        assert decode_all(registry, "Permission", b"\x02") == EnumValue(2, "Operator")

    def test_payload_enum(self, registry: TypeRegistry) -> None:
        """Test a variant payload follows the discriminant."""
        value = coerce(registry, "Signatory", {"AccountKey": bytes(range(32))})
        data = encode(registry, "Signatory", value)
        assert data == b"\x01" + bytes(range(32))
        assert decode_all(registry, "Signatory", data) == value

    def test_typedef_as_type_ref(self, registry: TypeRegistry) -> None:
        """Test an unregistered TypeDef whose references are registered."""
        typedef = Sequence(elem="Text")
        value = SeqValue((Text("a"),))
        assert encode(registry, typedef, value) == b"\x04\x04a"
        assert decode_all(registry, typedef, b"\x04\x04a") == value

    def test_alias_is_transparent(self, registry: TypeRegistry) -> None:
        """Test an alias encodes exactly like its target."""
        assert encode(registry, "Balance", Int(5)) == encode(registry, "u128", Int(5))
        assert encode(registry, "Hash", FixedList((Int(0),) * 32)) == bytes(32)


class TestEnumEdges:
    """Tests for enum discriminants."""

    def test_discriminant_equal_to_count_rejected(self, registry: TypeRegistry) -> None:
        """Test a discriminant one past the last variant."""
        with pytest.raises(UnknownVariant) as exc_info:
            decode(registry, "Permission", bytes([3]))
        assert exc_info.value.offset == 0
        assert exc_info.value.constructor == "Enum"

    def test_encode_index_out_of_range(self, registry: TypeRegistry) -> None:
        """Test encoding a variant index the enum doesn't declare."""
        with pytest.raises(ShapeMismatch, match="out of range"):
            encode(registry, "Permission", EnumValue(3, "Missing"))

    def test_encode_name_disagrees_with_index(self, registry: TypeRegistry) -> None:
        """Test index and name must describe the same variant."""
        with pytest.raises(ShapeMismatch, match="Admin"):
            encode(registry, "Permission", EnumValue(1, "Full"))

    def test_large_enum_uses_compact_discriminant(self) -> None:
        """Test enums with more than 255 variants use a compact discriminant."""
        reg = TypeRegistry()
        reg.register("Big", Enum(variants=[f"V{i}" for i in range(300)]))
        reg.freeze()

        assert encode(reg, "Big", EnumValue(2, "V2")) == b"\x08"
        assert encode(reg, "Big", EnumValue(299, "V299")) == b"\xad\x04"
        assert decode_all(reg, "Big", b"\xad\x04") == EnumValue(299, "V299")


class TestDecodeErrors:
    """Tests for malformed input."""

    def test_invalid_boolean(self, registry: TypeRegistry) -> None:
        """Test boolean bytes other than 0/1."""
        with pytest.raises(InvalidBoolean):
            decode(registry, "bool", b"\x02")

    def test_invalid_option_tag(self, registry: TypeRegistry) -> None:
        """Test option tags other than 0/1."""
        with pytest.raises(InvalidOptionTag) as exc_info:
            decode(registry, "Option<u32>", b"\x02\x00\x00\x00\x00")
        assert exc_info.value.offset == 0

    def test_invalid_utf8(self, registry: TypeRegistry) -> None:
        """Test text bytes that are not UTF-8."""
        with pytest.raises(InvalidUtf8) as exc_info:
            decode(registry, "Text", b"\x08a\xff")
        assert exc_info.value.offset == 2

    def test_truncated_struct_reports_path(self, registry: TypeRegistry) -> None:
        """Test the error names the field being decoded."""
        data = b"\x14Alice\x64\x00"
        with pytest.raises(TruncatedInput) as exc_info:
            decode(registry, "Transfer", data)
        error = exc_info.value
        assert error.path == "Transfer.amount"
        assert error.constructor == "Primitive"
        assert error.offset == 6
        assert "Transfer.amount" in str(error)

    def test_trailing_bytes(self, registry: TypeRegistry) -> None:
        """Test decode_all requires the whole buffer to be consumed."""
        with pytest.raises(TrailingBytes) as exc_info:
            decode_all(registry, "u8", b"\x01\x02")
        assert exc_info.value.offset == 1

    def test_decode_returns_consumed(self, registry: TypeRegistry) -> None:
        """Test decode() stops after one value and reports bytes consumed."""
        value, used = decode(registry, "u16", b"\xff\x01\x02\x03", offset=1)
        assert value == Int(0x0201)
        assert used == 2

    def test_offset_outside_buffer(self, registry: TypeRegistry) -> None:
        """Test a starting offset past the end."""
        with pytest.raises(TruncatedInput):
            decode(registry, "u8", b"\x00", offset=5)

    def test_unknown_type(self, registry: TypeRegistry) -> None:
        """Test decoding an unregistered name."""
        with pytest.raises(UnknownType):
            decode(registry, "Nope", b"\x00")

    def test_collection_limit(self, registry: TypeRegistry) -> None:
        """Test a length prefix larger than the configured limit."""
        config = CodecConfig(max_collection_length=3)
        with pytest.raises(LimitExceeded, match="max_collection_length"):
            decode(registry, "Vec<u32>", b"\x10" + bytes(16), config=config)

    def test_fixed_array_limit(self, registry: TypeRegistry) -> None:
        """Test a fixed array longer than the configured limit."""
        config = CodecConfig(max_collection_length=8)
        with pytest.raises(LimitExceeded, match="array length 32"):
            decode(registry, "IdentityId", bytes(32), config=config)

    def test_zero_width_array_limit(self) -> None:
        """Test a huge array of empty tuples is rejected at the default limit."""
        reg = TypeRegistry()
        reg.register("()", Tuple(members=()))
        reg.freeze()

        typedef = FixedArray(elem="()", length=2**32 - 1)
        with pytest.raises(LimitExceeded, match="max_collection_length"):
            decode(reg, typedef, b"")

    def test_depth_limit(self, tree_registry: TypeRegistry) -> None:
        """Test recursion deeper than max_depth."""
        # Each level is one child, eight levels deep, then an empty list
        data = b"\x04" * 8 + b"\x00"
        value = decode_all(tree_registry, "Node", data)
        assert isinstance(value, Record)

        with pytest.raises(LimitExceeded, match="max_depth"):
            decode(tree_registry, "Node", data, config=CodecConfig(max_depth=4))

    def test_depth_limit_default_config(self, tree_registry: TypeRegistry) -> None:
        """Test hostile nesting fails with LimitExceeded at the default limit."""
        # 32 nodes nest to depth 63, inside the default of 64
        value = decode_all(tree_registry, "Node", b"\x04" * 31 + b"\x00")
        assert isinstance(value, Record)

        with pytest.raises(LimitExceeded, match="max_depth"):
            decode(tree_registry, "Node", b"\x04" * 1000 + b"\x00")

    def test_depth_beyond_interpreter_stack(self, tree_registry: TypeRegistry) -> None:
        """Test a max_depth the interpreter cannot reach still fails as LimitExceeded."""
        config = CodecConfig(max_depth=1_000_000)
        with pytest.raises(LimitExceeded, match="recursion limit") as exc_info:
            decode(tree_registry, "Node", b"\x04" * 5000 + b"\x00", config=config)
        assert exc_info.value.path == "Node"

    def test_encode_beyond_interpreter_stack(self, tree_registry: TypeRegistry) -> None:
        """Test encoding a very deep value fails as EncodeError."""
        value = Record((("children", SeqValue(())),))
        for _ in range(5000):
            value = Record((("children", SeqValue((value,))),))

        with pytest.raises(EncodeError, match="max_depth=64"):
            encode(tree_registry, "Node", value)
        with pytest.raises(EncodeError, match="recursion limit"):
            encode(tree_registry, "Node", value, config=CodecConfig(max_depth=1_000_000))


class TestTruncation:
    """Every strict prefix of a valid encoding must fail cleanly."""

    @pytest.mark.parametrize(
        ("type_name", "obj"),
        [
            ("Transfer", {"name": "Alice", "amount": 100}),
            ("Option<u32>", 7),
            ("Vec<Text>", ["a", "bc", ""]),
            ("Signatory", {"Identity": bytes(32)}),
            ("(u8, bool)", [1, False]),
        ],
    )
    def test_prefixes_raise_truncated(self, registry: TypeRegistry, type_name: str, obj: object) -> None:
        """Test each prefix raises TruncatedInput."""
        data = encode(registry, type_name, coerce(registry, type_name, obj))
        for end in range(len(data)):
            with pytest.raises(TruncatedInput):
                decode(registry, type_name, data[:end])


class TestRecursiveTypes:
    """Tests for types that refer to themselves through a sequence or option."""

    def test_linked_list(self) -> None:
        """Test a list defined through Option<Self>."""
        reg = TypeRegistry()
        reg.register("Link", Struct(fields={"value": "u8", "next": "Option<Link>"}))
        reg.register("Option<Link>", Option(inner="Link"))
        reg.freeze()

        value = coerce(reg, "Link", {"value": 1, "next": {"value": 2, "next": None}})
        data = encode(reg, "Link", value)
        assert data == b"\x01\x01\x02\x00"
        assert decode_all(reg, "Link", data) == value

    def test_primitive_typedef_ref(self, registry: TypeRegistry) -> None:
        """Test a Primitive TypeDef can be used directly."""
        typedef = Primitive(primitive=PrimitiveKind.U16)
        assert encode(registry, typedef, Int(1)) == b"\x01\x00"
