"""
Tests for DropForge Ledger Value Decoder

Covers shape classification and the tolerant decoding of strings, integers,
ids and vectors as the Sui node renders them.
"""

import pytest

from dropforge.exceptions import CollectionMalformed, UnrecognizedValueShape
from dropforge.registry.decoder import (
    ABSENT,
    ValueShape,
    classify,
    decode_id,
    decode_int,
    decode_list,
    decode_text,
    encode_text,
    field,
    field_path,
    normalize_address,
    require,
    unwrap_vector,
)


class TestClassify:
    """Test value shape classification."""

    @pytest.mark.parametrize("value,shape", [
        ("text", ValueShape.TEXT),
        ([104, 105], ValueShape.BYTES),
        ([], ValueShape.LIST),
        (["0x1", "0x2"], ValueShape.LIST),
        ({"fields": {}}, ValueShape.RECORD),
        (42, ValueShape.INTEGER),
        (True, ValueShape.BOOLEAN),
        (None, ValueShape.ABSENT),
        (ABSENT, ValueShape.ABSENT),
    ])
    def test_known_shapes(self, value, shape):
        """Test every recognized shape."""
        assert classify(value) is shape

    def test_out_of_range_ints_are_a_list(self):
        """Test that a list with values above 255 is not a byte vector."""
        assert classify([1, 256]) is ValueShape.LIST

    @pytest.mark.parametrize("value", [1.5, object(), b"raw"])
    def test_unrecognized_shape_rejected(self, value):
        """Test that non-ledger types are rejected."""
        with pytest.raises(UnrecognizedValueShape):
            classify(value)


class TestFieldLookup:
    """Test record field access."""

    def test_wrapped_record(self):
        """Test lookup inside a fields wrapper."""
        record = {"type": "0x2::table::Table", "fields": {"id": {"id": "0xabc"}}}
        assert field(record, "id") == {"id": "0xabc"}

    def test_bare_mapping(self):
        """Test lookup in a mapping without a fields wrapper."""
        assert field({"id": "0xabc"}, "id") == "0xabc"

    def test_missing_field_is_absent(self):
        """Test that missing and null fields are ABSENT."""
        assert field({"fields": {"a": None}}, "a") is ABSENT
        assert field({"fields": {}}, "b") is ABSENT
        assert field("not a record", "a") is ABSENT

    def test_field_path(self):
        """Test chained lookup through nested wrappers."""
        content = {"fields": {"user_collections": {"fields": {"id": {"id": "0xt"}}}}}
        assert field_path(content, "user_collections", "id") == {"id": "0xt"}
        assert field_path(content, "user_collections", "missing", "id") is ABSENT


class TestDecodeText:
    """Test string decoding."""

    def test_native_string(self):
        """Test a JSON string passes through."""
        assert decode_text("Forge") == "Forge"

    def test_byte_vector(self):
        """Test a vector<u8> is decoded as UTF-8."""
        assert decode_text(list("Forgé".encode("utf-8"))) == "Forgé"

    def test_empty_vector_is_empty_string(self):
        """Test that an empty vector<u8> decodes to an empty string."""
        assert decode_text([]) == ""

    def test_invalid_utf8(self):
        """Test that invalid UTF-8 is not decoded."""
        assert decode_text([0xff, 0xfe]) is None

    @pytest.mark.parametrize("value", [12, {"fields": {}}, ABSENT, 1.5, ["a"]])
    def test_other_shapes(self, value):
        """Test that non-string shapes never raise."""
        assert decode_text(value) is None

    def test_encode_text(self):
        """Test ledger encoding of a string."""
        assert encode_text("hi") == "hi"
        assert encode_text("hi", as_bytes=True) == [104, 105]


class TestDecodeInt:
    """Test integer decoding."""

    def test_u64_as_string(self):
        """Test that u64 values arrive as decimal strings."""
        assert decode_int("18446744073709551615") == 2 ** 64 - 1

    def test_native_int(self):
        """Test native JSON numbers (u8/u16/u32)."""
        assert decode_int(250) == 250

    @pytest.mark.parametrize("value", ["-1", "1.5", "abc", "", "²", "١٢", -3, True, [1], 1.0])
    def test_rejected(self, value):
        """Test that negatives, fractions and other shapes are rejected."""
        assert decode_int(value) is None


class TestDecodeId:
    """Test object id decoding."""

    def test_bare_id(self):
        assert decode_id("0xabc") == "0xabc"

    def test_uid_mapping(self):
        """Test UID and wrapped ID forms."""
        assert decode_id({"id": "0xabc"}) == "0xabc"
        assert decode_id({"fields": {"id": {"id": "0xabc"}}}) == "0xabc"
        assert decode_id({"bytes": "0xabc"}) == "0xabc"

    def test_not_an_id(self):
        assert decode_id("abc") is None
        assert decode_id({"fields": {}}) is None
        assert decode_id(5) is None


class TestVectors:
    """Test vector unwrapping and list decoding."""

    def test_flat_list(self):
        assert decode_list(["0x1", "0x2"], decode_id) == ["0x1", "0x2"]

    def test_wrapped_list(self):
        """Test the wrapped vector forms the node may produce."""
        assert unwrap_vector({"fields": {"value": ["0x1"]}}) == ["0x1"]
        assert unwrap_vector({"value": ["0x1"]}) == ["0x1"]
        assert unwrap_vector({"fields": {"contents": ["0x1"]}}) == ["0x1"]

    def test_empty_list(self):
        assert decode_list([], decode_id) == []

    def test_item_failure_fails_whole_list(self):
        """Test that one undecodable item rejects the vector."""
        assert decode_list(["0x1", 7], decode_id) is None

    def test_not_a_vector(self):
        assert decode_list("0x1", decode_id) is None


class TestRequire:
    """Test required value decoding."""

    def test_present(self):
        assert require("7", decode_int, lambda: CollectionMalformed("0x1", "max_supply")) == 7

    def test_absent_raises_structural_error(self):
        """Test that the raised error carries the field name and object id."""
        with pytest.raises(CollectionMalformed) as exc_info:
            require(ABSENT, decode_int, lambda: CollectionMalformed("0x1", "max_supply"))

        assert exc_info.value.field == "max_supply"
        assert exc_info.value.object_id == "0x1"

    def test_bad_shape_raises(self):
        with pytest.raises(CollectionMalformed):
            require("many", decode_int, lambda: CollectionMalformed("0x1", "max_supply"))


class TestNormalizeAddress:
    """Test address normalization."""

    def test_short_address_padded(self):
        assert normalize_address("0x2") == "0x" + "0" * 63 + "2"

    def test_case_insensitive(self):
        """Test that addresses compare equal regardless of case."""
        assert normalize_address("0xABCD") == normalize_address("0xabcd")

    @pytest.mark.parametrize("value", ["", "0x", "0xzz", "0x" + "1" * 65])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            normalize_address(value)
