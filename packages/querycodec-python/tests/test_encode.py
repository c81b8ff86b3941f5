"""Tests for query string stringifying."""

import math
import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from querycodec import UNDEFINED, ArrayFormat, StringifyOptions, stringify, stringify_pairs

COMMA = StringifyOptions(array=ArrayFormat("comma"))


class TestBasics:
    """Test basic stringifying."""

    def test_empty_mapping(self):
        assert stringify({}) == ""

    def test_non_mapping_input(self):
        assert stringify(None) == ""
        assert stringify([]) == ""
        assert stringify("a=1") == ""

    def test_empty_list_skipped(self):
        assert stringify({"a": []}) == ""

    def test_simple_scalars(self):
        assert stringify({"a": "1", "b": "two"}) == "a=1&b=two"

    def test_numbers_and_booleans(self):
        assert stringify({"a": 1, "b": True, "c": False}) == "a=1&b=true&c=false"

    def test_floats(self):
        assert stringify({"a": 2.5, "b": 3.0, "c": -0.0}) == "a=2.5&b=3&c=0"

    def test_float_special_values(self):
        assert stringify({"a": math.nan, "b": math.inf, "c": -math.inf}) == (
            "a=NaN&b=Infinity&c=-Infinity"
        )

    def test_float_magnitudes(self):
        assert stringify({"a": 1e16, "b": 1e-7}) == "a=10000000000000000&b=1e-7"

    def test_insertion_order(self):
        assert stringify({"b": 1, "a": 2}) == "b=1&a=2"

    def test_pairs_generator(self):
        assert list(stringify_pairs({"a": 1, "b": None, "c": ["x", "y"]})) == [
            "a=1",
            "b",
            "c=x",
            "c=y",
        ]


class TestEncodeOption:
    """Test percent-encoding."""

    def test_reserved_characters(self):
        assert stringify({"a": " "}) == "a=%20"
        assert stringify({"a": "&"}) == "a=%26"
        assert stringify({"a": "+"}) == "a=%2B"
        assert stringify({"a": "="}) == "a=%3D"

    def test_strict_characters(self):
        assert stringify({"a": "!'()*"}) == "a=%21%27%28%29%2A"

    def test_keys_encoded(self):
        assert stringify({"a b": "c"}) == "a%20b=c"

    def test_utf8(self):
        assert stringify({"name": "✓"}) == "name=%E2%9C%93"

    def test_encode_disabled(self):
        opts = StringifyOptions(encode=False)
        assert stringify({"a": " "}, opts) == "a= "
        assert stringify({"a": "&"}, opts) == "a=&"


class TestNullEmptyUndefined:
    """Test handling of None, empty strings and UNDEFINED."""

    def test_undefined_skipped(self):
        assert stringify({"a": UNDEFINED, "b": "x"}) == "b=x"

    def test_null_is_bare_key(self):
        assert stringify({"a": None, "b": "x"}) == "a&b=x"

    def test_skip_null(self):
        assert stringify({"a": None, "b": "x"}, StringifyOptions(skip_null=True)) == "b=x"

    def test_empty_string_kept(self):
        assert stringify({"a": "", "b": "x"}) == "a=&b=x"

    def test_skip_empty_string(self):
        opts = StringifyOptions(skip_empty_string=True)
        assert stringify({"a": "", "b": "x"}, opts) == "b=x"

    def test_zero_and_false_not_skipped(self):
        opts = StringifyOptions(skip_null=True, skip_empty_string=True)
        assert stringify({"a": 0, "b": False}, opts) == "a=0&b=false"


class TestRepeatFormat:
    """Test the default repeat array format."""

    def test_repeated_keys(self):
        assert stringify({"a": ["x", "y"]}) == "a=x&a=y"
        assert stringify({"a": ["x", "y"]}, StringifyOptions(array=ArrayFormat("repeat"))) == (
            "a=x&a=y"
        )

    def test_tuple_values(self):
        assert stringify({"a": ("x", "y")}) == "a=x&a=y"

    def test_mixed_types(self):
        assert stringify({"a": [1, True, "s"]}) == "a=1&a=true&a=s"

    def test_undefined_items_skipped(self):
        assert stringify({"a": ["x", UNDEFINED, "y"]}) == "a=x&a=y"

    def test_null_items(self):
        assert stringify({"a": ["x", None, "y"]}) == "a=x&a&a=y"
        assert stringify({"a": ["x", None, "y"]}, StringifyOptions(skip_null=True)) == "a=x&a=y"

    def test_empty_items(self):
        assert stringify({"a": ["x", "", "y"]}) == "a=x&a=&a=y"
        opts = StringifyOptions(skip_empty_string=True)
        assert stringify({"a": ["x", "", "y"]}, opts) == "a=x&a=y"

    def test_no_double_ampersands(self):
        opts = StringifyOptions(skip_null=True, skip_empty_string=True)
        assert "&&" not in stringify({"a": ["x", None, "", "y"], "b": "z"}, opts)


class TestBracketFormat:
    """Test the bracket array format."""

    def test_bracket_keys(self):
        opts = StringifyOptions(array=ArrayFormat("bracket"))
        assert stringify({"a": ["x", "y"]}, opts) == "a%5B%5D=x&a%5B%5D=y"

    def test_bracket_keys_unencoded(self):
        opts = StringifyOptions(array=ArrayFormat("bracket"), encode=False)
        assert stringify({"a": ["x", None]}, opts) == "a[]=x&a[]"

    def test_scalars_unaffected(self):
        opts = StringifyOptions(array=ArrayFormat("bracket"))
        assert stringify({"a": "x"}, opts) == "a=x"


class TestCommaFormat:
    """Test the comma array format."""

    def test_joined(self):
        assert stringify({"a": ["x", "y"]}, COMMA) == "a=x,y"

    def test_items_encoded_individually(self):
        assert stringify({"a": ["a b", "c&d"]}, COMMA) == "a=a%20b,c%26d"

    def test_commas_in_values_escaped(self):
        assert stringify({"a": ["x", "y,z"]}, COMMA) == "a=x,y%2Cz"

    def test_undefined_items_skipped(self):
        assert stringify({"a": ["x", UNDEFINED, "y"]}, COMMA) == "a=x,y"

    def test_null_and_empty_items_dropped(self):
        assert stringify({"a": ["x", None, "", "y"]}, COMMA) == "a=x,y"

    def test_all_items_removed(self):
        opts = StringifyOptions(array=ArrayFormat("comma"), skip_null=True, skip_empty_string=True)
        assert stringify({"a": [None, UNDEFINED, ""]}, opts) == ""
        assert stringify({"a": [None, ""], "b": 1}, COMMA) == "b=1"

    def test_split_mode_ignored(self):
        opts = StringifyOptions(array=ArrayFormat("comma", "split"))
        assert stringify({"a": ["x", "y,z"]}, opts) == "a=x,y%2Cz"


class TestInvalidOptions:
    """Test configuration errors."""

    def test_unknown_array_format(self):
        with pytest.raises(TypeError, match="Invalid array format"):
            StringifyOptions(array=ArrayFormat("unknown"))

    def test_array_must_be_array_format(self):
        with pytest.raises(TypeError):
            StringifyOptions(array="comma")


class TestUnsupportedValues:
    """Test values that are not scalars or lists."""

    def test_nested_mapping_stringified(self):
        assert stringify({"a": {"b": 1}}) == "a=%7B%27b%27%3A%201%7D"

    def test_list_of_mappings(self):
        assert stringify({"a": [{"b": 1}]}, StringifyOptions(encode=False)) == "a={'b': 1}"

    def test_custom_object_uses_str(self):
        class Point:
            def __str__(self):
                return "1;2"

        assert stringify({"p": Point()}) == "p=1%3B2"
