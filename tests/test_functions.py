"""Unit tests for the template functions."""

import json
from dataclasses import dataclass
from decimal import Decimal

import pytest

from ztp.errors import SerializationError, UnsupportedTypeError
from ztp.functions import base64_func, build_functions, json_func


class Hostname:
    def __init__(self, value):
        self.value = value

    def __str__(self):
        return self.value


@dataclass
class Node:
    name: str
    role: str


class TestBase64Func:
    """Test cases for the base64 function."""

    def test_string(self):
        """Test that strings are encoded as UTF-8."""
        assert base64_func("hello") == "aGVsbG8="
        assert base64_func("ñ") == "w7E="

    def test_bytes(self):
        """Test that bytes-like values are encoded directly."""
        assert base64_func(b"\x00\xff") == "AP8="
        assert base64_func(bytearray(b"hi")) == "aGk="
        assert base64_func(memoryview(b"hi")) == "aGk="

    def test_object_with_str(self):
        """Test that objects defining __str__ are encoded through their string representation."""
        assert base64_func(Hostname("master-0")) == base64_func("master-0")
        assert base64_func(Decimal("1.5")) == base64_func("1.5")

    def test_no_line_wrapping(self):
        """Test that long values are not wrapped."""
        result = base64_func("x" * 1000)
        assert "\n" not in result

    @pytest.mark.parametrize("value", [{"a": 1}, None, object(), [1, 2]])
    def test_unsupported_types(self, value):
        """Test that values without a text representation are rejected."""
        with pytest.raises(UnsupportedTypeError, match="Don't know how to encode") as exc_info:
            base64_func(value)
        assert exc_info.value.value_type is type(value)


class TestJsonFunc:
    """Test cases for the json function."""

    def test_compact_object(self):
        """Test that objects are encoded without whitespace."""
        assert json_func({"a": 1}) == '{"a":1}'

    def test_string_is_quoted(self):
        """Test that strings include the surrounding quotes and escapes."""
        assert json_func('line "one"\nline two') == '"line \\"one\\"\\nline two"'

    def test_html_characters_not_escaped(self):
        """Test that <, > and & are written as they are."""
        assert json_func("<a href=\"x\">&amp;</a>") == '"<a href=\\"x\\">&amp;</a>"'

    def test_keys_are_sorted(self):
        """Test that dictionary keys are sorted for stable output."""
        assert json_func({"b": 1, "a": [True, None]}) == '{"a":[true,null],"b":1}'

    def test_non_ascii_is_kept(self):
        """Test that non ASCII characters are not escaped."""
        assert json_func("ñ") == '"ñ"'

    def test_dataclass(self):
        """Test that dataclass instances are encoded as objects."""
        result = json_func(Node(name="master-0", role="master"))
        assert json.loads(result) == {"name": "master-0", "role": "master"}

    def test_unsupported_type(self):
        """Test that values of unknown types raise SerializationError."""
        with pytest.raises(SerializationError, match="not JSON serializable"):
            json_func({"value": object()})

    def test_cyclic_structure(self):
        """Test that cyclic structures raise SerializationError."""
        value = {}
        value["self"] = value
        with pytest.raises(SerializationError):
            json_func(value)

    def test_non_finite_float(self):
        """Test that NaN is rejected because it isn't valid JSON."""
        with pytest.raises(SerializationError):
            json_func(float("nan"))


class TestBuildFunctions:
    """Test cases for build_functions."""

    def test_function_table(self):
        """Test that the table has exactly the three functions."""

        def execute(name, data):
            return name

        functions = build_functions(execute)
        assert sorted(functions) == ["base64", "execute", "json"]
        assert functions["execute"] is execute
        assert functions["base64"] is base64_func
        assert functions["json"] is json_func
