"""
querycodec - Query string parsing and stringifying

Converts between a flat mapping and the query component of a URL, with
selectable array formats (repeat, bracket, comma), optional type casting
and strict percent-encoding.

Usage:
    import querycodec

    # Parse a query string
    querycodec.parse("?a=1&tags=x&tags=y")
    # {"a": "1", "tags": ["x", "y"]}

    # Stringify a mapping
    querycodec.stringify({"a": 1, "tags": ["x", "y"]})
    # "a=1&tags=x&tags=y"

    # With options
    from querycodec import ArrayFormat, ParseOptions, StringifyOptions

    querycodec.parse(
        "ids=1,2,3&debug=true",
        ParseOptions(array=ArrayFormat("comma"), types={"ids": "number[]", "debug": "boolean"}),
    )
    querycodec.stringify({"ids": [1, 2]}, StringifyOptions(array=ArrayFormat("comma")))
"""

__version__ = "1.0.0"

from .decode import parse
from .encode import stringify, stringify_pairs
from .string_utils import safe_decode, split_on_first, strict_encode
from .types import (
    UNDEFINED,
    VALUE_TYPES,
    ArrayFormat,
    CastError,
    ParseOptions,
    QueryMapping,
    QueryValue,
    ScalarType,
    StringifyOptions,
    ValueType,
)

__all__ = [
    # Version
    "__version__",
    # Main API
    "parse",
    "stringify",
    "stringify_pairs",
    # Text primitives
    "split_on_first",
    "safe_decode",
    "strict_encode",
    # Options
    "ArrayFormat",
    "ParseOptions",
    "StringifyOptions",
    # Types
    "ScalarType",
    "ValueType",
    "VALUE_TYPES",
    "QueryMapping",
    "QueryValue",
    "UNDEFINED",
    # Errors
    "CastError",
]
