"""Query string stringifier implementation."""

from collections.abc import Generator, Mapping
from typing import Any

from .primitives import format_scalar
from .string_utils import encode_text
from .types import UNDEFINED, StringifyOptions, validate_array_format

BRACKET_SUFFIX = "[]"


def stringify(mapping: Any, options: StringifyOptions | None = None) -> str:
    """
    Stringify a flat mapping into a query string.

    Args:
        mapping: Keys to values. Values may be None, scalars, or lists/tuples
            of scalars. UNDEFINED values and items are omitted. Anything
            other than a mapping stringifies to an empty string.
        options: Stringify options.

    Returns:
        The query string, without a leading ``?``.
    """
    opts = options or StringifyOptions()
    return "&".join(stringify_pairs(mapping, opts))


def stringify_pairs(
    mapping: Any, options: StringifyOptions | None = None
) -> Generator[str, None, None]:
    """
    Stringify a mapping, yielding one ``key=value`` (or bare key) fragment at a time.

    Args:
        mapping: Keys to values.
        options: Stringify options.

    Yields:
        Encoded fragments, in mapping order.
    """
    opts = options or StringifyOptions()
    validate_array_format(opts.array)

    if not isinstance(mapping, Mapping):
        return

    for key, value in mapping.items():
        key = str(key)

        if value is UNDEFINED:
            continue

        if isinstance(value, (list, tuple)):
            items = [item for item in value if item is not UNDEFINED]
            yield from _encode_array(key, items, opts)
            continue

        fragment = _encode_pair(key, value, opts)
        if fragment is not None:
            yield fragment


def _encode_pair(key: str, value: Any, opts: StringifyOptions) -> str | None:
    """Encode one scalar value, or return None if it is skipped."""
    encoded_key = encode_text(key, opts.encode)

    if value is None:
        return None if opts.skip_null else encoded_key

    if isinstance(value, str) and value == "":
        if opts.skip_empty_string:
            return None
        return f"{encoded_key}="

    return f"{encoded_key}={encode_text(format_scalar(value), opts.encode)}"


def _encode_array(key: str, items: list, opts: StringifyOptions) -> Generator[str, None, None]:
    """Encode a list value with the configured array format."""
    array_format = opts.array.format

    if array_format == "comma":
        fragment = _encode_comma_array(key, items, opts)
        if fragment is not None:
            yield fragment
        return

    if array_format == "bracket":
        key = f"{key}{BRACKET_SUFFIX}"

    for item in items:
        fragment = _encode_pair(key, item, opts)
        if fragment is not None:
            yield fragment


def _encode_comma_array(key: str, items: list, opts: StringifyOptions) -> str | None:
    """
    Encode a list as ``key=a,b,c``.

    Items are encoded one by one so commas inside values are escaped.
    None and empty items are dropped; an array with nothing left is omitted.
    """
    encoded_items = []
    for item in items:
        if item is None:
            continue
        encoded = encode_text(format_scalar(item), opts.encode)
        if encoded:
            encoded_items.append(encoded)

    if not encoded_items:
        return None

    return f"{encode_text(key, opts.encode)}={','.join(encoded_items)}"
