"""Query string parser implementation."""

from __future__ import annotations

import re
from typing import Any

from .primitives import finalize_value
from .string_utils import decode_text, split_comma_segments, split_on_first
from .types import (
    ParseOptions,
    QueryMapping,
    QueryValue,
    validate_array_format,
    validate_on_type_error,
)

# Single leading delimiter stripped before splitting pairs
LEADING_DELIMITER_PATTERN = re.compile(r"^[?#&]")

BRACKET_SUFFIX = "[]"


class _Occurrences(list):
    """List of values from a repeated key, as opposed to one comma group."""


def parse(query: Any, options: ParseOptions | None = None) -> QueryMapping:
    """
    Parse a query string into a dict.

    Args:
        query: The query string, with or without a leading ``?``, ``#`` or ``&``.
            Anything other than a string parses to an empty dict.
        options: Parsing options.

    Returns:
        A dict of decoded keys to values, in order of first appearance.
        Bare keys (no ``=``) map to None; repeated keys map to lists.

    Raises:
        TypeError: For invalid options.
        CastError: If a value fails its declared type with ``on_type_error="throw"``.
    """
    opts = options or ParseOptions()
    validate_array_format(opts.array)
    validate_on_type_error(opts.on_type_error)

    if not isinstance(query, str):
        return {}

    cleaned = LEADING_DELIMITER_PATTERN.sub("", query.strip(), count=1)
    if not cleaned:
        return {}

    accumulated = _accumulate(cleaned, opts)

    if opts.array.format == "comma":
        accumulated = {key: _flatten(value) for key, value in accumulated.items()}

    result: QueryMapping = {}
    for key, value in accumulated.items():
        keep, final = finalize_value(key, value, opts)
        if keep:
            result[key] = final
    return result


def _accumulate(cleaned: str, opts: ParseOptions) -> dict[str, Any]:
    """Split pairs and group raw decoded values per key."""
    accumulated: dict[str, Any] = {}
    array_format = opts.array.format

    for part in cleaned.split("&"):
        if not part:
            continue

        raw_key, raw_value = split_on_first(part, "=")
        key = decode_text(raw_key, opts.decode)

        if array_format == "bracket" and key.endswith(BRACKET_SUFFIX):
            key = key[: -len(BRACKET_SUFFIX)]

        if raw_value is None:
            _push_value(accumulated, key, None)
        elif array_format == "comma" and not _is_declared_scalar(key, opts):
            _push_value(accumulated, key, _decode_comma_value(raw_value, opts))
        else:
            _push_value(accumulated, key, decode_text(raw_value, opts.decode))

    return accumulated


def _decode_comma_value(raw_value: str, opts: ParseOptions) -> str | list[str]:
    """
    Split a raw comma-format value, then decode each segment.

    Splitting happens before decoding so an escaped comma is not taken as a
    delimiter in ``preserve`` mode.
    """
    segments = split_comma_segments(raw_value, opts.array.encoded == "split")
    if not segments:
        return ""
    if len(segments) == 1:
        return decode_text(segments[0], opts.decode)
    return [decode_text(segment, opts.decode) for segment in segments]


def _is_declared_scalar(key: str, opts: ParseOptions) -> bool:
    """Check if a key has a declared non-array type."""
    value_type = opts.type_for(key)
    return value_type is not None and not value_type.is_array


def _push_value(accumulated: dict[str, Any], key: str, value: Any) -> None:
    """
    Accumulate a value: the first occurrence is stored as-is, repeats
    promote the stored value to a list.
    """
    if key not in accumulated:
        accumulated[key] = value
        return

    existing = accumulated[key]
    if isinstance(existing, _Occurrences):
        existing.append(value)
    else:
        accumulated[key] = _Occurrences([existing, value])


def _flatten(value: Any) -> QueryValue:
    """Flatten repeated comma groups one level (a=x,y&a=z -> [x, y, z])."""
    if isinstance(value, _Occurrences):
        flat: list = []
        for item in value:
            if isinstance(item, list):
                flat.extend(item)
            else:
                flat.append(item)
        return flat
    return value
