"""Scalar casting and formatting for query values."""

import logging
import math
import re
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from .types import CastError, ScalarType

if TYPE_CHECKING:
    from .types import ParseOptions, QueryScalar, QueryValue, TypeErrorPolicy, ValueType

logger = logging.getLogger(__name__)

BOOLEAN_LITERALS = {"true": True, "false": False}
NULL_LITERAL = "null"

# Numeric literal forms accepted by number casting
INTEGER_LITERAL_PATTERN = re.compile(r"[+-]?[0-9]+")
DECIMAL_LITERAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
RADIX_LITERAL_PATTERN = re.compile(r"0([xXoObB])([0-9a-fA-F]+)")
RADIX_BASES = {"x": 16, "o": 8, "b": 2}
FLOAT_MAX_BITS = 1024

# Floats print in fixed notation from 1e-6 up to 1e21, exponent form outside
FIXED_NOTATION_MIN_POINT = -6
FIXED_NOTATION_MAX_POINT = 21


def try_parse_number(token: str) -> int | float | None:
    """
    Try to parse a token as a finite number.

    Surrounding whitespace is ignored. Accepts integers (leading zeros
    included), decimals, scientific notation and 0x/0o/0b literals.
    Empty tokens, NaN and infinities are rejected.

    Args:
        token: The token to parse.

    Returns:
        An int for integer literals, a float otherwise, or None if the
        token is not a valid finite number.
    """
    text = token.strip()
    if not text:
        return None

    if INTEGER_LITERAL_PATTERN.fullmatch(text):
        if not math.isfinite(float(text)):
            return None
        # Leading zeros stripped so int() stays within the digit limit
        sign = "-" if text.startswith("-") else ""
        return int(sign + (text.lstrip("+-").lstrip("0") or "0"))

    if DECIMAL_LITERAL_PATTERN.fullmatch(text):
        value = float(text)
        if not math.isfinite(value):
            return None
        # Normalize -0 to 0
        if value == 0.0:
            return 0
        return value

    radix_match = RADIX_LITERAL_PATTERN.fullmatch(text)
    if radix_match:
        base = RADIX_BASES[radix_match.group(1).lower()]
        try:
            value = int(radix_match.group(2), base)
        except ValueError:
            return None
        # Beyond the float range
        if value.bit_length() > FLOAT_MAX_BITS:
            return None
        return value

    return None


def cast_scalar(raw: str, scalar: ScalarType) -> "QueryScalar":
    """
    Cast a raw token to a declared scalar type.

    Args:
        raw: The decoded token.
        scalar: The target type.

    Returns:
        The cast value.

    Raises:
        ValueError: If the token does not satisfy the type.
    """
    if scalar is ScalarType.STRING:
        return raw

    if scalar is ScalarType.NUMBER:
        number = try_parse_number(raw)
        if number is None:
            raise ValueError(f"Expected a finite number, got {raw!r}")
        return number

    if scalar is ScalarType.BOOLEAN:
        if raw not in BOOLEAN_LITERALS:
            raise ValueError(f"Expected 'true' or 'false', got {raw!r}")
        return BOOLEAN_LITERALS[raw]

    raise ValueError(f"Unknown scalar type: {scalar!r}")


def infer_value(raw: str | None, options: "ParseOptions") -> "QueryScalar | None":
    """
    Apply global type inference to an untyped token.

    Rules are tried in order: boolean, null, number. Tokens that match no
    enabled rule stay strings; None stays None.
    """
    if raw is None:
        return None

    if options.parse_boolean and raw in BOOLEAN_LITERALS:
        return BOOLEAN_LITERALS[raw]

    if options.parse_null and raw == NULL_LITERAL:
        return None

    if options.parse_number:
        number = try_parse_number(raw)
        if number is not None:
            return number

    return raw


def cast_declared(
    value: str | None,
    key: str,
    value_type: "ValueType",
    on_type_error: "TypeErrorPolicy",
) -> tuple[bool, Any]:
    """
    Cast one value against a declared type, applying the error policy.

    Args:
        value: The raw decoded value (None for a bare key).
        key: The key, used in error messages.
        value_type: The declared type.
        on_type_error: ``keep``, ``throw`` or ``drop``.

    Returns:
        ``(accepted, value)``. ``accepted`` is False when the value should
        be dropped.

    Raises:
        CastError: If the cast fails and the policy is ``throw``.
    """
    if value is None:
        error = f"Expected a value for key {key!r} of type {value_type}"
    else:
        try:
            return True, cast_scalar(value, value_type.scalar)
        except ValueError as exc:
            error = f"Invalid value for key {key!r} of type {value_type}: {exc}"

    if on_type_error == "throw":
        raise CastError(error, key, value)

    if on_type_error == "keep":
        logger.debug("%s; keeping raw value", error)
        return True, value

    logger.debug("%s; dropping value", error)
    return False, None


def finalize_value(
    key: str, current: "QueryValue", options: "ParseOptions"
) -> tuple[bool, "QueryValue"]:
    """
    Cast an accumulated key value into its final form.

    Declared array types always produce a list. Declared scalar types use
    the last repeated value. Keys without a declared type go through
    global inference.

    Args:
        key: The decoded key.
        current: The accumulated raw value (str, None or a list of them).
        options: Parse options.

    Returns:
        ``(keep_key, value)``. ``keep_key`` is False when the key should be
        removed from the result.
    """
    value_type = options.type_for(key)

    if value_type is not None and value_type.is_array:
        items = current if isinstance(current, list) else [current]
        cast_items = []
        for item in items:
            accepted, cast = cast_declared(item, key, value_type, options.on_type_error)
            if accepted:
                cast_items.append(cast)
        return True, cast_items

    if value_type is not None:
        candidate = current[-1] if isinstance(current, list) else current
        return cast_declared(candidate, key, value_type, options.on_type_error)

    if isinstance(current, list):
        return True, [infer_value(item, options) for item in current]

    return True, infer_value(current, options)


def format_scalar(value: Any) -> str:
    """
    Format a scalar as query text (before encoding).

    Booleans become ``true``/``false``, integral floats lose their ``.0``
    and anything else uses ``str()``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, float):
        return _format_float(value)

    if isinstance(value, str):
        return value

    return str(value)


def _format_float(value: float) -> str:
    """Format a float with the fixed/exponent thresholds of JavaScript number text."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    # Normalize -0 to 0
    if value == 0.0:
        return "0"
    sign = "-" if value < 0 else ""
    # Shortest round-tripping digits, as repr() picks them
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    # Position of the decimal point relative to the first digit
    point = exponent + len(digits)

    if len(digits) <= point <= FIXED_NOTATION_MAX_POINT:
        return sign + digits + "0" * (point - len(digits))
    if 0 < point <= FIXED_NOTATION_MAX_POINT:
        return f"{sign}{digits[:point]}.{digits[point:]}"
    if FIXED_NOTATION_MIN_POINT < point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"

    mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
    power = point - 1
    return f"{sign}{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"
