"""Type definitions and options for the query string codec."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Literal

# Query value aliases
QueryScalar = str | int | float | bool
QueryValue = QueryScalar | None | list[QueryScalar | None]
QueryMapping = dict[str, QueryValue]

ArrayFormatName = Literal["repeat", "bracket", "comma"]
EncodedCommaMode = Literal["preserve", "split"]
TypeErrorPolicy = Literal["keep", "throw", "drop"]

ARRAY_FORMATS: tuple[str, ...] = ("repeat", "bracket", "comma")
ENCODED_COMMA_MODES: tuple[str, ...] = ("preserve", "split")
TYPE_ERROR_POLICIES: tuple[str, ...] = ("keep", "throw", "drop")


class _Undefined:
    """Sentinel telling stringify to omit a key or array item."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class CastError(TypeError):
    """Raised when a value fails its declared type and the policy is ``throw``."""

    def __init__(self, message: str, key: str, value: str | None):
        super().__init__(message)
        self.key = key
        self.value = value


class ScalarType(str, Enum):
    """Base type a declared value is cast to."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


# Scalar types allowed as array elements
ARRAY_ELEMENT_TYPES = frozenset({ScalarType.STRING, ScalarType.NUMBER})


@dataclass(frozen=True)
class ValueType:
    """A declared per-key type: a scalar type, or an array of one."""

    scalar: ScalarType
    """Type each value (or each array element) is cast to."""

    is_array: bool = False
    """Whether the key always parses to a list."""

    def __post_init__(self):
        try:
            object.__setattr__(self, "scalar", ScalarType(self.scalar))
        except ValueError:
            raise TypeError(f"Invalid scalar type: {self.scalar!r}") from None
        if self.is_array and self.scalar not in ARRAY_ELEMENT_TYPES:
            raise TypeError(f"Arrays of {self.scalar.value} are not supported")

    @property
    def name(self) -> str:
        return f"{self.scalar.value}[]" if self.is_array else self.scalar.value

    def __str__(self) -> str:
        return self.name


VALUE_TYPES: Mapping[str, ValueType] = MappingProxyType(
    {
        "string": ValueType(ScalarType.STRING),
        "number": ValueType(ScalarType.NUMBER),
        "boolean": ValueType(ScalarType.BOOLEAN),
        "string[]": ValueType(ScalarType.STRING, is_array=True),
        "number[]": ValueType(ScalarType.NUMBER, is_array=True),
    }
)


@dataclass(frozen=True)
class ArrayFormat:
    """Wire convention for keys carrying more than one value."""

    format: ArrayFormatName = "repeat"
    """One of ``repeat`` (a=1&a=2), ``bracket`` (a[]=1&a[]=2) or ``comma`` (a=1,2)."""

    encoded: EncodedCommaMode = "preserve"
    """Comma format only, parse side: whether ``%2C`` also splits values."""

    def __post_init__(self):
        validate_array_format(self)


@dataclass(frozen=True)
class ParseOptions:
    """Options for query string parsing."""

    decode: bool = True
    """Percent-decode keys and values."""

    array: ArrayFormat = field(default_factory=ArrayFormat)
    """Array format used to group values."""

    parse_number: bool = False
    """Infer numbers for keys without a declared type."""

    parse_boolean: bool = False
    """Infer ``true``/``false`` for keys without a declared type."""

    parse_null: bool = False
    """Infer the literal ``null`` as None for keys without a declared type."""

    types: Mapping[str, str | ValueType] | tuple[tuple[str, ValueType], ...] = ()
    """Declared type per key, by name (``"number[]"``) or as a ValueType.

    Stored as a tuple of ``(key, ValueType)`` pairs once resolved.
    """

    on_type_error: TypeErrorPolicy = "keep"
    """What to do with values that fail their declared type."""

    _type_lookup: Mapping[str, ValueType] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        validate_array_format(self.array)
        validate_on_type_error(self.on_type_error)
        resolved = resolve_types(dict(self.types))
        object.__setattr__(self, "types", tuple(resolved.items()))
        object.__setattr__(self, "_type_lookup", MappingProxyType(resolved))

    def type_for(self, key: str) -> ValueType | None:
        """Return the declared type for a key, if any."""
        return self._type_lookup.get(key)


@dataclass(frozen=True)
class StringifyOptions:
    """Options for query string stringifying."""

    encode: bool = True
    """Percent-encode keys and values."""

    array: ArrayFormat = field(default_factory=ArrayFormat)
    """Array format used for list values. ``encoded`` is ignored here."""

    skip_null: bool = False
    """Omit None values instead of emitting a bare key."""

    skip_empty_string: bool = False
    """Omit empty string values instead of emitting ``key=``."""

    def __post_init__(self):
        validate_array_format(self.array)


def validate_array_format(array: ArrayFormat) -> None:
    """Raise TypeError unless ``array`` is a valid ArrayFormat."""
    if not isinstance(array, ArrayFormat):
        raise TypeError(f"Expected an ArrayFormat, got {type(array).__name__}")
    if array.format not in ARRAY_FORMATS:
        raise TypeError(
            f"Invalid array format: {array.format!r}. Must be one of: {', '.join(ARRAY_FORMATS)}"
        )
    if array.encoded not in ENCODED_COMMA_MODES:
        raise TypeError(
            f"Invalid encoded mode: {array.encoded!r}. "
            f"Must be one of: {', '.join(ENCODED_COMMA_MODES)}"
        )


def validate_on_type_error(policy: str) -> None:
    """Raise TypeError unless ``policy`` is a known type error policy."""
    if policy not in TYPE_ERROR_POLICIES:
        raise TypeError(
            f"Invalid on_type_error: {policy!r}. Must be one of: {', '.join(TYPE_ERROR_POLICIES)}"
        )


def resolve_types(types: Mapping[str, str | ValueType] | None) -> dict[str, ValueType]:
    """
    Resolve declared type names to ValueType instances.

    Unknown names are skipped, leaving the key untyped.

    Args:
        types: Mapping of key to type name or ValueType.

    Returns:
        A new dict holding only the resolvable declarations.

    Raises:
        TypeError: If a declaration is neither a string nor a ValueType.
    """
    resolved: dict[str, ValueType] = {}
    if not types:
        return resolved

    for key, declared in types.items():
        if isinstance(declared, ValueType):
            resolved[key] = declared
        elif isinstance(declared, str):
            value_type = VALUE_TYPES.get(declared)
            if value_type is not None:
                resolved[key] = value_type
        else:
            raise TypeError(
                f"Invalid type for key {key!r}: expected a type name or ValueType, "
                f"got {type(declared).__name__}"
            )
    return resolved
