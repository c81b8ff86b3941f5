"""String utilities for query string encoding/decoding."""

import logging
import re
from urllib.parse import quote

logger = logging.getLogger(__name__)

# Characters left unescaped by strict_encode (besides ASCII letters and digits).
# ! ' ( ) * are escaped so output stays valid in strict URL contexts.
UNRESERVED_CHARS = "-_.~"

# A run of consecutive percent-encoded octets
PERCENT_RUN_PATTERN = re.compile(r"(?:%[0-9A-Fa-f]{2})+")

# A percent sign not followed by two hex digits
MALFORMED_PERCENT_PATTERN = re.compile(r"%(?![0-9A-Fa-f]{2})")

# Comma delimiters for the comma array format
COMMA_PATTERN = re.compile(",")
COMMA_OR_ENCODED_COMMA_PATTERN = re.compile(r",|%2[cC]")


def split_on_first(text: str, separator: str) -> tuple[str, str | None]:
    """
    Split a string on the first occurrence of a separator.

    Args:
        text: The string to split.
        separator: The separator to split on.

    Returns:
        ``(head, tail)`` with the separator removed, or ``(text, None)`` when
        the separator is empty or not found.

    Raises:
        TypeError: If either argument is not a string.
    """
    if not (isinstance(text, str) and isinstance(separator, str)):
        raise TypeError("Expected the arguments to be of type `str`")

    if not separator:
        return text, None

    index = text.find(separator)
    if index == -1:
        return text, None

    return text[:index], text[index + len(separator) :]


def safe_decode(text: str) -> str:
    """
    Decode ``+`` as space and percent-escapes as UTF-8.

    Malformed input (a stray ``%`` or escapes that are not valid UTF-8) is
    returned unchanged instead of raising.

    Args:
        text: The encoded text.

    Returns:
        The decoded text, or ``text`` itself if it is malformed.
    """
    spaced = text.replace("+", " ")
    if "%" not in spaced:
        return spaced

    if MALFORMED_PERCENT_PATTERN.search(spaced):
        logger.debug("Malformed percent-encoding, keeping raw text: %r", text)
        return text

    try:
        return PERCENT_RUN_PATTERN.sub(_decode_percent_run, spaced)
    except UnicodeDecodeError:
        logger.debug("Percent-encoding is not valid UTF-8, keeping raw text: %r", text)
        return text


def _decode_percent_run(match: re.Match) -> str:
    """Decode one run of %XX octets as UTF-8."""
    octets = bytes.fromhex(match.group(0).replace("%", ""))
    return octets.decode("utf-8")


def strict_encode(text: str) -> str:
    """
    Percent-encode a string for use as a query key or value.

    Only ASCII letters, digits and ``-_.~`` are left as-is. Everything else,
    including ``! ' ( ) *``, is encoded as UTF-8 ``%XX`` octets.

    Args:
        text: The string to encode.

    Returns:
        The encoded string.
    """
    return quote(text, safe=UNRESERVED_CHARS)


def decode_text(text: str, enabled: bool) -> str:
    """Decode ``text`` when decoding is enabled."""
    return safe_decode(text) if enabled else text


def encode_text(text: str, enabled: bool) -> str:
    """Encode ``text`` when encoding is enabled."""
    return strict_encode(text) if enabled else text


def split_comma_segments(raw: str, split_encoded: bool = False) -> list[str]:
    """
    Split a raw (still encoded) value for the comma array format.

    Args:
        raw: The raw value, before decoding.
        split_encoded: Also split on ``%2C``/``%2c``.

    Returns:
        The trimmed, non-empty segments.
    """
    pattern = COMMA_OR_ENCODED_COMMA_PATTERN if split_encoded else COMMA_PATTERN
    segments = (segment.strip() for segment in pattern.split(raw))
    return [segment for segment in segments if segment]
