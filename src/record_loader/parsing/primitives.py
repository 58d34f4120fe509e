from __future__ import annotations

import re
from typing import Any, Callable, Mapping

from .types import ConversionError, FieldType, UnsupportedTypeError


DELIMITER = ","
QUOTE = '"'


## -- line splitting

def strip_quotes(token: str) -> str:
    """
    Remove one layer of surrounding quotes from a token.

    A token starting with `"` loses its first and last character, the last is
    not checked to be a quote. A lone `"` is too short to hold a pair and is
    returned unchanged.
    """
    if token.startswith(QUOTE) and len(token) >= 2:
        return token[1:-1]
    return token


def split_line(line: str) -> list[str]:
    """
    Split a raw data line into value tokens.

    Splits strictly on `DELIMITER`, a delimiter inside quotes still splits.
    Trailing empty tokens are dropped: a line ending in `,` carries no value
    for its last columns, so their fields are left unassigned. An empty line
    still yields one empty token for the first column.
    """
    tokens = line.split(DELIMITER)
    while len(tokens) > 1 and tokens[-1] == "":
        tokens.pop()
    return [strip_quotes(t) for t in tokens]


## -- typed values

# sign + ASCII digits only. `int()` alone would also take whitespace, `_` and non-ASCII digits.
_INTEGER = re.compile(r"[+-]?[0-9]+")

_INT32_RANGE = (-(2**31), 2**31 - 1)
_INT64_RANGE = (-(2**63), 2**63 - 1)


def parse_text(v: str, *, field: str) -> str:
    """Text passes through unchanged."""
    return v


def _parse_bounded_int(v: str, *, field: str, bounds: tuple[int, int], kind: str) -> int:
    if not _INTEGER.fullmatch(v):
        raise ConversionError(f"{field}: invalid {kind} value {v!r}")
    try:
        n = int(v)
    except ValueError as e:
        # digit strings past the interpreter's int conversion limit
        raise ConversionError(f"{field}: {kind} out of range ({len(v)} chars)") from e
    lo, hi = bounds
    if not lo <= n <= hi:
        raise ConversionError(f"{field}: {kind} out of range {v!r}")
    return n


def parse_int32(v: str, *, field: str) -> int:
    """Parse a signed 32-bit integer. Raise on anything else."""
    return _parse_bounded_int(v, field=field, bounds=_INT32_RANGE, kind="int32")


def parse_int64(v: str, *, field: str) -> int:
    """Parse a signed 64-bit integer. Raise on anything else."""
    return _parse_bounded_int(v, field=field, bounds=_INT64_RANGE, kind="int64")


Converter = Callable[..., Any]

# one entry per supported field type
CONVERTERS: Mapping[Any, Converter] = {
    FieldType.text: parse_text,
    FieldType.int32: parse_int32,
    FieldType.int64: parse_int64,
}


def convert_value(token: str, field_type: Any, *, field: str) -> Any:
    """
    Convert a raw token into the value `field_type` declares.

    Raises `UnsupportedTypeError` when `field_type` has no converter,
    `ConversionError` when the token does not parse.
    """
    try:
        converter = CONVERTERS[field_type]
    except (KeyError, TypeError):
        # TypeError: unhashable field types land here too
        raise UnsupportedTypeError(f"{field}: data type {field_type!r} is not supported") from None
    return converter(token, field=field)
