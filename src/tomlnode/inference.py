"""Value inference: decide what kind of value starts at a position in a line.

The parser has no separate tokenizing pass. Each value is classified from
its first character plus a bounded scan of the characters that follow:

- ``"``                          → String
- ``YYYY-MM-DDTHH:MM:SSZ``       → Date
- digit or ``-``                 → Int, or Float when a ``.`` follows the digits
- ``t`` / ``f``                  → Bool
- ``[``                          → Array
"""

from __future__ import annotations

import re
from enum import Enum, auto

from .model import ValueKind

DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})Z")

_DATE_CHARS = frozenset("0123456789TZ:-")


class ValueType(Enum):
    String = auto()
    Date = auto()
    Int = auto()
    Float = auto()
    Bool = auto()
    Array = auto()


_VALUE_KINDS: dict[ValueType, ValueKind] = {
    ValueType.String: ValueKind.String,
    ValueType.Date: ValueKind.DateTime,
    ValueType.Int: ValueKind.Integer,
    ValueType.Float: ValueKind.Float,
    ValueType.Bool: ValueKind.Boolean,
}


def value_kind_for(vtype: ValueType) -> ValueKind | None:
    """Scalar kind produced by *vtype*; None for arrays."""
    return _VALUE_KINDS.get(vtype)


# ---------------------------------------------------------------------------
# Scanning helpers
# ---------------------------------------------------------------------------

def date_span(line: str, pos: int, end: int) -> int:
    """Return the end of the run of date-time characters starting at *pos*."""
    while pos < end and line[pos] in _DATE_CHARS:
        pos += 1
    return pos


def is_date(line: str, pos: int, end: int) -> bool:
    return DATE_RE.fullmatch(line, pos, date_span(line, pos, end)) is not None


def scan_digits(line: str, pos: int, end: int) -> int:
    while pos < end and "0" <= line[pos] <= "9":
        pos += 1
    return pos


def determine_number_type(line: str, pos: int, end: int) -> ValueType:
    """Int unless the (optionally signed) digit run is followed by ``.``."""
    if pos < end and line[pos] == "-":
        pos += 1
    pos = scan_digits(line, pos, end)
    if pos < end and line[pos] == ".":
        return ValueType.Float
    return ValueType.Int


# ---------------------------------------------------------------------------
# determine_value_type
# ---------------------------------------------------------------------------

def determine_value_type(line: str, pos: int, end: int | None = None) -> ValueType | None:
    """Classify the value starting at ``line[pos]``.

    Returns None when the leading character starts no known value; the
    parser turns that into a parse error.
    """
    if end is None:
        end = len(line)
    if pos >= end:
        return None

    c = line[pos]
    if c == '"':
        return ValueType.String
    if is_date(line, pos, end):
        return ValueType.Date
    if ("0" <= c <= "9") or c == "-":
        return determine_number_type(line, pos, end)
    if c in ("t", "f"):
        return ValueType.Bool
    if c == "[":
        return ValueType.Array
    return None
