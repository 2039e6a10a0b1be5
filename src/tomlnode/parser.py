"""Recursive-descent parser: text lines → Table tree.

The parser reads its input one line at a time and keeps an explicit
cursor (current line, position, 1-based line number). Only arrays pull
more lines while a value is being parsed; every other construct must
fit on its line.
"""

from __future__ import annotations

import io
import logging
import os
from datetime import datetime, timezone
from typing import Iterable

from .errors import ParseError
from .inference import (
    DATE_RE,
    ValueType,
    date_span,
    determine_value_type,
    scan_digits,
    value_kind_for,
)
from .model import Array, Node, Table, TableArray, Value, ValueKind
from .qualified import child_table, split_key

logger = logging.getLogger(__name__)

_WHITESPACE = " \t"
_BOOL_TERMINATORS = " \t#,]"
_ELEMENT_TERMINATORS = ",]#"

_INT_MIN = -(2 ** 63)
_INT_MAX = 2 ** 63 - 1

_ESCAPES: dict[str, str] = {
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "f": "\f",
    "r": "\r",
    '"': '"',
    "/": "/",
    "\\": "\\",
}


class Parser:
    """Single-use parser over a stream of text lines.

    Lines may also be bytes, which are decoded as UTF-8 one at a time so a
    bad byte is reported on its own line. Not reentrant: one instance
    consumes one stream.
    """

    def __init__(self, stream: Iterable[str | bytes]) -> None:
        self._lines = iter(stream)
        self._line = ""
        self._pos = 0
        self._line_number = 0
        # Header paths of [tables] declared so far; [[arrays]] are exempt
        self._tables: set[str] = set()

    # -- Public entry point ---------------------------------------------

    def parse(self) -> Table:
        """Consume the stream until it is exhausted and return the root table."""
        root = Table()
        current = root
        logger.debug("parse started")

        while self._next_line():
            self._consume_whitespace()
            if self._at_end() or self._peek() == "#":
                continue
            if self._peek() == "[":
                current = self._parse_table(root)
            else:
                self._parse_key_value(current)

        self._tables.clear()
        logger.debug("parsed %d lines", self._line_number)
        return root

    # -- Cursor ---------------------------------------------------------

    def _next_line(self) -> bool:
        try:
            line = next(self._lines)
        except StopIteration:
            return False
        except UnicodeDecodeError as exc:
            raise ParseError("Invalid UTF-8", self._line_number + 1) from exc
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ParseError("Invalid UTF-8", self._line_number + 1) from exc
        self._line = line.removesuffix("\n").removesuffix("\r")
        self._pos = 0
        self._line_number += 1
        return True

    def _at_end(self) -> bool:
        return self._pos >= len(self._line)

    def _peek(self) -> str:
        return "" if self._at_end() else self._line[self._pos]

    def _consume_whitespace(self) -> None:
        while not self._at_end() and self._line[self._pos] in _WHITESPACE:
            self._pos += 1

    def _error(self, message: str) -> ParseError:
        return ParseError(message, self._line_number)

    def _eol_or_comment(self) -> None:
        if not self._at_end() and self._peek() != "#":
            raise self._error(
                f"Unidentified trailing character {self._peek()}---did you forget a '#'?"
            )

    # -- Table headers --------------------------------------------------

    def _parse_table(self, root: Table) -> Table:
        self._pos += 1
        if self._at_end():
            raise self._error("Unexpected end of table")
        if self._peek() == "[":
            return self._parse_table_array(root)
        return self._parse_single_table(root)

    def _parse_single_table(self, table: Table) -> Table:
        line = self._line
        close = line.find("]", self._pos)
        name = line[self._pos:] if close == -1 else line[self._pos:close]
        if "[" in name:
            raise self._error("Cannot have [ in table name")
        if close == -1:
            raise self._error("Unterminated table")
        if not name:
            raise self._error("Empty table")
        if name in self._tables:
            raise self._error("Duplicate table")
        self._check_header_whitespace(name)

        self._tables.add(name)
        logger.debug("table [%s] at line %d", name, self._line_number)
        for part in split_key(name):
            if not part:
                raise self._error("Empty keytable part")
            table = self._descend(table, part)

        self._pos = close + 1
        self._consume_whitespace()
        self._eol_or_comment()
        return table

    def _parse_table_array(self, table: Table) -> Table:
        self._pos += 1
        line = self._line
        close = line.find("]", self._pos)
        name = line[self._pos:] if close == -1 else line[self._pos:close]
        if "[" in name:
            raise self._error("Cannot have [ in keytable name")
        if close == -1:
            raise self._error("Unterminated keytable array")
        if not name:
            raise self._error("Empty keytable")
        if close + 1 >= len(line) or line[close + 1] != "]":
            raise self._error("Invalid keytable array specifier")
        self._check_header_whitespace(name)

        logger.debug("table array [[%s]] at line %d", name, self._line_number)
        *parents, last = split_key(name)
        for part in parents:
            if not part:
                raise self._error("Empty keytable part")
            table = self._descend(table, part)
        if not last:
            raise self._error("Empty keytable part")

        node = table.entries.get(last)
        if node is None:
            tables = TableArray()
            table.insert(last, tables)
        elif isinstance(node, TableArray):
            tables = node
        else:
            raise self._error("Expected keytable array")
        table = tables.append(Table())

        self._pos = close + 2
        self._consume_whitespace()
        self._eol_or_comment()
        return table

    def _check_header_whitespace(self, name: str) -> None:
        if any(c in _WHITESPACE for c in name):
            raise self._error(f"Table name {name} cannot have whitespace")

    def _descend(self, table: Table, part: str) -> Table:
        """Step into *part*, creating an empty table when it is missing."""
        if not table.contains(part):
            child = Table()
            table.insert(part, child)
            return child
        child = child_table(table, part, through_arrays=True)
        if child is None:
            raise self._error("Keytable already exists as a value")
        return child

    # -- Keys -----------------------------------------------------------

    def _parse_key_value(self, table: Table) -> None:
        key = self._parse_key()
        if table.contains(key):
            raise self._error(f"Key {key} already present")
        if self._peek() != "=":
            raise self._error("Value must follow after a '='")
        self._pos += 1
        self._consume_whitespace()
        if self._at_end():
            raise self._error("Value must follow after a '='")
        table.insert(key, self._parse_value())
        self._consume_whitespace()
        self._eol_or_comment()

    def _parse_key(self) -> str:
        self._consume_whitespace()
        if self._peek() == '"':
            return self._string_literal()
        return self._parse_bare_key()

    def _parse_bare_key(self) -> str:
        line = self._line
        eq = line.find("=", self._pos)
        if eq == -1:
            eq = len(line)
        key = line[self._pos:eq].rstrip(_WHITESPACE)
        if not key:
            raise self._error("Empty key")
        if "#" in key:
            raise self._error(f"Key {key} cannot contain #")
        if any(c in _WHITESPACE for c in key):
            raise self._error(f"Key {key} cannot contain whitespace")
        self._pos = eq
        return key

    # -- Values ---------------------------------------------------------

    def _parse_value(self) -> Node:
        vtype = determine_value_type(self._line, self._pos)
        if vtype is None:
            raise self._error("Failed to parse value type")
        if vtype is ValueType.String:
            return Value(self._string_literal())
        if vtype is ValueType.Date:
            return self._parse_date()
        if vtype in (ValueType.Int, ValueType.Float):
            return self._parse_number()
        if vtype is ValueType.Bool:
            return self._parse_bool()
        return self._parse_array()

    def _string_literal(self) -> str:
        """Scan a double-quoted string and the whitespace after it."""
        self._pos += 1
        chars: list[str] = []
        line = self._line
        while self._pos < len(line):
            c = line[self._pos]
            if c == "\\":
                chars.append(self._parse_escape_code())
            elif c == '"':
                self._pos += 1
                self._consume_whitespace()
                return "".join(chars)
            else:
                chars.append(c)
                self._pos += 1
        raise self._error("Unterminated string literal")

    def _parse_escape_code(self) -> str:
        self._pos += 1
        escaped = _ESCAPES.get(self._peek())
        if escaped is None:
            raise self._error("Invalid escape sequence")
        self._pos += 1
        return escaped

    def _parse_number(self) -> Value:
        line = self._line
        start = pos = self._pos
        if line[pos] == "-":
            pos += 1
        pos = scan_digits(line, pos, len(line))
        if pos < len(line) and line[pos] == ".":
            end = scan_digits(line, pos + 1, len(line))
            if end == pos + 1:
                raise self._error("Floats must have trailing digits")
            return self._parse_float(line[start:end], end)
        return self._parse_int(line[start:pos], pos)

    def _parse_int(self, text: str, end: int) -> Value:
        try:
            number = int(text)
        except ValueError as exc:
            raise self._error(f"Malformed integer {text}") from exc
        if not _INT_MIN <= number <= _INT_MAX:
            raise self._error(f"Integer out of range {text}")
        self._pos = end
        return Value(number)

    def _parse_float(self, text: str, end: int) -> Value:
        try:
            number = float(text)
        except ValueError as exc:
            raise self._error(f"Malformed float {text}") from exc
        self._pos = end
        return Value(number)

    def _parse_bool(self) -> Value:
        line = self._line
        end = self._pos
        while end < len(line) and line[end] not in _BOOL_TERMINATORS:
            end += 1
        text = line[self._pos:end]
        self._pos = end
        if text == "true":
            return Value(True)
        if text == "false":
            return Value(False)
        raise self._error("Attempted to parse invalid boolean value")

    def _parse_date(self) -> Value:
        end = date_span(self._line, self._pos, len(self._line))
        match = DATE_RE.fullmatch(self._line, self._pos, end)
        self._pos = end
        if match is None:
            raise self._error("Failed to parse value type")
        year, month, day, hour, minute, second = (int(g) for g in match.groups())
        try:
            stamp = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
        except ValueError as exc:
            raise self._error(f"Invalid date-time {match.group(0)}") from exc
        return Value(stamp)

    # -- Arrays ---------------------------------------------------------

    def _parse_array(self) -> Array:
        self._pos += 1
        self._skip_whitespace_and_comments()

        if self._peek() == "]":
            self._pos += 1
            return Array()

        # The first element fixes the element kind for the whole array.
        line = self._line
        val_end = self._pos
        while val_end < len(line) and line[val_end] not in _ELEMENT_TERMINATORS:
            val_end += 1
        vtype = determine_value_type(line, self._pos, val_end)
        if vtype is None:
            raise self._error("Failed to parse value type")
        if vtype is ValueType.Array:
            return self._parse_nested_array()
        return self._parse_value_array(value_kind_for(vtype))

    def _parse_value_array(self, kind: ValueKind) -> Array:
        arr = Array()
        while self._peek() != "]":
            value = self._parse_value()
            if not isinstance(value, Value) or value.kind is not kind:
                raise self._error("Arrays must be heterogeneous")
            arr.append(value)
            if not self._next_element():
                break
        self._close_array()
        return arr

    def _parse_nested_array(self) -> Array:
        arr = Array()
        while self._peek() != "]":
            if self._peek() != "[":
                raise self._error("Arrays must be heterogeneous")
            arr.append(self._parse_array())
            if not self._next_element():
                break
        self._close_array()
        return arr

    def _next_element(self) -> bool:
        """Step over a separating comma; False when none follows."""
        self._skip_whitespace_and_comments()
        if self._peek() != ",":
            return False
        self._pos += 1
        self._skip_whitespace_and_comments()
        return True

    def _close_array(self) -> None:
        if self._peek() != "]":
            raise self._error("Expected ',' or ']' in array")
        self._pos += 1

    def _skip_whitespace_and_comments(self) -> None:
        """Skip blanks and comments, pulling lines until content appears."""
        self._consume_whitespace()
        while self._at_end() or self._peek() == "#":
            if not self._next_line():
                raise self._error("Unclosed array")
            self._consume_whitespace()


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

def parse(stream: Iterable[str | bytes]) -> Table:
    """Parse a text or binary stream (or any iterable of lines) into a Table."""
    return Parser(stream).parse()


def parse_string(text: str) -> Table:
    return parse(io.StringIO(text))


def parse_file(path: str | os.PathLike[str]) -> Table:
    """Parse the file at *path*. The file is closed whether or not parsing succeeds."""
    try:
        fh = open(path, "rb")
    except OSError as exc:
        raise ParseError(f"{os.fspath(path)} could not be opened for parsing") from exc
    logger.debug("parsing %s", path)
    with fh:
        return parse(fh)
