"""Render a node tree back to TOML-like text.

The output is not canonical: comments, key quoting and key order from the
source are not reproduced, and strings are written without quotes.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime
from typing import IO

from .model import Array, Node, Table, TableArray, Value


@dataclass
class Printer:
    """Rendering options.

    ``indent`` is repeated once per nesting depth; ``datetime_format`` is
    handed to ``datetime.strftime``.
    """

    indent: str = "\t"
    datetime_format: str = "%c"

    def render(self, node: Node) -> str:
        buf = io.StringIO()
        self.write(node, buf)
        return buf.getvalue()

    def write(self, node: Node, stream: IO[str]) -> None:
        if isinstance(node, Table):
            self._write_table(node, stream, 0)
        elif isinstance(node, TableArray):
            self._write_table_array(node, stream, 0, "")
        else:
            stream.write(self.format_inline(node))

    # -- Inline values --------------------------------------------------

    def format_inline(self, node: Node) -> str:
        if isinstance(node, Value):
            return format_scalar(node, self.datetime_format)
        if isinstance(node, Array):
            if not node.values:
                return "[  ]"
            return "[ " + ", ".join(self.format_inline(v) for v in node.values) + " ]"
        return self.render(node)

    # -- Tables ---------------------------------------------------------

    def _write_table(self, table: Table, stream: IO[str], depth: int) -> None:
        prefix = self.indent * depth
        for key, node in table.items():
            if isinstance(node, TableArray):
                self._write_table_array(node, stream, depth, key)
            elif isinstance(node, Table):
                stream.write(f"{prefix}{key} = \n")
                self._write_table(node, stream, depth + 1)
            else:
                stream.write(f"{prefix}{key} = {self.format_inline(node)}\n")

    def _write_table_array(self, tables: TableArray, stream: IO[str], depth: int, key: str) -> None:
        prefix = self.indent * depth
        for table in tables:
            stream.write(f"{prefix}[[{key}]]\n")
            self._write_table(table, stream, depth + 1)


def format_scalar(value: Value, datetime_format: str = "%c") -> str:
    """Text for a single scalar.

    Booleans render as true/false, date-times via strftime and floats with
    six significant digits.
    """
    data = value.data
    if isinstance(data, bool):
        return "true" if data else "false"
    if isinstance(data, datetime):
        return data.strftime(datetime_format)
    if isinstance(data, float):
        return f"{data:g}"
    return str(data)


_DEFAULT = Printer()


def render(node: Node, printer: Printer | None = None) -> str:
    """Render *node* with *printer* (default options when None)."""
    return (printer or _DEFAULT).render(node)
