"""Dotted-key resolution through nested tables."""

from __future__ import annotations

from .errors import KeyNotFoundError
from .model import Node, Table, TableArray


def split_key(key: str) -> list[str]:
    """Split ``a.b.c`` into its segments. Empty segments are kept."""
    return key.split(".")


def child_table(table: Table, part: str, *, through_arrays: bool = False) -> Table | None:
    """Return the table stored under *part*, or None.

    With ``through_arrays`` a table array resolves to its last table, which
    is how a header such as ``[fruit.variety]`` attaches to the most recent
    ``[[fruit]]``.
    """
    node = table.entries.get(part)
    if isinstance(node, Table):
        return node
    if through_arrays and isinstance(node, TableArray) and node.tables:
        return node.tables[-1]
    return None


def _terminal_table(table: Table, parts: list[str]) -> Table | None:
    for part in parts:
        table = child_table(table, part)
        if table is None:
            return None
    return table


def contains_qualified(table: Table, key: str) -> bool:
    """True if every segment of *key* resolves. Never raises."""
    *parents, last = split_key(key)
    terminal = _terminal_table(table, parents)
    return terminal is not None and last in terminal.entries


def resolve_qualified(table: Table, key: str) -> Node:
    """Return the node at dotted *key*; raise KeyNotFoundError otherwise."""
    *parents, last = split_key(key)
    terminal = _terminal_table(table, parents)
    if terminal is None or last not in terminal.entries:
        raise KeyNotFoundError(key)
    return terminal.entries[last]
