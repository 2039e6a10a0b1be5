"""Document tree for tomlnode: scalar values, arrays, tables and table arrays."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import IO, Any, Iterator, TypeVar, Union

from .errors import KeyNotFoundError

T = TypeVar("T")


# ---------------------------------------------------------------------------
# ValueKind
# ---------------------------------------------------------------------------

class ValueKind(Enum):
    String = auto()
    Integer = auto()
    Float = auto()
    Boolean = auto()
    DateTime = auto()


_KIND_TYPES: dict[ValueKind, type] = {
    ValueKind.String: str,
    ValueKind.Integer: int,
    ValueKind.Float: float,
    ValueKind.Boolean: bool,
    ValueKind.DateTime: datetime,
}

_TYPE_KINDS: dict[type, ValueKind] = {t: k for k, t in _KIND_TYPES.items()}


def kind_of(data: Any) -> ValueKind:
    """Return the ValueKind for a Python scalar.

    The lookup is on the exact type, so ``True`` is a Boolean and never an
    Integer even though bool subclasses int.
    """
    kind = _TYPE_KINDS.get(type(data))
    if kind is None:
        if isinstance(data, datetime):
            return ValueKind.DateTime
        raise TypeError(f"Unsupported value type: {type(data)!r}")
    return kind


def _kind_for_type(t: type) -> ValueKind:
    kind = _TYPE_KINDS.get(t)
    if kind is None:
        raise TypeError(f"{t!r} is not a TOML value type")
    return kind


# ---------------------------------------------------------------------------
# Capability interface shared by every node
# ---------------------------------------------------------------------------

class _NodeBase:
    """Kind queries and checked downcasts.

    Downcasts return ``None`` instead of raising when the node is of a
    different kind.
    """

    __slots__ = ()

    def is_value(self) -> bool:
        return False

    def is_table(self) -> bool:
        return False

    def is_array(self) -> bool:
        return False

    def is_table_array(self) -> bool:
        return False

    def as_table(self) -> Table | None:
        return self if isinstance(self, Table) else None

    def as_array(self) -> Array | None:
        return self if isinstance(self, Array) else None

    def as_table_array(self) -> TableArray | None:
        return self if isinstance(self, TableArray) else None

    def as_(self, t: type[T]) -> Value | None:
        """Return this node as a Value holding a ``t``, or None."""
        kind = _kind_for_type(t)
        if isinstance(self, Value) and self.kind is kind:
            return self
        return None

    def print(self, stream: IO[str]) -> None:
        """Write the textual rendering of this node to *stream*."""
        from .printer import render
        stream.write(render(self))

    def __str__(self) -> str:
        from .printer import render
        return render(self)


# ---------------------------------------------------------------------------
# Value
# ---------------------------------------------------------------------------

@dataclass(slots=True, eq=True)
class Value(_NodeBase):
    """A leaf holding one string, integer, float, boolean or date-time."""

    data: str | int | float | bool | datetime
    kind: ValueKind = field(init=False)

    def __post_init__(self) -> None:
        self.kind = kind_of(self.data)

    def is_value(self) -> bool:
        return True

    def get(self) -> Any:
        return self.data


def make_value(data: Any) -> Value:
    """Wrap a plain Python scalar, passing existing nodes through unchanged."""
    if isinstance(data, _NodeBase):
        return data
    return Value(data)


# ---------------------------------------------------------------------------
# Array
# ---------------------------------------------------------------------------

def element_key(node: Node) -> ValueKind | type:
    """Homogeneity key of an array element: its scalar kind, or Array."""
    if isinstance(node, Value):
        return node.kind
    if isinstance(node, Array):
        return Array
    raise ValueError(f"{type(node).__name__} cannot be an array element")


@dataclass(slots=True, eq=True)
class Array(_NodeBase):
    """An ordered sequence of values of one scalar kind, or of arrays.

    Nested arrays are checked independently, so ``[[1, 2], ["a"]]`` is
    allowed while ``[1, "a"]`` is not.
    """

    values: list[Node] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.values:
            return
        first = element_key(self.values[0])
        for v in self.values[1:]:
            if element_key(v) != first:
                raise ValueError("Arrays must be homogeneous")

    def is_array(self) -> bool:
        return True

    def accepts(self, node: Node) -> bool:
        """True if *node* may be appended without breaking homogeneity."""
        try:
            key = element_key(node)
        except ValueError:
            return False
        return not self.values or element_key(self.values[0]) == key

    def append(self, node: Node) -> None:
        if not self.accepts(node):
            raise ValueError("Arrays must be homogeneous")
        self.values.append(node)

    def at(self, idx: int) -> Node:
        return self.values[idx]

    def array_of(self, t: type[T]) -> list[Value | None]:
        """Return every element as a Value of type ``t``, None where not."""
        return [v.as_(t) for v in self.values]

    def nested_array(self) -> list[Array | None]:
        return [v.as_array() for v in self.values]

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.values)


# ---------------------------------------------------------------------------
# TableArray
# ---------------------------------------------------------------------------

@dataclass(slots=True, eq=True)
class TableArray(_NodeBase):
    """The tables declared by repeated ``[[key]]`` headers, in order."""

    tables: list[Table] = field(default_factory=list)

    def is_table_array(self) -> bool:
        return True

    def append(self, table: Table) -> Table:
        if not isinstance(table, Table):
            raise ValueError("Table arrays may only hold tables")
        self.tables.append(table)
        return table

    def at(self, idx: int) -> Table:
        return self.tables[idx]

    def __len__(self) -> int:
        return len(self.tables)

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

@dataclass(slots=True, eq=True)
class Table(_NodeBase):
    """Mapping from key to node. Key order carries no meaning."""

    entries: dict[str, Node] = field(default_factory=dict)

    def is_table(self) -> bool:
        return True

    # -- Direct lookups -------------------------------------------------

    def contains(self, key: str) -> bool:
        return key in self.entries

    def contains_qualified(self, key: str) -> bool:
        from .qualified import contains_qualified
        return contains_qualified(self, key)

    def get(self, key: str) -> Node:
        try:
            return self.entries[key]
        except KeyError:
            raise KeyNotFoundError(key) from None

    def get_qualified(self, key: str) -> Node:
        from .qualified import resolve_qualified
        return resolve_qualified(self, key)

    # -- Typed convenience lookups (None on miss or wrong kind) ---------

    def get_table(self, key: str) -> Table | None:
        node = self.entries.get(key)
        return node.as_table() if node is not None else None

    def get_table_qualified(self, key: str) -> Table | None:
        if not self.contains_qualified(key):
            return None
        return self.get_qualified(key).as_table()

    def get_array(self, key: str) -> Array | None:
        node = self.entries.get(key)
        return node.as_array() if node is not None else None

    def get_array_qualified(self, key: str) -> Array | None:
        if not self.contains_qualified(key):
            return None
        return self.get_qualified(key).as_array()

    def get_table_array(self, key: str) -> TableArray | None:
        node = self.entries.get(key)
        return node.as_table_array() if node is not None else None

    def get_table_array_qualified(self, key: str) -> TableArray | None:
        if not self.contains_qualified(key):
            return None
        return self.get_qualified(key).as_table_array()

    def get_as(self, t: type[T], key: str) -> T | None:
        """Return the payload at *key* if it is a ``t`` value, else None."""
        try:
            value = self.get(key).as_(t)
        except KeyNotFoundError:
            return None
        return value.data if value is not None else None

    def get_as_qualified(self, t: type[T], key: str) -> T | None:
        try:
            value = self.get_qualified(key).as_(t)
        except KeyNotFoundError:
            return None
        return value.data if value is not None else None

    # -- Mutation -------------------------------------------------------

    def insert(self, key: str, value: Any) -> None:
        """Add or replace *key*. Plain scalars are wrapped in a Value."""
        self.entries[key] = make_value(value)

    # -- Mapping conveniences -------------------------------------------

    def keys(self):
        return self.entries.keys()

    def items(self):
        return self.entries.items()

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


Node = Union[Value, Array, Table, TableArray]
