"""tomlnode — parse a restricted TOML dialect into a typed node tree."""

from .errors import KeyNotFoundError, ParseError, TomlError
from .model import (
    Array,
    Node,
    Table,
    TableArray,
    Value,
    ValueKind,
    make_value,
)
from .parser import Parser, parse, parse_file, parse_string
from .printer import Printer, render

__all__ = [
    "parse",
    "parse_file",
    "parse_string",
    "Parser",
    "Array",
    "Node",
    "Table",
    "TableArray",
    "Value",
    "ValueKind",
    "make_value",
    "Printer",
    "render",
    "TomlError",
    "ParseError",
    "KeyNotFoundError",
]
