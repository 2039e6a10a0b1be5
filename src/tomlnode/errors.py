"""Exception types raised by tomlnode."""

from __future__ import annotations


class TomlError(Exception):
    """Base class for every error raised by this package."""


class ParseError(TomlError):
    """A grammar or type violation found while parsing.

    ``line`` is the 1-based line being consumed when the error was raised,
    or ``None`` when no line was read (e.g. the file could not be opened).
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.message = message
        self.line = line
        if line is None:
            super().__init__(message)
        else:
            super().__init__(f"{message} at line {line}")


class KeyNotFoundError(TomlError, KeyError):
    """Raised by direct lookups when a (possibly dotted) key is missing."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"{self.key} is not a valid key"
