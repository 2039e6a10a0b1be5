"""``tomlnode`` command: parse a file and print the resulting tree.

Also runnable as ``python -m tomlnode.cli``.
"""

from __future__ import annotations

import argparse
import logging
import sys

from .errors import KeyNotFoundError, ParseError
from .parser import parse_file
from .printer import render


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tomlnode", description="Parse a TOML file and print it")
    parser.add_argument("path", help="Path to the TOML file")
    parser.add_argument("--get", metavar="KEY", help="Print only the node at a dotted key")
    parser.add_argument("--verbose", action="store_true", help="Emit debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s %(message)s")

    try:
        root = parse_file(args.path)
    except ParseError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.get is None:
        sys.stdout.write(render(root))
        return 0

    try:
        node = root.get_qualified(args.get)
    except KeyNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    text = render(node)
    sys.stdout.write(text if text.endswith("\n") else text + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
