"""Interface for ``python -m kv_flatten``."""

from __future__ import annotations

import json
import logging
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import TYPE_CHECKING

from ._version import version
from .marshaller import FlattenMarshaller


if TYPE_CHECKING:
    from collections.abc import Sequence


__all__ = ["main"]


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="kv_flatten", description="Flatten or unflatten a JSON document.")
    _ = parser.add_argument("-v", "--version", action="version", version=version)
    _ = parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    _ = parser.add_argument("command", choices=["flatten", "unflatten"])
    _ = parser.add_argument("file", nargs="?", type=Path, help="JSON input, stdin by default")
    _ = parser.add_argument("--metadata-key", default="_metadata")
    _ = parser.add_argument("--field-separator", default=".")
    _ = parser.add_argument("--metadata-separator", default="/")
    _ = parser.add_argument("--placeholder", default="*")
    return parser


def main(args: Sequence[str] | None = None) -> None:
    """Argument parser for the CLI."""
    parser = _build_parser()
    options = parser.parse_args(args)
    if options.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        marshaller = FlattenMarshaller(
            options.metadata_key,
            options.field_separator,
            options.metadata_separator,
            options.placeholder,
        )
    except ValueError as error:
        parser.error(str(error))

    if options.file is None:
        document = json.load(sys.stdin)
    else:
        try:
            with options.file.open(encoding="utf-8") as source:
                document = json.load(source)
        except OSError as error:
            parser.error(f"cannot read {options.file}: {error.strerror}")

    if not isinstance(document, dict):
        parser.error("input must be a JSON object")

    result = marshaller.flatten(document) if options.command == "flatten" else marshaller.unflatten(document)
    json.dump(result, sys.stdout, indent=2)
    _ = sys.stdout.write("\n")


if __name__ == "__main__":
    main()
