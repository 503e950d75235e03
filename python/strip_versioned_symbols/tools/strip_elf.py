#!/usr/bin/env python3
"""
Strip symbol-versioning metadata from an ELF file in place.

Zeroes the DT_VERSYM, DT_VERNEED and DT_VERNEEDNUM entries of the dynamic
section so the binary loads against libraries that lack matching version
definitions.

Usage:
    python -m strip_versioned_symbols.tools.strip_elf <binary> [--verbose]

Only the first positional argument is used; anything after it is ignored.
Every failure, including a bad command line, prints to stdout and exits 1.
"""

import argparse
import logging
import sys
from pathlib import Path

from strip_versioned_symbols import strip_file

USAGE_ERROR = "The first argument should be a path to an elf executable."


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        print(f"{USAGE_ERROR} ({message})")
        sys.exit(1)


def main(argv: list[str] | None = None):
    parser = _ArgumentParser(
        description="Remove symbol-versioning entries from an ELF dynamic section"
    )
    parser.add_argument(
        "binary", type=Path, nargs="?", help="Path to ELF file to patch in place"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log sections and dynamic entries as they are visited",
    )
    args, extra = parser.parse_known_args(argv)
    if args.binary is None:
        print(USAGE_ERROR)
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    if extra:
        logging.getLogger(__name__).debug("Ignoring extra arguments: %s", extra)

    result = strip_file(args.binary)
    if not result.success:
        print(result.diagnostic())
        sys.exit(1)

    if args.verbose:
        print(f"{args.binary}: {result.diagnostic()}")
    sys.exit(0)


if __name__ == "__main__":
    main()
