#!/usr/bin/env python3
"""Print a disassembled listing of a JVM class file."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from classtrace import (
    ClassDisassembler,
    ClassFormatError,
    ClassNotFoundError,
    ClassPath,
    MnemonicTable,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "target",
        help="Either a fully qualified class name (java.lang.String) or the"
        " path of a .class file.",
    )
    parser.add_argument(
        "--skip-debug",
        action="store_true",
        help="Omit source file, line number and local variable information",
    )
    parser.add_argument(
        "--classpath",
        "-cp",
        action="append",
        default=[],
        help="Directories and archives searched for class names"
        " (may be repeated, entries separated by the platform path separator)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the listing to this file instead of stdout",
    )
    parser.add_argument(
        "--mnemonics",
        type=Path,
        default=None,
        help="JSON file overriding opcode and array type names",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log reader and class path activity to stderr",
    )
    return parser.parse_args()


def load_class(target: str, classpath_entries: list[str]) -> bytes:
    path = Path(target)
    if target.endswith(".class") and path.exists():
        try:
            return path.read_bytes()
        except OSError as exc:
            raise SystemExit(f"cannot read {path}: {exc.strerror}") from exc
    if target.endswith(".class") and (path.parent != Path(".") or path.is_absolute()):
        raise SystemExit(f"missing input file: {path}")
    try:
        return ClassPath.from_environment(classpath_entries).find(target)
    except ClassNotFoundError as exc:
        raise SystemExit(str(exc)) from exc


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    mnemonics = None
    if args.mnemonics:
        try:
            mnemonics = MnemonicTable.load(args.mnemonics)
        except ValueError as exc:
            raise SystemExit(f"invalid mnemonic table {args.mnemonics}: {exc}") from exc
    data = load_class(args.target, args.classpath)
    disassembler = ClassDisassembler(mnemonics)

    try:
        if args.output is not None:
            disassembler.write_listing(data, args.output, skip_debug=args.skip_debug)
            print(f"listing written to {args.output}")
        else:
            sys.stdout.write(disassembler.generate_listing(data, skip_debug=args.skip_debug))
    except ClassFormatError as exc:
        raise SystemExit(f"malformed class file {args.target}: {exc}") from exc


if __name__ == "__main__":
    main()
