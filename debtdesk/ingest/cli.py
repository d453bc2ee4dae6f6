"""
debtdesk/ingest/cli.py
======================
Command-line access to the account import pipeline.

Usage:
    # Validate a spreadsheet and print a summary
    debtdesk-import validate accounts.xlsx

    # Full JSON result (records + errors), every failing check per row
    debtdesk-import validate accounts.xlsx --json --all-errors

    # Write the example template
    debtdesk-import template accounts_template.xlsx

Exit codes:
    0 - no errors
    1 - row or structural errors were reported
    2 - the file could not be read or decoded
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .errors import MalformedFileError
from .pipeline import ingest_file
from .template import generate_template

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ROW_ERRORS = 1
EXIT_UNREADABLE = 2


def _cmd_validate(args: argparse.Namespace) -> int:
    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return EXIT_UNREADABLE

    try:
        result = ingest_file(
            path.read_bytes(),
            filename=path.name,
            fmt=args.format,
            accumulate=args.all_errors,
        )
    except MalformedFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNREADABLE

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.summary())
        for error in result.errors:
            print(f"  row {error.row}: [{error.kind.code}] {error.message}")

    return EXIT_OK if result.ok else EXIT_ROW_ERRORS


def _cmd_template(args: argparse.Namespace) -> int:
    out = Path(args.output)
    fmt = args.format or ("csv" if out.suffix.lower() == ".csv" else "xlsx")
    out.write_bytes(generate_template(fmt))
    print(f"Template written to {out}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="debtdesk-import",
        description="Validate account spreadsheets and generate import templates",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate a spreadsheet")
    validate.add_argument("file", help="Path to the .xlsx or .csv file")
    validate.add_argument(
        "--format",
        choices=("xlsx", "csv"),
        help="Force the container format instead of detecting it",
    )
    validate.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON",
    )
    validate.add_argument(
        "--all-errors",
        action="store_true",
        help="Report every failing check per row, not only the first",
    )
    validate.set_defaults(handler=_cmd_validate)

    template = subparsers.add_parser("template", help="Write the example template")
    template.add_argument("output", help="Destination path")
    template.add_argument(
        "--format",
        choices=("xlsx", "csv"),
        help="Template format (default: from the file extension, else xlsx)",
    )
    template.set_defaults(handler=_cmd_template)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
