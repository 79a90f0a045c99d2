"""Command-line interface for finding and managing duplicate images."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from imagededup.filter_duplicates import execute_filter_duplicates
from imagededup.find_dups import execute_find_dups
from imagededup.process import ProcessAction, execute_process
from imagededup.report import ImageDedupError

_VERSION = "0.1.0"
_U32_MAX = 2**32 - 1


def _u32(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid non-negative integer: {text!r}") from exc
    if not 0 <= value <= _U32_MAX:
        raise argparse.ArgumentTypeError(f"value out of range: {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="image_dedup",
        description="A tool for finding and managing duplicate images",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_VERSION}")
    commands = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    find = commands.add_parser(
        "find-dups", help="Find duplicate images using hash database"
    )
    find.add_argument(
        "hash_database",
        nargs="?",
        type=Path,
        default=Path("hashes.json"),
        help="Hash database file",
    )
    find.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("duplicates.json"),
        help="Output file path for duplicate list",
    )
    find.add_argument(
        "-t",
        "--threshold",
        type=_u32,
        default=5,
        help="Maximum Hamming distance for duplicates",
    )

    filt = commands.add_parser(
        "filter-duplicates", help="Filter duplicate groups by minimum hash distance"
    )
    filt.add_argument(
        "input_json",
        nargs="?",
        type=Path,
        default=Path("duplicates.json"),
        help="Duplicate list file from find-dups command",
    )
    filt.add_argument(
        "-m",
        "--min-distance",
        type=_u32,
        default=3,
        help="Minimum hash distance to display",
    )

    proc = commands.add_parser("process", help="Process duplicate images (move or delete)")
    proc.add_argument(
        "duplicate_list",
        nargs="?",
        type=Path,
        default=Path("duplicates.json"),
        help="Duplicate list file",
    )
    proc.add_argument(
        "-a",
        "--action",
        choices=[action.value for action in ProcessAction],
        default=ProcessAction.MOVE.value,
        help="Action to perform: move or delete",
    )
    proc.add_argument(
        "-d",
        "--dest",
        type=Path,
        default=Path("./duplicates"),
        help="Destination directory for moved files",
    )
    proc.add_argument(
        "--no-confirm", action="store_true", help="Skip confirmation prompt"
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run the chosen command and return an exit status."""
    args = build_parser().parse_args(argv)
    try:
        if args.command == "find-dups":
            execute_find_dups(args.hash_database, args.output, args.threshold)
        elif args.command == "filter-duplicates":
            execute_filter_duplicates(args.input_json, args.min_distance)
        else:
            execute_process(
                args.duplicate_list,
                ProcessAction(args.action),
                args.dest,
                args.no_confirm,
            )
    except (ImageDedupError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())