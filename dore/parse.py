import argparse
from pathlib import Path
from typing import Optional, Sequence

from .constants import VERSION


def _split_keys(value: str):
    return [key for key in value.split(",") if key]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dore",
        description="Interactive selector. Reads candidates from FILE or "
        "standard input and prints the chosen ones.",
    )
    parser.add_argument(
        "file",
        nargs="?",
        type=Path,
        default=None,
        help="Read candidates from FILE instead of standard input",
    )
    parser.add_argument(
        "-k",
        "--json-key",
        dest="json_keys",
        action="extend",
        type=_split_keys,
        default=None,
        metavar="KEY",
        help="Parse input as ndjson and show KEY. Repeat (or separate "
        "with commas) to show several columns",
    )
    parser.add_argument(
        "-m",
        "--multiselect",
        action="store_true",
        default=None,
        help="Allow selecting multiple items with Ctrl+Space",
    )
    parser.add_argument(
        "-q",
        "--query",
        default=None,
        help="Start with QUERY already typed",
    )
    parser.add_argument(
        "-p",
        "--prompt",
        default=None,
        help="Label shown before the query (default: QUERY)",
    )
    parser.add_argument(
        "--no-paging",
        dest="paged",
        action="store_false",
        default=None,
        help="Only show the first screenful; disables ←/→ page moves",
    )
    parser.add_argument("--version", action="version", version=VERSION)
    return parser


def parse_arguments(args: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(args)
