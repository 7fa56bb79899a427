from __future__ import annotations

import json
import logging
import os
import sys
from typing import IO, Any, Callable, Dict, List, Optional

from . import picker
from .config import Config
from .constants import EXIT_CANCELLED, EXIT_NO_CHOICE
from .parse import parse_arguments
from .terminal import Console

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def configure_logging() -> None:
    if _is_debug_mode():
        log_format = "[dore] %(levelname)s %(name)s: %(message)s"
        level = logging.DEBUG
    else:
        log_format = "[dore] %(message)s"
        level = logging.INFO

    logging.basicConfig(level=level, format=log_format)


def read_lines(stream: IO[str]) -> List[str]:
    return [line.rstrip("\r\n") for line in stream]


def parse_records(lines: List[str], keys: List[str]) -> List[Record]:
    records: List[Record] = []
    for line in lines:
        try:
            item = json.loads(line)
        except ValueError:
            raise SystemExit(f"ERROR: cannot parse input {json.dumps(line)} as JSON")

        if not isinstance(item, dict):
            raise SystemExit(f"ERROR: {json.dumps(item)} is not object")

        for key in keys:
            if key not in item:
                raise SystemExit(
                    f"ERROR: object {json.dumps(item)} doesn't have key '{key}'"
                )
        records.append(item)
    return records


def load_source(config: Config, stdin: IO[str]) -> List[Any]:
    if config.file is not None:
        try:
            with open(config.file, encoding="utf-8") as f:
                lines = read_lines(f)
        except OSError as exc:
            raise SystemExit(f"ERROR: fail to setup source: {exc}")
    elif stdin.isatty():
        raise SystemExit("ERROR: fail to setup source: input is tty")
    else:
        lines = read_lines(stdin)

    logger.debug("Read %d input lines", len(lines))
    if config.ndjson:
        return parse_records(lines, config.json_keys)
    return lines


def make_projection(config: Config) -> Callable[[Any], Any]:
    if not config.ndjson:
        return str

    if len(config.json_keys) == 1:
        key = config.json_keys[0]
        return lambda record: f"{record[key]}"

    return lambda record: [f"{record[k]}" for k in config.json_keys]


def format_output(item: Any, config: Config) -> str:
    if config.ndjson:
        return json.dumps(item, ensure_ascii=False)
    return str(item)


def _print_error(msg: str) -> None:
    sys.stderr.write(f"{msg}\n")


def main(
    argv: Optional[List[str]] = None,
    *,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
    console: Optional[Console] = None,
) -> int:
    namespace = parse_arguments(argv)
    logger.debug("CLI arguments parsed: %s", namespace)

    config = Config.create(namespace)
    source = load_source(config, stdin or sys.stdin)
    out = stdout or sys.stdout

    if not source:
        _print_error("ERROR: no choice")
        return EXIT_NO_CHOICE

    options = dict(
        console=console,
        query=config.query,
        prompt=config.prompt,
        paged=config.paged,
    )
    show = make_projection(config)

    if config.multiselect:
        selected = picker.select_many(source, show, **options)
    else:
        choice = picker.select(source, show, **options)
        selected = [] if choice is None else [choice]

    if not selected:
        _print_error("ERROR: cancelled")
        return EXIT_CANCELLED

    for item in selected:
        out.write(format_output(item, config) + "\n")
    out.flush()
    return 0


def run():
    configure_logging()
    logger.debug("Starting dore")
    sys.exit(main(sys.argv[1:]))


def _is_debug_mode() -> bool:
    debug_value = os.getenv("DORE_DEBUG", "")

    normalized = debug_value.lower().strip()
    return normalized not in {"", "0", "false", "no", "off"}
