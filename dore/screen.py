"""ANSI/VT screen-control byte sequences."""

from __future__ import annotations

import contextlib
import logging
from typing import Iterator

logger = logging.getLogger(__name__)

_CSI = "\033["
_BOLD = f"{_CSI}1m"
_CYAN = f"{_CSI}36m"
_BG_MAGENTA = f"{_CSI}45m"
_RESET = f"{_CSI}0m"


def _encode(s: str) -> bytes:
    return s.encode("utf-8")


def enter_buffer() -> bytes:
    return _encode(f"{_CSI}?1049h")


def exit_buffer() -> bytes:
    return _encode(f"{_CSI}?1049l")


def clear_buffer() -> bytes:
    return _encode(f"{_CSI}2J")


def move_cursor(row: int, col: int) -> bytes:
    """Move to (*row*, *col*), both 1-indexed."""
    return _encode(f"{_CSI}{int(row)};{int(col)}H")


def save_cursor() -> bytes:
    return _encode(f"{_CSI}s")


def restore_cursor() -> bytes:
    return _encode(f"{_CSI}u")


def highlight(text: str) -> bytes:
    return _encode(f"{_BG_MAGENTA}{text}{_RESET}")


def marked(text: str) -> bytes:
    return _encode(f"{_BOLD}{_CYAN}{text}{_RESET}")


def plain(text: str) -> bytes:
    return _encode(text)


@contextlib.contextmanager
def alternate_screen(console) -> Iterator[None]:
    """Hold the alternate screen buffer for the duration of the block.

    The buffer is left on every exit path, including exceptions raised by
    the body.
    """
    console.write(enter_buffer())
    logger.debug("Entered alternate screen")
    try:
        yield
    finally:
        console.write(exit_buffer())
        logger.debug("Left alternate screen")
