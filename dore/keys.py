"""Decoding of raw terminal input into key events.

The decoder reads one character at a time through a *read_char* callable
that returns ``None`` when no data is ready, so it can be driven by a real
file descriptor or by a scripted sequence in tests.
"""

from __future__ import annotations

import codecs
import os
import select
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import ESC_TIMEOUT

# -- Key names ---------------------------------------------------------------

KEY_UP = "up"
KEY_DOWN = "down"
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_HOME = "home"
KEY_END = "end"
KEY_RETURN = "return"
KEY_ENTER = "enter"
KEY_ESCAPE = "escape"
KEY_BACKSPACE = "backspace"
KEY_TAB = "tab"
KEY_SPACE = "space"

NAMED_KEYS = frozenset(
    {
        KEY_UP,
        KEY_DOWN,
        KEY_LEFT,
        KEY_RIGHT,
        KEY_HOME,
        KEY_END,
        KEY_RETURN,
        KEY_ENTER,
        KEY_ESCAPE,
        KEY_BACKSPACE,
        KEY_TAB,
        KEY_SPACE,
    }
)


@dataclass(frozen=True)
class KeyEvent:
    name: str
    sequence: str = ""
    ctrl: bool = False
    meta: bool = False
    shift: bool = False


@dataclass(frozen=True)
class Resize:
    """The terminal was resized."""


ReadChar = Callable[[], Optional[str]]

_ESC_READ_RETRIES = 4  # max None returns to tolerate inside an escape sequence

_CSI_FINALS = {
    "A": KEY_UP,
    "B": KEY_DOWN,
    "C": KEY_RIGHT,
    "D": KEY_LEFT,
    "H": KEY_HOME,
    "F": KEY_END,
}


def _read_continuation(read_char: ReadChar) -> Optional[str]:
    """Read the next real character, skipping up to *_ESC_READ_RETRIES*
    ``None`` returns.
    """
    for _ in range(_ESC_READ_RETRIES):
        ch = read_char()
        if ch is not None:
            return ch
    return None


def _read_escape(read_char: ReadChar) -> KeyEvent:
    seq1 = _read_continuation(read_char)
    if seq1 is None:
        # No follow-up byte at all → genuine Escape press
        return KeyEvent(KEY_ESCAPE, "\x1b")

    if seq1 in ("[", "O"):
        seq2 = _read_continuation(read_char)
        name = _CSI_FINALS.get(seq2 or "")
        if name is not None:
            return KeyEvent(name, f"\x1b{seq1}{seq2}")
        # Unrecognised sequence → treat as Escape
        return KeyEvent(KEY_ESCAPE, "\x1b")

    # ESC followed by a regular key is how terminals send Alt+key
    inner = _decode_char(seq1)
    if inner is None:
        return KeyEvent(KEY_ESCAPE, "\x1b")
    return KeyEvent(
        inner.name,
        "\x1b" + inner.sequence,
        ctrl=inner.ctrl,
        meta=True,
        shift=inner.shift,
    )


def _decode_char(ch: str) -> Optional[KeyEvent]:
    if ch in ("\r", "\n"):
        return KeyEvent(KEY_RETURN, ch)

    if ch in ("\x7f", "\x08"):  # DEL / Backspace
        return KeyEvent(KEY_BACKSPACE, ch)

    if ch == "\t":
        return KeyEvent(KEY_TAB, ch)

    if ch == "\x00":  # Ctrl+Space
        return KeyEvent(KEY_SPACE, ch, ctrl=True)

    if ch == " ":
        return KeyEvent(KEY_SPACE, ch)

    if "\x01" <= ch <= "\x1a":  # Ctrl+A .. Ctrl+Z
        return KeyEvent(chr(ord(ch) + 96), ch, ctrl=True)

    if ch.isprintable():
        if ch.isupper():
            return KeyEvent(ch.lower(), ch, shift=True)
        return KeyEvent(ch, ch)

    return None  # ignore other control characters


def read_key_event(read_char: ReadChar) -> Optional[KeyEvent]:
    """Read one logical key event using *read_char* (a single-char reader).

    Handles multi-byte escape sequences for arrow keys in both normal
    mode (``ESC [ X``) and application mode (``ESC O X``).
    Tolerates ``None`` gaps between bytes (see :func:`_read_continuation`).
    Returns ``None`` when no data is ready or the character is not a key.
    """
    ch = read_char()
    if ch is None:
        return None

    if ch == "\x1b":  # ESC – might be an arrow-key sequence
        return _read_escape(read_char)

    return _decode_char(ch)


def make_raw_reader(fd: int, timeout: float = ESC_TIMEOUT) -> ReadChar:
    """Return a single-char reader over the raw file descriptor *fd*.

    Bytes are pulled with :func:`os.read` so that ``select()`` and the read
    observe the same OS-level buffer. Multi-byte UTF-8 characters are
    assembled before being returned. Raises :class:`EOFError` once the
    descriptor is closed at the other end.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def read_char() -> Optional[str]:
        while True:
            if not select.select([fd], [], [], timeout)[0]:
                return None
            data = os.read(fd, 1)
            if not data:
                raise EOFError(f"end of input on fd {fd}")
            ch = decoder.decode(data)
            if ch:
                return ch

    return read_char
