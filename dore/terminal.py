"""Console port used by the selector, and its controlling-terminal backend."""

from __future__ import annotations

import logging
import os
import selectors
import signal
import termios
import tty
from typing import Iterator, Optional, Protocol, Tuple, Union

from .keys import KeyEvent, Resize, make_raw_reader, read_key_event

logger = logging.getLogger(__name__)

DEFAULT_SIZE = (24, 80)

Event = Union[KeyEvent, Resize]


class Console(Protocol):
    """What the selector needs from a terminal."""

    def write(self, data: bytes) -> None: ...

    def size(self) -> Tuple[int, int]:
        """Return ``(rows, columns)``."""
        ...

    def key_events(self) -> Iterator[Event]: ...


class TTYConsole:
    """Console backed by the controlling terminal.

    Opening ``/dev/tty`` directly keeps keyboard input available while
    stdin is a pipe carrying the candidates.
    """

    def __init__(self, path: str = "/dev/tty") -> None:
        self.path = path
        self.fd = os.open(path, os.O_RDWR | os.O_NOCTTY)
        logger.debug("Opened console %s (fd=%d)", path, self.fd)

    def write(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = os.write(self.fd, view)
            view = view[written:]

    def size(self) -> Tuple[int, int]:
        try:
            size = os.get_terminal_size(self.fd)
        except OSError:
            return DEFAULT_SIZE
        return size.lines, size.columns

    def key_events(self) -> Iterator[Event]:
        """Yield key events and resize notifications as they arrive.

        The terminal is held in raw mode while the generator is alive.
        Key input and SIGWINCH are multiplexed with a selector; whichever
        is ready first is delivered first.
        """
        wake_r, wake_w = os.pipe()
        os.set_blocking(wake_w, False)

        def on_sigwinch(signum, frame):
            try:
                os.write(wake_w, b"\0")
            except BlockingIOError:
                pass  # a wakeup is already pending

        saved_attrs = termios.tcgetattr(self.fd)
        prev_handler = signal.signal(signal.SIGWINCH, on_sigwinch)
        sel = selectors.DefaultSelector()
        sel.register(self.fd, selectors.EVENT_READ, "key")
        sel.register(wake_r, selectors.EVENT_READ, "resize")
        read_char = make_raw_reader(self.fd)

        try:
            # TCSANOW keeps keys typed before the selector started
            tty.setraw(self.fd, termios.TCSANOW)
            while True:
                for key, _ in sel.select():
                    if key.data == "resize":
                        os.read(wake_r, 512)
                        logger.debug("Terminal resized to %s", self.size())
                        yield Resize()
                        continue

                    try:
                        event = read_key_event(read_char)
                    except EOFError:
                        logger.debug("Console %s closed", self.path)
                        return
                    if event is not None:
                        yield event
        finally:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, saved_attrs)
            signal.signal(signal.SIGWINCH, prev_handler)
            sel.close()
            os.close(wake_r)
            os.close(wake_w)

    def close(self) -> None:
        os.close(self.fd)

    def __enter__(self) -> "TTYConsole":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def get_console(path: Optional[str] = None) -> TTYConsole:
    if path is None:
        return TTYConsole()
    return TTYConsole(path)
