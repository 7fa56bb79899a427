"""Interactive full-screen selector.

Renders the candidates on the alternate screen:

    QUERY> ba|
    bar
    baz
    foobar

Keys:
    typing          – refine the query (space-separated tokens, all must match)
    ↑ / ↓           – move the cursor one row
    ← / →           – move the cursor one page
    Ctrl+Space      – mark/unmark the current row (multi-select only)
    Enter           – accept the current row, or the marked rows
    Escape / Ctrl+C – cancel
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Sequence, Set

from . import screen
from .constants import DEFAULT_PROMPT
from .keys import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_LEFT,
    KEY_RETURN,
    KEY_RIGHT,
    KEY_SPACE,
    KEY_UP,
    NAMED_KEYS,
    KeyEvent,
    Resize,
)
from .matching import filter_entries
from .model import Entry, Projection, build_entries
from .terminal import Console, get_console
from .text import truncate

logger = logging.getLogger(__name__)

FilterFn = Callable[[str, Sequence[Entry]], List[Entry]]


class Mode(enum.Enum):
    SINGLE = "single"
    MULTI = "multi"


@dataclass
class SelectorState:
    """Mutable state for one selector run."""

    filtered: List[Entry] = field(default_factory=list)
    query: str = ""
    cursor: int = 0  # index into `filtered`
    marks: Set[int] = field(default_factory=set)  # indices into `filtered`
    mode: Mode = Mode.SINGLE
    done: bool = False
    selected: List[Any] = field(default_factory=list)  # accepted payloads


def page_size_for(rows: int) -> int:
    # one row is taken by the query line
    return max(1, rows - 1)


# -- State transitions -------------------------------------------------------


def _is_toggle_mark(event: KeyEvent) -> bool:
    return event.ctrl and event.name in (KEY_SPACE, "`")


def _is_printable(event: KeyEvent) -> bool:
    return (
        not event.ctrl
        and not event.meta
        and event.name not in NAMED_KEYS
        and bool(event.sequence)
        and event.sequence.isprintable()
    )


def clamp_cursor(state: SelectorState, page_size: int, paged: bool = True) -> None:
    last = len(state.filtered) - 1
    if not paged:
        # only the first page is ever drawn
        last = min(last, page_size - 1)
    state.cursor = max(0, min(last, state.cursor))


def _set_query(
    state: SelectorState,
    query: str,
    entries: Sequence[Entry],
    filter_fn: FilterFn,
) -> None:
    state.query = query
    state.marks.clear()
    state.filtered = filter_fn(query, entries)


def _cancel(state: SelectorState) -> None:
    state.done = True
    state.marks.clear()
    state.selected = []


def _accept(state: SelectorState) -> None:
    state.done = True
    if not state.filtered:
        state.selected = []
        return

    if state.mode is Mode.SINGLE:
        state.selected = [state.filtered[state.cursor].payload]
        return

    if not state.marks:
        state.marks.add(state.cursor)
    state.selected = [state.filtered[i].payload for i in sorted(state.marks)]


def update_state(
    state: SelectorState,
    event: KeyEvent,
    entries: Sequence[Entry],
    *,
    page_size: int,
    paged: bool = True,
    filter_fn: FilterFn = filter_entries,
) -> None:
    """Apply *event* to *state*.

    Sets ``state.done`` when the run should stop; ``state.selected`` then
    holds the accepted payloads (empty when cancelled or nothing matched).
    Unrecognised events leave the state untouched.
    """
    if event.ctrl and event.name == "c":
        _cancel(state)
        return

    if event.name == KEY_ESCAPE:
        _cancel(state)
        return

    if _is_toggle_mark(event):
        if state.mode is Mode.MULTI and state.filtered:
            state.marks ^= {state.cursor}
            state.cursor += 1
            clamp_cursor(state, page_size, paged)
        return

    if event.ctrl or event.meta:
        return

    if event.name in (KEY_RETURN, KEY_ENTER):
        _accept(state)
        return

    if event.name == KEY_BACKSPACE:
        if state.query:
            _set_query(state, state.query[:-1], entries, filter_fn)
            clamp_cursor(state, page_size, paged)
        return

    if event.name == KEY_UP:
        state.cursor -= 1
    elif event.name == KEY_DOWN:
        state.cursor += 1
    elif event.name == KEY_LEFT and paged:
        state.cursor -= page_size
    elif event.name == KEY_RIGHT and paged:
        state.cursor += page_size
    elif event.name == KEY_SPACE:
        _set_query(state, state.query + " ", entries, filter_fn)
    elif _is_printable(event):
        _set_query(state, state.query + event.sequence, entries, filter_fn)
    else:
        return

    clamp_cursor(state, page_size, paged)


# -- Rendering ---------------------------------------------------------------


def render(
    state: SelectorState,
    rows: int,
    columns: int,
    prompt: str = DEFAULT_PROMPT,
) -> bytes:
    """Return one full frame for *state* on a *rows* x *columns* screen.

    Every row is positioned explicitly, so the frame draws the same whether
    or not the terminal translates LF into CRLF.
    """
    page_size = page_size_for(rows)
    start = (state.cursor // page_size) * page_size

    out = [
        screen.clear_buffer(),
        screen.move_cursor(1, 1),
        screen.plain(truncate(f"{prompt}> {state.query}", columns)),
        screen.save_cursor(),
    ]

    for i, entry in enumerate(state.filtered[start : start + page_size], start):
        line = truncate(entry.view, columns) or " "
        # row 1 is the query line
        out.append(screen.move_cursor(i - start + 2, 1))
        if i == state.cursor:
            out.append(screen.highlight(line))
        elif i in state.marks:
            out.append(screen.marked(line))
        else:
            out.append(screen.plain(line))

    out.append(screen.restore_cursor())
    return b"".join(out)


# -- Core loop ---------------------------------------------------------------


class Selector:
    """Run one interactive selection over *entries* on *console*."""

    def __init__(
        self,
        entries: Sequence[Entry],
        console: Console,
        *,
        mode: Mode = Mode.SINGLE,
        query: str = "",
        prompt: str = DEFAULT_PROMPT,
        paged: bool = True,
        filter_fn: FilterFn = filter_entries,
    ) -> None:
        self.entries = list(entries)
        self.console = console
        self.mode = mode
        self.query = query
        self.prompt = prompt
        self.paged = paged
        self.filter_fn = filter_fn
        self._rows, self._columns = 0, 0

    def _render(self, state: SelectorState) -> None:
        self._rows, self._columns = self.console.size()
        clamp_cursor(state, page_size_for(self._rows), self.paged)
        self.console.write(render(state, self._rows, self._columns, self.prompt))

    def _new_state(self) -> SelectorState:
        state = SelectorState(mode=self.mode)
        _set_query(state, self.query, self.entries, self.filter_fn)
        return state

    def run(self) -> List[Any]:
        """Run the event loop and return the selected payloads.

        Returns an empty list when the source is empty, when the user
        cancels, or when the event stream ends before a selection is made.
        """
        if not self.entries:
            logger.debug("No entries to select from")
            return []

        state = self._new_state()

        with screen.alternate_screen(self.console):
            self._render(state)
            for event in self.console.key_events():
                if isinstance(event, Resize):
                    self._render(state)
                    continue

                logger.debug("Key event: %s", event)
                update_state(
                    state,
                    event,
                    self.entries,
                    page_size=page_size_for(self._rows),
                    paged=self.paged,
                    filter_fn=self.filter_fn,
                )
                if state.done:
                    break
                self._render(state)
            else:
                logger.debug("Key event stream ended without a selection")

        logger.debug(
            "Selector finished: done=%s selected=%d", state.done, len(state.selected)
        )
        return state.selected


def _run(
    source: Iterable[Any],
    show: Projection,
    console: Optional[Console],
    **options: Any,
) -> List[Any]:
    entries = build_entries(source, show)
    if not entries:
        return []

    if console is not None:
        return Selector(entries, console, **options).run()

    with get_console() as tty_console:
        return Selector(entries, tty_console, **options).run()


def select(
    source: Iterable[Any],
    show: Projection = str,
    *,
    console: Optional[Console] = None,
    query: str = "",
    prompt: str = DEFAULT_PROMPT,
    paged: bool = True,
) -> Optional[Any]:
    """Let the user pick one item of *source*; ``None`` if nothing was picked."""
    selected = _run(
        source,
        show,
        console,
        mode=Mode.SINGLE,
        query=query,
        prompt=prompt,
        paged=paged,
    )
    return selected[0] if selected else None


def select_many(
    source: Iterable[Any],
    show: Projection = str,
    *,
    console: Optional[Console] = None,
    query: str = "",
    prompt: str = DEFAULT_PROMPT,
    paged: bool = True,
) -> List[Any]:
    """Let the user mark several items of *source*.

    The result is ordered by position in the filtered list, not by the
    order in which items were marked.
    """
    return _run(
        source,
        show,
        console,
        mode=Mode.MULTI,
        query=query,
        prompt=prompt,
        paged=paged,
    )
