from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Sequence, Union

from .text import display_width

COLUMN_SEPARATOR = "  "

Projection = Callable[[Any], Union[str, Sequence[str]]]


@dataclass(frozen=True)
class Entry:
    """A candidate row: the opaque *payload* and its display text."""

    payload: Any
    view: str


def _as_columns(shown: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(shown, str):
        return [shown]
    return [str(col) for col in shown]


def align_columns(rows: Sequence[Sequence[str]]) -> List[str]:
    """Join each row's columns, padding every column but the last.

    Widths are the maximum display width per column across all *rows*.
    """
    ncols = max((len(r) for r in rows), default=0)
    widths = [0] * ncols
    for row in rows:
        for i, col in enumerate(row):
            widths[i] = max(widths[i], display_width(col))

    lines: List[str] = []
    for row in rows:
        cols = list(row) + [""] * (ncols - len(row))
        parts = [
            col + " " * (widths[i] - display_width(col))
            for i, col in enumerate(cols[:-1])
        ]
        parts.append(cols[-1] if cols else "")
        lines.append(COLUMN_SEPARATOR.join(parts))
    return lines


def build_entries(source: Iterable[Any], show: Projection = str) -> List[Entry]:
    """Wrap *source* items into entries using the *show* projection.

    *show* may return a single string, used as is, or a sequence of column
    strings, which are aligned across the whole source in one pass.
    """
    items = list(source)
    shown = [show(item) for item in items]

    if all(isinstance(s, str) for s in shown):
        views = list(shown)
    else:
        views = align_columns([_as_columns(s) for s in shown])

    return [Entry(item, view) for item, view in zip(items, views)]
