"""Display width helpers for wide characters."""

from __future__ import annotations

import wcwidth


def char_width(ch: str) -> int:
    if ord(ch) < 128:
        return 1
    w = wcwidth.wcwidth(ch)
    # non-printable (-1) and combining (0) characters take no column
    return max(w, 0)


def display_width(text: str) -> int:
    return sum(char_width(ch) for ch in text)


def truncate(text: str, width: int) -> str:
    """Return the longest prefix of *text* that fits in *width* columns.

    A double-width character that would straddle the limit is dropped.
    """
    used = 0
    for i, ch in enumerate(text):
        used += char_width(ch)
        if used > width:
            return text[:i]
    return text
