from __future__ import annotations

import logging
from typing import List, Sequence

from .model import Entry

logger = logging.getLogger(__name__)


def tokenize(query: str) -> List[str]:
    """Split *query* on whitespace, dropping empty tokens."""
    return query.split()


def matches(tokens: Sequence[str], view: str) -> bool:
    """Return True if every token is a substring of *view* (case-sensitive)."""
    return all(token in view for token in tokens)


def filter_entries(query: str, entries: Sequence[Entry]) -> List[Entry]:
    """Return *entries* whose view matches every token of *query*.

    Order is preserved from *entries*; nothing is scored or ranked.
    """
    tokens = tokenize(query)
    if not tokens:
        return list(entries)

    filtered = [e for e in entries if matches(tokens, e.view)]
    logger.debug(
        "Query %r matched %d of %d entries", query, len(filtered), len(entries)
    )
    return filtered
