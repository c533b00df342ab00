"""Incremental substring filter over the symbol index."""

from __future__ import annotations

from collections.abc import Iterable

from .symbols_types import SymbolEntry


def entry_matches(entry: SymbolEntry, folded_query: str) -> bool:
    return folded_query in entry.qualified_name.casefold()


def filter_entries(entries: Iterable[SymbolEntry], query: str) -> list[SymbolEntry]:
    """Return entries whose qualified name contains ``query``, case-insensitively.

    Order is preserved. Matching the qualified name also covers the simple
    name, which is always its last segment. An empty query returns every
    entry.
    """
    if not query:
        return list(entries)
    folded_query = query.casefold()
    return [entry for entry in entries if entry_matches(entry, folded_query)]
