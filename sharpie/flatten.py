"""Flatten provider symbol trees into an ordered index."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from functools import lru_cache

from .languages import CSHARP, LanguageProfile
from .symbols_types import HierarchicalSymbol, SymbolEntry, WorkspaceSymbol


@lru_cache(maxsize=16)
def _extension_pattern(extensions: tuple[str, ...]) -> re.Pattern[str] | None:
    if not extensions:
        return None
    alternatives = "|".join(re.escape(ext) for ext in sorted(extensions, key=len, reverse=True))
    return re.compile(rf"(?:{alternatives})(?=\.|$)")


def clean_symbol_name(name: str, extensions: Sequence[str] = CSHARP.file_extensions) -> str:
    """Strip file-extension artifacts some servers bake into symbol names.

    ``Program.cs`` becomes ``Program`` and ``File.cs.Ns`` becomes ``File.Ns``.
    A name that would clean down to nothing is returned unchanged.
    """
    pattern = _extension_pattern(tuple(extensions))
    if pattern is None:
        return name
    cleaned = pattern.sub("", name)
    return cleaned or name


def _extensions_for(profile: LanguageProfile | None) -> tuple[str, ...]:
    return (profile or CSHARP).file_extensions


def flatten(
    tree: Iterable[HierarchicalSymbol],
    profile: LanguageProfile | None = None,
    source_location: str | None = None,
) -> list[SymbolEntry]:
    """Pre-order flatten ``tree`` into :class:`SymbolEntry` records.

    Siblings keep provider order and every parent precedes its descendants.
    Uses an explicit stack so deeply nested trees cannot hit the recursion
    limit.
    """
    extensions = _extensions_for(profile)
    entries: list[SymbolEntry] = []
    stack: list[tuple[HierarchicalSymbol, str, int]] = [(node, "", 0) for node in reversed(list(tree))]

    while stack:
        node, parent_name, depth = stack.pop()
        simple_name = clean_symbol_name(node.name, extensions)
        qualified_name = f"{parent_name}.{simple_name}" if parent_name else simple_name
        entries.append(
            SymbolEntry(
                qualified_name=qualified_name,
                simple_name=simple_name,
                kind=node.kind,
                signature=node.detail,
                range=node.range,
                selection_range=node.selection_range,
                source_location=source_location,
                depth=depth,
            )
        )
        for child in reversed(node.children):
            stack.append((child, qualified_name, depth + 1))

    return entries


def flatten_workspace_symbols(
    symbols: Iterable[WorkspaceSymbol],
    profile: LanguageProfile | None = None,
) -> list[SymbolEntry]:
    """Build entries from flat ``workspace/symbol`` results, keeping order."""
    extensions = _extensions_for(profile)
    entries: list[SymbolEntry] = []
    for symbol in symbols:
        simple_name = clean_symbol_name(symbol.name, extensions)
        container = clean_symbol_name(symbol.container_name, extensions) if symbol.container_name else ""
        qualified_name = f"{container}.{simple_name}" if container else simple_name
        entries.append(
            SymbolEntry(
                qualified_name=qualified_name,
                simple_name=simple_name,
                kind=symbol.kind,
                range=symbol.range,
                source_location=symbol.file,
                depth=qualified_name.count(".") if container else 0,
            )
        )
    return entries
