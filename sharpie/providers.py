"""Collaborator contracts and the bundled Tree-sitter symbol source."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

from .errors import ProviderUnavailable, SymbolProviderError
from .languages import LanguageProfile, classify
from .symbols_types import HierarchicalSymbol, Position, Reference, SymbolEntry, WorkspaceSymbol
from .syntax_tree import collect_tree_symbols, parse_declaration_near, read_text

logger = logging.getLogger(__name__)


class SymbolProvider(Protocol):
    """Source of symbol trees, usually a language server client."""

    async def fetch_document_symbols(self, buffer_id: object) -> list[HierarchicalSymbol]:
        """Return the buffer's symbol tree.

        Raises ``ProviderUnavailable`` when nothing can answer for the buffer
        and ``SymbolProviderError`` when the request fails.
        """
        ...

    async def fetch_references(self, buffer_id: object, position: Position) -> list[Reference]:
        ...

    async def fetch_workspace_symbols(self, query: str) -> list[WorkspaceSymbol]:
        ...


class SyntaxTreeFallback(Protocol):
    def parse_declaration_near(self, buffer_id: object) -> str | None:
        ...


class PresentationSink(Protocol):
    """Surface that shows the listing and moves the editor cursor."""

    def render(self, frame) -> None:
        ...

    def jump(self, instruction) -> None:
        ...

    def close(self) -> None:
        ...


class FuzzyFinderSink(Protocol):
    """Alternate picker used for one-shot searches."""

    def pick(
        self,
        entries: Sequence[SymbolEntry],
        format_entry: Callable[[SymbolEntry], str],
        prompt: str,
    ) -> SymbolEntry | None:
        ...


class TreeSitterSymbolProvider:
    """Symbol provider backed by a local Tree-sitter parse.

    Buffers are identified by whatever ``read_source`` accepts; by default a
    file path. References and workspace symbols need a language server and
    always raise :class:`ProviderUnavailable`.
    """

    def __init__(
        self,
        read_source: Callable[[object], str] | None = None,
        resolve_profile: Callable[[object], LanguageProfile | None] | None = None,
    ) -> None:
        self.read_source = read_source or (lambda buffer_id: read_text(Path(str(buffer_id))))
        self.resolve_profile = resolve_profile or (lambda buffer_id: classify(str(buffer_id)))

    def _load(self, buffer_id: object) -> tuple[str, LanguageProfile]:
        profile = self.resolve_profile(buffer_id)
        if profile is None:
            raise ProviderUnavailable(f"No language profile for {buffer_id}")
        try:
            source = self.read_source(buffer_id)
        except OSError as exc:
            raise SymbolProviderError(f"Failed to read source for symbols: {exc}") from exc
        return source, profile

    async def fetch_document_symbols(self, buffer_id: object) -> list[HierarchicalSymbol]:
        source, profile = self._load(buffer_id)
        symbols, error = collect_tree_symbols(source, profile)
        if error is not None and not symbols:
            raise SymbolProviderError(error)
        logger.debug("Collected %d top-level symbols for %s", len(symbols), buffer_id)
        return symbols

    async def fetch_references(self, buffer_id: object, position: Position) -> list[Reference]:
        raise ProviderUnavailable("References need a language server")

    async def fetch_workspace_symbols(self, query: str) -> list[WorkspaceSymbol]:
        raise ProviderUnavailable("Workspace symbols need a language server")

    def parse_declaration_near(self, buffer_id: object) -> str | None:
        try:
            source, profile = self._load(buffer_id)
        except SymbolProviderError:
            return None
        return parse_declaration_near(source, profile)
