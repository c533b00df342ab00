"""Navigation state: active index, cursor, filter query, and references.

This module has no I/O. Cursors are 1-based; ``0`` marks an empty active
index, in which case every movement is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .filtering import filter_entries
from .languages import LanguageProfile
from .symbols_types import Reference, SymbolEntry


class Mode(Enum):
    NAVIGATE = "navigate"
    FILTER = "filter"


@dataclass(frozen=True)
class JumpInstruction:
    """Editor jump target: 1-based ``line``, 0-based ``column``."""

    file: str | None
    line: int
    column: int

    @classmethod
    def for_entry(cls, entry: SymbolEntry, default_file: str | None = None) -> JumpInstruction | None:
        position = entry.jump_position()
        if position is None:
            return None
        return cls(
            file=entry.source_location or default_file,
            line=position.line + 1,
            column=position.character,
        )

    @classmethod
    def for_reference(cls, reference: Reference) -> JumpInstruction:
        return cls(file=reference.file, line=reference.line, column=reference.column - 1)


def clamp_cursor(cursor: int, size: int) -> int:
    """Clamp a 1-based cursor into ``[1, size]``; ``0`` when ``size`` is 0."""
    if size <= 0:
        return 0
    return max(1, min(cursor, size))


def wrap_cursor(cursor: int, delta: int, size: int) -> int:
    """Step a 1-based cursor by ``delta`` with unconditional wraparound."""
    if size <= 0:
        return 0
    start = clamp_cursor(cursor, size)
    return (start - 1 + delta) % size + 1


@dataclass
class NavigationState:
    """All mutable state of one navigator session."""

    full_index: list[SymbolEntry] = field(default_factory=list)
    filtered_index: list[SymbolEntry] = field(default_factory=list)
    filter_query: str = ""
    mode: Mode = Mode.NAVIGATE
    cursor_index: int = 0
    reference_list: list[Reference] = field(default_factory=list)
    reference_cursor: int = 0
    buffer_id: object | None = None
    file: str | None = None
    profile: LanguageProfile | None = None
    namespace_mode: bool = False
    namespace: str | None = None
    status_message: str = ""

    @property
    def filtering(self) -> bool:
        """Whether the filtered index is the active one."""
        return self.mode is Mode.FILTER or bool(self.filter_query)

    @property
    def active_index(self) -> list[SymbolEntry]:
        return self.filtered_index if self.filtering else self.full_index

    def current_entry(self) -> SymbolEntry | None:
        active = self.active_index
        if self.cursor_index < 1 or self.cursor_index > len(active):
            return None
        return active[self.cursor_index - 1]

    def clamp(self) -> None:
        self.cursor_index = clamp_cursor(self.cursor_index, len(self.active_index))

    def refilter(self) -> None:
        """Recompute ``filtered_index`` from ``full_index`` and clamp the cursor."""
        self.filtered_index = filter_entries(self.full_index, self.filter_query)
        self.clamp()

    def set_filter_query(self, query: str) -> None:
        self.filter_query = query
        self.refilter()

    def replace_full_index(self, entries: list[SymbolEntry]) -> None:
        """Swap in a new index, keeping the cursor on the same symbol if present."""
        previous = self.current_entry()
        self.full_index = list(entries)
        self.filtered_index = filter_entries(self.full_index, self.filter_query)
        if previous is not None:
            for position, entry in enumerate(self.active_index, start=1):
                if entry.qualified_name == previous.qualified_name:
                    self.cursor_index = position
                    return
        if self.cursor_index < 1 and self.active_index:
            self.cursor_index = 1
        self.clamp()

    def step(self, delta: int) -> SymbolEntry | None:
        size = len(self.active_index)
        if size == 0:
            self.cursor_index = 0
            return None
        self.cursor_index = wrap_cursor(self.cursor_index, delta, size)
        return self.current_entry()

    def select(self, index: int) -> SymbolEntry | None:
        size = len(self.active_index)
        if size == 0:
            self.cursor_index = 0
            return None
        self.cursor_index = clamp_cursor(index, size)
        return self.current_entry()

    def set_references(self, references: list[Reference]) -> None:
        self.reference_list = list(references)
        self.reference_cursor = 1 if self.reference_list else 0

    def clear_references(self) -> None:
        self.reference_list = []
        self.reference_cursor = 0

    def step_reference(self, delta: int) -> Reference | None:
        size = len(self.reference_list)
        if size == 0:
            self.reference_cursor = 0
            return None
        self.reference_cursor = wrap_cursor(self.reference_cursor, delta, size)
        return self.reference_list[self.reference_cursor - 1]
