"""Shared symbol datatypes.

Positions follow language-server conventions: ``line`` and ``character`` are
0-based. Conversion to editor coordinates happens at the jump boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SymbolKind(Enum):
    """Symbol categories, numbered like LSP ``SymbolKind``."""

    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26
    UNKNOWN = 0

    @classmethod
    def coerce(cls, value: object) -> SymbolKind:
        """Map an LSP number, a kind name, or a ``SymbolKind`` onto a member."""
        if isinstance(value, SymbolKind):
            return value
        if isinstance(value, bool):
            return cls.UNKNOWN
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return cls.UNKNOWN
        if isinstance(value, str):
            key = value.strip().replace(" ", "").replace("_", "").upper()
            return _KIND_BY_FOLDED_NAME.get(key, cls.UNKNOWN)
        return cls.UNKNOWN

    @property
    def label(self) -> str:
        """Display label, e.g. ``EnumMember`` or ``TypeParameter``."""
        return "".join(part.capitalize() for part in self.name.split("_"))


_KIND_BY_FOLDED_NAME = {member.name.replace("_", ""): member for member in SymbolKind}


@dataclass(frozen=True)
class Position:
    line: int = 0
    character: int = 0

    @classmethod
    def from_lsp(cls, payload: object) -> Position | None:
        if not isinstance(payload, dict):
            return None
        line = payload.get("line")
        character = payload.get("character", 0)
        if not isinstance(line, int) or isinstance(line, bool):
            return None
        if not isinstance(character, int) or isinstance(character, bool):
            character = 0
        return cls(line=max(0, line), character=max(0, character))


@dataclass(frozen=True)
class Span:
    start: Position
    end: Position

    @classmethod
    def from_lsp(cls, payload: object) -> Span | None:
        """Build a span from an LSP ``Range`` dict; ``None`` when malformed."""
        if not isinstance(payload, dict):
            return None
        start = Position.from_lsp(payload.get("start"))
        if start is None:
            return None
        end = Position.from_lsp(payload.get("end")) or start
        return cls(start=start, end=end)


@dataclass(frozen=True)
class HierarchicalSymbol:
    """One node of a provider symbol tree (LSP ``DocumentSymbol`` shape)."""

    name: str
    kind: SymbolKind = SymbolKind.UNKNOWN
    detail: str | None = None
    range: Span | None = None
    selection_range: Span | None = None
    children: tuple[HierarchicalSymbol, ...] = ()

    @classmethod
    def from_lsp(cls, payload: dict) -> HierarchicalSymbol:
        """Convert ``DocumentSymbol`` or ``SymbolInformation`` payloads.

        ``SymbolInformation`` has no ``range``; its ``location.range`` is used
        instead. Unknown kinds map to ``SymbolKind.UNKNOWN``.
        """
        span = Span.from_lsp(payload.get("range"))
        if span is None:
            location = payload.get("location")
            if isinstance(location, dict):
                span = Span.from_lsp(location.get("range"))
        detail = payload.get("detail")
        raw_children = payload.get("children") or ()
        return cls(
            name=str(payload.get("name") or ""),
            kind=SymbolKind.coerce(payload.get("kind")),
            detail=detail if isinstance(detail, str) and detail else None,
            range=span,
            selection_range=Span.from_lsp(payload.get("selectionRange")),
            children=tuple(cls.from_lsp(child) for child in raw_children if isinstance(child, dict)),
        )


@dataclass(frozen=True)
class SymbolEntry:
    """Flattened symbol record used by the listing, filter, and jump logic."""

    qualified_name: str
    simple_name: str
    kind: SymbolKind
    signature: str | None = None
    range: Span | None = None
    selection_range: Span | None = None
    source_location: str | None = None
    depth: int = 0

    def jump_position(self) -> Position | None:
        """Return the jump target; the name span always beats the full span."""
        if self.selection_range is not None:
            return self.selection_range.start
        if self.range is not None:
            return self.range.start
        return None


@dataclass(frozen=True)
class WorkspaceSymbol:
    """Flat ``workspace/symbol`` result."""

    name: str
    kind: SymbolKind
    container_name: str | None = None
    file: str | None = None
    range: Span | None = None

    @classmethod
    def from_lsp(cls, payload: dict, uri_to_file=None) -> WorkspaceSymbol:
        location = payload.get("location") if isinstance(payload.get("location"), dict) else {}
        uri = location.get("uri")
        container = payload.get("containerName")
        file = None
        if isinstance(uri, str) and uri:
            file = uri_to_file(uri) if uri_to_file is not None else uri
        return cls(
            name=str(payload.get("name") or ""),
            kind=SymbolKind.coerce(payload.get("kind")),
            container_name=container if isinstance(container, str) and container else None,
            file=file,
            range=Span.from_lsp(location.get("range")),
        )


@dataclass(frozen=True)
class Reference:
    file: str
    range: Span

    @property
    def line(self) -> int:
        """1-based line of the reference start."""
        return self.range.start.line + 1

    @property
    def column(self) -> int:
        """1-based column of the reference start."""
        return self.range.start.character + 1


class Indicator(Enum):
    """Secondary badges shown next to a symbol's icon, in display order."""

    ASYNC = "async"
    STATIC = "static"
    GENERIC = "generic"
    UNEXPORTED = "unexported"
    POINTER_RECEIVER = "pointer_receiver"
    GOROUTINE = "goroutine"
    CHANNEL_SEND = "chan_send"
    CHANNEL_RECEIVE = "chan_receive"
    CHANNEL_BIDIRECTIONAL = "chan_bidirectional"
    RETURNS_ERROR = "returns_error"


class ChannelDirection(Enum):
    SEND = "send"
    RECEIVE = "receive"
    BIDIRECTIONAL = "bidirectional"

    @property
    def indicator(self) -> Indicator:
        return _CHANNEL_INDICATORS[self]


_CHANNEL_INDICATORS = {
    ChannelDirection.SEND: Indicator.CHANNEL_SEND,
    ChannelDirection.RECEIVE: Indicator.CHANNEL_RECEIVE,
    ChannelDirection.BIDIRECTIONAL: Indicator.CHANNEL_BIDIRECTIONAL,
}


@dataclass(frozen=True)
class DisplayMetadata:
    icon_key: str
    indicators: tuple[Indicator, ...] = field(default_factory=tuple)
