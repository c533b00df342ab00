"""Go inference rules and syntax tables.

gopls reports signatures such as ``func(ctx context.Context) (int, error)``
in ``detail``. Everything below reads those strings with regexes; receiver,
return-type, channel, and goroutine detection are approximations and will
misread unusual signatures (nested function types, grouped named results).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from ..symbols_types import ChannelDirection, Indicator, SymbolEntry, SymbolKind
from .base import LanguageRules, TypeRule, feature_enabled

TYPE_RULES: tuple[TypeRule, ...] = (
    TypeRule(
        "integer",
        frozenset(
            {
                "int", "int8", "int16", "int32", "int64",
                "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
                "byte", "rune",
            }
        ),
    ),
    TypeRule("number", frozenset({"float32", "float64", "complex64", "complex128"})),
    TypeRule("string", frozenset({"string"})),
    TypeRule("boolean", frozenset({"bool"})),
    TypeRule("slice", patterns=(re.compile(r"^\[\]"),)),
    TypeRule("array", patterns=(re.compile(r"^\[\d+\]"),)),
    TypeRule("map", patterns=(re.compile(r"^map\["),)),
    TypeRule("channel", patterns=(re.compile(r"^(?:<-)?chan"),)),
    TypeRule("interface", frozenset({"interface{}", "any"})),
    TypeRule("error", frozenset({"error"})),
)

GOROUTINE_NAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^run"),
    re.compile(r"^start"),
    re.compile(r"^worker"),
    re.compile(r"^process"),
    re.compile(r"^handle"),
    re.compile(r"async$"),
    re.compile(r"background$"),
    re.compile(r"goroutine"),
)

_FUNC_SIGNATURE_RE = re.compile(
    r"^\s*func\s*(?:\((?P<receiver>[^)]*)\)\s*(?=\w))?(?P<name>\w+)?\s*(?:\[[^\]]*\])?"
    r"\s*\((?P<params>[^)]*)\)\s*(?P<results>[^{]*)"
)
_RECEIVER_RE = re.compile(r"func\s*\((?P<name>\w+)\s+(?P<type>\*?[\w.]+)(?:\[[^\]]*\])?\)\s*\w+\s*[\[(]")
_RECEIVER_NAME_PREFIX_RE = re.compile(r"^\(\*?[\w.]+\)\.")
_GENERIC_FUNC_RE = re.compile(r"^\s*func\s*(?:\([^)]*\)\s*)?\w+\[")
_CHAN_SEND_RE = re.compile(r"\bchan\s*<-")
_CHAN_RECEIVE_RE = re.compile(r"<-\s*chan\b")
_CHAN_RE = re.compile(r"\bchan\b")
_IDENT_RE = re.compile(r"[A-Za-z_]\w*")
_TYPE_KEYWORDS = frozenset({"chan", "func", "map", "struct", "interface"})

# Tree-sitter node types for the syntax-tree fallback provider.
SYMBOL_NODE_KINDS: dict[str, SymbolKind] = {
    "function_declaration": SymbolKind.FUNCTION,
    "method_declaration": SymbolKind.METHOD,
    "type_spec": SymbolKind.CLASS,
    "field_declaration": SymbolKind.FIELD,
    "method_spec": SymbolKind.METHOD,
    "method_elem": SymbolKind.METHOD,
    "const_spec": SymbolKind.CONSTANT,
    "var_spec": SymbolKind.VARIABLE,
}
TYPE_SPEC_KINDS: dict[str, SymbolKind] = {
    "struct_type": SymbolKind.STRUCT,
    "interface_type": SymbolKind.INTERFACE,
}
DECLARATION_NODE_TYPES = frozenset({"package_clause"})
DECLARATION_PATTERNS: tuple[re.Pattern[str], ...] = (re.compile(r"^\s*package\s+(?P<name>\w+)"),)
DECLARATION_SCAN_LINES = 20


@dataclass(frozen=True)
class Receiver:
    name: str
    type: str

    @property
    def is_pointer(self) -> bool:
        return self.type.startswith("*")


def node_symbol_kind(node) -> SymbolKind | None:
    """Refine ``type_spec`` into struct/interface kinds by its ``type`` child."""
    kind = SYMBOL_NODE_KINDS.get(node.type)
    if kind is not SymbolKind.CLASS:
        return kind
    type_node = node.child_by_field_name("type")
    if type_node is None:
        return kind
    return TYPE_SPEC_KINDS.get(type_node.type, kind)


def _split_top_level(text: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def _result_type(item: str) -> str:
    tokens = item.split(None, 1)
    if len(tokens) == 2 and _IDENT_RE.fullmatch(tokens[0]) and tokens[0] not in _TYPE_KEYWORDS:
        return tokens[1].strip()
    return item


def return_types(signature: str | None) -> list[str]:
    """Return declared result types, ``[]`` when none can be read.

    Handles ``func(...) T`` and ``func(...) (T1, T2)``; named results drop their
    leading identifier.
    """
    if not signature:
        return []
    match = _FUNC_SIGNATURE_RE.match(signature)
    if match is None:
        return []
    results = match.group("results").strip()
    if not results:
        return []
    if not results.startswith("("):
        return [results]
    closing = results.rfind(")")
    inner = results[1:closing] if closing > 0 else results[1:]
    return [_result_type(item) for item in _split_top_level(inner)]


def returns_error(signature: str | None) -> bool:
    types = return_types(signature)
    return bool(types) and types[-1] == "error"


def method_receiver(signature: str | None) -> Receiver | None:
    if not signature:
        return None
    match = _RECEIVER_RE.search(signature)
    if match is None:
        return None
    return Receiver(name=match.group("name"), type=match.group("type"))


def channel_direction(signature: str | None) -> ChannelDirection | None:
    """Classify channel direction by where ``<-`` sits relative to ``chan``."""
    if not signature:
        return None
    if _CHAN_SEND_RE.search(signature):
        return ChannelDirection.SEND
    if _CHAN_RECEIVE_RE.search(signature):
        return ChannelDirection.RECEIVE
    if _CHAN_RE.search(signature):
        return ChannelDirection.BIDIRECTIONAL
    return None


def is_exported(name: str | None) -> bool:
    if not name:
        return False
    bare = _RECEIVER_NAME_PREFIX_RE.sub("", name)
    if not bare:
        return False
    first = bare[0]
    return first == first.upper() and first != first.lower()


def is_goroutine_func(name: str | None) -> bool:
    """Guess whether a function is meant to run as a goroutine from its name."""
    if not name:
        return False
    folded = _RECEIVER_NAME_PREFIX_RE.sub("", name).lower()
    return any(pattern.search(folded) for pattern in GOROUTINE_NAME_PATTERNS)


class GoRules(LanguageRules):
    """Structural overrides for interfaces, structs, error returns, and channels."""

    type_rules = TYPE_RULES
    aggregate_icon_key = "struct"
    generic_pattern = _GENERIC_FUNC_RE

    def structural_icon(
        self,
        entry: SymbolEntry,
        features: Mapping[str, bool] | None = None,
    ) -> str | None:
        if entry.kind is SymbolKind.INTERFACE:
            return "interface"
        if entry.kind is SymbolKind.STRUCT:
            return "struct"
        signature = entry.signature
        types = return_types(signature)
        if len(types) > 1 and types[-1] == "error":
            return self.classify_type(types[0])
        direction = channel_direction(signature)
        if direction is not None:
            return "channel"
        return None

    def indicators(
        self,
        entry: SymbolEntry,
        features: Mapping[str, bool] | None = None,
    ) -> list[Indicator]:
        indicators = self.common_indicators(entry, features)
        if feature_enabled(features, "show_exported_indicator") and not is_exported(entry.simple_name):
            indicators.append(Indicator.UNEXPORTED)
        if feature_enabled(features, "show_receiver_types"):
            receiver = method_receiver(entry.signature)
            if receiver is not None and receiver.is_pointer:
                indicators.append(Indicator.POINTER_RECEIVER)
        if feature_enabled(features, "detect_goroutine_funcs") and is_goroutine_func(entry.simple_name):
            indicators.append(Indicator.GOROUTINE)
        if feature_enabled(features, "show_channel_direction"):
            direction = channel_direction(entry.signature)
            if direction is not None:
                indicators.append(direction.indicator)
        if feature_enabled(features, "show_error_returns") and returns_error(entry.signature):
            indicators.append(Indicator.RETURNS_ERROR)
        return indicators


RULES = GoRules()
