"""C# inference rules and syntax tables."""

from __future__ import annotations

import re
from collections.abc import Mapping

from ..symbols_types import Indicator, SymbolEntry, SymbolKind
from .base import LanguageRules, TypeRule, extract_generic_argument, feature_enabled

ASYNC_WRAPPERS = ("IAsyncEnumerable", "ValueTask", "Task")

_RETURNS_TASK_RE = re.compile(r"Task\s*(?:<|$)")
_ASYNC_KEYWORD_RE = re.compile(r"\s*async\s+")
_ACCESS_PREFIX_RE = re.compile(
    r"^\s*(?:(?:public|private|protected|internal|async|static|virtual|override|sealed|abstract|new|extern|unsafe|partial|readonly)\s+)+"
)
_RETURN_TYPE_RE = re.compile(r"^([^\s(]+)")
_TASK_TYPE_RE = re.compile(r"(?:(?:Value)?Task(?:<|$)|IAsyncEnumerable<)")
_WRAPPER_RE = re.compile(r"\b(" + "|".join(ASYNC_WRAPPERS) + r")\s*<")

TYPE_RULES: tuple[TypeRule, ...] = (
    TypeRule(
        "integer",
        frozenset(
            {"int", "int16", "int32", "int64", "long", "short", "byte", "sbyte", "uint", "ulong", "ushort", "nint", "nuint"}
        ),
    ),
    TypeRule("string", frozenset({"string"})),
    TypeRule("boolean", frozenset({"bool", "boolean"})),
    TypeRule("number", frozenset({"float", "double", "decimal", "single"})),
    TypeRule("void", frozenset({"void"})),
    TypeRule("null", frozenset({"null"})),
    TypeRule(
        "array",
        patterns=(
            re.compile(r"^list<"),
            re.compile(r"^ilist<"),
            re.compile(r"^ienumerable<"),
            re.compile(r"^icollection<"),
            re.compile(r"^ireadonlylist<"),
            re.compile(r"^ireadonlycollection<"),
            re.compile(r"^iasyncenumerable<"),
            re.compile(r"\[\]$"),
        ),
    ),
    TypeRule(
        "dictionary",
        patterns=(
            re.compile(r"^dictionary<"),
            re.compile(r"^idictionary<"),
            re.compile(r"^ireadonlydictionary<"),
            re.compile(r"^concurrentdictionary<"),
        ),
    ),
    TypeRule("object", frozenset({"object", "dynamic"})),
)

# Tree-sitter node types for the syntax-tree fallback provider.
SYMBOL_NODE_KINDS: dict[str, SymbolKind] = {
    "namespace_declaration": SymbolKind.NAMESPACE,
    "file_scoped_namespace_declaration": SymbolKind.NAMESPACE,
    "class_declaration": SymbolKind.CLASS,
    "record_declaration": SymbolKind.CLASS,
    "interface_declaration": SymbolKind.INTERFACE,
    "struct_declaration": SymbolKind.STRUCT,
    "enum_declaration": SymbolKind.ENUM,
    "enum_member_declaration": SymbolKind.ENUM_MEMBER,
    "method_declaration": SymbolKind.METHOD,
    "constructor_declaration": SymbolKind.CONSTRUCTOR,
    "property_declaration": SymbolKind.PROPERTY,
    "field_declaration": SymbolKind.FIELD,
    "event_declaration": SymbolKind.EVENT,
    "event_field_declaration": SymbolKind.EVENT,
    "operator_declaration": SymbolKind.OPERATOR,
}
DECLARATION_NODE_TYPES = frozenset({"namespace_declaration", "file_scoped_namespace_declaration"})
DECLARATION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\s*namespace\s+(?P<name>[\w.]+)\s*;"),
    re.compile(r"^\s*namespace\s+(?P<name>[\w.]+)\s*\{"),
    re.compile(r"^\s*namespace\s+(?P<name>[\w.]+)\s*$"),
)
DECLARATION_SCAN_LINES = 50


def return_type(signature: str | None) -> str | None:
    """Return the leading return type of a C# member signature."""
    if not signature:
        return None
    stripped = _ACCESS_PREFIX_RE.sub("", signature)
    match = _RETURN_TYPE_RE.match(stripped)
    return match.group(1) if match else None


def is_task_type(type_name: str | None) -> bool:
    if not type_name:
        return False
    return _TASK_TYPE_RE.match(type_name) is not None


class CSharpRules(LanguageRules):
    """Task/ValueTask unwrapping plus the C# primitive and collection tables."""

    type_rules = TYPE_RULES
    aggregate_icon_key = "object"

    def normalize(self, type_name: str) -> str:
        normalized = super().normalize(type_name)
        if normalized.endswith("?"):
            normalized = normalized[:-1]
        return normalized

    def returns_async(self, signature: str) -> bool:
        if _RETURNS_TASK_RE.search(signature):
            return True
        if _ASYNC_KEYWORD_RE.search(signature):
            return True
        return is_task_type(return_type(signature))

    def async_result_type(self, signature: str) -> str | None:
        """Return the ``T`` of the outermost async wrapper in ``signature``."""
        match = _WRAPPER_RE.search(signature)
        if match is None:
            return None
        return extract_generic_argument(signature[match.start() :], match.group(1))

    def common_indicators(
        self,
        entry: SymbolEntry,
        features: Mapping[str, bool] | None = None,
    ) -> list[Indicator]:
        indicators = super().common_indicators(entry, features)
        if not feature_enabled(features, "show_async_indicators"):
            indicators = [indicator for indicator in indicators if indicator is not Indicator.ASYNC]
        return indicators


RULES = CSharpRules()
