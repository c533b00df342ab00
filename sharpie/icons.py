"""Icon keys, default glyphs, and kind-to-icon mapping."""

from __future__ import annotations

from collections.abc import Mapping

from .symbols_types import Indicator, SymbolKind

DEFAULT_ICON_SET: dict[str, str] = {
    "file": "\uea7b",
    "namespace": "\uea8b",
    "class": "\ueb5b",
    "method": "\uea8c",
    "property": "\ueb65",
    "field": "\ueb5f",
    "constructor": "\uea8c",
    "enum": "\uea95",
    "interface": "\ueb61",
    "struct": "\uea91",
    "event": "\uea86",
    "operator": "\ueb64",
    "type_parameter": "\uea92",
    "search": "\uea6d",
    "integer": "\uea90",
    "string": "󰀬",
    "boolean": "\uea8f",
    "array": "󰅪",
    "number": "\uea90",
    "null": "󰟢",
    "void": "󰟢",
    "object": "\ueb63",
    "dictionary": "\ueb0f",
    "key": "\uea93",
    "task": "⏳",
    "slice": "󰅪",
    "map": "\ueb0f",
    "channel": "󰘖",
    "error": "\uea87",
}

DEFAULT_INDICATOR_GLYPHS: dict[Indicator, str] = {
    Indicator.ASYNC: "\uea77",
    Indicator.STATIC: "\ueb2b",
    Indicator.GENERIC: "<>",
    Indicator.UNEXPORTED: "\uea75",
    Indicator.POINTER_RECEIVER: "\uea9c",
    Indicator.GOROUTINE: "󰟓",
    Indicator.CHANNEL_SEND: "\ueaa1",
    Indicator.CHANNEL_RECEIVE: "\uea9a",
    Indicator.CHANNEL_BIDIRECTIONAL: "󰘖",
    Indicator.RETURNS_ERROR: "\uea6c",
}

_ICON_KEY_BY_KIND: dict[SymbolKind, str] = {
    SymbolKind.FILE: "file",
    SymbolKind.MODULE: "namespace",
    SymbolKind.NAMESPACE: "namespace",
    SymbolKind.PACKAGE: "namespace",
    SymbolKind.CLASS: "class",
    SymbolKind.METHOD: "method",
    SymbolKind.PROPERTY: "property",
    SymbolKind.FIELD: "field",
    SymbolKind.CONSTRUCTOR: "constructor",
    SymbolKind.ENUM: "enum",
    SymbolKind.INTERFACE: "interface",
    SymbolKind.FUNCTION: "method",
    SymbolKind.VARIABLE: "field",
    SymbolKind.CONSTANT: "field",
    SymbolKind.STRING: "string",
    SymbolKind.NUMBER: "number",
    SymbolKind.BOOLEAN: "boolean",
    SymbolKind.ARRAY: "array",
    SymbolKind.OBJECT: "object",
    SymbolKind.KEY: "key",
    SymbolKind.NULL: "null",
    SymbolKind.ENUM_MEMBER: "field",
    SymbolKind.STRUCT: "struct",
    SymbolKind.EVENT: "event",
    SymbolKind.OPERATOR: "operator",
    SymbolKind.TYPE_PARAMETER: "type_parameter",
}


def kind_icon_key(kind: SymbolKind) -> str:
    """Return the icon key for a symbol kind, ``object`` when unmapped."""
    return _ICON_KEY_BY_KIND.get(kind, "object")


def icon_glyph(icon_key: str, icon_set: Mapping[str, str] | None = None) -> str:
    icons = DEFAULT_ICON_SET if icon_set is None else icon_set
    glyph = icons.get(icon_key)
    if glyph is None:
        glyph = icons.get("object", "")
    return glyph


def indicator_glyphs(indicators, glyphs: Mapping[Indicator, str] | None = None) -> tuple[str, ...]:
    table = DEFAULT_INDICATOR_GLYPHS if glyphs is None else glyphs
    return tuple(table.get(indicator, "") for indicator in indicators)
