"""Display metadata inference for flattened symbols.

Icons are chosen by the first rule that applies:

1. async unwrapping (``Task<T>`` classifies ``T``; bare wrappers get ``task``)
2. ambiguous ``object``/``unknown`` kinds whose signature names a type keyword
3. language structural overrides (Go interfaces, structs, errors, channels)
4. the language type table applied to the whole signature
5. the symbol kind

Indicators are computed independently of the icon. Nothing here raises on
odd signatures; unreadable text simply falls through to the kind icon.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from .icons import DEFAULT_ICON_SET, kind_icon_key
from .languages import LanguageProfile
from .languages.base import feature_enabled
from .symbols_types import DisplayMetadata, SymbolEntry, SymbolKind

_TYPE_KEYWORD_RE = re.compile(r"class|interface|struct")
_AMBIGUOUS_KINDS = frozenset({SymbolKind.OBJECT, SymbolKind.UNKNOWN})


def _async_icon_key(signature: str, profile: LanguageProfile, icon_set: Mapping[str, str]) -> str:
    inner = profile.rules.async_result_type(signature)
    if inner is None:
        return "task"
    icon_key = profile.rules.classify_type(inner) or "task"
    if icon_key not in icon_set:
        return "task"
    return icon_key


def infer_icon_key(
    entry: SymbolEntry,
    profile: LanguageProfile | None,
    icon_set: Mapping[str, str] | None = None,
    features: Mapping[str, bool] | None = None,
) -> str:
    icons = DEFAULT_ICON_SET if icon_set is None else icon_set
    signature = entry.signature or ""

    if profile is not None and signature and feature_enabled(features, "show_task_types"):
        if profile.rules.returns_async(signature):
            return _async_icon_key(signature, profile, icons)

    if entry.kind in _AMBIGUOUS_KINDS and _TYPE_KEYWORD_RE.search(signature):
        return "class"

    if profile is None:
        return kind_icon_key(entry.kind)

    structural = profile.rules.structural_icon(entry, features)
    if structural is not None:
        return structural

    if signature:
        table_key = profile.rules.classify_type(signature, strict=True)
        if table_key is not None:
            return table_key

    return kind_icon_key(entry.kind)


def infer_display(
    entry: SymbolEntry,
    profile: LanguageProfile | None,
    icon_set: Mapping[str, str] | None = None,
    features: Mapping[str, bool] | None = None,
) -> DisplayMetadata:
    """Compute the icon key and indicators for one entry.

    ``features`` holds the per-language toggles from config; a missing toggle
    counts as enabled.
    """
    icon_key = infer_icon_key(entry, profile, icon_set, features)
    indicators = profile.rules.indicators(entry, features) if profile is not None else []
    return DisplayMetadata(icon_key=icon_key, indicators=tuple(indicators))
