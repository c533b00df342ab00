"""Shared pieces of per-language inference rules.

Each language module subclasses :class:`LanguageRules` and fills in its own
pattern tables. Every table here is a best-effort text heuristic over
language-server ``detail`` strings, not a type checker.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from ..symbols_types import Indicator, SymbolEntry

_WHITESPACE_RE = re.compile(r"\s+")
_STATIC_RE = re.compile(r"static")
_ASYNC_MARKER_RE = re.compile(r"async")


@dataclass(frozen=True)
class TypeRule:
    """One row of a type-classification table.

    A normalized type name matches when it equals one of ``names`` or when any
    of ``patterns`` matches it.
    """

    icon_key: str
    names: frozenset[str] = frozenset()
    patterns: tuple[re.Pattern[str], ...] = ()

    def matches(self, normalized: str) -> bool:
        if normalized in self.names:
            return True
        return any(pattern.search(normalized) for pattern in self.patterns)


def normalize_type_name(type_name: str) -> str:
    """Strip whitespace, case-fold, and drop leading pointer/reference sigils."""
    return _WHITESPACE_RE.sub("", type_name).casefold().lstrip("*&")


def extract_generic_argument(signature: str, wrapper: str) -> str | None:
    """Return the bracket-balanced ``T`` of ``wrapper<T>`` in ``signature``."""
    match = re.search(rf"{re.escape(wrapper)}\s*<", signature)
    if match is None:
        return None
    depth = 1
    start = match.end()
    for idx in range(start, len(signature)):
        char = signature[idx]
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
            if depth == 0:
                inner = signature[start:idx].strip()
                return inner or None
    return None


def feature_enabled(features: Mapping[str, bool] | None, name: str) -> bool:
    if features is None:
        return True
    return bool(features.get(name, True))


class LanguageRules:
    """Inference capabilities consulted by :func:`sharpie.inference.infer_display`.

    Subclasses override the tables and hooks; the defaults describe a language
    with no async wrappers and no structural overrides.
    """

    type_rules: tuple[TypeRule, ...] = ()
    aggregate_icon_key = "object"
    generic_pattern: re.Pattern[str] = re.compile(r"<.*>")

    def normalize(self, type_name: str) -> str:
        return normalize_type_name(type_name)

    def classify_type(self, type_name: str | None, *, strict: bool = False) -> str | None:
        """Map a type name onto an icon key.

        With ``strict`` an unrecognized name yields ``None``; otherwise it is
        treated as an aggregate and yields :attr:`aggregate_icon_key`.
        """
        if not type_name:
            return None if strict else self.aggregate_icon_key
        normalized = self.normalize(type_name)
        for rule in self.type_rules:
            if rule.matches(normalized):
                return rule.icon_key
        return None if strict else self.aggregate_icon_key

    def returns_async(self, signature: str) -> bool:
        return False

    def async_result_type(self, signature: str) -> str | None:
        return None

    def structural_icon(
        self,
        entry: SymbolEntry,
        features: Mapping[str, bool] | None = None,
    ) -> str | None:
        """Return a language-specific icon override, if any."""
        return None

    def common_indicators(
        self,
        entry: SymbolEntry,
        features: Mapping[str, bool] | None = None,
    ) -> list[Indicator]:
        signature = entry.signature or ""
        indicators: list[Indicator] = []
        if signature and (_ASYNC_MARKER_RE.search(signature) or self.returns_async(signature)):
            indicators.append(Indicator.ASYNC)
        if signature and _STATIC_RE.search(signature):
            indicators.append(Indicator.STATIC)
        if signature and self.generic_pattern.search(signature):
            indicators.append(Indicator.GENERIC)
        return indicators

    def indicators(
        self,
        entry: SymbolEntry,
        features: Mapping[str, bool] | None = None,
    ) -> list[Indicator]:
        return self.common_indicators(entry, features)
