"""Language profile registry.

A profile bundles everything the rest of the package needs to know about one
language: how to recognise its files, how to clean symbol names, where its
namespace/package declaration lives, and which inference rules apply.
Adding a language means building a :class:`LanguageProfile` and passing it to
:func:`register_profile`.
"""

from __future__ import annotations

import fnmatch
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePath

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

from ..symbols_types import SymbolKind
from . import csharp, go
from .base import LanguageRules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LanguageProfile:
    """Static description of one supported language."""

    name: str
    display_name: str
    filetypes: tuple[str, ...]
    file_patterns: tuple[str, ...]
    file_extensions: tuple[str, ...]
    lsp_clients: tuple[str, ...]
    treesitter_languages: tuple[str, ...]
    lexer_aliases: tuple[str, ...]
    declaration_scan_lines: int
    declaration_patterns: tuple[re.Pattern[str], ...]
    declaration_node_types: frozenset[str]
    symbol_node_kind: Callable[[object], SymbolKind | None]
    rules: LanguageRules

    def matches_file(self, file_identifier: str) -> bool:
        """Return whether the file name matches one of ``file_patterns``."""
        name = PurePath(file_identifier).name
        return any(fnmatch.fnmatch(name.lower(), pattern.lower()) for pattern in self.file_patterns)

    def matches_lsp_client(self, client_name: str) -> bool:
        folded = client_name.casefold()
        return any(pattern.casefold() in folded for pattern in self.lsp_clients)


def _csharp_node_kind(node) -> SymbolKind | None:
    return csharp.SYMBOL_NODE_KINDS.get(node.type)


CSHARP = LanguageProfile(
    name="csharp",
    display_name="C#",
    filetypes=("cs", "csharp"),
    file_patterns=("*.cs",),
    file_extensions=(".cs", ".vb", ".fs"),
    lsp_clients=("omnisharp", "csharp"),
    treesitter_languages=("c_sharp", "csharp"),
    lexer_aliases=("csharp", "c#", "cs"),
    declaration_scan_lines=csharp.DECLARATION_SCAN_LINES,
    declaration_patterns=csharp.DECLARATION_PATTERNS,
    declaration_node_types=csharp.DECLARATION_NODE_TYPES,
    symbol_node_kind=_csharp_node_kind,
    rules=csharp.RULES,
)

GO = LanguageProfile(
    name="go",
    display_name="Go",
    filetypes=("go",),
    file_patterns=("*.go",),
    file_extensions=(".go",),
    lsp_clients=("gopls",),
    treesitter_languages=("go",),
    lexer_aliases=("go", "golang"),
    declaration_scan_lines=go.DECLARATION_SCAN_LINES,
    declaration_patterns=go.DECLARATION_PATTERNS,
    declaration_node_types=go.DECLARATION_NODE_TYPES,
    symbol_node_kind=go.node_symbol_kind,
    rules=go.RULES,
)

_PROFILES: dict[str, LanguageProfile] = {}


def register_profile(profile: LanguageProfile) -> None:
    """Add or replace a profile under ``profile.name``."""
    _PROFILES[profile.name] = profile


def get_profile(name: str | None) -> LanguageProfile | None:
    if not name:
        return None
    return _PROFILES.get(name)


def is_supported(name: str | None) -> bool:
    return get_profile(name) is not None


def all_profiles() -> list[LanguageProfile]:
    return list(_PROFILES.values())


def all_file_patterns() -> list[str]:
    """Flatten ``file_patterns`` of every registered profile."""
    patterns: list[str] = []
    for profile in _PROFILES.values():
        patterns.extend(profile.file_patterns)
    return patterns


def _profile_for_filetype(filetype: str) -> LanguageProfile | None:
    folded = filetype.casefold()
    for profile in _PROFILES.values():
        if folded in profile.filetypes:
            return profile
    return None


def _profile_for_lexer(file_identifier: str) -> LanguageProfile | None:
    """Resolve through Pygments' filename registry as a last resort."""
    try:
        lexer = get_lexer_for_filename(PurePath(file_identifier).name)
    except ClassNotFound:
        return None
    aliases = {alias.casefold() for alias in getattr(lexer, "aliases", ())}
    for profile in _PROFILES.values():
        if aliases.intersection(profile.lexer_aliases):
            return profile
    return None


def classify(
    file_identifier: str | None,
    filetype: str | None = None,
    force: str | None = None,
) -> LanguageProfile | None:
    """Return the profile for a buffer, or ``None`` when unsupported.

    Resolution order: ``force`` (a profile name from config), the editor
    filetype tag, the file pattern, then Pygments lexer aliases.
    """
    if force:
        forced = get_profile(force)
        if forced is not None:
            return forced
        logger.warning("Ignoring unknown forced language %r", force)

    if filetype:
        profile = _profile_for_filetype(filetype)
        if profile is not None:
            return profile

    if not file_identifier:
        return None

    for profile in _PROFILES.values():
        if profile.matches_file(file_identifier):
            return profile

    profile = _profile_for_lexer(file_identifier)
    if profile is None:
        logger.debug("No language profile for %s", file_identifier)
    return profile


register_profile(CSHARP)
register_profile(GO)

__all__ = [
    "CSHARP",
    "GO",
    "LanguageProfile",
    "all_file_patterns",
    "all_profiles",
    "classify",
    "get_profile",
    "is_supported",
    "register_profile",
]
