"""Namespace/package detection and dot-boundary matching."""

from __future__ import annotations

import logging
from collections.abc import Callable
from itertools import islice

from .languages import LanguageProfile
from .syntax_tree import parse_declaration_near

logger = logging.getLogger(__name__)

TreeLookup = Callable[[str, LanguageProfile], "str | None"]


def scan_declaration(buffer_text: str, profile: LanguageProfile) -> str | None:
    """Match the profile's anchored declaration patterns line by line.

    Only the first ``profile.declaration_scan_lines`` lines are read.
    """
    for line in islice(buffer_text.splitlines(), profile.declaration_scan_lines):
        for pattern in profile.declaration_patterns:
            match = pattern.match(line)
            if match is not None:
                return match.group("name")
    return None


def detect_declaration(
    buffer_text: str,
    profile: LanguageProfile | None,
    tree_lookup: TreeLookup | None = parse_declaration_near,
) -> str | None:
    """Return the namespace or package a buffer declares, ``None`` if absent.

    The syntax-tree lookup runs first; the regex scan covers buffers the
    parser cannot handle or when no grammar is installed.
    """
    if profile is None:
        return None

    if tree_lookup is not None:
        try:
            declared = tree_lookup(buffer_text, profile)
        except Exception:
            logger.debug("Syntax-tree namespace lookup failed", exc_info=True)
            declared = None
        if declared:
            logger.info("Detected %s declaration %r via syntax tree", profile.display_name, declared)
            return declared

    declared = scan_declaration(buffer_text, profile)
    if declared:
        logger.info("Detected %s declaration %r via line scan", profile.display_name, declared)
        return declared

    logger.info("No namespace/package detected for %s buffer", profile.display_name)
    return None


def matches(qualified_name: str | None, namespace: str | None) -> bool:
    """Return whether ``qualified_name`` lies in ``namespace``.

    Equality or a ``namespace + "."`` prefix; ``Foo.ServicesHelper`` is not in
    ``Foo.Services``.
    """
    if not qualified_name or not namespace:
        return False
    return qualified_name == namespace or qualified_name.startswith(namespace + ".")

