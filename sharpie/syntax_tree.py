"""Tree-sitter helpers: outline symbols and namespace/package declarations.

Parsers are loaded lazily from whichever Tree-sitter grammar bundle is
installed. When none is, outline extraction degrades to line regexes and
declaration lookup returns ``None`` so callers fall back to text scanning.
"""

from __future__ import annotations

import importlib
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .languages import LanguageProfile
from .logging_setup import trace
from .symbols_types import HierarchicalSymbol, Position, Span, SymbolKind

logger = logging.getLogger(__name__)

MISSING_PARSER_ERROR = "Tree-sitter parser package not found. Install tree-sitter-language-pack."
GRAMMAR_PACKAGES = ("tree_sitter_languages", "tree_sitter_language_pack")
MAX_SYMBOLS = 4000

IDENTIFIER_NODE_TYPES = {
    "identifier",
    "type_identifier",
    "field_identifier",
    "package_identifier",
    "qualified_name",
}
_DETAIL_FROM_TYPE_NODE_TYPES = {
    "field_declaration",
    "event_field_declaration",
    "property_declaration",
    "const_spec",
    "var_spec",
}
# Function bodies hold locals, not outline symbols.
_OPAQUE_NODE_TYPES = {"block"}
_HEADER_END_RE = re.compile(r"\{|=>|;")

_FALLBACK_PATTERNS_BY_LANGUAGE: dict[str, tuple[tuple[SymbolKind, re.Pattern[str]], ...]] = {
    "csharp": (
        (SymbolKind.NAMESPACE, re.compile(r"^\s*namespace\s+(?P<name>[\w.]+)")),
        (
            SymbolKind.INTERFACE,
            re.compile(r"^\s*(?:(?:public|private|protected|internal|partial)\s+)*interface\s+(?P<name>\w+)"),
        ),
        (
            SymbolKind.STRUCT,
            re.compile(r"^\s*(?:(?:public|private|protected|internal|readonly|partial|ref)\s+)*struct\s+(?P<name>\w+)"),
        ),
        (
            SymbolKind.ENUM,
            re.compile(r"^\s*(?:(?:public|private|protected|internal)\s+)*enum\s+(?P<name>\w+)"),
        ),
        (
            SymbolKind.CLASS,
            re.compile(
                r"^\s*(?:(?:public|private|protected|internal|static|sealed|abstract|partial)\s+)*"
                r"(?:class|record)\s+(?P<name>\w+)"
            ),
        ),
        (
            SymbolKind.METHOD,
            re.compile(
                r"^\s*(?:(?:public|private|protected|internal|static|virtual|override|async|sealed|abstract|new)\s+)+"
                r"[\w<>\[\],.?]+\s+(?P<name>\w+)\s*(?:<[^>]*>)?\s*\("
            ),
        ),
    ),
    "go": (
        (SymbolKind.PACKAGE, re.compile(r"^\s*package\s+(?P<name>\w+)")),
        (SymbolKind.STRUCT, re.compile(r"^\s*type\s+(?P<name>[A-Za-z_]\w*)\s+struct\b")),
        (SymbolKind.INTERFACE, re.compile(r"^\s*type\s+(?P<name>[A-Za-z_]\w*)\s+interface\b")),
        (SymbolKind.METHOD, re.compile(r"^\s*func\s+\([^)]*\)\s*(?P<name>[A-Za-z_]\w*)\s*[\[(]")),
        (SymbolKind.FUNCTION, re.compile(r"^\s*func\s+(?P<name>[A-Za-z_]\w*)\s*[\[(]")),
    ),
}


@dataclass
class _Builder:
    """Mutable accumulator for one symbol while its subtree is walked."""

    name: str
    kind: SymbolKind
    detail: str | None
    range: Span
    selection_range: Span
    children: list[_Builder]

    def freeze(self) -> HierarchicalSymbol:
        return HierarchicalSymbol(
            name=self.name,
            kind=self.kind,
            detail=self.detail,
            range=self.range,
            selection_range=self.selection_range,
            children=tuple(child.freeze() for child in self.children),
        )


def read_text(path: Path) -> str:
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


@lru_cache(maxsize=32)
def _load_parser(language_name: str):
    """Return ``(parser, error_message)`` for one grammar name.

    Grammar packages are tried in ``GRAMMAR_PACKAGES`` order; an installed
    package that fails to build the parser is reported, a missing one is
    skipped.
    """
    first_error: str | None = None
    for package in GRAMMAR_PACKAGES:
        try:
            get_parser = importlib.import_module(package).get_parser
        except ModuleNotFoundError:
            continue
        try:
            return get_parser(language_name), None
        except Exception as exc:
            logger.debug("%s could not load %s: %s", package, language_name, exc)
            if first_error is None:
                first_error = f"Failed to load Tree-sitter parser for {language_name}: {exc}"
    return None, first_error or MISSING_PARSER_ERROR


def load_parser(profile: LanguageProfile):
    """Return ``(parser, error_message)`` trying each grammar name of ``profile``."""
    first_error: str | None = None
    for language_name in profile.treesitter_languages:
        parser, error = _load_parser(language_name)
        if parser is not None:
            return parser, None
        if first_error is None:
            first_error = error
    return None, first_error or MISSING_PARSER_ERROR


def _node_text(source_bytes: bytes, node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _span(node) -> Span:
    start_row, start_col = node.start_point
    end_row, end_col = node.end_point
    return Span(
        start=Position(line=int(start_row), character=int(start_col)),
        end=Position(line=int(end_row), character=int(end_col)),
    )


def _name_node(node):
    """Find the node holding a declaration's name."""
    child = node.child_by_field_name("name")
    if child is not None:
        return child
    # C# fields and events wrap their names in a variable declaration.
    for declaration in node.named_children:
        if declaration.type != "variable_declaration":
            continue
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            nested = declarator.child_by_field_name("name")
            if nested is not None:
                return nested
            for part in declarator.named_children:
                if part.type == "identifier":
                    return part
    for child in node.named_children:
        if child.type in IDENTIFIER_NODE_TYPES:
            return child
    return None


def _type_node(node):
    child = node.child_by_field_name("type")
    if child is not None:
        return child
    for declaration in node.named_children:
        if declaration.type == "variable_declaration":
            return declaration.child_by_field_name("type")
    return None


def _detail(source_bytes: bytes, node) -> str | None:
    """Approximate a language server ``detail`` string from source text."""
    if node.type in _DETAIL_FROM_TYPE_NODE_TYPES:
        type_node = _type_node(node)
        if type_node is not None:
            return _normalize_whitespace(_node_text(source_bytes, type_node)) or None
    header = _node_text(source_bytes, node)
    match = _HEADER_END_RE.search(header)
    if match is not None:
        header = header[: match.start()]
    return _normalize_whitespace(header) or None


def parse_source(source: str, profile: LanguageProfile):
    """Parse ``source``; returns ``(tree, source_bytes, error_message)``."""
    parser, parser_error = load_parser(profile)
    source_bytes = source.encode("utf-8", errors="replace")
    if parser is None:
        return None, source_bytes, parser_error
    try:
        return parser.parse(source_bytes), source_bytes, None
    except Exception as exc:
        return None, source_bytes, f"Tree-sitter parse failed: {exc}"


def parse_declaration_near(source: str, profile: LanguageProfile) -> str | None:
    """Return the namespace/package declared near the top of ``source``.

    Only top-level declaration nodes starting inside the profile's scan window
    are considered. ``None`` when no parser is available or nothing matches.
    """
    tree, source_bytes, error = parse_source(source, profile)
    if tree is None:
        logger.debug("Syntax-tree declaration lookup unavailable: %s", error)
        return None

    for node in tree.root_node.named_children:
        line, _column = node.start_point
        if int(line) >= profile.declaration_scan_lines:
            break
        if node.type not in profile.declaration_node_types:
            continue
        name_node = _name_node(node)
        if name_node is None:
            continue
        name = _normalize_whitespace(_node_text(source_bytes, name_node))
        if name:
            return name
    return None


def _collect_symbols_fallback(source: str, profile: LanguageProfile, max_symbols: int) -> list[HierarchicalSymbol]:
    """Collect a flat outline via language-specific regex patterns."""
    patterns = _FALLBACK_PATTERNS_BY_LANGUAGE.get(profile.name, ())
    symbols: list[HierarchicalSymbol] = []
    for line_idx, line in enumerate(source.splitlines()):
        for kind, pattern in patterns:
            match = pattern.match(line)
            if match is None:
                continue
            name = match.group("name")
            start = Position(line=line_idx, character=int(match.start("name")))
            end = Position(line=line_idx, character=int(match.end("name")))
            symbols.append(
                HierarchicalSymbol(
                    name=name,
                    kind=kind,
                    detail=_normalize_whitespace(line) or None,
                    range=Span(start=Position(line=line_idx, character=0), end=Position(line=line_idx, character=len(line))),
                    selection_range=Span(start=start, end=end),
                )
            )
            if len(symbols) >= max_symbols:
                return symbols
            break
    return symbols


def collect_tree_symbols(
    source: str,
    profile: LanguageProfile,
    max_symbols: int = MAX_SYMBOLS,
) -> tuple[list[HierarchicalSymbol], str | None]:
    """Build a hierarchical outline of ``source``.

    Returns ``(symbols, error_message)``. When the parser cannot be loaded or
    parsing fails, a regex fallback is used before surfacing an error.
    """
    tree, source_bytes, error = parse_source(source, profile)
    if tree is None:
        fallback_symbols = _collect_symbols_fallback(source, profile, max_symbols)
        if fallback_symbols:
            return fallback_symbols, None
        return [], error

    roots: list[_Builder] = []
    count = 0
    stack: list[tuple[object, list[_Builder]]] = [(tree.root_node, roots)]
    while stack and count < max_symbols:
        node, siblings = stack.pop()
        if node.type in _OPAQUE_NODE_TYPES:
            continue
        kind = profile.symbol_node_kind(node)
        target = siblings
        if kind is not None:
            name_node = _name_node(node)
            if name_node is not None:
                builder = _Builder(
                    name=_normalize_whitespace(_node_text(source_bytes, name_node)),
                    kind=kind,
                    detail=_detail(source_bytes, node),
                    range=_span(node),
                    selection_range=_span(name_node),
                    children=[],
                )
                siblings.append(builder)
                count += 1
                trace(logger, "Symbol %s %r at line %d", node.type, builder.name, builder.range.start.line + 1)
                target = builder.children
        for child in reversed(node.named_children):
            stack.append((child, target))

    return [builder.freeze() for builder in roots], None

