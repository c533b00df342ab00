"""Render instructions for the listing and the fuzzy picker.

Nothing here draws; frames are plain data handed to a presentation sink.
Display metadata is recomputed on every build and never cached on entries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath

from .config import SharpieConfig
from .icons import icon_glyph, indicator_glyphs
from .inference import infer_display
from .languages import LanguageProfile
from .navigation import Mode, NavigationState
from .symbols_types import Indicator, SymbolEntry

_SEPARATOR_TEMPLATES = {
    "line": "── {name} ──",
    "box": "┌─ {name} ─┐",
    "bold": "━━ {name} ━━",
}
_ACCESS_MODIFIER_RE = re.compile(r"\b(?:public|private|protected|internal)\s+")


@dataclass(frozen=True)
class RenderRow:
    icon_key: str
    icon: str
    indicators: tuple[Indicator, ...]
    indicator_glyphs: tuple[str, ...]
    formatted_path: str
    file_location: str | None = None
    separator: bool = False

    @property
    def text(self) -> str:
        if self.separator:
            return self.formatted_path
        parts = [self.icon]
        glyphs = [glyph for glyph in self.indicator_glyphs if glyph]
        if glyphs:
            parts.append("(" + " ".join(glyphs) + ")")
        parts.append(self.formatted_path)
        if self.file_location:
            parts.append(f"[{self.file_location}]")
        return " ".join(part for part in parts if part)


@dataclass(frozen=True)
class RenderFrame:
    """Rows to show, the 1-based highlighted row (``0`` for none), and the prompt."""

    rows: tuple[RenderRow, ...]
    cursor: int
    prompt: str | None = None

    def lines(self) -> list[str]:
        return [row.text for row in self.rows]


def format_symbol_path(qualified_name: str, depth: int) -> str:
    """Trim a qualified name to the configured display depth.

    ``0`` keeps the name, ``1`` adds its parent, ``2`` keeps the last three
    segments, and ``3`` or more shows the full path.
    """
    parts = qualified_name.split(".")
    if depth <= 0:
        return parts[-1]
    if depth == 1:
        return ".".join(parts[-2:])
    if depth == 2:
        return ".".join(parts[-3:])
    return qualified_name


def separator_row(file: str | None, style: str) -> RenderRow:
    name = PurePath(file).name if file else "?"
    template = _SEPARATOR_TEMPLATES.get(style, _SEPARATOR_TEMPLATES["line"])
    return RenderRow(
        icon_key="file",
        icon="",
        indicators=(),
        indicator_glyphs=(),
        formatted_path=template.format(name=name),
        separator=True,
    )


def build_row(
    entry: SymbolEntry,
    profile: LanguageProfile | None,
    config: SharpieConfig,
    current_file: str | None = None,
) -> RenderRow:
    features = config.features_for(profile.name if profile is not None else None)
    metadata = infer_display(entry, profile, config.icon_set, features)
    file_location = None
    if config.show_file_location and entry.source_location and entry.source_location != current_file:
        file_location = PurePath(entry.source_location).name
    return RenderRow(
        icon_key=metadata.icon_key,
        icon=icon_glyph(metadata.icon_key, config.icon_set),
        indicators=metadata.indicators,
        indicator_glyphs=indicator_glyphs(metadata.indicators),
        formatted_path=format_symbol_path(entry.qualified_name, config.path_depth),
        file_location=file_location,
    )


def build_render_frame(state: NavigationState, config: SharpieConfig) -> RenderFrame:
    """Build rows for the active index.

    In namespace mode a separator row precedes each run of entries from the
    same source file; the cursor is translated to account for them.
    """
    rows: list[RenderRow] = []
    cursor_row = 0
    previous_file: object = object()
    for position, entry in enumerate(state.active_index, start=1):
        if state.namespace_mode:
            source = entry.source_location or state.file
            if source != previous_file:
                rows.append(separator_row(source, config.separator_style))
                previous_file = source
        rows.append(build_row(entry, state.profile, config, state.file))
        if position == state.cursor_index:
            cursor_row = len(rows)

    prompt = config.filter_prompt + state.filter_query if state.mode is Mode.FILTER else None
    return RenderFrame(rows=tuple(rows), cursor=cursor_row, prompt=prompt)


def display_signature(signature: str | None, features: dict[str, bool]) -> str:
    if not signature:
        return ""
    if features.get("show_access_modifiers", True):
        return signature
    return _ACCESS_MODIFIER_RE.sub("", signature).strip()


def format_picker_entry(entry: SymbolEntry, profile: LanguageProfile | None, config: SharpieConfig) -> str:
    """Label used by fuzzy pickers: ``<icon> <qualified name> <signature>``."""
    features = config.features_for(profile.name if profile is not None else None)
    metadata = infer_display(entry, profile, config.icon_set, features)
    parts = [icon_glyph(metadata.icon_key, config.icon_set), entry.qualified_name]
    signature = display_signature(entry.signature, features)
    if signature:
        parts.append(signature)
    return " ".join(parts)
