"""Navigator controller: the browse/filter state machine and refresh pipeline.

One :class:`SymbolNavigatorOps` instance drives one session. It owns a
:class:`~sharpie.navigation.NavigationState`, talks to its collaborators
only through :class:`SymbolNavigatorDeps`, and never raises for provider
failures: those are logged and left in ``state.status_message`` while the
previous index stays in place.

Mode transitions:

- Navigate -> Filter: :meth:`begin_filter` (query reset to empty).
- Filter -> Navigate: :meth:`accept_filter` / :meth:`dismiss_filter` keep the
  query, :meth:`cancel_filter` clears it.

Fetches are coroutines. Each buffer switch bumps a generation counter; a
fetch that completes under an older generation is discarded.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from .config import FUZZY_FINDERS, SharpieConfig
from .debounce import DebounceTimer
from .errors import ProviderUnavailable, SymbolProviderError
from .flatten import flatten, flatten_workspace_symbols
from .languages import classify
from .logging_setup import trace
from .namespace import detect_declaration, matches
from .navigation import JumpInstruction, Mode, NavigationState
from .providers import FuzzyFinderSink, PresentationSink, SymbolProvider, SyntaxTreeFallback
from .render import build_render_frame, format_picker_entry
from .symbols_types import Position, SymbolEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SymbolNavigatorDeps:
    """Collaborators required by :class:`SymbolNavigatorOps`."""

    provider: SymbolProvider | None
    sink: PresentationSink
    config: SharpieConfig = field(default_factory=SharpieConfig)
    provider_name: str | None = None
    read_buffer_text: Callable[[object], str | None] | None = None
    syntax_fallback: SyntaxTreeFallback | None = None
    fuzzy_finders: Mapping[str, FuzzyFinderSink] = field(default_factory=dict)
    cursor_position: Callable[[], Position | None] | None = None
    monotonic: Callable[[], float] = time.monotonic
    state: NavigationState | None = None


class SymbolNavigatorOps:
    """Stateful controller for one navigator session."""

    def __init__(self, deps: SymbolNavigatorDeps) -> None:
        self.config = deps.config
        self.provider = deps.provider
        self.provider_name = deps.provider_name
        self.sink = deps.sink
        self.read_buffer_text = deps.read_buffer_text
        self.syntax_fallback = deps.syntax_fallback
        self.fuzzy_finders = dict(deps.fuzzy_finders)
        self.cursor_position = deps.cursor_position
        self.state = deps.state or NavigationState(namespace_mode=self.config.namespace_mode)
        self.timer = DebounceTimer(self.config.debounce_seconds, deps.monotonic)
        self.generation = 0
        self.refresh_ticket = 0
        self.visible = False

    @property
    def is_visible(self) -> bool:
        return self.visible

    # Presentation

    def _report(self, message: str, level: int = logging.WARNING) -> None:
        self.state.status_message = message
        logger.log(level, message)

    def render(self) -> None:
        if not self.visible:
            return
        self.sink.render(build_render_frame(self.state, self.config))

    def _jump_to_entry(self, entry: SymbolEntry | None) -> None:
        if entry is None:
            return
        instruction = JumpInstruction.for_entry(entry, self.state.file)
        if instruction is None:
            logger.debug("Symbol %s has no position to jump to", entry.qualified_name)
            return
        self.sink.jump(instruction)

    def _provider_ready(self) -> bool:
        """Check a provider is attached and, when named, serves the buffer's language."""
        if self.provider is None:
            self._report(str(ProviderUnavailable()))
            return False
        profile = self.state.profile
        if self.provider_name and profile is not None and not profile.matches_lsp_client(self.provider_name):
            self._report(f"{self.provider_name} does not serve {profile.display_name} buffers")
            return False
        return True

    # Lifecycle

    def _track_buffer(self, buffer_id: object, file: str | None, filetype: str | None) -> bool:
        """Point the state at a buffer, resetting per-buffer state on change."""
        profile = classify(file, filetype, force=self.config.language_force)
        changed = buffer_id != self.state.buffer_id or file != self.state.file
        if changed:
            self.generation += 1
            self.timer.cancel()
            self.state.buffer_id = buffer_id
            self.state.file = file
            self.state.mode = Mode.NAVIGATE
            self.state.filter_query = ""
            self.state.namespace = None
            self.state.clear_references()
            self.state.replace_full_index([])
        self.state.profile = profile
        if profile is None:
            self._report(f"Unsupported file type: {file}")
            return False
        return True

    async def show(self, buffer_id: object, file: str | None, filetype: str | None = None) -> bool:
        """Open the listing for a buffer and load its symbols."""
        if not self._track_buffer(buffer_id, file, filetype):
            return False
        self.visible = True
        if not await self.refresh(force=True):
            self.render()
        return True

    def hide(self) -> None:
        if not self.visible:
            return
        self.visible = False
        self.timer.cancel()
        self.sink.close()

    # Filtering

    def _reset_query(self) -> None:
        """Drop the query, keeping the cursor on the same symbol."""
        current = self.state.current_entry()
        self.state.set_filter_query("")
        if current is None:
            return
        for position, entry in enumerate(self.state.active_index, start=1):
            if entry.qualified_name == current.qualified_name:
                self.state.cursor_index = position
                break

    def begin_filter(self) -> None:
        self._reset_query()
        self.state.mode = Mode.FILTER
        if self.state.cursor_index < 1 and self.state.active_index:
            self.state.cursor_index = 1
        self.render()

    def append_filter_char(self, char: str) -> None:
        if self.state.mode is not Mode.FILTER or not char:
            return
        self.state.set_filter_query(self.state.filter_query + char)
        trace(logger, "Filter %r matches %d symbols", self.state.filter_query, len(self.state.filtered_index))
        self.render()

    def backspace_filter(self) -> None:
        if self.state.mode is not Mode.FILTER or not self.state.filter_query:
            return
        self.state.set_filter_query(self.state.filter_query[:-1])
        self.render()

    def accept_filter(self) -> None:
        if self.state.mode is not Mode.FILTER:
            return
        self.state.mode = Mode.NAVIGATE
        self.state.clamp()
        self.render()

    def dismiss_filter(self) -> None:
        self.accept_filter()

    def cancel_filter(self) -> None:
        if self.state.mode is not Mode.FILTER:
            return
        self.state.mode = Mode.NAVIGATE
        self._reset_query()
        self.render()

    def clear_filter(self) -> None:
        """Cancel semantics from either mode."""
        self.state.mode = Mode.NAVIGATE
        self._reset_query()
        self.render()

    # Symbol navigation

    def next_symbol(self) -> SymbolEntry | None:
        entry = self.state.step(1)
        self._jump_to_entry(entry)
        self.render()
        return entry

    def prev_symbol(self) -> SymbolEntry | None:
        entry = self.state.step(-1)
        self._jump_to_entry(entry)
        self.render()
        return entry

    def select_symbol(self, index: int) -> SymbolEntry | None:
        entry = self.state.select(index)
        self._jump_to_entry(entry)
        self.render()
        return entry

    def jump_to_current(self) -> SymbolEntry | None:
        entry = self.state.current_entry()
        self._jump_to_entry(entry)
        return entry

    # References

    def _reference_position(self) -> Position | None:
        if self.cursor_position is not None:
            position = self.cursor_position()
            if position is not None:
                return position
        entry = self.state.current_entry()
        return entry.jump_position() if entry is not None else None

    async def _load_references(self) -> None:
        if not self._provider_ready():
            return
        position = self._reference_position()
        if position is None:
            self._report("No symbol selected", logging.INFO)
            return
        generation = self.generation
        buffer_id = self.state.buffer_id
        try:
            references = await self.provider.fetch_references(buffer_id, position)
        except SymbolProviderError as exc:
            self._report(f"Error getting references: {exc}")
            return
        if generation != self.generation or buffer_id != self.state.buffer_id:
            logger.debug("Discarding stale reference fetch for %s", buffer_id)
            return
        self.state.set_references(references)
        if references:
            self._report(f"Found {len(references)} references", logging.INFO)
        else:
            self._report("No references found", logging.INFO)

    async def _step_reference(self, delta: int):
        if not self.state.reference_list:
            # The first request only loads the list.
            await self._load_references()
            return None
        reference = self.state.step_reference(delta)
        if reference is not None:
            self.sink.jump(JumpInstruction.for_reference(reference))
        return reference

    async def next_reference(self):
        return await self._step_reference(1)

    async def prev_reference(self):
        return await self._step_reference(-1)

    # Scope and search

    async def toggle_namespace_scope(self) -> bool:
        self.state.namespace_mode = not self.state.namespace_mode
        await self.refresh(force=True)
        return self.state.namespace_mode

    def _fuzzy_finder(self) -> FuzzyFinderSink | None:
        preferred = self.fuzzy_finders.get(self.config.fuzzy_finder)
        if preferred is not None:
            return preferred
        for name in FUZZY_FINDERS:
            finder = self.fuzzy_finders.get(name)
            if finder is not None:
                logger.warning("Fuzzy finder %s not available, falling back to %s", self.config.fuzzy_finder, name)
                return finder
        return next(iter(self.fuzzy_finders.values()), None)

    def search(self, query: str = "") -> SymbolEntry | None:
        """Hand the full index to the fuzzy finder and jump to its pick."""
        entries = list(self.state.full_index)
        if not entries:
            self._report("No symbols to search")
            return None
        finder = self._fuzzy_finder()
        if finder is None:
            self._report("No fuzzy finder available", logging.ERROR)
            return None
        profile = self.state.profile
        selected = finder.pick(entries, lambda entry: format_picker_entry(entry, profile, self.config), query)
        if selected is None:
            return None
        for position, entry in enumerate(self.state.active_index, start=1):
            if entry == selected:
                self.state.cursor_index = position
                break
        self._jump_to_entry(selected)
        self.render()
        return selected

    # Refresh pipeline

    def notify_content_changed(self) -> None:
        if not self.config.auto_reload or self.state.buffer_id is None:
            return
        self.timer.arm()

    async def notify_saved(self) -> bool:
        self.timer.cancel()
        if self.state.buffer_id is None:
            return False
        return await self.refresh()

    async def notify_buffer_switched(self, buffer_id: object, file: str | None, filetype: str | None = None) -> bool:
        """Track a new buffer: clears the query and always fetches."""
        self.timer.cancel()
        self.state.mode = Mode.NAVIGATE
        self.state.set_filter_query("")
        if not self._track_buffer(buffer_id, file, filetype):
            self.render()
            return False
        refreshed = await self.refresh(force=True)
        if not refreshed:
            self.render()
        return refreshed

    async def poll(self) -> bool:
        """Fire a due debounce timer; returns whether the index was refreshed."""
        if not self.timer.due():
            return False
        return await self.refresh()

    def _is_stale(self, generation: int, ticket: int, buffer_id: object) -> bool:
        """A fetch is stale once the buffer changed or a newer refresh started."""
        if generation != self.generation or ticket != self.refresh_ticket or buffer_id != self.state.buffer_id:
            logger.debug("Discarding stale symbol fetch for %s", buffer_id)
            return True
        return False

    async def refresh(self, force: bool = False) -> bool:
        """Re-fetch, re-flatten, and replace the full index.

        Without ``force`` a hidden navigator is left alone. Returns whether
        the index was replaced.
        """
        if not force and not self.visible:
            return False
        buffer_id = self.state.buffer_id
        profile = self.state.profile
        if buffer_id is None or profile is None:
            return False
        if not self._provider_ready():
            return False

        generation = self.generation
        self.refresh_ticket += 1
        ticket = self.refresh_ticket
        try:
            tree = await self.provider.fetch_document_symbols(buffer_id)
        except SymbolProviderError as exc:
            if not self._is_stale(generation, ticket, buffer_id):
                self._report(f"Error getting symbols: {exc}")
            return False
        if self._is_stale(generation, ticket, buffer_id):
            return False

        self.state.status_message = ""
        entries = flatten(tree, profile, source_location=self.state.file)
        if self.state.namespace_mode:
            entries = await self._namespace_entries(entries)
            if self._is_stale(generation, ticket, buffer_id):
                return False

        self.state.replace_full_index(entries)
        if not entries:
            self.state.status_message = "No symbols found"
        logger.debug("Indexed %d symbols for %s", len(entries), buffer_id)
        self.render()
        return True

    def _detect_namespace(self) -> str | None:
        buffer_id = self.state.buffer_id
        text = self.read_buffer_text(buffer_id) if self.read_buffer_text is not None else None
        tree_lookup = None
        if self.syntax_fallback is not None:
            fallback = self.syntax_fallback

            def tree_lookup(_text, _profile):
                return fallback.parse_declaration_near(buffer_id)

        return detect_declaration(text or "", self.state.profile, tree_lookup=tree_lookup)

    async def _namespace_entries(self, document_entries: list[SymbolEntry]) -> list[SymbolEntry]:
        """Extend the file's entries with same-namespace symbols from other files.

        Degrades to the file's own entries when no namespace is declared or
        workspace symbols are unavailable.
        """
        namespace = self._detect_namespace()
        self.state.namespace = namespace
        if namespace is None:
            self._report("Namespace not detected; showing file symbols only", logging.INFO)
            return document_entries
        try:
            workspace = await self.provider.fetch_workspace_symbols(namespace)
        except SymbolProviderError as exc:
            self._report(f"Workspace symbols unavailable: {exc}", logging.INFO)
            return document_entries

        grouped: dict[str | None, list[SymbolEntry]] = {}
        for entry in flatten_workspace_symbols(workspace, self.state.profile):
            if entry.source_location == self.state.file:
                continue
            if not matches(entry.qualified_name, namespace):
                continue
            grouped.setdefault(entry.source_location, []).append(entry)
        combined = list(document_entries)
        for entries in grouped.values():
            combined.extend(entries)
        return combined
