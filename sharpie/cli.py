"""Command-line front door for sharpie.

Prints the symbol outline of one C# or Go file the way the navigator would
list it, using the bundled Tree-sitter provider in place of a language
server.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path

from .config import SharpieConfig, load_sharpie_config
from .controller import SymbolNavigatorDeps, SymbolNavigatorOps
from .inference import infer_display
from .languages import all_file_patterns, classify
from .logging_setup import configure_logging
from .namespace import detect_declaration
from .providers import TreeSitterSymbolProvider
from .render import RenderFrame
from .syntax_tree import read_text


class CollectingSink:
    """Presentation sink that keeps the last frame instead of drawing it."""

    def __init__(self) -> None:
        self.frame: RenderFrame | None = None
        self.jumps: list = []

    def render(self, frame: RenderFrame) -> None:
        self.frame = frame

    def jump(self, instruction) -> None:
        self.jumps.append(instruction)

    def close(self) -> None:
        self.frame = None


def _non_negative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


async def _collect_outline(path: Path, config: SharpieConfig, query: str | None) -> SymbolNavigatorOps:
    sink = CollectingSink()
    provider = TreeSitterSymbolProvider()
    ops = SymbolNavigatorOps(
        SymbolNavigatorDeps(
            provider=provider,
            sink=sink,
            config=config,
            read_buffer_text=lambda buffer_id: read_text(Path(str(buffer_id))),
            syntax_fallback=provider,
        )
    )
    await ops.show(str(path), str(path))
    if query:
        ops.begin_filter()
        for char in query:
            ops.append_filter_char(char)
        ops.accept_filter()
    return ops


def _json_rows(ops: SymbolNavigatorOps, config: SharpieConfig) -> list[dict[str, object]]:
    state = ops.state
    features = config.features_for(state.profile.name if state.profile is not None else None)
    rows: list[dict[str, object]] = []
    for entry in state.active_index:
        metadata = infer_display(entry, state.profile, config.icon_set, features)
        position = entry.jump_position()
        rows.append(
            {
                "qualified_name": entry.qualified_name,
                "kind": entry.kind.label,
                "signature": entry.signature,
                "icon_key": metadata.icon_key,
                "indicators": [indicator.value for indicator in metadata.indicators],
                "line": position.line + 1 if position is not None else None,
                "column": position.character if position is not None else None,
            }
        )
    return rows


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and print the outline of one file."""
    parser = argparse.ArgumentParser(
        prog="sharpie",
        description="List C# and Go symbols with inferred type icons.",
    )
    parser.add_argument("path", help="Source file to outline.")
    parser.add_argument("--filter", dest="query", default=None, help="Only show symbols containing this text.")
    parser.add_argument(
        "--depth",
        type=_non_negative_int,
        default=None,
        help="Qualified-name display depth (0: name only, 3: full path).",
    )
    parser.add_argument("--namespace", action="store_true", help="Print the declared namespace/package and exit.")
    parser.add_argument("--json", action="store_true", help="Emit symbols as JSON.")
    parser.add_argument("--log-level", default=None, help="TRACE, DEBUG, INFO, WARN, ERROR, or FATAL.")
    args = parser.parse_args(argv)

    config = load_sharpie_config()
    if args.depth is not None:
        config = replace(config, path_depth=args.depth)
    configure_logging(
        args.log_level or config.log_level,
        log_file=config.log_path if config.logging_enabled else None,
        max_bytes=config.log_max_bytes,
        fmt=config.log_format,
        console=config.log_console or args.log_level is not None,
    )

    path = Path(args.path)
    if not path.is_file():
        parser.exit(2, f"Path not found: {path}\n")
    profile = classify(str(path), force=config.language_force)
    if profile is None:
        parser.exit(2, f"Unsupported file type: {path} (expected {', '.join(all_file_patterns())})\n")

    if args.namespace:
        namespace = detect_declaration(read_text(path), profile)
        if namespace is None:
            parser.exit(1, "No namespace or package declared.\n")
        sys.stdout.write(namespace + "\n")
        return

    config = replace(config, namespace_mode=False)
    ops = asyncio.run(_collect_outline(path, config, args.query))
    if ops.state.status_message:
        sys.stderr.write(ops.state.status_message + "\n")

    if args.json:
        sys.stdout.write(json.dumps(_json_rows(ops, config), indent=2) + "\n")
        return

    frame = ops.sink.frame
    if frame is None:
        return
    for line in frame.lines():
        sys.stdout.write(line + "\n")


if __name__ == "__main__":
    main()
