"""Persistent JSON config and the typed settings object built from it.

The JSON file mirrors the nested layout of :data:`DEFAULTS`; user values are
deep-merged over it. Unreadable files and mistyped values fall back to
defaults instead of raising.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .debounce import DEFAULT_DEBOUNCE_SECONDS
from .icons import DEFAULT_ICON_SET
from .logging_setup import DEFAULT_LOG_PATH, DEFAULT_MAX_BYTES

logger = logging.getLogger(__name__)

APP_NAME = "sharpie"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

FUZZY_FINDERS = ("telescope", "fzf")
SEPARATOR_STYLES = ("line", "box", "bold")

# Icon keys used by older configs.
_LEGACY_ICON_KEYS = {
    "go_slice": "slice",
    "go_map": "map",
    "go_channel": "channel",
    "go_interface": "interface",
    "go_struct": "struct",
    "go_error": "error",
}

DEFAULTS: dict[str, object] = {
    "fuzzy_finder": "telescope",
    "display": {
        "auto_reload": True,
        "auto_reload_debounce": int(DEFAULT_DEBOUNCE_SECONDS * 1000),
        "filter_prompt": "> ",
    },
    "style": {
        "icon_set": {},
    },
    "symbol_options": {
        "namespace": False,
        "path": 2,
        "show_file_location": True,
        "namespace_mode_separator_style": "line",
    },
    "language": {
        "force": None,
        "csharp": {
            "show_async_indicators": True,
            "show_access_modifiers": True,
            "show_task_types": True,
        },
        "go": {
            "show_receiver_types": True,
            "show_channel_direction": True,
            "show_exported_indicator": True,
            "detect_goroutine_funcs": True,
            "show_error_returns": True,
        },
    },
    "logging": {
        "enabled": True,
        "level": "INFO",
        "file": None,
        "console_output": False,
        "max_file_size": DEFAULT_MAX_BYTES,
        "format": "default",
    },
}


def deep_merge(target: dict[str, object], source: Mapping[str, object]) -> dict[str, object]:
    """Merge ``source`` into ``target`` recursively and return ``target``."""
    for key, value in source.items():
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            target[key] = deep_merge(existing, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def _section(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


def _as_bool(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _as_int(value: object, default: int, minimum: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return max(minimum, int(value))


def _as_choice(value: object, choices: tuple[str, ...], default: str) -> str:
    return value if isinstance(value, str) and value in choices else default


def _features(section: Mapping[str, object], defaults: Mapping[str, object]) -> dict[str, bool]:
    return {name: _as_bool(section.get(name), bool(default)) for name, default in defaults.items()}


def _icon_set(overrides: Mapping[str, object]) -> dict[str, str]:
    icons = dict(DEFAULT_ICON_SET)
    for key, glyph in overrides.items():
        if not isinstance(glyph, str):
            continue
        icons[_LEGACY_ICON_KEYS.get(key, key)] = glyph
    return icons


@dataclass(frozen=True)
class SharpieConfig:
    fuzzy_finder: str = "telescope"
    auto_reload: bool = True
    auto_reload_debounce_ms: int = int(DEFAULT_DEBOUNCE_SECONDS * 1000)
    filter_prompt: str = "> "
    namespace_mode: bool = False
    path_depth: int = 2
    show_file_location: bool = True
    separator_style: str = "line"
    icon_set: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ICON_SET))
    language_force: str | None = None
    language_features: dict[str, dict[str, bool]] = field(default_factory=dict)
    logging_enabled: bool = True
    log_level: str = "INFO"
    log_file: str | None = None
    log_console: bool = False
    log_max_bytes: int = DEFAULT_MAX_BYTES
    log_format: str = "default"

    @property
    def log_path(self) -> Path:
        """Configured log file, or the per-user default location."""
        return Path(self.log_file) if self.log_file else DEFAULT_LOG_PATH

    @property
    def debounce_seconds(self) -> float:
        return self.auto_reload_debounce_ms / 1000.0

    def features_for(self, language_name: str | None) -> dict[str, bool]:
        """Feature toggles for one language; unknown languages get none."""
        if not language_name:
            return {}
        return dict(self.language_features.get(language_name, {}))


def config_from_mapping(data: Mapping[str, object] | None = None) -> SharpieConfig:
    """Deep-merge ``data`` over :data:`DEFAULTS` and build a typed config."""
    merged = deep_merge(copy.deepcopy(DEFAULTS), data or {})
    display = _section(merged, "display")
    style = _section(merged, "style")
    symbol_options = _section(merged, "symbol_options")
    language = _section(merged, "language")
    logging_section = _section(merged, "logging")
    language_defaults = _section(DEFAULTS, "language")

    force = language.get("force")
    filter_prompt = display.get("filter_prompt")
    log_level = logging_section.get("level")
    log_file = logging_section.get("file")

    return SharpieConfig(
        fuzzy_finder=_as_choice(merged.get("fuzzy_finder"), FUZZY_FINDERS, "telescope"),
        auto_reload=_as_bool(display.get("auto_reload"), True),
        auto_reload_debounce_ms=_as_int(
            display.get("auto_reload_debounce"), int(DEFAULT_DEBOUNCE_SECONDS * 1000)
        ),
        filter_prompt=filter_prompt if isinstance(filter_prompt, str) else "> ",
        namespace_mode=_as_bool(symbol_options.get("namespace"), False),
        path_depth=_as_int(symbol_options.get("path"), 2),
        show_file_location=_as_bool(symbol_options.get("show_file_location"), True),
        separator_style=_as_choice(
            symbol_options.get("namespace_mode_separator_style"), SEPARATOR_STYLES, "line"
        ),
        icon_set=_icon_set(_section(style, "icon_set")),
        language_force=force if isinstance(force, str) and force else None,
        language_features={
            name: _features(_section(language, name), _section(language_defaults, name))
            for name in ("csharp", "go")
        },
        logging_enabled=_as_bool(logging_section.get("enabled"), True),
        log_level=log_level if isinstance(log_level, str) else "INFO",
        log_file=log_file if isinstance(log_file, str) and log_file else None,
        log_console=_as_bool(logging_section.get("console_output"), False),
        log_max_bytes=_as_int(logging_section.get("max_file_size"), DEFAULT_MAX_BYTES, minimum=1),
        log_format=_as_choice(logging_section.get("format"), ("default", "json"), "default"),
    )


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path or CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: Mapping[str, object], path: Path | None = None) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem and serialization errors are logged; an unwritable config is
    never fatal.
    """
    config_path = path or CONFIG_PATH
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Could not save config to %s: %s", config_path, exc)


def load_sharpie_config(path: Path | None = None) -> SharpieConfig:
    return config_from_mapping(load_config(path))
