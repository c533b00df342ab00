"""Public package surface for sharpie.

Exports ``main`` for programmatic CLI invocation. The navigator itself lives
in :mod:`sharpie.controller`; inference and indexing helpers live in the
other submodules.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
