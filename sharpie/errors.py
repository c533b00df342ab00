"""Error types raised by symbol collaborators.

The navigator never lets these escape: they are logged and surfaced as a
status message while the previous index stays in place.
"""

from __future__ import annotations


class SharpieError(Exception):
    """Base class for sharpie errors."""


class SymbolProviderError(SharpieError):
    """A symbol, reference, or workspace request failed."""


class ProviderUnavailable(SymbolProviderError):
    """No symbol source is attached to the buffer."""

    def __init__(self, message: str = "No symbol provider attached to buffer") -> None:
        super().__init__(message)
