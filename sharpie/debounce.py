"""Poll-driven debounce timer for auto-refresh."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

DEFAULT_DEBOUNCE_SECONDS = 0.5


@dataclass
class DebounceTimer:
    """Single pending deadline; arming again replaces it.

    The owner calls :meth:`due` from its event loop and fires the action when
    it returns ``True``. ``monotonic`` is injectable so tests can drive time.
    """

    window_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    monotonic: Callable[[], float] = field(default=time.monotonic)
    deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self.deadline is not None

    def arm(self) -> None:
        self.deadline = self.monotonic() + max(0.0, self.window_seconds)

    def cancel(self) -> None:
        self.deadline = None

    def due(self) -> bool:
        """Return ``True`` once the deadline has passed, disarming the timer."""
        if self.deadline is None:
            return False
        if self.monotonic() < self.deadline:
            return False
        self.deadline = None
        return True
