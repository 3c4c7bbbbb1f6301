"""Tick bookkeeping shared by every system.

``CurrentTick`` is the single counter all systems read when timestamping
events; ``TickInterval`` throttles periodic work (such as reputation decay)
to ``every N ticks`` without each system duplicating the modulo logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


DEFAULT_OFFSET = 0
"""Default tick offset so an every-N cadence fires on ticks N, 2N, ..."""


@dataclass(frozen=True)
class TickInterval:
    """Represents an ``every N ticks`` cadence with an optional offset."""

    every: int = 1
    offset: int = DEFAULT_OFFSET

    def is_due(self, *, tick: int, last_run_tick: Optional[int] = None) -> bool:
        """Return ``True`` when the cadence fires on this tick."""

        if self.every <= 1:
            return last_run_tick is None or tick > last_run_tick

        if last_run_tick is not None and tick <= last_run_tick:
            return False

        return ((tick - self.offset) % self.every) == 0


class CurrentTick:
    """Monotonically increasing simulation tick counter."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("start tick must be non-negative")
        self._value = start

    @property
    def value(self) -> int:
        return self._value

    def advance(self) -> int:
        """Increment by exactly one and return the new tick."""
        self._value += 1
        return self._value

    def __int__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"CurrentTick({self._value})"
