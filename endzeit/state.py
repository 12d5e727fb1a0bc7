"""Countdown state: the fixed target and the latest clock sample."""

from __future__ import annotations

from datetime import datetime, timedelta

_ZERO = timedelta(0)


class CountdownState:
    """Derives remaining time from ``target`` and the most recent ``now``.

    Nothing is cached between ticks; ``remaining()`` is recomputed on every
    call. Once the state has been observed due it stays due.
    """

    def __init__(self, target: datetime, now: datetime) -> None:
        self.target = target
        self.started_at = now
        self.now = now
        self._due = False

    def refresh(self, now: datetime) -> None:
        self.now = now

    def remaining(self) -> timedelta:
        return self.target - self.now

    def is_due(self) -> bool:
        if not self._due and self.remaining() <= _ZERO:
            self._due = True
        return self._due

    def progress(self) -> float:
        """Fraction of the start -> target span already elapsed, in [0, 1]."""
        total = (self.target - self.started_at).total_seconds()
        if total <= 0:
            return 1.0
        elapsed = (self.now - self.started_at).total_seconds()
        return min(max(elapsed / total, 0.0), 1.0)
