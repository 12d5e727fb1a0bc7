"""Wall-clock access, kept behind a class so tests can swap it out."""

from __future__ import annotations

from datetime import datetime


class Clock:
    """Reads the current local time as an aware datetime."""

    def now(self) -> datetime:
        return datetime.now().astimezone()
