"""Pydantic models -- single source of truth for all data types."""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from endzeit.errors import CommandExecutionError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RunOutcome(str, enum.Enum):
    """How the countdown loop ended."""

    COMPLETED = "completed"
    QUIT_BY_USER = "quit"


class KeyEvent(str, enum.Enum):
    """Keys the input poller reports to the loop."""

    QUIT = "quit"


class TargetSpec(BaseModel):
    """Date and time strings exactly as the caller supplied them."""

    date: Optional[str] = None
    time: Optional[str] = None


class ExecutionResult(BaseModel):
    """Outcome of the command run after the countdown completed."""

    command: str
    exit_status: int
    output: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0

    def raise_for_status(self) -> None:
        """Raise CommandExecutionError if the command exited non-zero."""
        if not self.succeeded:
            raise CommandExecutionError(
                f"Command {self.command!r} exited with status {self.exit_status}."
            )


class AppConfig(BaseModel):
    """Runtime settings (defaults, overlaid by ENDZEIT_* environment variables)."""

    tick_interval: float = Field(default=0.25, gt=0, le=5)
    # One printable ASCII character; the POSIX poller reads single bytes.
    quit_key: str = Field(default="q", pattern=r"^[!-~]$")
    bell: bool = True
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level
