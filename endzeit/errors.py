"""Exception hierarchy for the countdown timer."""

from __future__ import annotations


class EndzeitError(Exception):
    """Base class for all errors raised by endzeit."""


class TargetParseError(EndzeitError, ValueError):
    """A --date or --time value could not be parsed."""


class InvalidDateFormat(TargetParseError):
    """The --date value is not a valid YYYY-MM-DD date."""


class InvalidTimeFormat(TargetParseError):
    """The --time value is not a valid HH[:MM[:SS]] time of day."""


class TerminalInitError(EndzeitError):
    """Interactive terminal mode could not be acquired."""


class TerminalIOError(EndzeitError):
    """Drawing to or reading from the terminal failed mid-run."""


class CommandExecutionError(EndzeitError):
    """The --execute command failed to spawn or exited non-zero."""
