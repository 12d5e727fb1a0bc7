"""Terminal ownership: cbreak mode as a scoped resource, and the key poller.

Keystrokes are read one at a time without echo while the countdown runs.
Whatever happens inside the ``with TerminalMode()`` block, the saved terminal
attributes are written back on the way out.
"""

from __future__ import annotations

import logging
import os
import select
import signal
import sys
import threading
import time
from types import TracebackType
from typing import IO, Any, Optional, Protocol

from endzeit.errors import TerminalInitError, TerminalIOError
from endzeit.models import KeyEvent

log = logging.getLogger(__name__)

_IS_WINDOWS = sys.platform == "win32"

# Signals that should unwind the loop (and restore the terminal) rather than
# kill the process with the terminal still in cbreak mode.
_RESTORE_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
)


class InputPoller(Protocol):
    def poll(self, timeout: float) -> Optional[KeyEvent]: ...


def _raise_exit(signum: int, _frame: Any) -> None:
    log.debug("Received signal %d, unwinding.", signum)
    raise SystemExit(128 + signum)


class TerminalMode:
    """Context manager putting ``stream`` into cbreak mode with echo off."""

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._fd: Optional[int] = None
        self._saved_attrs: Optional[list[Any]] = None
        self._saved_handlers: dict[int, Any] = {}

    @property
    def fd(self) -> int:
        if self._fd is None:
            raise TerminalInitError("Terminal mode has not been acquired.")
        return self._fd

    def __enter__(self) -> TerminalMode:
        try:
            interactive = self._stream.isatty()
        except (AttributeError, ValueError):
            interactive = False
        if not interactive:
            raise TerminalInitError("Standard input is not an interactive terminal.")

        self._fd = self._stream.fileno()
        if not _IS_WINDOWS:
            import termios
            import tty

            try:
                self._saved_attrs = termios.tcgetattr(self._fd)
                tty.setcbreak(self._fd)
            except (termios.error, OSError) as exc:
                raise TerminalInitError(f"Could not switch terminal mode: {exc}") from exc
        self._install_signal_handlers()
        log.debug("Terminal mode acquired on fd %d.", self._fd)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        try:
            self.restore()
        except TerminalIOError as exc:
            if exc_type is None:
                raise
            # Already unwinding with the original error; keep that one.
            log.warning("Terminal restore failed while handling %s: %s", exc_type.__name__, exc)

    def restore(self) -> None:
        """Write back the saved attributes and signal handlers. Idempotent."""
        for signum, handler in self._saved_handlers.items():
            signal.signal(signum, handler)
        self._saved_handlers.clear()

        if self._saved_attrs is not None and self._fd is not None:
            import termios

            try:
                termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
            except (termios.error, OSError) as exc:
                raise TerminalIOError(f"Could not restore terminal mode: {exc}") from exc
            self._saved_attrs = None
            log.debug("Terminal mode restored on fd %d.", self._fd)

    def _install_signal_handlers(self) -> None:
        # signal.signal only works from the main thread.
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in _RESTORE_SIGNALS:
            self._saved_handlers[signum] = signal.signal(signum, _raise_exit)


class PosixInputPoller:
    """Waits on a file descriptor with ``select`` for the quit key."""

    def __init__(self, fd: int, quit_key: str = "q") -> None:
        self._fd = fd
        self._quit_key = quit_key
        self._eof = False

    def poll(self, timeout: float) -> Optional[KeyEvent]:
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            if self._eof:
                time.sleep(remaining)
                return None
            try:
                readable, _, _ = select.select([self._fd], [], [], remaining)
                if not readable:
                    return None
                data = os.read(self._fd, 1)
            except OSError as exc:
                raise TerminalIOError(f"Could not read from terminal: {exc}") from exc
            if not data:
                log.debug("Input reached end of file; no more keys will be read.")
                self._eof = True
                continue
            if data.decode("ascii", errors="ignore") == self._quit_key:
                return KeyEvent.QUIT


class WindowsInputPoller:
    """Samples the console keyboard buffer through ``msvcrt``."""

    _SLICE = 0.02

    def __init__(self, quit_key: str = "q") -> None:
        self._quit_key = quit_key

    def poll(self, timeout: float) -> Optional[KeyEvent]:
        import msvcrt

        deadline = time.monotonic() + timeout
        while True:
            while msvcrt.kbhit():
                if msvcrt.getwch() == self._quit_key:
                    return KeyEvent.QUIT
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            time.sleep(min(self._SLICE, remaining))


def create_poller(terminal: TerminalMode, quit_key: str = "q") -> InputPoller:
    """Build the poller that matches the platform of an acquired terminal."""
    if _IS_WINDOWS:
        return WindowsInputPoller(quit_key=quit_key)
    return PosixInputPoller(terminal.fd, quit_key=quit_key)
