"""Rich terminal formatting helpers and the live countdown renderer."""

from __future__ import annotations

import logging
import math
import re
from datetime import timedelta
from types import TracebackType
from typing import Optional

from rich.console import Console, RenderableType
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from endzeit.errors import TerminalIOError
from endzeit.state import CountdownState

log = logging.getLogger(__name__)

console = Console()

_DURATION_RE = re.compile(r"^(?:(\d+)d\s+)?(\d{2,}):(\d{2}):(\d{2})$")


def format_duration(remaining: timedelta) -> str:
    """Format a remaining duration as ``HH:MM:SS`` or ``Nd HH:MM:SS``.

    Partial seconds round up, so ``00:00:00`` only appears once the countdown
    is due. Negative durations are shown as ``00:00:00``.
    """
    total = max(0, math.ceil(remaining.total_seconds()))
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    clock = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days:
        return f"{days}d {clock}"
    return clock


def parse_duration(text: str) -> timedelta:
    """Inverse of :func:`format_duration`."""
    match = _DURATION_RE.match(text.strip())
    if match is None:
        raise ValueError(f"Not a countdown duration: {text!r}")
    days, hours, minutes, seconds = (int(part) if part else 0 for part in match.groups())
    return timedelta(days=days, hours=hours, minutes=minutes, seconds=seconds)


def render_frame(state: CountdownState, quit_key: str = "q") -> RenderableType:
    """Build one frame: big remaining time, progress gauge and target."""
    due = state.is_due()
    time_text = Text(
        format_duration(state.remaining()),
        style="bold green" if due else "bold magenta",
        justify="center",
    )

    table = Table.grid(expand=True)
    table.add_column(justify="center")
    table.add_row(time_text)
    table.add_row(ProgressBar(total=100, completed=state.progress() * 100))
    table.add_row(
        Text.from_markup(
            f"[dim]Target:[/] {state.target:%Y-%m-%d %H:%M:%S}  "
            f"[dim]{state.progress():.0%}  press[/] [bold]{quit_key}[/] [dim]to quit[/]"
        )
    )
    return Panel(table, title="Endzeit", border_style="green" if due else "blue")


class Renderer:
    """Draws countdown frames into a single live region.

    The live region never refreshes on its own; a frame is written only when
    :meth:`draw` is called from the countdown loop.
    """

    def __init__(self, out: Optional[Console] = None, quit_key: str = "q") -> None:
        self._console = out if out is not None else console
        self._quit_key = quit_key
        self._live: Optional[Live] = None

    def __enter__(self) -> Renderer:
        self._live = Live(
            console=self._console,
            auto_refresh=False,
            transient=False,
        )
        try:
            self._live.start()
        except OSError as exc:
            self._live = None
            raise TerminalIOError(f"Could not start the display: {exc}") from exc
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        live, self._live = self._live, None
        if live is None:
            return
        try:
            live.stop()
        except OSError as exc:
            if exc_type is None:
                raise TerminalIOError(f"Could not finish the display: {exc}") from exc
            # Already unwinding with the original error; keep that one.
            log.warning("Display teardown failed while handling %s: %s", exc_type.__name__, exc)

    def draw(self, state: CountdownState) -> None:
        if self._live is None:
            raise TerminalIOError("Renderer used outside of its context.")
        try:
            self._live.update(render_frame(state, self._quit_key), refresh=True)
        except OSError as exc:
            raise TerminalIOError(f"Could not draw to terminal: {exc}") from exc


def print_done(message: str) -> None:
    """Print the completion message in a styled panel."""
    text = Text(message, justify="center")
    console.print(Panel(text, border_style="yellow", padding=(1, 4)))


def print_command_output(output: str) -> None:
    """Echo captured command output verbatim (no markup interpretation)."""
    if output.strip():
        console.print(Text(output.rstrip("\n")))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{escape(message)}[/green]", highlight=False)


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[blue]{escape(message)}[/blue]", highlight=False)


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]{escape(message)}[/yellow]", highlight=False)


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]", highlight=False)


def bell() -> None:
    console.bell()
