"""Endzeit CLI -- count down to a date and time, then optionally run a command."""

from __future__ import annotations

import logging
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from endzeit import config as cfg
from endzeit import countdown, display, executor
from endzeit.clock import Clock
from endzeit.errors import (
    CommandExecutionError,
    TargetParseError,
    TerminalInitError,
    TerminalIOError,
)
from endzeit.models import RunOutcome, TargetSpec
from endzeit.resolver import resolve_target

log = logging.getLogger(__name__)

EXIT_TERMINAL_ERROR = 1
EXIT_USAGE_ERROR = 2

app = typer.Typer(
    name="endzeit",
    help="Count down to a date and time in your terminal.",
    add_completion=False,
)


def setup_logging(level: str) -> None:
    """Send log records to stderr through Rich."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


def _run_execute(command: str) -> None:
    """Run the completion command and report, never changing the exit code."""
    display.print_info(f"Running: {command}")
    try:
        result = executor.run_command(command)
        display.print_command_output(result.output)
        result.raise_for_status()
    except CommandExecutionError as exc:
        log.debug("Completion command failed: %s", exc)
        display.print_warning(f"Warning: {exc}")
        return
    display.print_success("Command finished successfully.")


@app.command()
def main(
    date: Optional[str] = typer.Option(
        None, "--date", "-d", help="Target date as YYYY-MM-DD (default: today)"
    ),
    time_: Optional[str] = typer.Option(
        None, "--time", "-t", help="Target time as HH:MM:SS (default: now)"
    ),
    execute: Optional[str] = typer.Option(
        None, "--execute", help="Shell command to run when the countdown finishes"
    ),
    tick: Optional[float] = typer.Option(
        None, "--tick", help="Seconds between display refreshes"
    ),
    no_bell: bool = typer.Option(False, "--no-bell", help="Do not ring the bell when done"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Count down to a target date/time. Press q to quit."""
    settings = cfg.load_config()
    setup_logging("DEBUG" if verbose else settings.log_level)

    try:
        settings = cfg.apply_overrides(
            settings, tick_interval=tick, bell=False if no_bell else None
        )
    except ValidationError as exc:
        display.print_error(f"Invalid option: {exc.errors()[0]['msg']}")
        raise typer.Exit(EXIT_USAGE_ERROR)

    clock = Clock()
    try:
        target = resolve_target(TargetSpec(date=date, time=time_), clock.now())
    except TargetParseError as exc:
        display.print_error(str(exc))
        raise typer.Exit(EXIT_USAGE_ERROR)

    display.print_info(
        f"Counting down to {target:%Y-%m-%d %H:%M:%S}. "
        f"Press {settings.quit_key} to quit."
    )

    try:
        outcome = countdown.run_countdown(target, settings, clock=clock)
    except (TerminalInitError, TerminalIOError) as exc:
        display.print_error(str(exc))
        raise typer.Exit(EXIT_TERMINAL_ERROR)

    if outcome is RunOutcome.QUIT_BY_USER:
        display.print_warning("Countdown stopped early.")
        return

    if settings.bell:
        display.bell()
    display.print_done("Endzeit reached!")

    if execute:
        _run_execute(execute)
