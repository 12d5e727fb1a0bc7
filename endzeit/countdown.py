"""The countdown loop: sample the clock, draw, wait for a key, repeat."""

from __future__ import annotations

import enum
import logging
from datetime import datetime
from typing import Optional, Protocol

from endzeit.clock import Clock
from endzeit.display import Renderer
from endzeit.models import AppConfig, KeyEvent, RunOutcome
from endzeit.state import CountdownState
from endzeit.terminal import InputPoller, TerminalMode, create_poller

log = logging.getLogger(__name__)


class LoopState(str, enum.Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    QUIT = "quit"


class FrameSink(Protocol):
    def draw(self, state: CountdownState) -> None: ...


class CountdownLoop:
    """Single-threaded tick cycle over an already resolved target.

    Each tick refreshes the state from the clock, draws it, then waits up to
    ``tick_interval`` seconds for the quit key. The poll is the only place the
    loop blocks.
    """

    def __init__(
        self,
        clock: Clock,
        state: CountdownState,
        renderer: FrameSink,
        poller: InputPoller,
        tick_interval: float,
    ) -> None:
        self.clock = clock
        self.state = state
        self.renderer = renderer
        self.poller = poller
        self.tick_interval = tick_interval
        self.status = LoopState.RUNNING
        self.ticks = 0

    def tick(self) -> LoopState:
        """Run one refresh/draw/poll cycle and return the resulting state."""
        if self.status is not LoopState.RUNNING:
            return self.status

        self.state.refresh(self.clock.now())
        self.renderer.draw(self.state)
        key = self.poller.poll(self.tick_interval)
        self.ticks += 1

        if key is KeyEvent.QUIT:
            self.status = LoopState.QUIT
        elif self.state.is_due():
            self.status = LoopState.COMPLETED

        if self.status is not LoopState.RUNNING:
            log.debug("Loop left RUNNING for %s after %d ticks.", self.status.value, self.ticks)
        return self.status

    def run(self) -> RunOutcome:
        while self.tick() is LoopState.RUNNING:
            pass
        if self.status is LoopState.QUIT:
            return RunOutcome.QUIT_BY_USER
        return RunOutcome.COMPLETED


def run_countdown(
    target: datetime,
    config: AppConfig,
    clock: Optional[Clock] = None,
) -> RunOutcome:
    """Count down to ``target`` on the controlling terminal.

    Terminal mode and the live display are acquired here and released on every
    exit path, the display first. Ctrl+C counts as quitting.
    """
    clock = clock or Clock()
    state = CountdownState(target=target, now=clock.now())

    try:
        with TerminalMode() as terminal, Renderer(quit_key=config.quit_key) as renderer:
            loop = CountdownLoop(
                clock=clock,
                state=state,
                renderer=renderer,
                poller=create_poller(terminal, quit_key=config.quit_key),
                tick_interval=config.tick_interval,
            )
            return loop.run()
    except KeyboardInterrupt:
        log.debug("Interrupted by Ctrl+C.")
        return RunOutcome.QUIT_BY_USER
