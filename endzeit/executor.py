"""Run the --execute command once the countdown has completed."""

from __future__ import annotations

import logging
import subprocess

from endzeit.errors import CommandExecutionError
from endzeit.models import ExecutionResult

log = logging.getLogger(__name__)


def run_command(command: str) -> ExecutionResult:
    """Run ``command`` through the host shell and capture its output.

    Raises CommandExecutionError if the shell itself cannot be started. A
    non-zero exit status is returned in the result, not raised; call
    ``raise_for_status()`` on it to turn that into an error.
    """
    log.debug("Executing %r", command)
    try:
        proc = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            errors="replace",
        )
    except OSError as exc:
        raise CommandExecutionError(f"Could not run {command!r}: {exc}") from exc

    output = (proc.stdout or "") + (proc.stderr or "")
    log.debug("Command %r exited with status %d", command, proc.returncode)
    return ExecutionResult(command=command, exit_status=proc.returncode, output=output)
