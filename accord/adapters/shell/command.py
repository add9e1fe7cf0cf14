"""
Command runner — the single place where ``subprocess.run`` is called.

Every package, service and account backend goes through a
``CommandRunner`` so that logging and error mapping live in one spot
and tests can substitute a fake runner.

Commands block until they exit. There is no timeout: a hung command
blocks the whole run.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass

from accord.core.errors import OperationFailed, PermissionDenied

logger = logging.getLogger(__name__)

# stderr fragments that mean "you are not allowed to do this"
_PERMISSION_MARKERS = (
    "permission denied",
    "operation not permitted",
    "are you root",
    "must be root",
    "must be run as root",
    "only root can",
    "requires root",
    "access denied",
)


@dataclass
class CommandResult:
    """Outcome of one command."""

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)


class CommandRunner:
    """Run external commands and capture their output."""

    def run(
        self,
        argv: list[str],
        *,
        env_overrides: dict[str, str] | None = None,
    ) -> CommandResult:
        """Run a command and return its result. Never raises for exit codes.

        A missing executable is reported as return code 127, the shell
        convention, so callers can treat it like any other failure.
        """
        env = None
        if env_overrides:
            env = os.environ.copy()
            env.update(env_overrides)

        logger.debug("Executing: %s", shlex.join(argv))
        start = time.monotonic()
        try:
            proc = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                env=env,
                check=False,
            )
        except FileNotFoundError:
            return CommandResult(
                argv=list(argv),
                returncode=127,
                stderr=f"command not found: {argv[0]}",
            )
        except PermissionError as e:
            return CommandResult(
                argv=list(argv),
                returncode=126,
                stderr=f"permission denied: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        result = CommandResult(
            argv=list(argv),
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            elapsed_ms=elapsed_ms,
        )
        logger.debug("→ exit %d (%dms)", result.returncode, elapsed_ms)
        return result

    def run_checked(
        self,
        argv: list[str],
        *,
        env_overrides: dict[str, str] | None = None,
    ) -> CommandResult:
        """Run a command that changes state; raise on non-zero exit."""
        result = self.run(argv, env_overrides=env_overrides)
        if not result.ok:
            raise command_error(result)
        return result


def command_error(result: CommandResult) -> OperationFailed:
    """Build the exception for a failed command."""
    detail = result.stderr.strip() or result.stdout.strip()
    if len(detail) > 500:
        detail = detail[-500:]
    message = f"'{result.command_line}' exited with code {result.returncode}"
    if detail:
        message = f"{message}: {detail}"

    lowered = detail.lower()
    if result.returncode == 126 or any(m in lowered for m in _PERMISSION_MARKERS):
        return PermissionDenied(message)
    return OperationFailed(message)
