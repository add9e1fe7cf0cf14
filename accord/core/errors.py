"""
Error taxonomy — every failure the core can raise.

The core only defines exceptions; the CLI decides how to print them.
Each class carries the process exit code it maps to when it is the
failure that ends a run.
"""

from __future__ import annotations

import errno
from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes. These values are part of the CLI contract."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    PARSE_ERROR = 2
    PERMISSION_DENIED = 3
    RESOURCE_FAILED = 4


class AccordError(Exception):
    """Base class for all accord errors."""

    exit_code: ExitCode = ExitCode.GENERAL_ERROR


class ConfigError(AccordError):
    """Settings file is missing, unreadable or invalid."""


class ParseError(AccordError):
    """Manifest text could not be turned into a Manifest.

    ``line`` and ``column`` are 1-based and point at the offending node
    when the position is known.
    """

    exit_code = ExitCode.PARSE_ERROR

    def __init__(
        self,
        message: str,
        source: str = "<manifest>",
        line: int | None = None,
        column: int | None = None,
    ):
        self.message = message
        self.source = source
        self.line = line
        self.column = column
        super().__init__(str(self))

    @property
    def location(self) -> str:
        if self.line is None:
            return self.source
        if self.column is None:
            return f"{self.source}:{self.line}"
        return f"{self.source}:{self.line}:{self.column}"

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


class ResourceFailure(AccordError):
    """A failure local to one resource. Caught by the engine."""

    exit_code = ExitCode.RESOURCE_FAILED


class CapabilityUnsupported(ResourceFailure):
    """The backend a resource needs was not detected on this host."""


class CheckFailed(ResourceFailure):
    """Current state could not be determined."""


class OperationFailed(ResourceFailure):
    """A change command or system call did not succeed."""


class PermissionDenied(OperationFailed):
    """The OS refused the operation for lack of privileges."""

    exit_code = ExitCode.PERMISSION_DENIED


def os_error(exc: OSError, what: str, *, checking: bool = False) -> ResourceFailure:
    """Convert an ``OSError`` into the matching resource failure.

    Access-denied errors always become :class:`PermissionDenied`; anything
    else becomes :class:`CheckFailed` while probing state and
    :class:`OperationFailed` while changing it.
    """
    reason = exc.strerror or str(exc)
    if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
        return PermissionDenied(f"{what}: {reason}")
    if checking:
        return CheckFailed(f"{what}: {reason}")
    return OperationFailed(f"{what}: {reason}")
