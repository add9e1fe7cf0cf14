"""
Run summary — what the engine accumulated over one reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from accord.core.errors import ExitCode


@dataclass
class ResourceError:
    """A failure recorded against one resource."""

    kind: str
    key: str
    error_type: str
    message: str
    phase: str = "check"          # "check" or "apply"
    exit_code: int = ExitCode.RESOURCE_FAILED

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "key": self.key,
            "error_type": self.error_type,
            "message": self.message,
            "phase": self.phase,
        }


@dataclass
class RunSummary:
    """Counts and errors for one run.

    ``total`` counts every resource visited, so after a fail-fast abort it
    equals the position of the failing resource, not the manifest size.
    """

    total: int = 0
    satisfied: int = 0
    applied: int = 0
    failed: int = 0
    errors: list[ResourceError] = field(default_factory=list)
    aborted: bool = False
    abort_error: ResourceError | None = None
    dry_run: bool = False

    @property
    def status(self) -> str:
        if self.aborted:
            return "aborted"
        if self.failed == 0:
            return "ok"
        if self.satisfied + self.applied > 0:
            return "partial"
        return "failed"

    @property
    def exit_code(self) -> int:
        if self.abort_error is not None:
            return int(self.abort_error.exit_code)
        if self.failed > 0:
            return int(ExitCode.RESOURCE_FAILED)
        return int(ExitCode.SUCCESS)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "dry_run": self.dry_run,
            "total": self.total,
            "satisfied": self.satisfied,
            "applied": self.applied,
            "failed": self.failed,
            "aborted": self.aborted,
            "abort_error": self.abort_error.to_dict() if self.abort_error else None,
            "errors": [e.to_dict() for e in self.errors],
        }
