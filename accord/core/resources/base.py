"""
Resource base — the uniform contract every resource kind implements.

A resource knows its desired state. It computes the difference to the
live system with ``plan()`` (read-only) and removes that difference with
``converge()``. ``check`` and ``apply`` are built on those two, so every
kind gets the same guarantees:

    - ``check`` never mutates anything
    - a dry-run ``apply`` reports what would change and mutates nothing
    - ``apply`` on an already-converged resource reports ``changed=False``

To create a new resource kind:
    1. Subclass Resource, set ``kind`` and declare the attributes
    2. Implement key, plan, converge
    3. Add it to ``RESOURCE_TYPES`` and the ``ResourceKind`` order
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from accord.adapters.registry import BackendRegistry
from accord.core.errors import OperationFailed, os_error
from accord.core.models.capabilities import SystemCapabilities
from accord.core.models.resource import Change, ResourceKind, ResourceResult, ResourceState

logger = logging.getLogger(__name__)


class ExecutionContext(BaseModel):
    """Everything a resource needs to inspect and change the host.

    Built once per run by the engine and shared read-only.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    capabilities: SystemCapabilities = Field(default_factory=SystemCapabilities)
    backends: BackendRegistry = Field(default_factory=BackendRegistry.default)


class Resource(BaseModel, ABC):
    """Abstract base class for all resource kinds.

    Common attributes:
        allow_failure: a failure of this resource is recorded and the run
            continues, instead of aborting the run.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ClassVar[ResourceKind]

    allow_failure: bool = False

    @property
    @abstractmethod
    def key(self) -> str:
        """Identity within the kind (path or name)."""

    @abstractmethod
    def plan(self, ctx: ExecutionContext) -> list[Change]:
        """Compute the changes needed to reach the desired state.

        MUST NOT modify the system. Raises ``CheckFailed``,
        ``PermissionDenied`` or ``CapabilityUnsupported`` when the current
        state cannot be determined.
        """

    @abstractmethod
    def converge(self, ctx: ExecutionContext, changes: list[Change]) -> None:
        """Perform ``changes``. Raises ``OperationFailed`` on failure."""

    # ── Uniform contract ────────────────────────────────────────

    def check(self, ctx: ExecutionContext) -> ResourceState:
        """Compare live state with desired state. Read-only."""
        try:
            changes = self.plan(ctx)
        except OSError as e:
            raise os_error(e, f"cannot inspect {self.key}", checking=True) from e
        if changes:
            logger.debug("%s %s differs: %s", self.kind.label, self.key, _join(changes))
            return ResourceState.NEEDS_CHANGE
        return ResourceState.SATISFIED

    def apply(self, ctx: ExecutionContext, dry_run: bool = False) -> ResourceResult:
        """Bring the resource into its desired state.

        The plan is recomputed here, so a resource that converged between
        ``check`` and ``apply`` reports ``changed=False``.
        """
        try:
            changes = self.plan(ctx)
        except OSError as e:
            raise os_error(e, f"cannot inspect {self.key}", checking=True) from e

        if not changes:
            return ResourceResult.satisfied()

        if dry_run:
            return ResourceResult.planned(f"would {_join(changes)}")

        try:
            self.converge(ctx, changes)
        except OSError as e:
            raise os_error(e, f"cannot {_join(changes)} {self.key}") from e
        return ResourceResult.changed_to(_past_tense(changes))

    def describe(self) -> str:
        """Stable human-readable identifier, used for logging only."""
        return self.key

    def __str__(self) -> str:
        return f"{self.kind.label} {self.key}"


def _join(changes: list[Change]) -> str:
    return ", ".join(str(c) for c in changes)


_PAST = {
    "create": "created",
    "remove": "removed",
    "write": "written",
    "chmod": "mode set to",
    "chown": "owner set to",
    "chgrp": "group set to",
    "install": "installed",
    "upgrade": "version set to",
    "start": "started",
    "stop": "stopped",
    "enable": "enabled",
    "disable": "disabled",
    "set uid": "uid set to",
    "set gid": "gid set to",
    "set home": "home set to",
    "set shell": "shell set to",
    "add to groups": "added to groups",
}


def _past_tense(changes: list[Change]) -> str:
    parts = []
    for change in changes:
        verb = _PAST.get(change.action, change.action)
        parts.append(f"{verb} {change.detail}" if change.detail else verb)
    return ", ".join(parts)


def unknown_change(resource: Resource, change: Change) -> OperationFailed:
    """Error for a change a resource does not know how to perform."""
    return OperationFailed(f"{resource}: unsupported change '{change.action}'")
