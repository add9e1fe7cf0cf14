"""
Resource outcome models — the check/apply contract.

Resources answer ``check`` with a ``ResourceState`` and ``apply`` with a
``ResourceResult``. The engine counts these; it never inspects the
resource itself.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel


class ResourceKind(str, Enum):
    """Resource kinds, in the order the engine processes them."""

    PACKAGE = "package"
    GROUP = "group"
    USER = "user"
    DIRECTORY = "directory"
    FILE = "file"
    SERVICE = "service"

    @property
    def section(self) -> str:
        """Manifest section name (plural)."""
        return _SECTIONS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_SECTIONS = {
    ResourceKind.PACKAGE: "packages",
    ResourceKind.GROUP: "groups",
    ResourceKind.USER: "users",
    ResourceKind.DIRECTORY: "directories",
    ResourceKind.FILE: "files",
    ResourceKind.SERVICE: "services",
}

# Engine processing order across kinds. Within a kind: declaration order.
KIND_ORDER: tuple[ResourceKind, ...] = tuple(ResourceKind)


class ResourceState(str, Enum):
    """Outcome of a check."""

    SATISFIED = "satisfied"        # current state matches desired state
    NEEDS_CHANGE = "needs_change"  # needs to be modified
    FAILED = "failed"              # unable to determine state


class Change(NamedTuple):
    """One pending modification computed by a read-only plan."""

    action: str          # e.g. "create", "chmod", "install"
    detail: str = ""     # e.g. "0755", "1.24.0"

    def __str__(self) -> str:
        return f"{self.action} {self.detail}" if self.detail else self.action


class ResourceResult(BaseModel):
    """Result of applying a resource.

    ``state`` is the state after the call, ``changed`` whether the system
    was (or, in a dry run, would be) modified.
    """

    state: ResourceState
    message: str = ""
    changed: bool = False

    @classmethod
    def satisfied(cls, message: str = "already satisfied") -> ResourceResult:
        """Nothing to do: state already matched."""
        return cls(state=ResourceState.SATISFIED, message=message, changed=False)

    @classmethod
    def changed_to(cls, message: str) -> ResourceResult:
        """Changes were made and the resource now matches."""
        return cls(state=ResourceState.SATISFIED, message=message, changed=True)

    @classmethod
    def planned(cls, message: str) -> ResourceResult:
        """Dry run: changes would be made."""
        return cls(state=ResourceState.NEEDS_CHANGE, message=message, changed=True)

    @classmethod
    def failure(cls, message: str) -> ResourceResult:
        """The resource could not be brought into the desired state."""
        return cls(state=ResourceState.FAILED, message=message, changed=False)
