"""
Backend base — the contract between resources and platform tools.

Resources never call package managers, init systems or account tools
directly. They ask the ``BackendRegistry`` for the backend matching the
detected capabilities and talk to it through these interfaces.

Query methods are read-only. Mutating methods raise ``OperationFailed``
(or ``PermissionDenied``) when the underlying command fails.

To add a backend:
    1. Subclass the matching ABC
    2. Implement name and the abstract methods
    3. Register it in ``BackendRegistry.default()``
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from accord.adapters.shell.command import CommandRunner


class PackageInfo(BaseModel):
    """Installed state of one package."""

    name: str
    installed: bool = False
    version: str | None = None   # None when not installed or not reported


class ServiceStatus(BaseModel):
    """Runtime and boot state of one service."""

    name: str
    running: bool = False
    enabled: bool = False


class UserInfo(BaseModel):
    """An account as seen in the user database."""

    name: str
    uid: int
    gid: int
    home: str
    shell: str
    groups: frozenset[str] = Field(default_factory=frozenset)  # supplementary


class GroupInfo(BaseModel):
    """A group as seen in the group database."""

    name: str
    gid: int
    members: frozenset[str] = Field(default_factory=frozenset)


class Backend(ABC):
    """Common base: every backend runs commands through a runner."""

    def __init__(self, runner: CommandRunner | None = None):
        self.runner = runner or CommandRunner()

    @property
    @abstractmethod
    def name(self) -> str:
        """The backend identifier (e.g., 'apt', 'systemd')."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class PackageBackend(Backend):
    """Package manager operations."""

    supports_versions: bool = True

    @abstractmethod
    def query(self, package: str) -> PackageInfo:
        """Report whether ``package`` is installed and at which version."""

    @abstractmethod
    def install(self, package: str, version: str | None = None) -> None:
        """Install ``package``, optionally pinned to ``version``."""

    @abstractmethod
    def remove(self, package: str) -> None:
        """Remove ``package``."""


class ServiceBackend(Backend):
    """Init system operations."""

    @abstractmethod
    def status(self, service: str) -> ServiceStatus:
        """Report whether ``service`` is running and enabled at boot."""

    @abstractmethod
    def start(self, service: str) -> None: ...

    @abstractmethod
    def stop(self, service: str) -> None: ...

    @abstractmethod
    def enable(self, service: str) -> None: ...

    @abstractmethod
    def disable(self, service: str) -> None: ...


class AccountBackend(Backend):
    """User and group database operations."""

    @abstractmethod
    def get_user(self, name: str) -> UserInfo | None:
        """Look up a user, None if absent."""

    @abstractmethod
    def get_group(self, name: str) -> GroupInfo | None:
        """Look up a group, None if absent."""

    @abstractmethod
    def create_user(
        self,
        name: str,
        *,
        uid: int | None,
        home: str,
        shell: str,
        groups: list[str],
    ) -> None: ...

    @abstractmethod
    def modify_user(
        self,
        name: str,
        *,
        uid: int | None = None,
        home: str | None = None,
        shell: str | None = None,
    ) -> None: ...

    @abstractmethod
    def add_to_groups(self, name: str, groups: list[str]) -> None:
        """Add ``name`` to each supplementary group, keeping existing ones."""

    @abstractmethod
    def delete_user(self, name: str) -> None: ...

    @abstractmethod
    def create_group(self, name: str, *, gid: int | None) -> None: ...

    @abstractmethod
    def modify_group(self, name: str, *, gid: int) -> None: ...

    @abstractmethod
    def delete_group(self, name: str) -> None: ...
