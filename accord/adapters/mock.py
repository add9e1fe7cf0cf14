"""
Mock backends — in-memory test doubles for packages, services and accounts.

Each mock keeps a tiny model of the system it pretends to manage, so
resources can be checked, applied and re-checked without touching the
host. Calls are logged and individual operations can be made to fail.
"""

from __future__ import annotations

from accord.adapters.base import (
    AccountBackend,
    GroupInfo,
    PackageBackend,
    PackageInfo,
    ServiceBackend,
    ServiceStatus,
    UserInfo,
)
from accord.core.errors import OperationFailed, PermissionDenied


class _MockMixin:
    """Call log and failure injection shared by all mocks."""

    def _init_mock(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self._failures: dict[tuple[str, str], Exception] = {}

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def mutations(self) -> list[tuple[str, ...]]:
        """Logged calls that would have changed the system."""
        reads = {"query", "status", "get_user", "get_group"}
        return [c for c in self.calls if c[0] not in reads]

    def set_failure(
        self,
        operation: str,
        target: str,
        error: str = "Mock failure",
        permission: bool = False,
    ) -> None:
        """Make ``operation`` on ``target`` raise."""
        exc_type = PermissionDenied if permission else OperationFailed
        self._failures[(operation, target)] = exc_type(error)

    def _record(self, operation: str, target: str, *extra: str) -> None:
        self.calls.append((operation, target, *extra))
        exc = self._failures.get((operation, target))
        if exc is not None:
            raise exc

    def reset(self) -> None:
        """Clear call log and failures (state is kept)."""
        self.calls.clear()
        self._failures.clear()


class MockPackageBackend(_MockMixin, PackageBackend):
    """In-memory package database."""

    def __init__(self, installed: dict[str, str] | None = None, backend_name: str = "mock"):
        super().__init__()
        self._init_mock()
        self._name = backend_name
        self.installed: dict[str, str] = dict(installed or {})

    @property
    def name(self) -> str:
        return self._name

    def query(self, package: str) -> PackageInfo:
        self._record("query", package)
        if package not in self.installed:
            return PackageInfo(name=package)
        return PackageInfo(name=package, installed=True, version=self.installed[package])

    def install(self, package: str, version: str | None = None) -> None:
        self._record("install", package, version or "")
        self.installed[package] = version or "1.0.0"

    def remove(self, package: str) -> None:
        self._record("remove", package)
        self.installed.pop(package, None)


class MockServiceBackend(_MockMixin, ServiceBackend):
    """In-memory service table: name → (running, enabled)."""

    def __init__(self, services: dict[str, tuple[bool, bool]] | None = None):
        super().__init__()
        self._init_mock()
        self.services: dict[str, list[bool]] = {
            name: [running, enabled] for name, (running, enabled) in (services or {}).items()
        }

    @property
    def name(self) -> str:
        return "mock"

    def status(self, service: str) -> ServiceStatus:
        self._record("status", service)
        running, enabled = self.services.get(service, [False, False])
        return ServiceStatus(name=service, running=running, enabled=enabled)

    def _set(self, service: str, index: int, value: bool) -> None:
        self.services.setdefault(service, [False, False])[index] = value

    def start(self, service: str) -> None:
        self._record("start", service)
        self._set(service, 0, True)

    def stop(self, service: str) -> None:
        self._record("stop", service)
        self._set(service, 0, False)

    def enable(self, service: str) -> None:
        self._record("enable", service)
        self._set(service, 1, True)

    def disable(self, service: str) -> None:
        self._record("disable", service)
        self._set(service, 1, False)


class MockAccountBackend(_MockMixin, AccountBackend):
    """In-memory passwd/group database."""

    def __init__(self) -> None:
        super().__init__()
        self._init_mock()
        self.users: dict[str, UserInfo] = {}
        self.groups: dict[str, GroupInfo] = {}
        self._next_id = 1000

    @property
    def name(self) -> str:
        return "mock"

    def _allocate_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def get_user(self, name: str) -> UserInfo | None:
        self._record("get_user", name)
        user = self.users.get(name)
        if user is None:
            return None
        members = frozenset(g.name for g in self.groups.values() if name in g.members)
        return user.model_copy(update={"groups": members})

    def get_group(self, name: str) -> GroupInfo | None:
        self._record("get_group", name)
        return self.groups.get(name)

    def add_user(self, name: str, **fields) -> None:
        """Seed a user directly (test setup, not logged)."""
        uid = fields.pop("uid", None)
        if uid is None:
            uid = self._allocate_id()
        self.users[name] = UserInfo(
            name=name,
            uid=uid,
            gid=fields.pop("gid", uid),
            home=fields.pop("home", f"/home/{name}"),
            shell=fields.pop("shell", "/bin/bash"),
        )

    def add_group(self, name: str, gid: int | None = None, members: set[str] | None = None) -> None:
        """Seed a group directly (test setup, not logged)."""
        self.groups[name] = GroupInfo(
            name=name,
            gid=gid if gid is not None else self._allocate_id(),
            members=frozenset(members or ()),
        )

    def create_user(self, name, *, uid, home, shell, groups) -> None:
        self._record("create_user", name)
        self.add_user(name, uid=uid, home=home, shell=shell)
        self.add_to_groups(name, groups)

    def modify_user(self, name, *, uid=None, home=None, shell=None) -> None:
        self._record("modify_user", name)
        update = {k: v for k, v in (("uid", uid), ("home", home), ("shell", shell)) if v is not None}
        self.users[name] = self.users[name].model_copy(update=update)

    def add_to_groups(self, name: str, groups: list[str]) -> None:
        for group in groups:
            self._record("add_to_group", name, group)
            if group not in self.groups:
                raise OperationFailed(f"group '{group}' does not exist")
            current = self.groups[group]
            self.groups[group] = current.model_copy(
                update={"members": current.members | {name}}
            )

    def delete_user(self, name: str) -> None:
        self._record("delete_user", name)
        self.users.pop(name, None)

    def create_group(self, name: str, *, gid: int | None) -> None:
        self._record("create_group", name)
        self.add_group(name, gid=gid)

    def modify_group(self, name: str, *, gid: int) -> None:
        self._record("modify_group", name)
        self.groups[name] = self.groups[name].model_copy(update={"gid": gid})

    def delete_group(self, name: str) -> None:
        self._record("delete_group", name)
        self.groups.pop(name, None)
