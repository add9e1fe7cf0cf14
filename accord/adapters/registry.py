"""
Backend registry — maps detected capabilities to backend instances.

The registry is the single point where a resource turns "this host uses
apt and systemd" into an object it can call. A capability with no
registered backend raises ``CapabilityUnsupported`` so the resource fails
cleanly instead of silently doing nothing.
"""

from __future__ import annotations

import logging
from typing import Any

from accord.adapters.base import AccountBackend, PackageBackend, ServiceBackend
from accord.adapters.shell.command import CommandRunner
from accord.core.errors import CapabilityUnsupported
from accord.core.models.capabilities import (
    InitSystem,
    OsFamily,
    PackageManager,
    SystemCapabilities,
)

logger = logging.getLogger(__name__)


class BackendRegistry:
    """Registry and lookup for package, service and account backends.

    Features:
        - Register backends per package manager, init system or OS family
        - Resolve the backend for a capabilities snapshot
        - Report what is registered (for ``accord detect``)
    """

    def __init__(self) -> None:
        self._packages: dict[PackageManager, PackageBackend] = {}
        self._services: dict[InitSystem, ServiceBackend] = {}
        self._accounts: dict[OsFamily, AccountBackend] = {}

    @classmethod
    def default(cls, runner: CommandRunner | None = None) -> BackendRegistry:
        """A registry wired with every built-in backend."""
        from accord.adapters.accounts.busybox import BusyBoxBackend
        from accord.adapters.accounts.pw import PwBackend
        from accord.adapters.accounts.shadow import ShadowBackend
        from accord.adapters.packages.apk import ApkBackend
        from accord.adapters.packages.apt import AptBackend
        from accord.adapters.packages.brew import BrewBackend
        from accord.adapters.packages.bsd import PkgAddBackend, PkgBackend, PkginBackend
        from accord.adapters.packages.pacman import PacmanBackend
        from accord.adapters.packages.rpm import DnfBackend, YumBackend
        from accord.adapters.services.launchd import LaunchdBackend
        from accord.adapters.services.openrc import OpenRCBackend
        from accord.adapters.services.rc import RcBackend
        from accord.adapters.services.systemd import SystemdBackend
        from accord.adapters.services.sysvinit import SysVinitBackend

        runner = runner or CommandRunner()
        registry = cls()

        registry.register_packages(PackageManager.APT, AptBackend(runner))
        registry.register_packages(PackageManager.DNF, DnfBackend(runner))
        registry.register_packages(PackageManager.YUM, YumBackend(runner))
        registry.register_packages(PackageManager.PACMAN, PacmanBackend(runner))
        registry.register_packages(PackageManager.APK, ApkBackend(runner))
        registry.register_packages(PackageManager.BREW, BrewBackend(runner))
        registry.register_packages(PackageManager.PKG, PkgBackend(runner))
        registry.register_packages(PackageManager.PKG_ADD, PkgAddBackend(runner))
        registry.register_packages(PackageManager.PKGIN, PkginBackend(runner))

        registry.register_services(InitSystem.SYSTEMD, SystemdBackend(runner))
        registry.register_services(InitSystem.OPENRC, OpenRCBackend(runner))
        registry.register_services(InitSystem.SYSVINIT, SysVinitBackend(runner))
        registry.register_services(InitSystem.LAUNCHD, LaunchdBackend(runner))
        registry.register_services(InitSystem.RC, RcBackend(runner))

        shadow = ShadowBackend(runner)
        for family in (OsFamily.DEBIAN, OsFamily.REDHAT, OsFamily.ARCH):
            registry.register_accounts(family, shadow)
        registry.register_accounts(OsFamily.ALPINE, BusyBoxBackend(runner))
        registry.register_accounts(OsFamily.FREEBSD, PwBackend(runner))

        return registry

    # ── Registration ────────────────────────────────────────────

    def register_packages(self, manager: PackageManager, backend: PackageBackend) -> None:
        if manager in self._packages:
            logger.debug("Overwriting package backend for %s", manager.value)
        self._packages[manager] = backend

    def register_services(self, init: InitSystem, backend: ServiceBackend) -> None:
        if init in self._services:
            logger.debug("Overwriting service backend for %s", init.value)
        self._services[init] = backend

    def register_accounts(self, family: OsFamily, backend: AccountBackend) -> None:
        if family in self._accounts:
            logger.debug("Overwriting account backend for %s", family.value)
        self._accounts[family] = backend

    # ── Lookup ──────────────────────────────────────────────────

    def packages(self, caps: SystemCapabilities) -> PackageBackend:
        """Backend for the detected package manager."""
        if caps.package_manager is None:
            raise CapabilityUnsupported("no supported package manager detected")
        backend = self._packages.get(caps.package_manager)
        if backend is None:
            raise CapabilityUnsupported(
                f"no backend for package manager '{caps.package_manager.value}'"
            )
        return backend

    def services(self, caps: SystemCapabilities) -> ServiceBackend:
        """Backend for the detected init system."""
        if caps.init_system is None:
            raise CapabilityUnsupported("no supported init system detected")
        backend = self._services.get(caps.init_system)
        if backend is None:
            raise CapabilityUnsupported(
                f"no backend for init system '{caps.init_system.value}'"
            )
        return backend

    def accounts(self, caps: SystemCapabilities) -> AccountBackend:
        """Backend for user/group management on this OS family."""
        backend = self._accounts.get(caps.os_family)
        if backend is None:
            raise CapabilityUnsupported(
                f"user/group management not supported on OS family '{caps.os_family.value}'"
            )
        return backend

    def backend_status(self, caps: SystemCapabilities) -> dict[str, Any]:
        """Which backend each resource family resolves to on this host."""
        status: dict[str, Any] = {}
        for family, lookup in (
            ("packages", self.packages),
            ("services", self.services),
            ("accounts", self.accounts),
        ):
            try:
                backend = lookup(caps)
                status[family] = {"available": True, "backend": backend.name}
            except CapabilityUnsupported as e:
                status[family] = {"available": False, "reason": str(e)}
        return status
