"""
SysV init backend — ``/etc/init.d`` scripts.

Boot enablement is read from the ``/etc/rc?.d`` start links and changed
with ``update-rc.d`` (Debian family) or ``chkconfig`` (Red Hat family),
whichever is installed.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from accord.adapters.base import ServiceBackend, ServiceStatus
from accord.adapters.shell.command import CommandRunner
from accord.core.errors import OperationFailed

_MULTIUSER_RUNLEVELS = ("2", "3", "4", "5")


class SysVinitBackend(ServiceBackend):
    """Manage init.d scripts via service(8)."""

    def __init__(self, runner: CommandRunner | None = None, etc_dir: Path = Path("/etc")):
        super().__init__(runner)
        self.etc_dir = etc_dir

    @property
    def name(self) -> str:
        return "sysvinit"

    def status(self, service: str) -> ServiceStatus:
        running = self.runner.run(["service", service, "status"])
        return ServiceStatus(
            name=service,
            running=running.ok,
            enabled=self._has_start_link(service),
        )

    def _has_start_link(self, service: str) -> bool:
        for level in _MULTIUSER_RUNLEVELS:
            rc_dir = self.etc_dir / f"rc{level}.d"
            if any(rc_dir.glob(f"S[0-9][0-9]{service}")):
                return True
        return False

    def start(self, service: str) -> None:
        self.runner.run_checked(["service", service, "start"])

    def stop(self, service: str) -> None:
        self.runner.run_checked(["service", service, "stop"])

    def enable(self, service: str) -> None:
        if shutil.which("update-rc.d"):
            self.runner.run_checked(["update-rc.d", service, "defaults"])
        elif shutil.which("chkconfig"):
            self.runner.run_checked(["chkconfig", service, "on"])
        else:
            raise OperationFailed("neither update-rc.d nor chkconfig is installed")

    def disable(self, service: str) -> None:
        if shutil.which("update-rc.d"):
            self.runner.run_checked(["update-rc.d", service, "disable"])
        elif shutil.which("chkconfig"):
            self.runner.run_checked(["chkconfig", service, "off"])
        else:
            raise OperationFailed("neither update-rc.d nor chkconfig is installed")
