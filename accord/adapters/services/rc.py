"""BSD rc.d backend — service(8) plus sysrc(8) for ``<name>_enable``."""

from __future__ import annotations

from accord.adapters.base import ServiceBackend, ServiceStatus


def _rcvar(service: str) -> str:
    return f"{service.replace('-', '_')}_enable"


class RcBackend(ServiceBackend):
    """FreeBSD/NetBSD style rc.d services."""

    @property
    def name(self) -> str:
        return "rc"

    def status(self, service: str) -> ServiceStatus:
        # onestatus works whether or not the service is enabled
        running = self.runner.run(["service", service, "onestatus"])
        rcvar = self.runner.run(["sysrc", "-n", _rcvar(service)])
        enabled = rcvar.ok and rcvar.stdout.strip().upper() in ("YES", "TRUE", "ON", "1")
        return ServiceStatus(name=service, running=running.ok, enabled=enabled)

    def start(self, service: str) -> None:
        self.runner.run_checked(["service", service, "onestart"])

    def stop(self, service: str) -> None:
        self.runner.run_checked(["service", service, "onestop"])

    def enable(self, service: str) -> None:
        self.runner.run_checked(["sysrc", f"{_rcvar(service)}=YES"])

    def disable(self, service: str) -> None:
        self.runner.run_checked(["sysrc", f"{_rcvar(service)}=NO"])
