"""systemd backend — ``systemctl``."""

from __future__ import annotations

from accord.adapters.base import ServiceBackend, ServiceStatus


class SystemdBackend(ServiceBackend):
    """Manage units with systemctl. Bare names get systemctl's ``.service`` default."""

    @property
    def name(self) -> str:
        return "systemd"

    def status(self, service: str) -> ServiceStatus:
        active = self.runner.run(["systemctl", "is-active", "--quiet", service])
        enabled = self.runner.run(["systemctl", "is-enabled", "--quiet", service])
        return ServiceStatus(name=service, running=active.ok, enabled=enabled.ok)

    def start(self, service: str) -> None:
        self.runner.run_checked(["systemctl", "start", service])

    def stop(self, service: str) -> None:
        self.runner.run_checked(["systemctl", "stop", service])

    def enable(self, service: str) -> None:
        self.runner.run_checked(["systemctl", "enable", service])

    def disable(self, service: str) -> None:
        self.runner.run_checked(["systemctl", "disable", service])
