"""OpenRC backend — Alpine, Gentoo."""

from __future__ import annotations

from accord.adapters.base import ServiceBackend, ServiceStatus

DEFAULT_RUNLEVEL = "default"


class OpenRCBackend(ServiceBackend):
    """Manage services with rc-service and rc-update (``default`` runlevel)."""

    @property
    def name(self) -> str:
        return "openrc"

    def status(self, service: str) -> ServiceStatus:
        running = self.runner.run(["rc-service", "--quiet", service, "status"])
        listing = self.runner.run(["rc-update", "show", DEFAULT_RUNLEVEL])
        enabled = False
        if listing.ok:
            # " sshd | default"
            for line in listing.stdout.splitlines():
                entry = line.split("|", 1)[0].strip()
                if entry == service:
                    enabled = True
                    break
        return ServiceStatus(name=service, running=running.ok, enabled=enabled)

    def start(self, service: str) -> None:
        self.runner.run_checked(["rc-service", service, "start"])

    def stop(self, service: str) -> None:
        self.runner.run_checked(["rc-service", service, "stop"])

    def enable(self, service: str) -> None:
        self.runner.run_checked(["rc-update", "add", service, DEFAULT_RUNLEVEL])

    def disable(self, service: str) -> None:
        self.runner.run_checked(["rc-update", "del", service, DEFAULT_RUNLEVEL])
