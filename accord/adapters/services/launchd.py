"""launchd backend — macOS system domain."""

from __future__ import annotations

from accord.adapters.base import ServiceBackend, ServiceStatus

DOMAIN = "system"


class LaunchdBackend(ServiceBackend):
    """Manage system daemons by label with launchctl."""

    @property
    def name(self) -> str:
        return "launchd"

    def status(self, service: str) -> ServiceStatus:
        printed = self.runner.run(["launchctl", "print", f"{DOMAIN}/{service}"])
        running = printed.ok and "state = running" in printed.stdout

        disabled = self.runner.run(["launchctl", "print-disabled", DOMAIN])
        enabled = printed.ok
        if disabled.ok:
            # '"com.example.daemon" => disabled' (or "=> true" on older releases)
            for line in disabled.stdout.splitlines():
                label, sep, value = line.strip().partition("=>")
                if sep and label.strip().strip('"') == service:
                    enabled = value.strip() not in ("disabled", "true")
                    break
        return ServiceStatus(name=service, running=running, enabled=enabled)

    def start(self, service: str) -> None:
        self.runner.run_checked(["launchctl", "kickstart", f"{DOMAIN}/{service}"])

    def stop(self, service: str) -> None:
        self.runner.run_checked(["launchctl", "kill", "SIGTERM", f"{DOMAIN}/{service}"])

    def enable(self, service: str) -> None:
        self.runner.run_checked(["launchctl", "enable", f"{DOMAIN}/{service}"])

    def disable(self, service: str) -> None:
        self.runner.run_checked(["launchctl", "disable", f"{DOMAIN}/{service}"])
