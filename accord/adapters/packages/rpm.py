"""
RPM-based backends — dnf (Fedora, RHEL 8+) and yum (legacy RHEL/CentOS).

Both read installed state from ``rpm`` and differ only in the front-end
used for changes.
"""

from __future__ import annotations

from accord.adapters.base import PackageBackend, PackageInfo


class _RpmBackend(PackageBackend):
    tool = ""

    @property
    def name(self) -> str:
        return self.tool

    def query(self, package: str) -> PackageInfo:
        result = self.runner.run(
            ["rpm", "-q", "--queryformat", "%{VERSION}-%{RELEASE}", package]
        )
        if not result.ok:
            return PackageInfo(name=package)
        return PackageInfo(
            name=package,
            installed=True,
            version=result.stdout.strip() or None,
        )

    def install(self, package: str, version: str | None = None) -> None:
        target = f"{package}-{version}" if version else package
        self.runner.run_checked([self.tool, "install", "-y", target])

    def remove(self, package: str) -> None:
        self.runner.run_checked([self.tool, "remove", "-y", package])


class DnfBackend(_RpmBackend):
    tool = "dnf"


class YumBackend(_RpmBackend):
    tool = "yum"
