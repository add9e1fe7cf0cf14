"""
apt backend — Debian and Ubuntu.

State is read with ``dpkg-query``; changes go through ``apt-get`` in
non-interactive mode.
"""

from __future__ import annotations

from accord.adapters.base import PackageBackend, PackageInfo

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class AptBackend(PackageBackend):
    """Debian package management via dpkg/apt-get."""

    @property
    def name(self) -> str:
        return "apt"

    def query(self, package: str) -> PackageInfo:
        result = self.runner.run(
            ["dpkg-query", "-W", "-f=${Status}\t${Version}", package]
        )
        if not result.ok:
            return PackageInfo(name=package)

        status, _, version = result.stdout.strip().partition("\t")
        # "install ok installed" vs "deinstall ok config-files" etc.
        if status.split()[-1:] != ["installed"]:
            return PackageInfo(name=package)
        return PackageInfo(name=package, installed=True, version=version or None)

    def install(self, package: str, version: str | None = None) -> None:
        # a trailing "*" lets "1.24.0" select "1.24.0-1ubuntu3"
        target = f"{package}={version}*" if version else package
        self.runner.run_checked(
            ["apt-get", "install", "-y", "-q", target],
            env_overrides=_APT_ENV,
        )

    def remove(self, package: str) -> None:
        self.runner.run_checked(
            ["apt-get", "remove", "-y", "-q", package],
            env_overrides=_APT_ENV,
        )
