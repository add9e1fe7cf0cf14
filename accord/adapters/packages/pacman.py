"""pacman backend — Arch Linux and derivatives."""

from __future__ import annotations

from accord.adapters.base import PackageBackend, PackageInfo
from accord.core.errors import OperationFailed


class PacmanBackend(PackageBackend):
    """Arch package management. Only the repository version can be installed."""

    supports_versions = False

    @property
    def name(self) -> str:
        return "pacman"

    def query(self, package: str) -> PackageInfo:
        result = self.runner.run(["pacman", "-Q", package])
        if not result.ok:
            return PackageInfo(name=package)
        # "nginx 1.24.0-1"
        parts = result.stdout.split()
        version = parts[1] if len(parts) > 1 else None
        return PackageInfo(name=package, installed=True, version=version)

    def install(self, package: str, version: str | None = None) -> None:
        if version:
            raise OperationFailed(
                f"pacman cannot install a pinned version ({package} {version})"
            )
        self.runner.run_checked(["pacman", "-S", "--noconfirm", "--needed", package])

    def remove(self, package: str) -> None:
        self.runner.run_checked(["pacman", "-R", "--noconfirm", package])
