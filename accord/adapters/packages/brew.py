"""Homebrew backend — macOS."""

from __future__ import annotations

from accord.adapters.base import PackageBackend, PackageInfo


class BrewBackend(PackageBackend):
    """Homebrew formulae. Versions are installed as ``name@version`` formulae."""

    @property
    def name(self) -> str:
        return "brew"

    def query(self, package: str) -> PackageInfo:
        result = self.runner.run(["brew", "list", "--versions", package])
        parts = result.stdout.split()
        if not result.ok or not parts:
            return PackageInfo(name=package)
        # "wget 1.21.3 1.21.4": last entry is the linked one
        version = parts[-1] if len(parts) > 1 else None
        return PackageInfo(name=package, installed=True, version=version)

    def install(self, package: str, version: str | None = None) -> None:
        target = f"{package}@{version}" if version else package
        self.runner.run_checked(["brew", "install", target])

    def remove(self, package: str) -> None:
        self.runner.run_checked(["brew", "uninstall", package])
