"""
BSD backends — pkg (FreeBSD), pkg_add (OpenBSD), pkgin (NetBSD).
"""

from __future__ import annotations

from accord.adapters.base import PackageBackend, PackageInfo
from accord.adapters.packages import strip_package_name


class PkgBackend(PackageBackend):
    """FreeBSD pkg(8)."""

    @property
    def name(self) -> str:
        return "pkg"

    def query(self, package: str) -> PackageInfo:
        result = self.runner.run(["pkg", "query", "%v", package])
        if not result.ok or not result.stdout.strip():
            return PackageInfo(name=package)
        return PackageInfo(name=package, installed=True, version=result.stdout.strip())

    def install(self, package: str, version: str | None = None) -> None:
        target = f"{package}-{version}" if version else package
        self.runner.run_checked(["pkg", "install", "-y", target])

    def remove(self, package: str) -> None:
        self.runner.run_checked(["pkg", "delete", "-y", package])


class _PkgInfoQuery:
    """Shared ``pkg_info`` lookup for OpenBSD and NetBSD."""

    def _pkg_info(self, package: str, argv: list[str]) -> PackageInfo:
        result = self.runner.run(argv)  # type: ignore[attr-defined]
        if not result.ok:
            return PackageInfo(name=package)
        version = None
        for line in result.stdout.split():
            # OpenBSD prefixes with "inst:"
            token = line.removeprefix("inst:")
            candidate = strip_package_name(token, package)
            if candidate:
                version = candidate
                break
        return PackageInfo(name=package, installed=True, version=version)


class PkgAddBackend(_PkgInfoQuery, PackageBackend):
    """OpenBSD pkg_add(1) / pkg_delete(1)."""

    @property
    def name(self) -> str:
        return "pkg_add"

    def query(self, package: str) -> PackageInfo:
        return self._pkg_info(package, ["pkg_info", "-e", f"{package}-*"])

    def install(self, package: str, version: str | None = None) -> None:
        target = f"{package}-{version}" if version else package
        self.runner.run_checked(["pkg_add", "-I", target])

    def remove(self, package: str) -> None:
        self.runner.run_checked(["pkg_delete", "-I", package])


class PkginBackend(_PkgInfoQuery, PackageBackend):
    """NetBSD pkgin(1)."""

    @property
    def name(self) -> str:
        return "pkgin"

    def query(self, package: str) -> PackageInfo:
        return self._pkg_info(package, ["pkg_info", "-E", package])

    def install(self, package: str, version: str | None = None) -> None:
        target = f"{package}-{version}" if version else package
        self.runner.run_checked(["pkgin", "-y", "install", target])

    def remove(self, package: str) -> None:
        self.runner.run_checked(["pkgin", "-y", "remove", package])
