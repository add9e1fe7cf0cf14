"""apk backend — Alpine Linux."""

from __future__ import annotations

from accord.adapters.base import PackageBackend, PackageInfo
from accord.adapters.packages import strip_package_name


class ApkBackend(PackageBackend):
    """Alpine package management via apk-tools."""

    @property
    def name(self) -> str:
        return "apk"

    def query(self, package: str) -> PackageInfo:
        result = self.runner.run(["apk", "info", "-e", package])
        if not result.ok or not result.stdout.strip():
            return PackageInfo(name=package)

        version = None
        listing = self.runner.run(["apk", "list", "--installed", package])
        if listing.ok:
            # "nginx-1.24.0-r7 x86_64 {nginx} (BSD-2-Clause) [installed]"
            for line in listing.stdout.splitlines():
                token = line.split(" ", 1)[0]
                candidate = strip_package_name(token, package)
                if candidate:
                    version = candidate
                    break
        return PackageInfo(name=package, installed=True, version=version)

    def install(self, package: str, version: str | None = None) -> None:
        # "~" is apk's fuzzy match: "1.24.0" selects "1.24.0-r7"
        target = f"{package}~{version}" if version else package
        self.runner.run_checked(["apk", "add", "--no-progress", target])

    def remove(self, package: str) -> None:
        self.runner.run_checked(["apk", "del", "--no-progress", package])
