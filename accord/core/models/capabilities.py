"""
System capabilities — what the detector learned about the host.

A ``SystemCapabilities`` snapshot is produced once per run and shared
read-only by every resource. Unresolved fields stay ``unknown``/``None``;
resources that need them fail at check/apply time instead.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class OsFamily(str, Enum):
    """Operating system family."""

    DEBIAN = "debian"      # Debian, Ubuntu
    REDHAT = "redhat"      # RHEL, CentOS, Fedora, Rocky
    ARCH = "arch"          # Arch Linux, Manjaro
    ALPINE = "alpine"
    MACOS = "macos"
    FREEBSD = "freebsd"
    OPENBSD = "openbsd"
    NETBSD = "netbsd"
    UNKNOWN = "unknown"


class PackageManager(str, Enum):
    """Package manager front-end."""

    APT = "apt"
    YUM = "yum"
    DNF = "dnf"
    PACMAN = "pacman"
    APK = "apk"
    BREW = "brew"
    PKG = "pkg"            # FreeBSD
    PKG_ADD = "pkg_add"    # OpenBSD
    PKGIN = "pkgin"        # NetBSD


class InitSystem(str, Enum):
    """Service manager."""

    SYSTEMD = "systemd"
    SYSVINIT = "sysvinit"
    LAUNCHD = "launchd"
    RC = "rc"              # BSD rc.d
    OPENRC = "openrc"


class SystemCapabilities(BaseModel):
    """Immutable snapshot of the host's platform attributes."""

    model_config = ConfigDict(frozen=True)

    os_family: OsFamily = OsFamily.UNKNOWN
    package_manager: PackageManager | None = None
    init_system: InitSystem | None = None

    def describe(self) -> str:
        pm = self.package_manager.value if self.package_manager else "none"
        init = self.init_system.value if self.init_system else "none"
        return f"os={self.os_family.value} packages={pm} init={init}"
