"""
Capability detection — learn the host's OS family, package manager and
init system.

Detection is probe-based: it reads ``/etc/os-release`` and checks for
well-known executables and init markers. Every probe path is taken
relative to ``root`` so tests can point the detector at a fake tree.

Pure inspection — never modifies the host and never raises. A probe that
cannot decide leaves its field unknown/None.
"""

from __future__ import annotations

import logging
import platform
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from accord.core.models.capabilities import (
    InitSystem,
    OsFamily,
    PackageManager,
    SystemCapabilities,
)

logger = logging.getLogger(__name__)

OS_RELEASE_PATHS = ("etc/os-release", "usr/lib/os-release")

# os-release ID / ID_LIKE token → family
_DISTRO_FAMILIES: dict[str, OsFamily] = {
    "debian": OsFamily.DEBIAN,
    "ubuntu": OsFamily.DEBIAN,
    "fedora": OsFamily.REDHAT,
    "rhel": OsFamily.REDHAT,
    "centos": OsFamily.REDHAT,
    "rocky": OsFamily.REDHAT,
    "almalinux": OsFamily.REDHAT,
    "arch": OsFamily.ARCH,
    "manjaro": OsFamily.ARCH,
    "alpine": OsFamily.ALPINE,
}

# platform.system() → family, for hosts without os-release
_SYSTEM_FAMILIES: dict[str, OsFamily] = {
    "Darwin": OsFamily.MACOS,
    "FreeBSD": OsFamily.FREEBSD,
    "OpenBSD": OsFamily.OPENBSD,
    "NetBSD": OsFamily.NETBSD,
}

# Checked in order; first existing path wins.
PACKAGE_MANAGER_PROBES: tuple[tuple[str, PackageManager], ...] = (
    ("usr/bin/apt-get", PackageManager.APT),
    ("usr/bin/dnf", PackageManager.DNF),
    ("usr/bin/yum", PackageManager.YUM),
    ("usr/bin/pacman", PackageManager.PACMAN),
    ("sbin/apk", PackageManager.APK),
    ("usr/local/bin/brew", PackageManager.BREW),
    ("opt/homebrew/bin/brew", PackageManager.BREW),
    ("usr/sbin/pkg", PackageManager.PKG),
    ("usr/sbin/pkg_add", PackageManager.PKG_ADD),
    ("usr/pkg/bin/pkgin", PackageManager.PKGIN),
)

INIT_SYSTEM_PROBES: tuple[tuple[str, InitSystem], ...] = (
    ("bin/systemctl", InitSystem.SYSTEMD),
    ("usr/bin/systemctl", InitSystem.SYSTEMD),
    ("bin/launchctl", InitSystem.LAUNCHD),
    ("sbin/openrc", InitSystem.OPENRC),
    ("etc/rc", InitSystem.RC),
    ("etc/init.d", InitSystem.SYSVINIT),
)


def parse_os_release(text: str) -> dict[str, str]:
    """Parse os-release ``KEY=value`` lines, stripping optional quotes."""
    fields: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        fields[key.strip()] = value
    return fields


def family_from_os_release(fields: Mapping[str, str]) -> OsFamily:
    """Map os-release ``ID`` (first) then ``ID_LIKE`` tokens to a family."""
    tokens = fields.get("ID", "").lower().split()
    tokens += fields.get("ID_LIKE", "").lower().split()
    for token in tokens:
        family = _DISTRO_FAMILIES.get(token)
        if family is not None:
            return family
    return OsFamily.UNKNOWN


def _read_os_release(root: Path) -> str | None:
    for rel in OS_RELEASE_PATHS:
        path = root / rel
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Cannot read %s: %s", path, e)
    return None


def detect_os_family(
    root: Path,
    os_release: str | None = None,
    system: str | None = None,
) -> OsFamily:
    text = os_release if os_release is not None else _read_os_release(root)
    if text is not None:
        family = family_from_os_release(parse_os_release(text))
        if family is not OsFamily.UNKNOWN:
            return family
        logger.debug("os-release present but distribution not recognised")

    system = system if system is not None else platform.system()
    family = _SYSTEM_FAMILIES.get(system, OsFamily.UNKNOWN)
    if family is OsFamily.UNKNOWN:
        logger.debug("Unrecognised platform %r", system)
    return family


def _first_existing(root: Path, probes):
    for rel, value in probes:
        path = root / rel
        try:
            if path.exists():
                logger.debug("Found %s → %s", path, value.value)
                return value
        except OSError as e:
            logger.debug("Cannot probe %s: %s", path, e)
    return None


def detect_package_manager(root: Path) -> PackageManager | None:
    return _first_existing(root, PACKAGE_MANAGER_PROBES)


def detect_init_system(root: Path) -> InitSystem | None:
    return _first_existing(root, INIT_SYSTEM_PROBES)


def detect(
    root: str | Path = "/",
    os_release: str | None = None,
    overrides: Mapping[str, object] | None = None,
    *,
    system: str | None = None,
) -> SystemCapabilities:
    """Probe the host and return its capabilities.

    Args:
        root: Filesystem root every probe path is resolved against.
        os_release: os-release content to use instead of reading the file.
        overrides: Field → value pins (e.g. from the config file) applied
            after probing. ``None`` values are ignored.
        system: Value to use instead of ``platform.system()``.
    """
    root = Path(root)
    probed = {
        "os_family": detect_os_family(root, os_release, system),
        "package_manager": detect_package_manager(root),
        "init_system": detect_init_system(root),
    }
    detected = dict(probed)

    for field_name, value in (overrides or {}).items():
        if value is None:
            continue
        if field_name not in detected:
            logger.warning("Ignoring unknown capability override '%s'", field_name)
            continue
        logger.debug("Capability %s pinned to %s by configuration", field_name, value)
        detected[field_name] = value

    try:
        caps = SystemCapabilities(**detected)
    except ValidationError as e:
        logger.warning("Invalid capability override, using detected values: %s", e)
        caps = SystemCapabilities(**probed)

    logger.info("Detected %s", caps.describe())
    return caps
