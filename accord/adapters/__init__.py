"""Adapters — backends for package managers, init systems and account tools.

Public re-exports for convenient access.
"""

from accord.adapters.base import (
    AccountBackend,
    Backend,
    GroupInfo,
    PackageBackend,
    PackageInfo,
    ServiceBackend,
    ServiceStatus,
    UserInfo,
)
from accord.adapters.mock import MockAccountBackend, MockPackageBackend, MockServiceBackend
from accord.adapters.registry import BackendRegistry
from accord.adapters.shell.command import CommandResult, CommandRunner

__all__ = [
    "AccountBackend",
    "Backend",
    "BackendRegistry",
    "CommandResult",
    "CommandRunner",
    "GroupInfo",
    "MockAccountBackend",
    "MockPackageBackend",
    "MockServiceBackend",
    "PackageBackend",
    "PackageInfo",
    "ServiceBackend",
    "ServiceStatus",
    "UserInfo",
]
