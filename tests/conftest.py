"""
Shared test fixtures and configuration.
"""

import logging
import os
from pathlib import Path

import pytest

from accord.adapters.mock import MockAccountBackend, MockPackageBackend, MockServiceBackend
from accord.adapters.registry import BackendRegistry
from accord.core.models.capabilities import (
    InitSystem,
    OsFamily,
    PackageManager,
    SystemCapabilities,
)
from accord.core.resources.base import ExecutionContext


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep the caller's accord environment out of every test."""
    for var in (
        "ACCORD_CONFIG",
        "ACCORD_LOG_LEVEL",
        "ACCORD_LOG_FILE",
        "ACCORD_LOG_FILE_LEVEL",
        "NO_COLOR",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def restore_logging():
    """Put the root logger back after a test reconfigures it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def caps() -> SystemCapabilities:
    """A Debian host with apt and systemd."""
    return SystemCapabilities(
        os_family=OsFamily.DEBIAN,
        package_manager=PackageManager.APT,
        init_system=InitSystem.SYSTEMD,
    )


@pytest.fixture
def packages() -> MockPackageBackend:
    return MockPackageBackend(backend_name="apt")


@pytest.fixture
def services() -> MockServiceBackend:
    return MockServiceBackend()


@pytest.fixture
def accounts() -> MockAccountBackend:
    return MockAccountBackend()


@pytest.fixture
def registry(packages, services, accounts) -> BackendRegistry:
    """A registry with in-memory backends for the ``caps`` host."""
    reg = BackendRegistry()
    reg.register_packages(PackageManager.APT, packages)
    reg.register_services(InitSystem.SYSTEMD, services)
    reg.register_accounts(OsFamily.DEBIAN, accounts)
    return reg


@pytest.fixture
def ctx(caps, registry) -> ExecutionContext:
    return ExecutionContext(capabilities=caps, backends=registry)


@pytest.fixture
def current_user() -> str:
    """Name (or uid) of the user running the tests, for ownership checks."""
    try:
        import pwd

        return pwd.getpwuid(os.getuid()).pw_name
    except (ImportError, KeyError):
        return str(os.getuid())


@pytest.fixture
def manifest_file(tmp_path: Path):
    """Write manifest text to a file and return its path."""

    def _write(text: str, name: str = "site.yml") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write
