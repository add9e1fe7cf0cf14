"""
Domain models — capability snapshot, resource outcomes, manifest, summary.

All models are re-exported here for convenient access:

    from accord.core.models import SystemCapabilities, ResourceResult, RunSummary
"""

from accord.core.models.capabilities import (
    InitSystem,
    OsFamily,
    PackageManager,
    SystemCapabilities,
)
from accord.core.models.manifest import Manifest
from accord.core.models.resource import (
    KIND_ORDER,
    Change,
    ResourceKind,
    ResourceResult,
    ResourceState,
)
from accord.core.models.settings import RUN_LEVELS, CapabilityOverrides, RunLevel, Settings
from accord.core.models.summary import ResourceError, RunSummary

__all__ = [
    # resource.py
    "KIND_ORDER",
    # settings.py
    "RUN_LEVELS",
    "CapabilityOverrides",
    "Change",
    # capabilities.py
    "InitSystem",
    # manifest.py
    "Manifest",
    "OsFamily",
    "PackageManager",
    # summary.py
    "ResourceError",
    "ResourceKind",
    "ResourceResult",
    "ResourceState",
    "RunLevel",
    "RunSummary",
    "Settings",
    "SystemCapabilities",
]
