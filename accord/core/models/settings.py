"""
Settings model — the optional accord configuration file.

    log_level: verbose
    log_file: /var/log/accord.log
    color: false
    capabilities:
      package_manager: dnf
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from accord.core.models.capabilities import InitSystem, OsFamily, PackageManager

RunLevel = Literal["quiet", "normal", "verbose", "debug"]

RUN_LEVELS: tuple[str, ...] = ("quiet", "normal", "verbose", "debug")


class CapabilityOverrides(BaseModel):
    """Pins for capabilities the detector gets wrong on a given host."""

    model_config = ConfigDict(extra="forbid")

    os_family: OsFamily | None = None
    package_manager: PackageManager | None = None
    init_system: InitSystem | None = None


class Settings(BaseModel):
    """Validated configuration. Every field has a usable default."""

    model_config = ConfigDict(extra="forbid")

    log_level: RunLevel = "verbose"
    log_file: str | None = None
    log_file_level: RunLevel = "debug"
    color: bool = True
    capabilities: CapabilityOverrides = CapabilityOverrides()

    # where the settings came from; "defaults" when no file was found
    source: str = "defaults"
