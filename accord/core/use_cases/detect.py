"""
Detect use case — show what accord learned about this host.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from accord.adapters.registry import BackendRegistry
from accord.core.config.loader import load_settings
from accord.core.errors import ConfigError
from accord.core.models.capabilities import SystemCapabilities
from accord.core.services.detection import detect

logger = logging.getLogger(__name__)


@dataclass
class DetectResult:
    """Result of the detect use case."""

    capabilities: SystemCapabilities | None = None
    settings_source: str = "defaults"
    overrides: dict[str, str] = field(default_factory=dict)
    backends: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "capabilities": self.capabilities.model_dump(mode="json") if self.capabilities else None,
            "settings": self.settings_source,
            "overrides": self.overrides,
            "backends": self.backends,
        }


def run_detect(
    config_path: Path | None = None,
    root: str | Path = "/",
    backends: BackendRegistry | None = None,
) -> DetectResult:
    """Detect capabilities, applying overrides from the settings file.

    Args:
        config_path: Explicit settings file.
        root: Filesystem root to probe.
        backends: Registry used to report backend availability.
    """
    result = DetectResult()

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.settings_source = settings.source
    result.overrides = settings.capabilities.model_dump(mode="json", exclude_none=True)

    caps = detect(root=root, overrides=settings.capabilities.model_dump(exclude_none=True))
    result.capabilities = caps

    registry = backends if backends is not None else BackendRegistry.default()
    result.backends = registry.backend_status(caps)
    return result
