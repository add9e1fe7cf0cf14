"""
Apply use case — load settings and manifest, detect the host, reconcile.

Ties together the settings loader, manifest loader, capability detector
and engine, and turns every failure into an exit code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from accord.adapters.registry import BackendRegistry
from accord.core.config.loader import load_settings
from accord.core.config.manifest_loader import load_manifest
from accord.core.engine.reconciler import reconcile
from accord.core.errors import ConfigError, ExitCode, ParseError
from accord.core.models.capabilities import SystemCapabilities
from accord.core.models.settings import Settings
from accord.core.models.summary import RunSummary
from accord.core.observability.logging_config import resolve_run_level
from accord.core.observability.reporter import RunReporter
from accord.core.services.detection import detect

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of the apply use case."""

    manifest_path: Path | None = None
    settings_source: str = "defaults"
    run_level: str = "verbose"
    dry_run: bool = False
    capabilities: SystemCapabilities | None = None
    summary: RunSummary | None = None
    error: str | None = None
    error_type: str | None = None
    exit_code: int = ExitCode.SUCCESS

    @property
    def ok(self) -> bool:
        return self.exit_code == ExitCode.SUCCESS

    def to_dict(self) -> dict:
        result: dict = {
            "manifest": str(self.manifest_path) if self.manifest_path else None,
            "dry_run": self.dry_run,
            "exit_code": int(self.exit_code),
        }
        if self.error:
            result["error"] = self.error
            result["error_type"] = self.error_type
            return result

        result["settings"] = self.settings_source
        if self.capabilities is not None:
            result["capabilities"] = self.capabilities.model_dump(mode="json")
        if self.summary is not None:
            result["summary"] = self.summary.to_dict()
        return result


def run_apply(
    manifest_path: Path,
    config_path: Path | None = None,
    dry_run: bool = False,
    log_level: str | None = None,
    backends: BackendRegistry | None = None,
    capabilities: SystemCapabilities | None = None,
    reporter: RunReporter | None = None,
    settings: Settings | None = None,
) -> ApplyResult:
    """Apply a manifest to this host.

    Args:
        manifest_path: Manifest file to apply.
        config_path: Explicit settings file (ignored when ``settings`` is given).
        dry_run: Report changes without making them.
        log_level: Run level from the command line, if any.
        backends: Backend registry override (tests use mocks).
        capabilities: Skip detection and use these capabilities.
        reporter: Receives per-resource output.
        settings: Already-loaded settings.

    Returns:
        ApplyResult; ``exit_code`` is the process exit code.
    """
    result = ApplyResult(manifest_path=Path(manifest_path), dry_run=dry_run)

    # Settings
    if settings is None:
        try:
            settings = load_settings(config_path)
        except ConfigError as e:
            return _failed(result, e)
    result.settings_source = settings.source
    result.run_level = resolve_run_level(log_level, settings.log_level)

    # Manifest
    try:
        manifest = load_manifest(result.manifest_path)
    except ParseError as e:
        return _failed(result, e)

    # Capabilities
    if capabilities is None:
        overrides = settings.capabilities.model_dump(exclude_none=True)
        capabilities = detect(overrides=overrides)
    result.capabilities = capabilities

    summary = reconcile(
        manifest,
        capabilities,
        dry_run=dry_run,
        backends=backends,
        reporter=reporter,
    )
    result.summary = summary
    result.exit_code = summary.exit_code
    return result


def _failed(result: ApplyResult, exc: ConfigError | ParseError) -> ApplyResult:
    logger.debug("%s", exc)
    result.error = str(exc)
    result.error_type = type(exc).__name__
    result.exit_code = exc.exit_code
    return result
