"""
Manifest check use case — validate a manifest without touching the host.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from accord.core.config.manifest_loader import load_manifest
from accord.core.errors import ExitCode, ParseError


@dataclass
class ManifestCheckResult:
    """Result of manifest validation."""

    valid: bool = False
    manifest_path: Path | None = None
    counts: dict[str, int] = field(default_factory=dict)
    error: str | None = None
    line: int | None = None
    column: int | None = None

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def exit_code(self) -> int:
        return ExitCode.SUCCESS if self.valid else ExitCode.PARSE_ERROR

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "manifest": str(self.manifest_path) if self.manifest_path else None,
            "total": self.total,
            "counts": self.counts,
            "error": self.error,
            "line": self.line,
            "column": self.column,
        }


def check_manifest(manifest_path: Path) -> ManifestCheckResult:
    """Parse a manifest and count its resources per section."""
    result = ManifestCheckResult(manifest_path=Path(manifest_path))

    try:
        manifest = load_manifest(result.manifest_path)
    except ParseError as e:
        result.error = str(e)
        result.line = e.line
        result.column = e.column
        return result

    result.valid = True
    result.counts = manifest.counts()
    return result
