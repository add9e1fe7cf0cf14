"""Package resource — installed or absent, optionally pinned to a version."""

from __future__ import annotations

import logging
import re
from typing import ClassVar, Literal

from pydantic import field_validator

from accord.core.errors import CapabilityUnsupported
from accord.core.models.resource import Change, ResourceKind
from accord.core.resources.base import ExecutionContext, Resource, unknown_change

logger = logging.getLogger(__name__)

_EPOCH = re.compile(r"^\d+:")
_VERSION_SEPARATORS = "-+~._"


def version_matches(installed: str | None, desired: str) -> bool:
    """Whether an installed version satisfies the declared one.

    The epoch ("1:") is ignored, and a declared "2.4" matches an installed
    "2.4-1ubuntu3" or "2.4.52", so manifests need not spell out the
    distribution revision.
    """
    if installed is None:
        return False
    installed = _EPOCH.sub("", installed)
    desired = _EPOCH.sub("", desired)
    if installed == desired:
        return True
    return installed.startswith(desired) and installed[len(desired)] in _VERSION_SEPARATORS


class Package(Resource):
    kind: ClassVar[ResourceKind] = ResourceKind.PACKAGE

    name: str
    state: Literal["installed", "absent"] = "installed"
    version: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_text(cls, value: object) -> object:
        # YAML reads "version: 1.2" as a float
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def key(self) -> str:
        return self.name

    def plan(self, ctx: ExecutionContext) -> list[Change]:
        backend = ctx.backends.packages(ctx.capabilities)
        if self.version is not None and self.state == "installed" and not backend.supports_versions:
            raise CapabilityUnsupported(
                f"package manager '{backend.name}' cannot install pinned versions"
            )

        info = backend.query(self.name)

        if self.state == "absent":
            return [Change("remove")] if info.installed else []

        if not info.installed:
            return [Change("install", self.version or "")]
        if self.version is not None and not version_matches(info.version, self.version):
            logger.debug(
                "Package %s at %s, want %s", self.name, info.version, self.version
            )
            return [Change("upgrade", self.version)]
        return []

    def converge(self, ctx: ExecutionContext, changes: list[Change]) -> None:
        backend = ctx.backends.packages(ctx.capabilities)
        for change in changes:
            if change.action in ("install", "upgrade"):
                backend.install(self.name, self.version)
            elif change.action == "remove":
                backend.remove(self.name)
            else:
                raise unknown_change(self, change)
