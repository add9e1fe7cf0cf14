"""
File resource — content, permissions and ownership of a regular file.

Content comes from ``content`` (inline text) or ``source`` (a local file
to copy), never both. With neither, an existing file's content is left
alone and a missing file is created empty.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import ClassVar

from pydantic import field_validator, model_validator

from accord.adapters.shell.filesystem import content_matches, stat_or_none, write_atomic
from accord.core.errors import CheckFailed, OperationFailed
from accord.core.models.resource import Change, ResourceKind
from accord.core.resources.base import ExecutionContext, unknown_change
from accord.core.resources.paths import PathResource

logger = logging.getLogger(__name__)


class File(PathResource):
    """A regular file."""

    kind: ClassVar[ResourceKind] = ResourceKind.FILE

    content: str | None = None
    source: str | None = None

    @field_validator("source")
    @classmethod
    def _absolute_source(cls, value: str | None) -> str | None:
        if value is not None and not os.path.isabs(value):
            raise ValueError(f"source must be an absolute path: {value!r}")
        return value

    @model_validator(mode="after")
    def _one_content_origin(self) -> File:
        if self.content is not None and self.source is not None:
            raise ValueError("'content' and 'source' are mutually exclusive")
        return self

    def desired_content(self) -> bytes | None:
        """The bytes the file should hold, or None when content is unmanaged."""
        if self.content is not None:
            return self.content.encode("utf-8")
        if self.source is not None:
            source = Path(self.source)
            if not source.is_file():
                raise CheckFailed(f"source {self.source} does not exist or is not a file")
            return source.read_bytes()
        return None

    def plan(self, ctx: ExecutionContext) -> list[Change]:
        st = stat_or_none(self.target)

        if st is None:
            if self.state == "absent":
                return []
            return [Change("create"), *self.attribute_changes(None)]

        if not stat.S_ISREG(st.st_mode):
            raise CheckFailed(f"{self.path} exists but is not a regular file")

        if self.state == "absent":
            return [Change("remove")]

        changes: list[Change] = []
        desired = self.desired_content()
        if desired is not None and not content_matches(self.target, st.st_size, desired):
            changes.append(Change("write", f"{len(desired)} bytes"))
        changes.extend(self.attribute_changes(st))
        return changes

    def converge(self, ctx: ExecutionContext, changes: list[Change]) -> None:
        for change in changes:
            if change.action in ("create", "write"):
                if not self.target.parent.is_dir():
                    raise OperationFailed(
                        f"cannot write {self.path}: parent directory does not exist"
                    )
                write_atomic(self.target, self.desired_content() or b"", mode=self.mode)
            elif change.action == "remove":
                os.unlink(self.path)
                logger.debug("Removed file %s", self.path)
            elif not self.enforce_attribute(change):
                raise unknown_change(self, change)
