"""Directory resource — creation, removal, permissions and ownership."""

from __future__ import annotations

import errno
import logging
import os
import stat
from typing import ClassVar

from accord.adapters.shell.filesystem import stat_or_none
from accord.core.errors import CheckFailed, OperationFailed
from accord.core.models.resource import Change, ResourceKind
from accord.core.resources.base import ExecutionContext, unknown_change
from accord.core.resources.paths import PathResource

logger = logging.getLogger(__name__)


class Directory(PathResource):
    """A directory. Missing parents are created; removal requires it to be empty."""

    kind: ClassVar[ResourceKind] = ResourceKind.DIRECTORY

    def plan(self, ctx: ExecutionContext) -> list[Change]:
        st = stat_or_none(self.target)

        if st is None:
            if self.state == "absent":
                return []
            return [Change("create"), *self.attribute_changes(None)]

        if not stat.S_ISDIR(st.st_mode):
            raise CheckFailed(f"{self.path} exists but is not a directory")

        if self.state == "absent":
            return [Change("remove")]
        return self.attribute_changes(st)

    def converge(self, ctx: ExecutionContext, changes: list[Change]) -> None:
        for change in changes:
            if change.action == "create":
                self.target.mkdir(parents=True, exist_ok=True)
                logger.debug("Created directory %s", self.path)
            elif change.action == "remove":
                try:
                    os.rmdir(self.path)
                except OSError as e:
                    if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                        raise OperationFailed(
                            f"cannot remove {self.path}: directory not empty"
                        ) from e
                    raise
            elif not self.enforce_attribute(change):
                raise unknown_change(self, change)
