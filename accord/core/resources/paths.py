"""
Path resources — shared behaviour of File and Directory.

Both compare existence first, then each declared attribute: permission
bits, owner, group. Attributes that are not declared are never touched.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Literal

from pydantic import field_validator

from accord.adapters.shell.filesystem import ownership_supported, resolve_gid, resolve_uid
from accord.core.errors import OperationFailed
from accord.core.models.resource import Change
from accord.core.resources.base import Resource

logger = logging.getLogger(__name__)

# setuid, setgid and sticky bits are outside the managed set
MAX_MODE = 0o777


def parse_mode(value: object) -> int | None:
    """Accept ``0o755``-style ints or octal strings ("0755", "755", "0o755")."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("mode must be an octal number, not a boolean")
    if isinstance(value, int):
        mode = value
    elif isinstance(value, str):
        text = value.strip().lower().removeprefix("0o")
        if not text or any(c not in "01234567" for c in text):
            raise ValueError(f"invalid octal mode: {value!r}")
        mode = int(text, 8)
    else:
        raise ValueError(f"mode must be an octal number, got {type(value).__name__}")
    if not 0 <= mode <= MAX_MODE:
        raise ValueError(f"mode {oct(mode)} out of range (0..0o777)")
    return mode


class PathResource(Resource):
    """A filesystem object identified by an absolute path."""

    path: str
    mode: int | None = None
    owner: str | None = None
    group: str | None = None
    state: Literal["present", "absent"] = "present"

    @field_validator("path")
    @classmethod
    def _absolute_path(cls, value: str) -> str:
        if not os.path.isabs(value):
            raise ValueError(f"path must be absolute: {value!r}")
        return value

    @field_validator("mode", mode="before")
    @classmethod
    def _octal_mode(cls, value: object) -> int | None:
        return parse_mode(value)

    @field_validator("owner", "group", mode="before")
    @classmethod
    def _name_or_id(cls, value: object) -> object:
        # YAML gives ints for "owner: 0"
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def key(self) -> str:
        return self.path

    @property
    def target(self) -> Path:
        return Path(self.path)

    # ── Attribute diff ──────────────────────────────────────────

    def attribute_changes(self, st: os.stat_result | None) -> list[Change]:
        """Changes to mode/owner/group. ``st`` is None for a path about to be created."""
        changes: list[Change] = []

        if self.mode is not None:
            if st is None or stat.S_IMODE(st.st_mode) & MAX_MODE != self.mode:
                changes.append(Change("chmod", f"{self.mode:04o}"))

        if self.owner is None and self.group is None:
            return changes
        if not ownership_supported():
            logger.debug("Ownership not supported on this platform; ignoring for %s", self.path)
            return changes

        if self.owner is not None:
            uid = resolve_uid(self.owner)
            # an owner that does not exist yet can never match
            if st is None or uid is None or st.st_uid != uid:
                changes.append(Change("chown", self.owner))

        if self.group is not None:
            gid = resolve_gid(self.group)
            if st is None or gid is None or st.st_gid != gid:
                changes.append(Change("chgrp", self.group))

        return changes

    def enforce_attribute(self, change: Change) -> bool:
        """Apply a chmod/chown/chgrp change. Returns False for other actions."""
        if change.action == "chmod" and self.mode is not None:
            # keep setuid/setgid/sticky bits the manifest does not manage
            special = stat.S_IMODE(os.stat(self.path).st_mode) & ~MAX_MODE
            os.chmod(self.path, special | self.mode)
        elif change.action == "chown" and self.owner is not None:
            uid = resolve_uid(self.owner)
            if uid is None:
                raise OperationFailed(f"user '{self.owner}' does not exist")
            os.chown(self.path, uid, -1)
        elif change.action == "chgrp" and self.group is not None:
            gid = resolve_gid(self.group)
            if gid is None:
                raise OperationFailed(f"group '{self.group}' does not exist")
            os.chown(self.path, -1, gid)
        else:
            return False
        return True
