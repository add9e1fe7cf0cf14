"""
Filesystem helpers — stat, atomic write, ownership lookups.

Read helpers never modify anything and are safe to call from ``check``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

try:
    import grp
    import pwd
except ImportError:  # not available on Windows
    grp = None  # type: ignore[assignment]
    pwd = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def ownership_supported() -> bool:
    """Whether this platform exposes user/group databases."""
    return pwd is not None and grp is not None and hasattr(os, "chown")


def stat_or_none(path: Path) -> os.stat_result | None:
    """``os.stat`` that returns None when the path does not exist.

    Symlinks are followed; a dangling link counts as absent. Any other
    ``OSError`` (permission, I/O, loop) propagates.
    """
    try:
        return os.stat(path)
    except FileNotFoundError:
        return None
    except NotADirectoryError:
        # a parent component is a regular file: the path cannot exist
        return None


def resolve_uid(owner: str) -> int | None:
    """User name or numeric id → uid, or None if there is no such user."""
    if owner.isdigit():
        return int(owner)
    if pwd is None:
        return None
    try:
        return pwd.getpwnam(owner).pw_uid
    except KeyError:
        return None


def resolve_gid(group: str) -> int | None:
    """Group name or numeric id → gid, or None if there is no such group."""
    if group.isdigit():
        return int(group)
    if grp is None:
        return None
    try:
        return grp.getgrnam(group).gr_gid
    except KeyError:
        return None


def content_matches(path: Path, size: int, desired: bytes) -> bool:
    """Compare file content: length first, bytes only when lengths agree."""
    if size != len(desired):
        return False
    return path.read_bytes() == desired


def write_atomic(path: Path, content: bytes, mode: int | None = None) -> None:
    """Replace ``path`` with ``content`` atomically.

    Writes to a temp file in the same directory, then renames over the
    target, so readers never see a half-written file. The existing file's
    permission bits are kept unless ``mode`` is given.
    """
    existing: os.stat_result | None = None
    try:
        existing = os.stat(path)
    except FileNotFoundError:
        pass

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if existing is not None and ownership_supported() and os.geteuid() == 0:
            os.chown(tmp_path, existing.st_uid, existing.st_gid)
        final_mode = mode
        if final_mode is None and existing is not None:
            final_mode = existing.st_mode & 0o7777
        if final_mode is None:
            # mkstemp creates 0600; give new files the usual umask-derived bits
            umask = os.umask(0)
            os.umask(umask)
            final_mode = 0o666 & ~umask
        os.chmod(tmp_path, final_mode)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    logger.debug("Wrote %d bytes to %s", len(content), path)
