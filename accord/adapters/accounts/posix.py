"""
POSIX account database reads — shared by every account backend.

Lookups go through the ``pwd`` and ``grp`` modules, so they see NSS
sources (LDAP, sssd) the same way the system tools do.
"""

from __future__ import annotations

from accord.adapters.base import AccountBackend, GroupInfo, UserInfo
from accord.core.errors import CapabilityUnsupported

try:
    import grp
    import pwd
except ImportError:  # not available on Windows
    grp = None  # type: ignore[assignment]
    pwd = None  # type: ignore[assignment]


class PosixAccountBackend(AccountBackend):
    """Read side of the account contract. Subclasses implement the writes."""

    def _require_db(self) -> None:
        if pwd is None or grp is None:
            raise CapabilityUnsupported("no user/group database on this platform")

    def get_user(self, name: str) -> UserInfo | None:
        self._require_db()
        try:
            entry = pwd.getpwnam(name)
        except KeyError:
            return None
        groups = frozenset(g.gr_name for g in grp.getgrall() if name in g.gr_mem)
        return UserInfo(
            name=entry.pw_name,
            uid=entry.pw_uid,
            gid=entry.pw_gid,
            home=entry.pw_dir,
            shell=entry.pw_shell,
            groups=groups,
        )

    def get_group(self, name: str) -> GroupInfo | None:
        self._require_db()
        try:
            entry = grp.getgrnam(name)
        except KeyError:
            return None
        return GroupInfo(name=entry.gr_name, gid=entry.gr_gid, members=frozenset(entry.gr_mem))
