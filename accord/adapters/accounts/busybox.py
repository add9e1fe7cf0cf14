"""
BusyBox backend — Alpine's adduser/addgroup.

BusyBox has no usermod/groupmod. When the ``shadow`` package is
installed its tools are used for modifications; otherwise changing an
existing account fails with a clear error.
"""

from __future__ import annotations

import shutil

from accord.adapters.accounts.posix import PosixAccountBackend
from accord.core.errors import OperationFailed


class BusyBoxBackend(PosixAccountBackend):
    """Alpine Linux account management."""

    @property
    def name(self) -> str:
        return "busybox"

    def create_user(
        self,
        name: str,
        *,
        uid: int | None,
        home: str,
        shell: str,
        groups: list[str],
    ) -> None:
        argv = ["adduser", "-D", "-h", home, "-s", shell]
        if uid is not None:
            argv += ["-u", str(uid)]
        self.runner.run_checked(argv + [name])
        self.add_to_groups(name, groups)

    def modify_user(
        self,
        name: str,
        *,
        uid: int | None = None,
        home: str | None = None,
        shell: str | None = None,
    ) -> None:
        argv = ["usermod"]
        if uid is not None:
            argv += ["-u", str(uid)]
        if home is not None:
            argv += ["-d", home, "-m"]
        if shell is not None:
            argv += ["-s", shell]
        if len(argv) == 1:
            return
        self._require_shadow("usermod")
        self.runner.run_checked(argv + [name])

    def add_to_groups(self, name: str, groups: list[str]) -> None:
        for group in groups:
            self.runner.run_checked(["addgroup", name, group])

    def delete_user(self, name: str) -> None:
        self.runner.run_checked(["deluser", name])

    def create_group(self, name: str, *, gid: int | None) -> None:
        argv = ["addgroup"]
        if gid is not None:
            argv += ["-g", str(gid)]
        self.runner.run_checked(argv + [name])

    def modify_group(self, name: str, *, gid: int) -> None:
        self._require_shadow("groupmod")
        self.runner.run_checked(["groupmod", "-g", str(gid), name])

    def delete_group(self, name: str) -> None:
        self.runner.run_checked(["delgroup", name])

    @staticmethod
    def _require_shadow(tool: str) -> None:
        if shutil.which(tool) is None:
            raise OperationFailed(
                f"{tool} is not available; install the 'shadow' package to modify accounts"
            )
