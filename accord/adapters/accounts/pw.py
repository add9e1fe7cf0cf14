"""pw(8) backend — FreeBSD."""

from __future__ import annotations

from accord.adapters.accounts.posix import PosixAccountBackend


class PwBackend(PosixAccountBackend):
    """FreeBSD account management via pw."""

    @property
    def name(self) -> str:
        return "pw"

    def create_user(
        self,
        name: str,
        *,
        uid: int | None,
        home: str,
        shell: str,
        groups: list[str],
    ) -> None:
        argv = ["pw", "useradd", name, "-m", "-d", home, "-s", shell]
        if uid is not None:
            argv += ["-u", str(uid)]
        if groups:
            argv += ["-G", ",".join(groups)]
        self.runner.run_checked(argv)

    def modify_user(
        self,
        name: str,
        *,
        uid: int | None = None,
        home: str | None = None,
        shell: str | None = None,
    ) -> None:
        argv = ["pw", "usermod", name]
        if uid is not None:
            argv += ["-u", str(uid)]
        if home is not None:
            argv += ["-d", home, "-m"]
        if shell is not None:
            argv += ["-s", shell]
        if len(argv) == 3:
            return
        self.runner.run_checked(argv)

    def add_to_groups(self, name: str, groups: list[str]) -> None:
        for group in groups:
            self.runner.run_checked(["pw", "groupmod", group, "-m", name])

    def delete_user(self, name: str) -> None:
        self.runner.run_checked(["pw", "userdel", name])

    def create_group(self, name: str, *, gid: int | None) -> None:
        argv = ["pw", "groupadd", name]
        if gid is not None:
            argv += ["-g", str(gid)]
        self.runner.run_checked(argv)

    def modify_group(self, name: str, *, gid: int) -> None:
        self.runner.run_checked(["pw", "groupmod", name, "-g", str(gid)])

    def delete_group(self, name: str) -> None:
        self.runner.run_checked(["pw", "groupdel", name])
