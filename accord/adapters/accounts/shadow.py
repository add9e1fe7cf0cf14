"""shadow-utils backend — useradd/usermod/groupadd on most Linux distributions."""

from __future__ import annotations

from accord.adapters.accounts.posix import PosixAccountBackend


class ShadowBackend(PosixAccountBackend):
    """Linux account management via shadow-utils."""

    @property
    def name(self) -> str:
        return "shadow"

    def create_user(
        self,
        name: str,
        *,
        uid: int | None,
        home: str,
        shell: str,
        groups: list[str],
    ) -> None:
        argv = ["useradd", "--create-home", "--home-dir", home, "--shell", shell]
        if uid is not None:
            argv += ["--uid", str(uid)]
        if groups:
            argv += ["--groups", ",".join(groups)]
        self.runner.run_checked(argv + [name])

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
            argv += ["--uid", str(uid)]
        if home is not None:
            argv += ["--home", home, "--move-home"]
        if shell is not None:
            argv += ["--shell", shell]
        if len(argv) == 1:
            return
        self.runner.run_checked(argv + [name])

    def add_to_groups(self, name: str, groups: list[str]) -> None:
        if groups:
            self.runner.run_checked(["usermod", "--append", "--groups", ",".join(groups), name])

    def delete_user(self, name: str) -> None:
        self.runner.run_checked(["userdel", name])

    def create_group(self, name: str, *, gid: int | None) -> None:
        argv = ["groupadd"]
        if gid is not None:
            argv += ["--gid", str(gid)]
        self.runner.run_checked(argv + [name])

    def modify_group(self, name: str, *, gid: int) -> None:
        self.runner.run_checked(["groupmod", "--gid", str(gid), name])

    def delete_group(self, name: str) -> None:
        self.runner.run_checked(["groupdel", name])
