"""
Tests for resource kinds — check/apply contract, dry run, idempotency.

Filesystem kinds run against ``tmp_path``; packages, services and
accounts run against the in-memory mock backends.
"""

import os
import stat
from pathlib import Path

import pytest
from pydantic import ValidationError

from accord.adapters.registry import BackendRegistry
from accord.adapters.shell.filesystem import ownership_supported
from accord.core.errors import (
    CapabilityUnsupported,
    CheckFailed,
    OperationFailed,
    PermissionDenied,
)
from accord.core.models.capabilities import SystemCapabilities
from accord.core.models.resource import Change, ResourceState
from accord.core.resources import (
    Directory,
    File,
    Group,
    Package,
    Service,
    User,
    parse_mode,
    version_matches,
)
from accord.core.resources.base import ExecutionContext

needs_ownership = pytest.mark.skipif(
    not ownership_supported(), reason="no pwd/grp on this platform"
)
not_root = pytest.mark.skipif(
    hasattr(os, "geteuid") and os.geteuid() == 0, reason="root bypasses permission bits"
)

MISSING_USER = "accord-test-no-such-user"


def _mode(path: Path) -> int:
    return stat.S_IMODE(os.stat(path).st_mode)


# ── Mode parsing ─────────────────────────────────────────────────────


class TestParseMode:
    @pytest.mark.parametrize("value", ["0755", "755", "0o755", 0o755])
    def test_accepted_forms(self, value):
        assert parse_mode(value) == 0o755

    def test_none(self):
        assert parse_mode(None) is None

    @pytest.mark.parametrize("value", ["0999", "rwx", "", "2755", 0o1777, 0o10000, -1, True, 7.5])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            parse_mode(value)

    def test_model_uses_parse_mode(self):
        assert Directory(path="/x", mode="0700").mode == 0o700


# ── Directory ────────────────────────────────────────────────────────


class TestDirectory:
    def test_relative_path_rejected(self):
        with pytest.raises(ValidationError):
            Directory(path="relative/dir")

    def test_unknown_attribute_rejected(self):
        with pytest.raises(ValidationError):
            Directory(path="/x", recurse=True)

    def test_create_missing(self, ctx, tmp_path: Path):
        target = tmp_path / "app"
        d = Directory(path=str(target))

        assert d.check(ctx) == ResourceState.NEEDS_CHANGE
        result = d.apply(ctx)

        assert result.changed is True
        assert result.state == ResourceState.SATISFIED
        assert target.is_dir()
        assert d.check(ctx) == ResourceState.SATISFIED

    def test_creates_parents(self, ctx, tmp_path: Path):
        target = tmp_path / "a" / "b" / "c"
        Directory(path=str(target)).apply(ctx)
        assert target.is_dir()

    def test_mode_on_create(self, ctx, tmp_path: Path):
        target = tmp_path / "private"
        Directory(path=str(target), mode=0o700).apply(ctx)
        assert _mode(target) == 0o700

    def test_mode_drift_corrected(self, ctx, tmp_path: Path):
        target = tmp_path / "srv"
        target.mkdir()
        os.chmod(target, 0o700)
        d = Directory(path=str(target), mode="0755")

        assert d.check(ctx) == ResourceState.NEEDS_CHANGE
        result = d.apply(ctx)
        assert "mode set to 0755" in result.message
        assert _mode(target) == 0o755

    def test_special_bits_ignored_by_check(self, ctx, tmp_path: Path):
        target = tmp_path / "shared"
        target.mkdir()
        os.chmod(target, 0o1755)
        assert Directory(path=str(target), mode=0o755).check(ctx) == ResourceState.SATISFIED

    def test_special_bits_kept_on_chmod(self, ctx, tmp_path: Path):
        target = tmp_path / "shared"
        target.mkdir()
        os.chmod(target, 0o1700)
        Directory(path=str(target), mode=0o755).apply(ctx)
        assert _mode(target) == 0o1755

    @pytest.mark.parametrize("action", ["chmod", "chown", "chgrp"])
    def test_attribute_change_needs_declared_value(self, ctx, tmp_path: Path, action):
        target = tmp_path / "srv"
        target.mkdir()
        os.chmod(target, 0o700)
        with pytest.raises(OperationFailed, match="unsupported change"):
            Directory(path=str(target)).converge(ctx, [Change(action, "x")])
        assert _mode(target) == 0o700

    def test_second_apply_is_noop(self, ctx, tmp_path: Path):
        d = Directory(path=str(tmp_path / "x"), mode=0o750)
        assert d.apply(ctx).changed is True
        second = d.apply(ctx)
        assert second.changed is False
        assert second.state == ResourceState.SATISFIED

    def test_dry_run_does_not_create(self, ctx, tmp_path: Path):
        target = tmp_path / "x"
        result = Directory(path=str(target)).apply(ctx, dry_run=True)
        assert result.changed is True
        assert result.state == ResourceState.NEEDS_CHANGE
        assert result.message.startswith("would create")
        assert not target.exists()

    def test_check_does_not_create(self, ctx, tmp_path: Path):
        target = tmp_path / "x"
        Directory(path=str(target), mode=0o700).check(ctx)
        assert not target.exists()

    def test_converged_between_check_and_apply(self, ctx, tmp_path: Path):
        target = tmp_path / "raced"
        d = Directory(path=str(target))
        assert d.check(ctx) == ResourceState.NEEDS_CHANGE
        target.mkdir()
        result = d.apply(ctx)
        assert result.changed is False

    def test_file_in_the_way(self, ctx, tmp_path: Path):
        target = tmp_path / "conflict"
        target.write_text("not a dir")
        with pytest.raises(CheckFailed):
            Directory(path=str(target)).check(ctx)

    def test_absent_removes_empty(self, ctx, tmp_path: Path):
        target = tmp_path / "gone"
        target.mkdir()
        result = Directory(path=str(target), state="absent").apply(ctx)
        assert result.changed is True
        assert not target.exists()

    def test_absent_missing_is_satisfied(self, ctx, tmp_path: Path):
        d = Directory(path=str(tmp_path / "never"), state="absent")
        assert d.check(ctx) == ResourceState.SATISFIED

    def test_absent_non_empty_fails(self, ctx, tmp_path: Path):
        target = tmp_path / "full"
        target.mkdir()
        (target / "keep").write_text("x")
        with pytest.raises(OperationFailed, match="not empty"):
            Directory(path=str(target), state="absent").apply(ctx)
        assert target.is_dir()

    @needs_ownership
    def test_current_owner_is_satisfied(self, ctx, tmp_path: Path, current_user):
        target = tmp_path / "mine"
        target.mkdir()
        d = Directory(path=str(target), owner=current_user)
        assert d.check(ctx) == ResourceState.SATISFIED

    @needs_ownership
    def test_numeric_owner_accepted(self, ctx, tmp_path: Path):
        target = tmp_path / "mine"
        target.mkdir()
        d = Directory(path=str(target), owner=os.getuid())
        assert d.owner == str(os.getuid())
        assert d.check(ctx) == ResourceState.SATISFIED

    @needs_ownership
    def test_unknown_owner(self, ctx, tmp_path: Path):
        target = tmp_path / "owned"
        target.mkdir()
        d = Directory(path=str(target), owner=MISSING_USER)
        assert d.check(ctx) == ResourceState.NEEDS_CHANGE
        with pytest.raises(OperationFailed, match=MISSING_USER):
            d.apply(ctx)

    @not_root
    def test_permission_denied(self, ctx, tmp_path: Path):
        locked = tmp_path / "locked"
        locked.mkdir()
        os.chmod(locked, 0o500)
        try:
            with pytest.raises(PermissionDenied):
                Directory(path=str(locked / "child")).apply(ctx)
        finally:
            os.chmod(locked, 0o700)

    def test_str_and_describe(self):
        d = Directory(path="/srv/app")
        assert d.describe() == "/srv/app"
        assert str(d) == "Directory /srv/app"


# ── File ─────────────────────────────────────────────────────────────


class TestFile:
    def test_content_and_source_exclusive(self):
        with pytest.raises(ValidationError, match="mutually exclusive"):
            File(path="/x", content="a", source="/y")

    def test_relative_source_rejected(self):
        with pytest.raises(ValidationError):
            File(path="/x", source="files/motd")

    def test_write_content(self, ctx, tmp_path: Path):
        target = tmp_path / "motd"
        f = File(path=str(target), content="hello\n", mode=0o640)

        assert f.check(ctx) == ResourceState.NEEDS_CHANGE
        assert f.apply(ctx).changed is True
        assert target.read_text() == "hello\n"
        assert _mode(target) == 0o640
        assert f.check(ctx) == ResourceState.SATISFIED

    def test_same_length_different_content(self, ctx, tmp_path: Path):
        target = tmp_path / "conf"
        target.write_text("aaaa")
        f = File(path=str(target), content="bbbb")
        assert f.check(ctx) == ResourceState.NEEDS_CHANGE
        result = f.apply(ctx)
        assert "written 4 bytes" in result.message
        assert target.read_text() == "bbbb"

    def test_rewrite_keeps_mode(self, ctx, tmp_path: Path):
        target = tmp_path / "conf"
        target.write_text("old")
        os.chmod(target, 0o600)
        File(path=str(target), content="new content").apply(ctx)
        assert _mode(target) == 0o600

    def test_copy_from_source(self, ctx, tmp_path: Path):
        source = tmp_path / "src.txt"
        source.write_bytes(b"\x00binary\xff")
        target = tmp_path / "dst.txt"
        f = File(path=str(target), source=str(source))
        f.apply(ctx)
        assert target.read_bytes() == b"\x00binary\xff"
        assert f.check(ctx) == ResourceState.SATISFIED

    def test_missing_source(self, ctx, tmp_path: Path):
        target = tmp_path / "dst"
        target.write_text("x")
        f = File(path=str(target), source=str(tmp_path / "nope"))
        with pytest.raises(CheckFailed):
            f.check(ctx)

    def test_no_content_creates_empty(self, ctx, tmp_path: Path):
        target = tmp_path / "empty"
        File(path=str(target)).apply(ctx)
        assert target.read_bytes() == b""

    def test_no_content_leaves_existing(self, ctx, tmp_path: Path):
        target = tmp_path / "data"
        target.write_text("keep me")
        f = File(path=str(target))
        assert f.check(ctx) == ResourceState.SATISFIED
        f.apply(ctx)
        assert target.read_text() == "keep me"

    def test_parent_not_created(self, ctx, tmp_path: Path):
        target = tmp_path / "missing-dir" / "file"
        with pytest.raises(OperationFailed, match="parent directory"):
            File(path=str(target), content="x").apply(ctx)
        assert not target.parent.exists()

    def test_dry_run_does_not_write(self, ctx, tmp_path: Path):
        target = tmp_path / "conf"
        target.write_text("old")
        result = File(path=str(target), content="new").apply(ctx, dry_run=True)
        assert result.changed is True
        assert target.read_text() == "old"

    def test_no_temp_files_left(self, ctx, tmp_path: Path):
        File(path=str(tmp_path / "conf"), content="x").apply(ctx)
        assert [p.name for p in tmp_path.iterdir()] == ["conf"]

    def test_absent_removes(self, ctx, tmp_path: Path):
        target = tmp_path / "old.conf"
        target.write_text("x")
        File(path=str(target), state="absent").apply(ctx)
        assert not target.exists()

    def test_directory_in_the_way(self, ctx, tmp_path: Path):
        with pytest.raises(CheckFailed, match="not a regular file"):
            File(path=str(tmp_path), content="x").check(ctx)


# ── Package ──────────────────────────────────────────────────────────


class TestVersionMatches:
    @pytest.mark.parametrize(
        "installed,desired",
        [
            ("1.24.0", "1.24.0"),
            ("1:1.24.0-2ubuntu1", "1.24.0"),
            ("2.4.52-1", "2.4"),
            ("8.5.0_1", "8.5.0"),
        ],
    )
    def test_matches(self, installed, desired):
        assert version_matches(installed, desired)

    @pytest.mark.parametrize(
        "installed,desired",
        [(None, "1.0"), ("2.40", "2.4"), ("1.23.9", "1.24"), ("1.2", "1.2.3")],
    )
    def test_does_not_match(self, installed, desired):
        assert not version_matches(installed, desired)


class TestPackage:
    def test_version_coerced_to_text(self):
        assert Package(name="curl", version=8.5).version == "8.5"

    def test_install_missing(self, ctx, packages):
        p = Package(name="nginx")
        assert p.check(ctx) == ResourceState.NEEDS_CHANGE
        result = p.apply(ctx)
        assert result.changed is True
        assert ("install", "nginx", "") in packages.mutations
        assert p.check(ctx) == ResourceState.SATISFIED

    def test_installed_is_satisfied(self, ctx, packages):
        packages.installed["nginx"] = "1.24.0"
        assert Package(name="nginx").check(ctx) == ResourceState.SATISFIED
        assert packages.mutations == []

    def test_version_with_epoch_matches(self, ctx, packages):
        packages.installed["nginx"] = "1:1.24.0-2ubuntu1"
        assert Package(name="nginx", version="1.24.0").check(ctx) == ResourceState.SATISFIED

    def test_version_mismatch_reinstalls_pinned(self, ctx, packages):
        packages.installed["nginx"] = "1.22.0"
        result = Package(name="nginx", version="1.24.0").apply(ctx)
        assert "version set to 1.24.0" in result.message
        assert packages.mutations == [("install", "nginx", "1.24.0")]
        assert packages.installed["nginx"] == "1.24.0"

    def test_absent_removes(self, ctx, packages):
        packages.installed["telnet"] = "0.17"
        Package(name="telnet", state="absent").apply(ctx)
        assert "telnet" not in packages.installed

    def test_absent_missing_is_satisfied(self, ctx, packages):
        assert Package(name="telnet", state="absent").check(ctx) == ResourceState.SATISFIED

    def test_dry_run_no_mutation(self, ctx, packages):
        result = Package(name="nginx").apply(ctx, dry_run=True)
        assert result.changed is True
        assert packages.mutations == []

    def test_backend_failure(self, ctx, packages):
        packages.set_failure("install", "nginx", "E: Unable to locate package")
        with pytest.raises(OperationFailed, match="Unable to locate"):
            Package(name="nginx").apply(ctx)

    def test_pinned_version_unsupported(self, ctx, packages):
        packages.supports_versions = False
        with pytest.raises(CapabilityUnsupported):
            Package(name="nginx", version="1.0").check(ctx)

    def test_no_package_manager(self, registry):
        ctx = ExecutionContext(capabilities=SystemCapabilities(), backends=registry)
        with pytest.raises(CapabilityUnsupported):
            Package(name="nginx").check(ctx)


# ── Service ──────────────────────────────────────────────────────────


class TestService:
    def test_start_and_enable(self, ctx, services):
        services.services["nginx"] = [False, False]
        s = Service(name="nginx")
        assert s.check(ctx) == ResourceState.NEEDS_CHANGE
        s.apply(ctx)
        assert services.mutations == [("enable", "nginx"), ("start", "nginx")]
        assert s.check(ctx) == ResourceState.SATISFIED

    def test_stop_and_disable(self, ctx, services):
        services.services["cups"] = [True, True]
        Service(name="cups", state="stopped", enabled=False).apply(ctx)
        assert services.services["cups"] == [False, False]

    def test_running_but_not_enabled_at_boot(self, ctx, services):
        services.services["cron"] = [True, True]
        Service(name="cron", enabled=False).apply(ctx)
        assert services.mutations == [("disable", "cron")]

    def test_satisfied(self, ctx, services):
        services.services["ssh"] = [True, True]
        assert Service(name="ssh").apply(ctx).changed is False

    def test_permission_denied(self, ctx, services):
        services.set_failure("start", "nginx", "Access denied", permission=True)
        services.services["nginx"] = [False, True]
        with pytest.raises(PermissionDenied):
            Service(name="nginx").apply(ctx)


# ── Users and groups ─────────────────────────────────────────────────


class TestUser:
    def test_home_default(self):
        assert User(name="deploy").home == "/home/deploy"
        assert User(name="deploy", home="/srv/deploy").home == "/srv/deploy"

    def test_shell_default(self):
        assert User(name="deploy").shell == "/bin/bash"

    def test_create_with_groups(self, ctx, accounts):
        accounts.add_group("docker")
        u = User(name="deploy", uid=1500, groups=["docker"])
        assert u.check(ctx) == ResourceState.NEEDS_CHANGE
        u.apply(ctx)

        info = accounts.get_user("deploy")
        assert info.uid == 1500
        assert info.home == "/home/deploy"
        assert "docker" in info.groups
        assert u.check(ctx) == ResourceState.SATISFIED

    def test_attribute_changes_use_one_modify(self, ctx, accounts):
        accounts.add_user("deploy", uid=1500, shell="/bin/sh", home="/home/old")
        User(name="deploy", uid=1501).apply(ctx)
        modifies = [c for c in accounts.mutations if c[0] == "modify_user"]
        assert len(modifies) == 1
        info = accounts.users["deploy"]
        assert (info.uid, info.home, info.shell) == (1501, "/home/deploy", "/bin/bash")

    def test_group_membership_is_additive(self, ctx, accounts):
        accounts.add_group("adm", members={"deploy"})
        accounts.add_group("docker")
        accounts.add_user("deploy")
        User(name="deploy", groups=["docker"]).apply(ctx)
        groups = accounts.get_user("deploy").groups
        assert groups == {"adm", "docker"}

    def test_existing_membership_satisfied(self, ctx, accounts):
        accounts.add_group("adm", members={"deploy"})
        accounts.add_group("docker", members={"deploy"})
        accounts.add_user("deploy")
        assert User(name="deploy", groups=["docker"]).check(ctx) == ResourceState.SATISFIED

    def test_missing_group_fails(self, ctx, accounts):
        with pytest.raises(OperationFailed, match="does not exist"):
            User(name="deploy", groups=["wheel"]).apply(ctx)

    def test_absent(self, ctx, accounts):
        accounts.add_user("olduser")
        User(name="olduser", state="absent").apply(ctx)
        assert "olduser" not in accounts.users

    def test_unsupported_os(self, registry):
        ctx = ExecutionContext(
            capabilities=SystemCapabilities(os_family="macos"), backends=registry
        )
        with pytest.raises(CapabilityUnsupported):
            User(name="deploy").check(ctx)


class TestGroup:
    def test_create(self, ctx, accounts):
        Group(name="web", gid=2000).apply(ctx)
        assert accounts.groups["web"].gid == 2000

    def test_gid_change(self, ctx, accounts):
        accounts.add_group("web", gid=2000)
        g = Group(name="web", gid=2001)
        assert g.check(ctx) == ResourceState.NEEDS_CHANGE
        g.apply(ctx)
        assert accounts.groups["web"].gid == 2001

    def test_any_gid_satisfied(self, ctx, accounts):
        accounts.add_group("web", gid=2000)
        assert Group(name="web").check(ctx) == ResourceState.SATISFIED

    def test_absent(self, ctx, accounts):
        accounts.add_group("old")
        Group(name="old", state="absent").apply(ctx)
        assert "old" not in accounts.groups

    def test_gid_change_without_gid_refused(self, ctx, accounts):
        accounts.add_group("web", gid=2000)
        with pytest.raises(OperationFailed, match="unsupported change"):
            Group(name="web").converge(ctx, [Change("set gid", "2001")])
        assert accounts.groups["web"].gid == 2000


def test_default_context_wires_real_backends():
    ctx = ExecutionContext()
    assert isinstance(ctx.backends, BackendRegistry)
