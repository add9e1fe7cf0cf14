"""
Tests for backends, the command runner, the registry and the mocks.

Real backends are exercised through a fake runner that records argv and
returns scripted results, so no package manager or init system is needed.
"""

import sys
from pathlib import Path

import pytest

from accord.adapters.accounts.busybox import BusyBoxBackend
from accord.adapters.accounts.pw import PwBackend
from accord.adapters.accounts.shadow import ShadowBackend
from accord.adapters.mock import MockAccountBackend, MockPackageBackend, MockServiceBackend
from accord.adapters.packages import strip_package_name
from accord.adapters.packages.apk import ApkBackend
from accord.adapters.packages.apt import AptBackend
from accord.adapters.packages.brew import BrewBackend
from accord.adapters.packages.bsd import PkgAddBackend, PkgBackend
from accord.adapters.packages.pacman import PacmanBackend
from accord.adapters.packages.rpm import DnfBackend, YumBackend
from accord.adapters.registry import BackendRegistry
from accord.adapters.services.launchd import LaunchdBackend
from accord.adapters.services.openrc import OpenRCBackend
from accord.adapters.services.rc import RcBackend
from accord.adapters.services.systemd import SystemdBackend
from accord.adapters.services.sysvinit import SysVinitBackend
from accord.adapters.shell.command import CommandResult, CommandRunner, command_error
from accord.core.errors import CapabilityUnsupported, OperationFailed, PermissionDenied
from accord.core.models.capabilities import (
    InitSystem,
    OsFamily,
    PackageManager,
    SystemCapabilities,
)
from accord.core.models.resource import ResourceState
from accord.core.resources import Package
from accord.core.resources.base import ExecutionContext


class FakeRunner(CommandRunner):
    """Records argv; answers from a prefix → (returncode, stdout, stderr) script."""

    def __init__(self, script=None):
        self.script = dict(script or {})
        self.calls: list[list[str]] = []
        self.envs: list[dict | None] = []

    def run(self, argv, *, env_overrides=None):
        self.calls.append(list(argv))
        self.envs.append(env_overrides)
        for prefix, (code, out, err) in self.script.items():
            if tuple(argv[: len(prefix)]) == prefix:
                return CommandResult(argv=list(argv), returncode=code, stdout=out, stderr=err)
        return CommandResult(argv=list(argv), returncode=0)


# ── Command runner ───────────────────────────────────────────────────


class TestCommandRunner:
    def test_captures_output(self):
        result = CommandRunner().run([sys.executable, "-c", "print('hi')"])
        assert result.ok
        assert result.stdout.strip() == "hi"

    def test_nonzero_exit_does_not_raise(self):
        result = CommandRunner().run([sys.executable, "-c", "import sys; sys.exit(3)"])
        assert result.returncode == 3
        assert not result.ok

    def test_missing_executable(self):
        result = CommandRunner().run(["accord-definitely-not-a-command"])
        assert result.returncode == 127

    def test_run_checked_raises(self):
        with pytest.raises(OperationFailed, match="exited with code 2"):
            CommandRunner().run_checked([sys.executable, "-c", "import sys; sys.exit(2)"])

    def test_env_overrides(self):
        result = CommandRunner().run(
            [sys.executable, "-c", "import os; print(os.environ['ACCORD_TEST'])"],
            env_overrides={"ACCORD_TEST": "yes"},
        )
        assert result.stdout.strip() == "yes"

    def test_stdin_is_closed(self):
        result = CommandRunner().run(
            [sys.executable, "-c", "import sys; print(repr(sys.stdin.read()))"]
        )
        assert result.stdout.strip() == "''"

    def test_command_line_is_quoted(self):
        r = CommandResult(argv=["echo", "a b"], returncode=0)
        assert r.command_line == "echo 'a b'"


class TestCommandError:
    def test_plain_failure(self):
        err = command_error(CommandResult(argv=["apt-get"], returncode=100, stderr="E: oops"))
        assert type(err) is OperationFailed
        assert "E: oops" in str(err)

    @pytest.mark.parametrize(
        "stderr",
        [
            "E: Could not open lock file - open (13: Permission denied)",
            "useradd: Permission denied.",
            "Failed to start nginx.service: Access denied",
            "pkg: Insufficient privileges to install packages; must be root",
        ],
    )
    def test_permission_markers(self, stderr):
        err = command_error(CommandResult(argv=["x"], returncode=1, stderr=stderr))
        assert isinstance(err, PermissionDenied)

    def test_exit_126_is_permission(self):
        err = command_error(CommandResult(argv=["x"], returncode=126))
        assert isinstance(err, PermissionDenied)


# ── Package backends ─────────────────────────────────────────────────


class TestAptBackend:
    def test_query_installed(self):
        runner = FakeRunner({("dpkg-query",): (0, "install ok installed\t1.24.0-2", "")})
        info = AptBackend(runner).query("nginx")
        assert info.installed
        assert info.version == "1.24.0-2"

    def test_query_config_files_only(self):
        runner = FakeRunner({("dpkg-query",): (0, "deinstall ok config-files\t1.0", "")})
        assert not AptBackend(runner).query("nginx").installed

    def test_query_unknown(self):
        runner = FakeRunner({("dpkg-query",): (1, "", "no packages found")})
        assert not AptBackend(runner).query("nope").installed

    def test_install_pinned_noninteractive(self):
        runner = FakeRunner()
        AptBackend(runner).install("nginx", "1.24.0")
        assert runner.calls == [["apt-get", "install", "-y", "-q", "nginx=1.24.0*"]]
        assert runner.envs[0] == {"DEBIAN_FRONTEND": "noninteractive"}

    def test_install_failure_permission(self):
        runner = FakeRunner({("apt-get",): (100, "", "E: Could not open lock file - Permission denied")})
        with pytest.raises(PermissionDenied):
            AptBackend(runner).install("nginx")


class TestPinnedPackage:
    """A declared version selects the distribution revision on install and check."""

    @staticmethod
    def _ctx(manager, backend):
        registry = BackendRegistry()
        registry.register_packages(manager, backend)
        return ExecutionContext(
            capabilities=SystemCapabilities(package_manager=manager), backends=registry
        )

    def test_apt_install_uses_prefix_pin(self):
        runner = FakeRunner({("dpkg-query",): (0, "install ok installed\t1.22.1-9", "")})
        ctx = self._ctx(PackageManager.APT, AptBackend(runner))
        Package(name="nginx", version="1.24.0").apply(ctx)
        assert ["apt-get", "install", "-y", "-q", "nginx=1.24.0*"] in runner.calls

    def test_apt_revision_satisfies_declared(self):
        runner = FakeRunner({("dpkg-query",): (0, "install ok installed\t1.24.0-1ubuntu3", "")})
        ctx = self._ctx(PackageManager.APT, AptBackend(runner))
        assert Package(name="nginx", version="1.24.0").check(ctx) == ResourceState.SATISFIED

    def test_apk_install_uses_fuzzy_pin(self):
        runner = FakeRunner({("apk", "info"): (1, "", "")})
        ctx = self._ctx(PackageManager.APK, ApkBackend(runner))
        Package(name="nginx", version="1.24.0").apply(ctx)
        assert ["apk", "add", "--no-progress", "nginx~1.24.0"] in runner.calls


class TestRpmBackends:
    def test_dnf_query(self):
        runner = FakeRunner({("rpm",): (0, "1.24.0-1.fc39", "")})
        info = DnfBackend(runner).query("nginx")
        assert info.version == "1.24.0-1.fc39"

    def test_yum_install(self):
        runner = FakeRunner()
        YumBackend(runner).install("nginx", "1.20.1")
        assert runner.calls == [["yum", "install", "-y", "nginx-1.20.1"]]
        assert YumBackend(runner).name == "yum"


class TestOtherPackageBackends:
    def test_pacman_refuses_pin(self):
        backend = PacmanBackend(FakeRunner())
        assert backend.supports_versions is False
        with pytest.raises(OperationFailed):
            backend.install("nginx", "1.0")

    def test_pacman_query(self):
        runner = FakeRunner({("pacman", "-Q"): (0, "nginx 1.24.0-1\n", "")})
        assert PacmanBackend(runner).query("nginx").version == "1.24.0-1"

    def test_apk_query(self):
        runner = FakeRunner({
            ("apk", "info"): (0, "nginx\n", ""),
            ("apk", "list"): (0, "nginx-1.24.0-r7 x86_64 {nginx} (BSD-2-Clause) [installed]\n", ""),
        })
        assert ApkBackend(runner).query("nginx").version == "1.24.0-r7"

    def test_brew_query_last_version(self):
        runner = FakeRunner({("brew", "list"): (0, "wget 1.21.3 1.21.4\n", "")})
        assert BrewBackend(runner).query("wget").version == "1.21.4"

    def test_pkg_query(self):
        runner = FakeRunner({("pkg", "query"): (0, "1.24.0_2,3\n", "")})
        assert PkgBackend(runner).query("nginx").version == "1.24.0_2,3"

    def test_pkg_add_query(self):
        runner = FakeRunner({("pkg_info",): (0, "inst:nginx-1.24.0p0\n", "")})
        assert PkgAddBackend(runner).query("nginx").version == "1.24.0p0"

    def test_strip_package_name(self):
        assert strip_package_name("nginx-1.2", "nginx") == "1.2"
        assert strip_package_name("nginx-mod-http-1.2", "nginx") is None
        assert strip_package_name("curl-8", "nginx") is None


# ── Service backends ─────────────────────────────────────────────────


class TestServiceBackends:
    def test_systemd_status(self):
        runner = FakeRunner({("systemctl", "is-enabled"): (1, "", "")})
        status = SystemdBackend(runner).status("nginx")
        assert status.running is True
        assert status.enabled is False

    def test_systemd_start(self):
        runner = FakeRunner()
        SystemdBackend(runner).start("nginx")
        assert runner.calls == [["systemctl", "start", "nginx"]]

    def test_openrc_enabled_from_runlevel(self):
        runner = FakeRunner({
            ("rc-update", "show"): (0, "                sshd | default\n", ""),
        })
        assert OpenRCBackend(runner).status("sshd").enabled is True
        assert OpenRCBackend(runner).status("nginx").enabled is False

    def test_sysvinit_start_links(self, tmp_path: Path):
        (tmp_path / "rc3.d").mkdir()
        (tmp_path / "rc3.d" / "S02ssh").write_text("")
        backend = SysVinitBackend(FakeRunner(), etc_dir=tmp_path)
        assert backend.status("ssh").enabled is True
        assert backend.status("cron").enabled is False

    def test_launchd_disabled_override(self):
        runner = FakeRunner({
            ("launchctl", "print-disabled"): (0, '\t"com.example.d" => disabled\n', ""),
            ("launchctl", "print"): (0, "state = running\n", ""),
        })
        status = LaunchdBackend(runner).status("com.example.d")
        assert status.running is True
        assert status.enabled is False

    def test_rc_enable_uses_sysrc(self):
        runner = FakeRunner()
        RcBackend(runner).enable("php-fpm")
        assert runner.calls == [["sysrc", "php_fpm_enable=YES"]]

    def test_rc_status_reads_rcvar(self):
        runner = FakeRunner({("sysrc",): (0, "YES\n", "")})
        assert RcBackend(runner).status("sshd").enabled is True


# ── Account backends ─────────────────────────────────────────────────


class TestAccountBackends:
    def test_shadow_create_user(self):
        runner = FakeRunner()
        ShadowBackend(runner).create_user(
            "deploy", uid=1500, home="/home/deploy", shell="/bin/bash", groups=["docker", "web"]
        )
        assert runner.calls == [[
            "useradd", "--create-home", "--home-dir", "/home/deploy", "--shell", "/bin/bash",
            "--uid", "1500", "--groups", "docker,web", "deploy",
        ]]

    def test_shadow_add_to_groups_appends(self):
        runner = FakeRunner()
        ShadowBackend(runner).add_to_groups("deploy", ["docker"])
        assert runner.calls == [["usermod", "--append", "--groups", "docker", "deploy"]]

    def test_shadow_modify_nothing(self):
        runner = FakeRunner()
        ShadowBackend(runner).modify_user("deploy")
        assert runner.calls == []

    def test_busybox_create_user_then_groups(self):
        runner = FakeRunner()
        BusyBoxBackend(runner).create_user(
            "deploy", uid=None, home="/home/deploy", shell="/bin/ash", groups=["wheel"]
        )
        assert runner.calls == [
            ["adduser", "-D", "-h", "/home/deploy", "-s", "/bin/ash", "deploy"],
            ["addgroup", "deploy", "wheel"],
        ]

    def test_pw_create_group(self):
        runner = FakeRunner()
        PwBackend(runner).create_group("web", gid=2000)
        assert runner.calls == [["pw", "groupadd", "web", "-g", "2000"]]

    def test_posix_lookup_missing_user(self):
        pytest.importorskip("pwd")
        assert ShadowBackend(FakeRunner()).get_user("accord-test-no-such-user") is None

    def test_posix_lookup_root_group(self):
        pytest.importorskip("grp")
        import grp

        name = grp.getgrgid(0).gr_name
        info = ShadowBackend(FakeRunner()).get_group(name)
        assert info is not None
        assert info.gid == 0


# ── Registry ─────────────────────────────────────────────────────────


class TestBackendRegistry:
    def test_default_resolves_every_family(self):
        reg = BackendRegistry.default(FakeRunner())
        caps = SystemCapabilities(
            os_family=OsFamily.DEBIAN,
            package_manager=PackageManager.APT,
            init_system=InitSystem.SYSTEMD,
        )
        assert reg.packages(caps).name == "apt"
        assert reg.services(caps).name == "systemd"
        assert reg.accounts(caps).name == "shadow"

    @pytest.mark.parametrize(
        "family,backend",
        [(OsFamily.REDHAT, "shadow"), (OsFamily.ALPINE, "busybox"), (OsFamily.FREEBSD, "pw")],
    )
    def test_account_backend_per_family(self, family, backend):
        reg = BackendRegistry.default(FakeRunner())
        assert reg.accounts(SystemCapabilities(os_family=family)).name == backend

    def test_missing_capability(self):
        reg = BackendRegistry.default(FakeRunner())
        caps = SystemCapabilities()
        with pytest.raises(CapabilityUnsupported, match="package manager"):
            reg.packages(caps)
        with pytest.raises(CapabilityUnsupported, match="init system"):
            reg.services(caps)
        with pytest.raises(CapabilityUnsupported):
            reg.accounts(caps)

    def test_unregistered_backend(self):
        reg = BackendRegistry()
        with pytest.raises(CapabilityUnsupported, match="no backend"):
            reg.packages(SystemCapabilities(package_manager=PackageManager.APT))

    def test_backend_status(self):
        reg = BackendRegistry.default(FakeRunner())
        status = reg.backend_status(SystemCapabilities(package_manager=PackageManager.PKG))
        assert status["packages"] == {"available": True, "backend": "pkg"}
        assert status["services"]["available"] is False


# ── Mocks ────────────────────────────────────────────────────────────


class TestMocks:
    def test_package_mock_tracks_state(self):
        mock = MockPackageBackend({"curl": "8.5"})
        assert mock.query("curl").installed
        mock.install("jq")
        assert mock.installed["jq"] == "1.0.0"
        assert mock.mutations == [("install", "jq", "")]

    def test_failure_injection_and_reset(self):
        mock = MockServiceBackend()
        mock.set_failure("start", "nginx", "boom")
        with pytest.raises(OperationFailed, match="boom"):
            mock.start("nginx")
        mock.reset()
        mock.start("nginx")
        assert mock.call_count == 1

    def test_account_mock_membership(self):
        mock = MockAccountBackend()
        mock.add_group("docker")
        mock.add_user("deploy", uid=0)
        assert mock.users["deploy"].uid == 0
        mock.add_to_groups("deploy", ["docker"])
        assert mock.get_user("deploy").groups == {"docker"}
