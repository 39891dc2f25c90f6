"""
Tests for package manager adapters, the registry, and the mock.
"""

import pytest

from envsetup.adapters.mock import MockPackageManager
from envsetup.adapters.packages.system import SystemPackageManager, sudo_prefix
from envsetup.adapters.registry import ManagerRegistry
from envsetup.core.errors import InstallError, UnsupportedPlatform
from envsetup.core.services.tool_install.data.managers import DETECTION_ORDER
from envsetup.core.services.tool_install.execution.subprocess_runner import PROXY_VARS
from envsetup.core.services.tool_install.resolver.recipe_resolution import build_descriptor
from tests.helpers import FakeRunner


def fake_which(*present):
    return lambda name: f"/usr/bin/{name}" if name in present else None


@pytest.fixture(autouse=True)
def _no_proxy_env(monkeypatch):
    for name in PROXY_VARS:
        monkeypatch.delenv(name, raising=False)


def _manager(name, runner=None, *, present=("sudo",), root=False, os_family="linux", **kwargs):
    return SystemPackageManager(
        build_descriptor(name),
        os_family=os_family,
        runner=runner or FakeRunner(),
        which=fake_which(*present),
        root=root,
        **kwargs,
    )


# ── Privilege prefix ─────────────────────────────────────────────────


class TestSudoPrefix:
    def test_root_needs_no_prefix(self):
        assert sudo_prefix(build_descriptor("apt"), os_family="linux", root=True,
                           which=fake_which("sudo")) == []

    def test_user_space_manager_needs_no_prefix(self):
        assert sudo_prefix(build_descriptor("pipx"), os_family="linux", root=False,
                           which=fake_which()) == []

    def test_windows_never_prefixed(self):
        assert sudo_prefix(build_descriptor("choco"), os_family="windows", root=False,
                           which=fake_which()) == []

    def test_preserves_manager_env(self):
        prefix = sudo_prefix(build_descriptor("apt"), os_family="linux", root=False,
                             which=fake_which("sudo"), environ={})
        assert prefix == ["sudo", "--preserve-env=DEBIAN_FRONTEND"]

    def test_preserves_proxy_vars(self):
        prefix = sudo_prefix(
            build_descriptor("dnf"), os_family="linux", root=False,
            which=fake_which("sudo"),
            environ={"https_proxy": "http://proxy:3128", "no_proxy": ""},
        )
        assert prefix == ["sudo", "--preserve-env=https_proxy"]

    def test_plain_sudo_when_nothing_to_preserve(self):
        prefix = sudo_prefix(build_descriptor("dnf"), os_family="linux", root=False,
                             which=fake_which("sudo"), environ={})
        assert prefix == ["sudo"]

    def test_missing_sudo_raises(self):
        with pytest.raises(InstallError, match="sudo is not installed"):
            sudo_prefix(build_descriptor("apt"), os_family="linux", root=False,
                        which=fake_which())


# ── SystemPackageManager ─────────────────────────────────────────────


class TestSystemInstall:
    def test_batch_install_single_call(self):
        runner = FakeRunner()
        apt = _manager("apt", runner)
        result = apt.install_packages(["python3.12", "python3-pip"])
        assert result["ok"]
        assert runner.commands == [[
            "sudo", "--preserve-env=DEBIAN_FRONTEND",
            "apt-get", "install", "-y", "python3.12", "python3-pip",
        ]]
        assert runner.calls[0]["env"] == {"DEBIAN_FRONTEND": "noninteractive"}

    def test_as_root_no_sudo(self):
        runner = FakeRunner()
        _manager("pacman", runner, root=True).install_packages(["python"])
        assert runner.commands == [["pacman", "-S", "--noconfirm", "--needed", "python"]]

    def test_install_timeout_applied(self):
        runner = FakeRunner()
        _manager("apk", runner, root=True, install_timeout=42).install_packages(["python3"])
        assert runner.calls[0]["timeout"] == 42

    def test_non_batch_manager_one_call_per_package(self):
        runner = FakeRunner()
        winget = _manager("winget", runner, os_family="windows")
        winget.install_packages(["OpenJS.NodeJS.LTS", "astral-sh.uv"])
        assert [cmd[-1] for cmd in runner.commands] == ["OpenJS.NodeJS.LTS", "astral-sh.uv"]
        assert all(cmd[0] == "winget" for cmd in runner.commands)

    def test_non_batch_stops_at_first_failure(self):
        runner = FakeRunner().on("OpenJS.NodeJS.LTS", returncode=1, error="Command failed (exit 1)")
        winget = _manager("winget", runner, os_family="windows")
        with pytest.raises(InstallError):
            winget.install_packages(["OpenJS.NodeJS.LTS", "astral-sh.uv"])
        assert len(runner.calls) == 1

    def test_empty_install_is_noop(self):
        runner = FakeRunner()
        assert _manager("apt", runner).install_packages([])["ok"]
        assert runner.calls == []

    def test_failure_carries_status_and_stderr_hint(self):
        runner = FakeRunner().on(
            "apt-get install", returncode=100,
            stderr="E: Unable to locate package python3.14",
            error="Command failed (exit 100)",
        )
        with pytest.raises(InstallError) as exc_info:
            _manager("apt", runner).install_packages(["python3.14"])
        err = exc_info.value
        assert err.returncode == 100
        assert "Unable to locate package" in err.stderr
        assert "not known to the configured repositories" in err.hint

    def test_failure_falls_back_to_exit_code_hint(self):
        runner = FakeRunner().on("apt-get install", returncode=100, error="Command failed (exit 100)")
        with pytest.raises(InstallError) as exc_info:
            _manager("apt", runner).install_packages(["python3.14"])
        assert "universe" in exc_info.value.hint

    def test_missing_sudo_is_install_error(self):
        runner = FakeRunner()
        with pytest.raises(InstallError):
            _manager("apt", runner, present=()).install_packages(["python3"])
        assert runner.calls == []


class TestSystemUpdate:
    def test_refresh_ok(self):
        runner = FakeRunner()
        assert _manager("apt", runner).update_indexes() == []
        assert runner.commands[0][-2:] == ["apt-get", "update"]

    def test_tolerated_exit_code(self):
        runner = FakeRunner().on("check-update", returncode=100)
        assert _manager("dnf", runner).update_indexes() == []

    def test_failure_is_warning(self):
        runner = FakeRunner().on(
            "apt-get update", returncode=100,
            stderr="W: Failed to fetch http://archive.ubuntu.com/...",
            error="Command failed (exit 100)",
        )
        warnings = _manager("apt", runner).update_indexes()
        assert len(warnings) == 1
        assert "APT index refresh failed" in warnings[0]
        assert "Failed to fetch" in warnings[0]

    def test_manager_without_refresh(self):
        runner = FakeRunner()
        assert _manager("pipx", runner).update_indexes() == []
        assert runner.calls == []

    def test_missing_sudo_skips_refresh(self):
        runner = FakeRunner()
        warnings = _manager("apt", runner, present=()).update_indexes()
        assert warnings and warnings[0].startswith("Skipped APT index refresh")
        assert runner.calls == []


class TestSystemQuery:
    def test_dpkg_marker(self):
        runner = FakeRunner().on("dpkg-query", stdout="install ok installed")
        apt = _manager("apt", runner)
        assert apt.is_package_installed("python3.12")
        assert runner.commands[0] == ["dpkg-query", "-W", "-f=${Status}", "python3.12"]

    def test_dpkg_removed_package(self):
        runner = FakeRunner().on("dpkg-query", stdout="deinstall ok config-files")
        assert not _manager("apt", runner).is_package_installed("python3.12")

    def test_query_failure_means_not_installed(self):
        runner = FakeRunner().on("rpm -q", returncode=1)
        assert not _manager("dnf", runner).is_package_installed("python3.12")

    def test_exit_status_only(self):
        runner = FakeRunner().on("rpm -q", stdout="python3.12-3.12.4-1.fc40.x86_64")
        assert _manager("dnf", runner).is_package_installed("python3.12")

    def test_listing_marker(self):
        runner = FakeRunner().on("pipx list", stdout="black 24.1.0\nuv 0.5.1\n")
        pipx = _manager("pipx", runner)
        assert pipx.is_package_installed("uv")
        assert not pipx.is_package_installed("ruff")

    def test_availability_uses_binary(self):
        assert _manager("apt", present=("apt-get",)).is_available()
        assert not _manager("apt", present=("apt",)).is_available()


# ── Registry ─────────────────────────────────────────────────────────


class TestRegistry:
    def test_detect_follows_priority(self):
        registry = ManagerRegistry(which=fake_which("dnf", "yum"))
        assert registry.detect("linux").name == "dnf"

    def test_detect_darwin(self):
        registry = ManagerRegistry(which=fake_which("brew", "port"))
        assert registry.detect("darwin").name == "brew"

    def test_detect_none_raises_with_tried(self):
        registry = ManagerRegistry(which=fake_which())
        with pytest.raises(UnsupportedPlatform) as exc_info:
            registry.detect("linux")
        assert exc_info.value.tried == DETECTION_ORDER["linux"]
        assert "apt" in str(exc_info.value)

    def test_unknown_family(self):
        with pytest.raises(UnsupportedPlatform) as exc_info:
            ManagerRegistry(which=fake_which("apt-get")).detect("plan9")
        assert exc_info.value.tried == []

    def test_detected_adapter_is_system_manager(self):
        registry = ManagerRegistry(which=fake_which("apt-get"))
        manager = registry.detect("linux")
        assert isinstance(manager, SystemPackageManager)
        assert manager.os_family == "linux"

    def test_registered_adapter_takes_precedence(self):
        registry = ManagerRegistry(which=fake_which())
        mock = MockPackageManager("apt")
        registry.register(mock)
        assert registry.detect("linux") is mock

    def test_unavailable_registered_adapter_skipped(self):
        registry = ManagerRegistry(which=fake_which("dnf"))
        registry.register(MockPackageManager("apt", available=False))
        assert registry.detect("linux").name == "dnf"

    def test_adapter_options(self):
        registry = ManagerRegistry(adapter_options={"install_timeout": 5})
        assert registry.get("apt", "linux").install_timeout == 5

    def test_get_unknown(self):
        assert ManagerRegistry().get("emerge") is None

    def test_secondary_order_and_exclusion(self):
        registry = ManagerRegistry(which=fake_which("pipx", "brew", "python3"))
        found = registry.secondary(
            ["pipx", "pip", "brew", "nope"], exclude=["brew"], os_family="linux",
        )
        assert [m.name for m in found] == ["pipx", "pip"]

    def test_secondary_skips_other_os(self):
        registry = ManagerRegistry(which=fake_which("brew"))
        assert registry.secondary(["brew"], os_family="windows") == []

    def test_status(self):
        registry = ManagerRegistry(which=fake_which("winget", "pipx"))
        status = registry.status("windows")
        assert set(status) == {"winget", "choco", "pipx", "pip"}
        assert status["winget"]["available"]
        assert not status["choco"]["available"]
        assert status["pipx"]["secondary"]

    def test_names(self):
        registry = ManagerRegistry()
        registry.register(MockPackageManager("mock"))
        assert "mock" in registry.names()
        assert "apt" in registry.names()


# ── Mock ─────────────────────────────────────────────────────────────


class TestMockPackageManager:
    def test_install_marks_installed(self):
        mock = MockPackageManager(packages={"uv": ["uv"]})
        assert not mock.is_package_installed("uv")
        mock.install_packages(["uv"])
        assert mock.is_package_installed("uv")
        assert mock.installs == [("uv",)]

    def test_descriptor_from_arguments(self):
        mock = MockPackageManager("apt", packages={"python": ["python{ver}"]}, batch_install=False)
        assert mock.name == "apt"
        assert mock.descriptor.packages_for("python") == ("python{ver}",)
        assert not mock.descriptor.batch_install

    def test_failure(self):
        mock = MockPackageManager()
        mock.set_failure("nodejs", returncode=100, hint="enable universe")
        with pytest.raises(InstallError) as exc_info:
            mock.install_packages(["nodejs", "npm"])
        assert exc_info.value.returncode == 100
        assert exc_info.value.hint == "enable universe"
        assert not mock.is_package_installed("npm")

    def test_hook_runs_after_install(self):
        mock = MockPackageManager()
        seen = []
        mock.on_install("uv", lambda: seen.append("uv"))
        mock.install_packages(["uv"])
        assert seen == ["uv"]

    def test_call_log_and_reset(self):
        mock = MockPackageManager()
        mock.update_indexes()
        mock.install_packages(["a"])
        assert mock.call_log == [("update_indexes", ()), ("install", ("a",))]
        assert mock.update_count == 1
        mock.reset()
        assert mock.call_log == []
