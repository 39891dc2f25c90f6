"""
Tests for core data models - probes, descriptors, recipes, attempts, reports.
"""

import pytest
from pydantic import ValidationError

from envsetup.core.errors import Cancelled
from envsetup.core.models.attempt import InstallAttempt, PlannedStrategy
from envsetup.core.models.probe import ProbeResult
from envsetup.core.models.recipe import InstallerSpec, Strategy
from envsetup.core.models.report import (
    InstallationReport,
    RequirementOutcome,
    RequirementState,
)
from envsetup.core.models.requirement import ToolId, Version, VersionRequirement
from envsetup.core.reliability.cancellation import CancellationToken
from envsetup.core.services.tool_install.resolver.recipe_resolution import (
    build_descriptor,
    build_recipe,
)


def _outcome(tool: ToolId, state: RequirementState) -> RequirementOutcome:
    return RequirementOutcome(requirement=VersionRequirement(tool=tool), state=state)


# ── ProbeResult ──────────────────────────────────────────────────────


class TestProbeResult:
    def test_absent(self):
        probe = ProbeResult.absent(ToolId.NODE)
        assert not probe.found
        assert probe.to_dict()["version"] is None

    def test_absent_cannot_carry_path(self):
        with pytest.raises(ValidationError):
            ProbeResult(tool=ToolId.NODE, found=False, command_path="/usr/bin/node")

    def test_to_dict(self):
        probe = ProbeResult(
            tool=ToolId.NODE, found=True, command="node",
            command_path="/usr/bin/node", version=Version(20, 11, 1), raw_version="v20.11.1",
        )
        assert probe.to_dict()["version"] == "20.11.1"

    def test_frozen(self):
        probe = ProbeResult.absent(ToolId.UV)
        with pytest.raises(ValidationError):
            probe.found = True


# ── Descriptors and recipes ──────────────────────────────────────────


class TestDescriptor:
    def test_installed_check_template(self):
        apt = build_descriptor("apt")
        assert apt.installed_check_for("nodejs") == ["dpkg-query", "-W", "-f=${Status}", "nodejs"]

    def test_marker_template(self):
        assert build_descriptor("choco").marker_for("nodejs-lts") == "nodejs-lts|"
        assert build_descriptor("dnf").marker_for("nodejs") is None

    def test_hint_for(self):
        apt = build_descriptor("apt")
        assert "universe" in apt.hint_for(100)
        assert apt.hint_for(1) is None
        assert apt.hint_for(None) is None

    def test_every_descriptor_builds(self):
        from envsetup.core.services.tool_install.data.managers import MANAGER_DESCRIPTORS

        for name in MANAGER_DESCRIPTORS:
            descriptor = build_descriptor(name)
            assert descriptor.name == name
            assert descriptor.install_command

    def test_secondary_managers(self):
        assert build_descriptor("pipx").secondary
        assert not build_descriptor("apt").secondary


class TestRecipe:
    def test_candidate_commands(self):
        recipe = build_recipe("python", {"install_versions": ["3.13", "3.12"]})
        assert recipe.candidate_commands() == ["python3.13", "python3.12", "python3", "python"]

    def test_version_args_by_pattern(self):
        python = build_recipe("python")
        assert python.version_args_for("python3.12")[0] == "-c"
        assert build_recipe("node").version_args_for("node") == ["--version"]

    def test_installer_for_os_and_manager(self):
        node = build_recipe("node")
        assert node.installer_for("linux", "apt").url.startswith("https://deb.nodesource.com")
        assert node.installer_for("linux", "dnf").url.startswith("https://rpm.nodesource.com")
        assert node.installer_for("linux", "pacman") is None
        assert node.installer_for("windows", None).url.endswith(".msi")

    def test_installer_spec_applies_to(self):
        spec = InstallerSpec(url="https://x", os_families=("linux",), managers=("apt",))
        assert spec.applies_to("linux", "apt")
        assert not spec.applies_to("linux", None)
        assert not spec.applies_to("darwin", "apt")

    def test_installer_checksum_normalised(self):
        spec = InstallerSpec(url="https://x", checksum="SHA256:" + "AB" * 32)
        assert spec.checksum == "sha256:" + "ab" * 32

    @pytest.mark.parametrize("checksum", ["deadbeef", "sha999:00", "sha256:xyz", "sha256:"])
    def test_malformed_installer_checksum(self, checksum):
        with pytest.raises(ValidationError):
            InstallerSpec(url="https://x", checksum=checksum)

    def test_default_strategies_allow_manual(self):
        assert build_recipe("uv").allows(Strategy.MANUAL_REQUIRED)

    def test_unknown_field_value_rejected(self):
        with pytest.raises(ValidationError):
            build_recipe("uv", {"strategies": ["teleport"]})


# ── Attempts ─────────────────────────────────────────────────────────


class TestInstallAttempt:
    def test_from_plan(self):
        planned = PlannedStrategy(
            strategy=Strategy.PACKAGE_MANAGER, manager="apt", packages=("nodejs", "npm"),
        )
        attempt = InstallAttempt.from_plan(ToolId.NODE, planned, ok=False, exit_status=100,
                                           reason="E: Unable to locate package nodejs")
        assert attempt.manager == "apt"
        assert attempt.describe() == (
            "package-manager via apt: nodejs npm -> failed (exit 100): "
            "E: Unable to locate package nodejs"
        )

    def test_describe_dry_run(self):
        planned = PlannedStrategy(strategy=Strategy.OFFICIAL_INSTALLER, url="https://astral.sh/uv/install.sh")
        attempt = InstallAttempt.from_plan(ToolId.UV, planned, dry_run=True)
        assert attempt.describe() == (
            "[dry-run] would try official-installer-script: https://astral.sh/uv/install.sh"
        )

    def test_to_dict(self):
        planned = PlannedStrategy(strategy=Strategy.FALLBACK_MANAGER, manager="pipx", packages=("uv",))
        data = InstallAttempt.from_plan(ToolId.UV, planned, ok=True, exit_status=0).to_dict()
        assert data["strategy"] == "fallback-manager"
        assert data["packages"] == ["uv"]
        assert data["probe"] is None


# ── Report ───────────────────────────────────────────────────────────


class TestInstallationReport:
    def test_terminal_states(self):
        assert RequirementState.SATISFIED.terminal
        assert RequirementState.PLANNED.terminal
        assert not RequirementState.INSTALLING.terminal

    def test_record_rejects_non_terminal(self):
        report = InstallationReport()
        with pytest.raises(ValueError):
            report.record(_outcome(ToolId.UV, RequirementState.CHECKING))

    def test_exit_code_all_satisfied(self):
        report = InstallationReport()
        report.record(_outcome(ToolId.PYTHON, RequirementState.SATISFIED))
        report.record(_outcome(ToolId.UV, RequirementState.SATISFIED))
        assert report.exit_code == 0

    def test_exit_code_unsatisfied(self):
        report = InstallationReport()
        report.record(_outcome(ToolId.PYTHON, RequirementState.SATISFIED))
        report.record(_outcome(ToolId.NODE, RequirementState.EXHAUSTED))
        assert report.exit_code == 1
        assert [o.tool for o in report.failures()] == ["node"]

    def test_exit_code_cancelled_wins(self):
        report = InstallationReport()
        report.record(_outcome(ToolId.NODE, RequirementState.EXHAUSTED))
        report.record(_outcome(ToolId.UV, RequirementState.CANCELLED))
        assert report.exit_code == 130

    def test_empty_report_is_satisfied(self):
        assert InstallationReport().exit_code == 0

    def test_to_dict(self):
        report = InstallationReport(dry_run=True)
        report.record(_outcome(ToolId.UV, RequirementState.PLANNED))
        data = report.to_dict()
        assert data["dry_run"] is True
        assert data["exit_code"] == 1
        assert data["summary"] == [
            {"tool": "uv", "status": "planned", "version": None, "command_path": None},
        ]
        assert data["requirements"][0]["requirement"] == "uv (any version)"

    def test_get(self):
        report = InstallationReport()
        report.record(_outcome(ToolId.UV, RequirementState.SATISFIED))
        assert report.get("uv").state == RequirementState.SATISFIED
        assert report.get("node") is None


# ── Cancellation ─────────────────────────────────────────────────────


class TestCancellationToken:
    def test_initially_clear(self):
        token = CancellationToken()
        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancel_once(self):
        token = CancellationToken()
        token.cancel("interrupted by user")
        token.cancel("second reason")
        assert token.cancelled
        assert token.reason == "interrupted by user"

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(Cancelled):
            token.raise_if_cancelled()
