"""
Install use case - resolve the toolchain end to end.

This is the top-level orchestrator: it loads config, parses the
requirements, detects the package managers, wires the planner and runs
it.  ``run_check`` is the probe-only variant behind ``envsetup check``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import MutableMapping

from envsetup.adapters.base import PackageManager
from envsetup.adapters.registry import ManagerRegistry
from envsetup.core.config.loader import (
    ConfigError,
    build_recipes,
    load_config,
    resolve_requirements,
)
from envsetup.core.errors import InstallError, UnsupportedPlatform
from envsetup.core.models.environment import EnvironmentPathSet, Scope
from envsetup.core.models.recipe import InstallerSpec
from envsetup.core.models.report import InstallationReport
from envsetup.core.models.requirement import VersionRequirement
from envsetup.core.reliability.cancellation import CancellationToken
from envsetup.core.services.tool_install.data.managers import HOMEBREW_INSTALLER
from envsetup.core.services.tool_install.detection.platform_info import detect_os_family
from envsetup.core.services.tool_install.detection.tool_probe import ToolProbe
from envsetup.core.services.tool_install.execution.installer import OfficialInstaller
from envsetup.core.services.tool_install.execution.path_reconciler import PathReconciler
from envsetup.core.services.tool_install.execution.path_store import (
    PersistentPathStore,
    default_store,
)
from envsetup.core.services.tool_install.orchestration.planner import InstallPlanner

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Result of an install (or check) run."""

    report: InstallationReport | None = None
    requirements: list[VersionRequirement] = field(default_factory=list)
    os_family: str = ""
    manager: str | None = None
    secondaries: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def exit_code(self) -> int:
        if self.error:
            return 2
        if self.report is None:
            return 1
        return self.report.exit_code

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            result["exit_code"] = self.exit_code
            return result

        result["os_family"] = self.os_family
        result["package_manager"] = self.manager
        result["fallback_managers"] = list(self.secondaries)
        if self.warnings:
            result["warnings"] = list(self.warnings)
        if self.report:
            result.update(self.report.to_dict())
        return result


def _fallback_names(recipes) -> list[str]:
    names: list[str] = []
    for recipe in recipes.values():
        for name in recipe.fallback_managers:
            if name not in names:
                names.append(name)
    return names


def _bootstrap_homebrew(
    registry: ManagerRegistry,
    installer: OfficialInstaller,
    reconciler: PathReconciler,
    result: InstallResult,
    *,
    dry_run: bool,
    persist_path: bool,
) -> PackageManager | None:
    """Install Homebrew on a Mac that has no package manager, then re-detect.

    Returns the detected manager, or None if the bootstrap did not
    produce a usable ``brew``.
    """
    spec = InstallerSpec(**HOMEBREW_INSTALLER)
    if dry_run:
        result.warnings.append(f"Would install Homebrew from {spec.url}")
        return None

    logger.warning("No package manager found; installing Homebrew from %s", spec.url)
    try:
        installer.run(spec)
    except InstallError as e:
        logger.warning("Homebrew installation failed: %s", e)
        result.warnings.append(f"Homebrew installation failed: {e}")
        return None

    scope = Scope.PERSISTENT_USER if persist_path else Scope.PROCESS_ONLY
    for directory in spec.installs_to:
        if os.path.isfile(os.path.join(directory, "brew")):
            reconciler.ensure_visible(directory, scope)
            break

    try:
        manager = registry.detect("darwin")
    except UnsupportedPlatform:
        result.warnings.append("Homebrew installer finished but brew was not found")
        return None
    result.warnings.append(f"Installed Homebrew ({manager.name})")
    return manager


def run_install(
    requirements: list[str] | tuple[str, ...] = (),
    *,
    config_path: Path | None = None,
    dry_run: bool = False,
    persist_path: bool | None = None,
    cancel: CancellationToken | None = None,
    registry: ManagerRegistry | None = None,
    installer: OfficialInstaller | None = None,
    store: PersistentPathStore | None = None,
    environ: MutableMapping[str, str] | None = None,
    os_family: str | None = None,
    probe_only: bool = False,
) -> InstallResult:
    """Resolve requirements, installing whatever is missing.

    Args:
        requirements: CLI requirement strings; config or defaults when empty.
        config_path: Optional explicit path to envsetup.yml.
        dry_run: Probe and plan, but install nothing.
        persist_path: Override the config's ``persist_path``.
        cancel: Token the caller sets to stop between operations.
        registry: Optional pre-configured manager registry.
        installer: Optional pre-configured official installer runner.
        store: Persistent PATH store; the platform default when omitted.
        environ: Mapping that receives PATH updates (default ``os.environ``).
        os_family: Override host OS detection.
        probe_only: Only probe; no strategies are planned or run.

    Returns:
        InstallResult with the report, or ``error`` for invalid input.
    """
    result = InstallResult()

    # ── Config + requirements ────────────────────────────────────
    try:
        config = load_config(config_path)
        parsed = resolve_requirements(list(requirements), config)
        recipes = build_recipes(config)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.requirements = parsed

    if persist_path is None:
        persist_path = config.persist_path
    environ = os.environ if environ is None else environ
    family = os_family or detect_os_family()
    result.os_family = family

    # ── PATH ─────────────────────────────────────────────────────
    if persist_path and not dry_run and not probe_only and store is None:
        store = default_store()
    if not persist_path:
        store = None
    path_set = EnvironmentPathSet.from_environ(environ, store)
    reconciler = PathReconciler(path_set, store=store, environ=environ)

    # ── Managers ─────────────────────────────────────────────────
    if registry is None:
        registry = ManagerRegistry(adapter_options={
            "install_timeout": config.timeouts.install,
            "update_timeout": config.timeouts.update,
        })

    manager: PackageManager | None = None
    secondaries: list[PackageManager] = []
    if not probe_only:
        if installer is None:
            installer = OfficialInstaller(
                os_family=family,
                timeout=config.timeouts.install,
                download_timeout=config.timeouts.download,
            )

        try:
            manager = registry.detect(family)
        except UnsupportedPlatform as e:
            if family == "darwin" and config.bootstrap_homebrew:
                manager = _bootstrap_homebrew(
                    registry, installer, reconciler, result,
                    dry_run=dry_run, persist_path=persist_path,
                )
            if manager is None:
                logger.warning("%s", e)
                result.warnings.append(str(e))
        if manager is not None:
            result.manager = manager.name
        secondaries = registry.secondary(
            _fallback_names(recipes),
            exclude=[manager.name] if manager else [],
            os_family=family,
        )
        result.secondaries = [m.name for m in secondaries]

    planner = InstallPlanner(
        ToolProbe(path_set, timeout=config.timeouts.probe),
        reconciler,
        recipes,
        manager=manager,
        secondaries=secondaries,
        installer=None if probe_only else installer,
        os_family=family,
        dry_run=dry_run or probe_only,
        cancel=cancel,
        persist_path=persist_path and not probe_only,
    )
    result.report = planner.run(parsed)
    return result


def run_check(
    requirements: list[str] | tuple[str, ...] = (),
    *,
    config_path: Path | None = None,
    environ: MutableMapping[str, str] | None = None,
    os_family: str | None = None,
) -> InstallResult:
    """Probe only: report which requirements are already satisfied."""
    return run_install(
        requirements,
        config_path=config_path,
        persist_path=False,
        environ=dict(os.environ if environ is None else environ),
        os_family=os_family,
        probe_only=True,
    )
