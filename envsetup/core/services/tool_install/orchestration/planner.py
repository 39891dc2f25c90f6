"""
L5 Orchestration - Install planner.

Ties everything together for each requirement: probe, plan the ordered
strategies, attempt them one at a time, make the result visible on
PATH, re-probe, and record what happened.

State per requirement::

    unchecked -> checking -> satisfied
    checking  -> installing -> checking -> ... -> exhausted
    (any)     -> cancelled             (token set between operations)
    checking  -> planned               (dry run, unsatisfied)

Only programmer errors escape: every install or verification failure is
captured on an ``InstallAttempt`` and the next strategy runs.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Iterable, Mapping, Sequence

from envsetup.adapters.base import PackageManager
from envsetup.core.errors import Cancelled, InstallError, VerificationError
from envsetup.core.models.attempt import InstallAttempt, PlannedStrategy
from envsetup.core.models.environment import Scope
from envsetup.core.models.probe import ProbeResult
from envsetup.core.models.recipe import Strategy, ToolRecipe
from envsetup.core.models.report import (
    InstallationReport,
    RequirementOutcome,
    RequirementState,
)
from envsetup.core.models.requirement import ToolId, VersionRequirement
from envsetup.core.reliability.cancellation import CancellationToken
from envsetup.core.services.tool_install.detection.platform_info import detect_os_family
from envsetup.core.services.tool_install.detection.tool_probe import ToolProbe
from envsetup.core.services.tool_install.domain.failure_hints import format_diagnostic
from envsetup.core.services.tool_install.domain.version_spec import meets
from envsetup.core.services.tool_install.execution.installer import OfficialInstaller
from envsetup.core.services.tool_install.execution.path_reconciler import PathReconciler
from envsetup.core.services.tool_install.resolver.method_selection import (
    package_batches,
    render_template,
)

logger = logging.getLogger(__name__)


class InstallPlanner:
    """Resolve requirements one at a time, in caller order.

    Args:
        probe: Read-only tool prober bound to the run's search paths.
        reconciler: Makes install directories visible.
        recipes: Per-tool data, keyed by ``ToolId``.
        manager: The detected primary manager; None when detection failed.
        secondaries: Available user-space managers (any order; each
            recipe's ``fallback_managers`` decides which are tried).
        installer: Official installer runner; None disables that strategy.
        os_family: Host OS family; detected when omitted.
        dry_run: Probe and plan only.
        cancel: Cooperative cancellation token.
        persist_path: Also write new directories to the persistent store.
    """

    def __init__(
        self,
        probe: ToolProbe,
        reconciler: PathReconciler,
        recipes: Mapping[ToolId, ToolRecipe],
        *,
        manager: PackageManager | None = None,
        secondaries: Iterable[PackageManager] = (),
        installer: OfficialInstaller | None = None,
        os_family: str | None = None,
        dry_run: bool = False,
        cancel: CancellationToken | None = None,
        persist_path: bool = True,
    ):
        self.probe = probe
        self.reconciler = reconciler
        self.recipes = dict(recipes)
        self.manager = manager
        self.secondaries = {m.name: m for m in secondaries}
        self.installer = installer
        self.os_family = os_family or detect_os_family()
        self.dry_run = dry_run
        self.cancel = cancel if cancel is not None else CancellationToken()
        self.persist_path = persist_path
        self._indexes_refreshed = False

    # ── Planning ────────────────────────────────────────────────

    def recipe_for(self, tool: ToolId) -> ToolRecipe:
        return self.recipes[ToolId(tool)]

    def plan(self, requirement: VersionRequirement) -> list[PlannedStrategy]:
        """The ordered strategies that could satisfy ``requirement``.

        Declarative: nothing is installed.  Batches whose main package the
        manager already reports as installed are left out (reinstalling
        would not change the version), and installed companions are
        dropped from each batch.
        """
        recipe = self.recipe_for(requirement.tool)
        planned: list[PlannedStrategy] = []
        for strategy in recipe.strategies:
            if strategy == Strategy.PACKAGE_MANAGER and self.manager is not None:
                planned.extend(
                    self._plan_manager(Strategy.PACKAGE_MANAGER, self.manager, recipe, requirement)
                )
            elif strategy == Strategy.FALLBACK_MANAGER:
                for manager in self._fallbacks(recipe):
                    planned.extend(
                        self._plan_manager(Strategy.FALLBACK_MANAGER, manager, recipe, requirement)
                    )
            elif strategy == Strategy.OFFICIAL_INSTALLER and self.installer is not None:
                primary = self.manager.name if self.manager else None
                spec = recipe.installer_for(self.os_family, primary)
                if spec is None:
                    continue
                planned.append(PlannedStrategy(
                    strategy=Strategy.OFFICIAL_INSTALLER,
                    manager=primary if spec.then_install else None,
                    packages=spec.then_install,
                    url=spec.url,
                    label=f"{recipe.label} official installer",
                ))
        return planned

    def _fallbacks(self, recipe: ToolRecipe) -> list[PackageManager]:
        primary = self.manager.name if self.manager else None
        found = []
        for name in recipe.fallback_managers:
            manager = self.secondaries.get(name)
            if manager is not None and name != primary:
                found.append(manager)
        return found

    def _plan_manager(
        self,
        strategy: Strategy,
        manager: PackageManager,
        recipe: ToolRecipe,
        requirement: VersionRequirement,
    ) -> list[PlannedStrategy]:
        planned = []
        for main, batch in package_batches(manager.descriptor, recipe, requirement):
            if manager.is_package_installed(main):
                logger.debug("%s: %s already installed via %s, skipping", recipe.tool, main, manager.name)
                continue
            packages = [main] + [p for p in batch[1:] if not manager.is_package_installed(p)]
            planned.append(PlannedStrategy(
                strategy=strategy,
                manager=manager.name,
                packages=tuple(packages),
                label=f"{recipe.label} via {manager.name}",
            ))
        return planned

    # ── Resolution ──────────────────────────────────────────────

    def resolve(self, requirement: VersionRequirement) -> RequirementOutcome:
        """Drive one requirement to a terminal state."""
        outcome = RequirementOutcome(requirement=requirement)
        try:
            self._resolve(requirement, outcome)
        except Cancelled as exc:
            logger.warning("%s: %s", requirement.describe(), exc)
            outcome.state = RequirementState.CANCELLED
        return outcome

    def _resolve(self, requirement: VersionRequirement, outcome: RequirementOutcome) -> None:
        recipe = self.recipe_for(requirement.tool)
        self.cancel.raise_if_cancelled()

        outcome.state = RequirementState.CHECKING
        probe = self.probe.probe_recipe(recipe, requirement)
        outcome.probe = probe
        if meets(probe, requirement):
            self._surface(probe, outcome)
            failed = self.probe.run_health_checks(probe.command_path, recipe.health_checks)
            if failed:
                failed = self._repair(recipe, probe, failed, outcome)
            for label in failed:
                warning = f"{probe.command_path}: {label} check failed"
                logger.warning(warning)
                outcome.warnings.append(warning)
            outcome.state = RequirementState.SATISFIED
            return

        if probe.found:
            logger.info(
                "%s: found %s (%s), need %s",
                recipe.label, probe.command_path,
                probe.version or "unknown version", requirement.describe(),
            )
        else:
            logger.info("%s: not found, need %s", recipe.label, requirement.describe())

        plan = self.plan(requirement)
        if self.dry_run:
            outcome.attempts = [
                InstallAttempt.from_plan(
                    requirement.tool, planned, dry_run=True, reason="not executed (dry run)",
                )
                for planned in plan
            ]
            outcome.state = RequirementState.PLANNED
            return

        for planned in plan:
            self.cancel.raise_if_cancelled()
            outcome.state = RequirementState.INSTALLING
            attempt = self._attempt(recipe, requirement, planned)
            outcome.attempts.append(attempt)
            outcome.warnings.extend(attempt.warnings)
            if attempt.probe is not None:
                outcome.probe = attempt.probe

            outcome.state = RequirementState.CHECKING
            if attempt.ok:
                self._surface(attempt.probe, outcome)
                outcome.state = RequirementState.SATISFIED
                return

        outcome.state = RequirementState.EXHAUSTED
        outcome.diagnostic = self._diagnostic(recipe, requirement, probe, outcome.attempts)
        logger.error("%s could not be satisfied", requirement.describe())
        return

    def run(self, requirements: Sequence[VersionRequirement]) -> InstallationReport:
        """Resolve every requirement sequentially and collect the report."""
        report = InstallationReport(dry_run=self.dry_run)
        for requirement in requirements:
            report.record(self.resolve(requirement))
        return report

    # ── Attempts ────────────────────────────────────────────────

    def _attempt(
        self,
        recipe: ToolRecipe,
        requirement: VersionRequirement,
        planned: PlannedStrategy,
    ) -> InstallAttempt:
        start = time.monotonic()
        warnings: list[str] = []
        logger.info("%s: trying %s", recipe.label, planned.describe())

        def elapsed() -> int:
            return int((time.monotonic() - start) * 1000)

        try:
            search_dirs = self._execute(recipe, planned, warnings)
        except InstallError as exc:
            logger.warning("%s: %s", recipe.label, exc)
            return InstallAttempt.from_plan(
                requirement.tool, planned,
                ok=False,
                exit_status=exc.returncode,
                error_kind=type(exc).__name__,
                reason=str(exc),
                hint=exc.hint,
                duration_ms=elapsed(),
                warnings=tuple(warnings),
            )

        self.probe.invalidate()
        probe = self.probe.probe(
            recipe.tool,
            recipe.candidate_commands(),
            recipe.version_args_for,
            requirement,
            [*recipe.extra_dirs, *search_dirs],
        )

        error: VerificationError | None = None
        if not meets(probe, requirement):
            if probe.found:
                seen = f"found {probe.version or 'unknown version'} at {probe.command_path}"
            else:
                seen = "tool still not found"
            error = VerificationError(
                f"{planned.describe()} reported success but {requirement.describe()} "
                f"is not satisfied ({seen})"
            )
        else:
            failed = self.probe.run_health_checks(probe.command_path, recipe.health_checks)
            if failed:
                error = VerificationError(
                    f"{probe.command_path} installed but failed health checks: {', '.join(failed)}"
                )

        if error is not None:
            logger.warning("%s: %s", recipe.label, error)
            return InstallAttempt.from_plan(
                requirement.tool, planned,
                ok=False,
                exit_status=0,
                error_kind=type(error).__name__,
                reason=str(error),
                duration_ms=elapsed(),
                probe=probe,
                warnings=tuple(warnings),
            )

        logger.info("%s: %s %s is ready", recipe.label, probe.command_path, probe.version or "")
        return InstallAttempt.from_plan(
            requirement.tool, planned,
            ok=True,
            exit_status=0,
            duration_ms=elapsed(),
            probe=probe,
            warnings=tuple(warnings),
        )

    def _repair(
        self,
        recipe: ToolRecipe,
        probe: ProbeResult,
        failed: list[str],
        outcome: RequirementOutcome,
    ) -> list[str]:
        """Install missing companions for a tool that is new enough but unhealthy.

        A Python that satisfies the requirement but lacks pip or venv is
        repaired through the primary manager, then re-checked.  The state
        stays satisfied either way; returns the checks that still fail.
        """
        if self.dry_run or self.manager is None or self.cancel.cancelled:
            return failed

        ver = f"{probe.version.major}.{probe.version.minor}" if probe.version else None
        packages = []
        for template in self.manager.descriptor.companions_for(recipe.tool):
            name = render_template(template, ver)
            if name is None or name in packages or self.manager.is_package_installed(name):
                continue
            packages.append(name)
        if not packages:
            return failed

        planned = PlannedStrategy(
            strategy=Strategy.PACKAGE_MANAGER,
            manager=self.manager.name,
            packages=tuple(packages),
            label=f"{recipe.label} companions via {self.manager.name}",
        )
        logger.info("%s: %s failed, trying %s", recipe.label, ", ".join(failed), planned.describe())
        start = time.monotonic()
        warnings = self._refresh_indexes()
        try:
            self.manager.install_packages(planned.packages)
        except InstallError as exc:
            logger.warning("%s: %s", recipe.label, exc)
            outcome.attempts.append(InstallAttempt.from_plan(
                recipe.tool, planned,
                ok=False,
                exit_status=exc.returncode,
                error_kind=type(exc).__name__,
                reason=str(exc),
                hint=exc.hint,
                duration_ms=int((time.monotonic() - start) * 1000),
                warnings=tuple(warnings),
            ))
            outcome.warnings.extend(warnings)
            return failed

        still = self.probe.run_health_checks(probe.command_path, recipe.health_checks)
        outcome.attempts.append(InstallAttempt.from_plan(
            recipe.tool, planned,
            ok=not still,
            exit_status=0,
            error_kind=None if not still else VerificationError.__name__,
            reason=f"still failing: {', '.join(still)}" if still else "",
            duration_ms=int((time.monotonic() - start) * 1000),
            probe=probe,
            warnings=tuple(warnings),
        ))
        outcome.warnings.extend(warnings)
        return still

    def _execute(
        self,
        recipe: ToolRecipe,
        planned: PlannedStrategy,
        warnings: list[str],
    ) -> list[str]:
        """Run one planned strategy; return directories the tool may land in.

        Raises:
            InstallError: the strategy failed.
        """
        if planned.strategy == Strategy.PACKAGE_MANAGER:
            warnings.extend(self._refresh_indexes())
            self.manager.install_packages(planned.packages)
            return list(self.manager.descriptor.bin_dirs)

        if planned.strategy == Strategy.FALLBACK_MANAGER:
            manager = self.secondaries[planned.manager]
            manager.install_packages(planned.packages)
            return list(manager.descriptor.bin_dirs)

        if planned.strategy == Strategy.OFFICIAL_INSTALLER:
            primary = self.manager.name if self.manager else None
            spec = recipe.installer_for(self.os_family, primary)
            if spec.then_install:
                warnings.extend(self._refresh_indexes())
            self.installer.run(spec, self.manager)
            dirs = list(spec.installs_to)
            if self.manager is not None and spec.then_install:
                dirs.extend(self.manager.descriptor.bin_dirs)
            return dirs

        raise ValueError(f"Strategy {planned.strategy} cannot be executed")

    def _refresh_indexes(self) -> list[str]:
        """Refresh the primary manager's index once per run."""
        if self._indexes_refreshed or self.manager is None:
            return []
        self._indexes_refreshed = True
        return self.manager.update_indexes()

    # ── PATH + diagnostics ──────────────────────────────────────

    def _surface(self, probe: ProbeResult | None, outcome: RequirementOutcome) -> None:
        """Make the directory of a found command visible if it is not already."""
        if probe is None or not probe.command_path:
            return
        directory = os.path.dirname(probe.command_path)
        if self.reconciler.path_set.contains(directory):
            return
        scope = (
            Scope.PERSISTENT_USER
            if self.persist_path and not self.dry_run
            else Scope.PROCESS_ONLY
        )
        if self.reconciler.ensure_visible(directory, scope):
            note = f"Added {directory} to PATH ({scope})"
            outcome.warnings.append(note)

    def _diagnostic(
        self,
        recipe: ToolRecipe,
        requirement: VersionRequirement,
        initial: ProbeResult,
        attempts: list[InstallAttempt],
    ) -> str:
        manual = recipe.manual_hint if recipe.allows(Strategy.MANUAL_REQUIRED) else ""
        text = format_diagnostic(recipe.label, requirement.describe(), attempts, manual)
        if initial.found:
            seen = initial.version or initial.raw_version or "unknown version"
            text = f"{text}\nCurrently found: {initial.command_path} ({seen})"
        if self.manager is None:
            text = f"{text}\nNo supported system package manager was detected."
        return text
