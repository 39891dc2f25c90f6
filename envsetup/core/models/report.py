"""
InstallationReport - final state of every requirement in a run.

Pure aggregation: the planner records outcomes, the CLI reads the
summary.  No behaviour beyond accumulation and read-only views.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from envsetup.core.models.attempt import InstallAttempt
from envsetup.core.models.probe import ProbeResult
from envsetup.core.models.requirement import VersionRequirement


class RequirementState(StrEnum):
    UNCHECKED = "unchecked"
    CHECKING = "checking"
    INSTALLING = "installing"
    SATISFIED = "satisfied"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    PLANNED = "planned"   # dry-run: unsatisfied, nothing executed

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({
    RequirementState.SATISFIED,
    RequirementState.EXHAUSTED,
    RequirementState.CANCELLED,
    RequirementState.PLANNED,
})


class RequirementOutcome(BaseModel):
    """Where one requirement ended up, and how it got there."""

    requirement: VersionRequirement
    state: RequirementState = RequirementState.UNCHECKED
    probe: ProbeResult | None = None
    attempts: list[InstallAttempt] = Field(default_factory=list)
    diagnostic: str = ""
    warnings: list[str] = Field(default_factory=list)

    @property
    def tool(self) -> str:
        return self.requirement.tool.value

    def summary(self) -> dict:
        found = self.probe is not None and self.probe.found
        return {
            "tool": self.tool,
            "status": self.state.value,
            "version": str(self.probe.version) if found and self.probe.version else None,
            "command_path": self.probe.command_path if found else None,
        }

    def to_dict(self) -> dict:
        data = self.summary()
        data["requirement"] = self.requirement.describe()
        data["attempts"] = [a.to_dict() for a in self.attempts]
        if self.diagnostic:
            data["diagnostic"] = self.diagnostic
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data


class InstallationReport(BaseModel):
    outcomes: list[RequirementOutcome] = Field(default_factory=list)
    dry_run: bool = False

    def record(self, outcome: RequirementOutcome) -> None:
        """Append a requirement that has reached a terminal state."""
        if not outcome.state.terminal:
            raise ValueError(
                f"cannot record {outcome.tool} in non-terminal state {outcome.state.value}"
            )
        self.outcomes.append(outcome)

    def summary(self) -> list[dict]:
        return [o.summary() for o in self.outcomes]

    def failures(self) -> list[RequirementOutcome]:
        return [o for o in self.outcomes if o.state == RequirementState.EXHAUSTED]

    def get(self, tool: str) -> RequirementOutcome | None:
        for outcome in self.outcomes:
            if outcome.tool == tool:
                return outcome
        return None

    @property
    def all_satisfied(self) -> bool:
        return all(o.state == RequirementState.SATISFIED for o in self.outcomes)

    @property
    def cancelled(self) -> bool:
        return any(o.state == RequirementState.CANCELLED for o in self.outcomes)

    @property
    def exit_code(self) -> int:
        """0 all satisfied, 130 cancelled, 1 anything else left unsatisfied."""
        if self.cancelled:
            return 130
        if self.all_satisfied:
            return 0
        return 1

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "exit_code": self.exit_code,
            "summary": self.summary(),
            "requirements": [o.to_dict() for o in self.outcomes],
        }
