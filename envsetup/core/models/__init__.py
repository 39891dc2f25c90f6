"""
Domain models - Pydantic types for the resolver/installer engine.

All models are re-exported here for convenient access:

    from envsetup.core.models import ToolId, VersionRequirement, InstallationReport
"""

from envsetup.core.models.attempt import InstallAttempt, PlannedStrategy
from envsetup.core.models.environment import EnvironmentPathSet, Scope
from envsetup.core.models.manager import PackageManagerDescriptor
from envsetup.core.models.probe import ProbeResult
from envsetup.core.models.recipe import (
    DEFAULT_STRATEGIES,
    HealthCheck,
    InstallerSpec,
    Strategy,
    ToolRecipe,
)
from envsetup.core.models.report import (
    InstallationReport,
    RequirementOutcome,
    RequirementState,
)
from envsetup.core.models.requirement import ToolId, Version, VersionRequirement
from envsetup.core.models.setup_config import SetupConfig, Timeouts

__all__ = [
    # recipe.py
    "DEFAULT_STRATEGIES",
    # environment.py
    "EnvironmentPathSet",
    "HealthCheck",
    # attempt.py
    "InstallAttempt",
    # report.py
    "InstallationReport",
    "InstallerSpec",
    # manager.py
    "PackageManagerDescriptor",
    "PlannedStrategy",
    # probe.py
    "ProbeResult",
    "RequirementOutcome",
    "RequirementState",
    "Scope",
    # setup_config.py
    "SetupConfig",
    "Strategy",
    "Timeouts",
    # requirement.py
    "ToolId",
    "ToolRecipe",
    "Version",
    "VersionRequirement",
]
