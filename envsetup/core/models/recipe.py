"""
ToolRecipe - per-tool probing and installation data.

Recipes say which commands to look for, how to ask each one for its
version, which fallback managers and installers may be used, and what to
tell the user when everything fails.
"""

from __future__ import annotations

import fnmatch
import hashlib
import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from envsetup.core.models.requirement import ToolId


class Strategy(StrEnum):
    """Installation strategies, in canonical preference order."""

    PACKAGE_MANAGER = "package-manager"
    FALLBACK_MANAGER = "fallback-manager"
    OFFICIAL_INSTALLER = "official-installer-script"
    MANUAL_REQUIRED = "manual-required"


# Manual is never executed; allowing it adds the recipe's manual
# instructions to the diagnostic of an exhausted requirement.
DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    Strategy.PACKAGE_MANAGER,
    Strategy.FALLBACK_MANAGER,
    Strategy.OFFICIAL_INSTALLER,
    Strategy.MANUAL_REQUIRED,
)


class InstallerSpec(BaseModel):
    """A vendor-provided installer artifact.

    ``kind="script"`` runs ``interpreter + [downloaded file] + args``;
    ``kind="executable"`` runs the downloaded file itself with ``args``.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    os_families: tuple[str, ...] = ()
    kind: str = "script"
    interpreter: tuple[str, ...] = ("sh",)
    args: tuple[str, ...] = ()
    env: dict[str, str] = Field(default_factory=dict)
    suffix: str = ""
    checksum: str | None = None        # "sha256:<hex>"
    managers: tuple[str, ...] = ()      # empty = any primary manager (or none)
    then_install: tuple[str, ...] = ()  # installed with the primary manager afterwards
    installs_to: tuple[str, ...] = ()
    needs_root: bool = False

    @field_validator("checksum")
    @classmethod
    def _checksum_format(cls, value: str | None) -> str | None:
        """``algo:hex`` with an algorithm hashlib knows, normalised to lower case."""
        if value is None:
            return None
        algo, sep, digest = value.partition(":")
        algo = algo.strip().lower()
        if not sep or algo not in hashlib.algorithms_available:
            raise ValueError(f"checksum must look like 'sha256:<hex>', got {value!r}")
        if not re.fullmatch(r"[0-9a-fA-F]+", digest.strip()):
            raise ValueError(f"checksum digest is not hexadecimal: {value!r}")
        return f"{algo}:{digest.strip().lower()}"

    def applies_to(self, os_family: str, manager_name: str | None) -> bool:
        if self.os_families and os_family not in self.os_families:
            return False
        if not self.managers:
            return True
        return manager_name in self.managers


class HealthCheck(BaseModel):
    """Arguments run against a resolved command; exit 0 means healthy."""

    model_config = ConfigDict(frozen=True)

    label: str
    args: tuple[str, ...]


class ToolRecipe(BaseModel):
    model_config = ConfigDict(frozen=True)

    tool: ToolId
    label: str
    commands: tuple[str, ...]
    install_versions: tuple[str, ...] = ()
    version_args: tuple[str, ...] = ("--version",)
    version_args_by_command: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    health_checks: tuple[HealthCheck, ...] = ()
    extra_dirs: tuple[str, ...] = ()
    fallback_managers: tuple[str, ...] = ()
    installers: tuple[InstallerSpec, ...] = ()
    strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES
    manual_hint: str = ""

    def version_args_for(self, command: str) -> list[str]:
        """Pick the version-query arguments for a candidate command name."""
        for pattern, args in self.version_args_by_command.items():
            if fnmatch.fnmatch(command, pattern):
                return list(args)
        return list(self.version_args)

    def candidate_commands(self) -> list[str]:
        """Expand command templates: versioned names newest first, then generic."""
        versioned = [t for t in self.commands if "{ver" in t]
        names: list[str] = []
        for ver in self.install_versions:
            for template in versioned:
                names.append(template.format(ver=ver, ver_nodot=ver.replace(".", "")))
        names.extend(t for t in self.commands if "{ver" not in t)
        return list(dict.fromkeys(names))

    def installer_for(self, os_family: str, manager_name: str | None) -> InstallerSpec | None:
        for spec in self.installers:
            if spec.applies_to(os_family, manager_name):
                return spec
        return None

    def allows(self, strategy: Strategy) -> bool:
        return strategy in self.strategies
