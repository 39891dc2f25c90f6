"""
L3 Detection - Tool presence and version probing.

Read-only: resolves candidate command names on the run's explicit search
path, asks each one for its version, and reports the best match.  Never
mutates the environment.
"""

from __future__ import annotations

import logging
import os
import shutil
from typing import Callable, Iterable, Sequence

from envsetup.core.errors import ParseError
from envsetup.core.models.environment import EnvironmentPathSet
from envsetup.core.models.probe import ProbeResult
from envsetup.core.models.recipe import HealthCheck, ToolRecipe
from envsetup.core.models.requirement import ToolId, VersionRequirement
from envsetup.core.services.tool_install.domain.version_spec import (
    extract_version,
    meets,
    parse,
)
from envsetup.core.services.tool_install.execution.subprocess_runner import Runner, run_command

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0

VersionArgSelector = Callable[[str], Sequence[str]]


def expand_dirs(dirs: Iterable[str]) -> list[str]:
    """Expand ``~`` and ``$VARS`` and keep only existing directories."""
    expanded: list[str] = []
    for entry in dirs:
        path = os.path.expandvars(os.path.expanduser(entry))
        if "$" in path or "%" in path:
            continue                       # unresolved variable
        if os.path.isdir(path):
            expanded.append(path)
    return expanded


class ToolProbe:
    """Find an acceptable executable for a tool.

    Command resolution is cached per probe instance; call
    ``invalidate()`` after anything that may have installed a binary.
    """

    def __init__(
        self,
        path_set: EnvironmentPathSet,
        *,
        runner: Runner = run_command,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ):
        self.path_set = path_set
        self.runner = runner
        self.timeout = timeout
        self._cache: dict[tuple[str, tuple[str, ...]], str | None] = {}

    def invalidate(self) -> None:
        """Forget every cached command resolution."""
        self._cache.clear()

    def resolve(self, command: str, extra_dirs: Sequence[str] = ()) -> str | None:
        """Resolve ``command`` on the search path, then in ``extra_dirs``."""
        key = (command, tuple(extra_dirs))
        if key in self._cache:
            return self._cache[key]

        found = shutil.which(command, path=self.path_set.process_path())
        if found is None:
            dirs = expand_dirs(extra_dirs)
            if dirs:
                found = shutil.which(command, path=os.pathsep.join(dirs))
                if found:
                    logger.debug("%s found outside PATH at %s", command, found)

        self._cache[key] = found
        return found

    def probe(
        self,
        tool: ToolId,
        candidates: Sequence[str],
        version_arg_selector: VersionArgSelector,
        requirement: VersionRequirement,
        extra_dirs: Sequence[str] = (),
    ) -> ProbeResult:
        """Return the first candidate that satisfies ``requirement``.

        Candidates are tried in the given order (most specific first).  If
        none satisfies, the result for the last command that resolved is
        returned, so callers can report "found 3.9.1, need 3.10"; if
        nothing resolved at all, an absent result.
        """
        best: ProbeResult | None = None
        for name in candidates:
            path = self.resolve(name, extra_dirs)
            if path is None:
                logger.debug("Candidate %s not found", name)
                continue

            result = self._query(tool, name, path, version_arg_selector(name))
            if meets(result, requirement):
                logger.info(
                    "%s: %s (%s) satisfies %s",
                    tool.value, path, result.version, requirement.describe(),
                )
                return result

            logger.info(
                "%s: %s reports %s, does not satisfy %s",
                tool.value, path, result.version or "unknown version",
                requirement.describe(),
            )
            best = result

        return best or ProbeResult.absent(tool)

    def probe_recipe(self, recipe: ToolRecipe, requirement: VersionRequirement) -> ProbeResult:
        return self.probe(
            recipe.tool,
            recipe.candidate_commands(),
            recipe.version_args_for,
            requirement,
            recipe.extra_dirs,
        )

    def _query(self, tool: ToolId, name: str, path: str, args: Sequence[str]) -> ProbeResult:
        """Run the version query; failures leave the version undetermined."""
        outcome = self.runner([path, *args], timeout=self.timeout)
        output = ((outcome.get("stdout") or "") + "\n" + (outcome.get("stderr") or "")).strip()

        if not outcome.get("ok"):
            logger.warning(
                "Version query failed for %s: %s", path, outcome.get("error", "unknown error"),
            )
            return ProbeResult(
                tool=tool, found=True, command=name, command_path=path,
                raw_version=output or outcome.get("error"),
            )

        first_line = output.splitlines()[0] if output else ""
        token = extract_version(output)
        version = None
        if token is not None:
            try:
                version = parse(token)
            except ParseError as exc:
                logger.warning("%s: %s", path, exc)
        else:
            logger.warning("No version found in output of %s: %r", path, first_line)

        return ProbeResult(
            tool=tool, found=True, command=name, command_path=path,
            version=version, raw_version=first_line or None,
        )

    def run_health_checks(self, command_path: str, checks: Sequence[HealthCheck]) -> list[str]:
        """Run each check against ``command_path``; return the labels that failed."""
        failed: list[str] = []
        for check in checks:
            outcome = self.runner([command_path, *check.args], timeout=self.timeout)
            if not outcome.get("ok"):
                failed.append(check.label)
        return failed
