"""
System package manager adapter - drives any manager described by data.

One class covers apt, dnf, yum, pacman, zypper, apk, brew, port, winget,
choco, pipx and pip: everything that differs between them lives in the
``PackageManagerDescriptor``.
"""

from __future__ import annotations

import logging
import shutil
from typing import Any, Callable, Mapping, Sequence

from envsetup.adapters.base import PackageManager
from envsetup.core.errors import InstallError
from envsetup.core.models.manager import PackageManagerDescriptor
from envsetup.core.services.tool_install.detection.platform_info import (
    detect_os_family,
    is_root,
)
from envsetup.core.services.tool_install.domain.failure_hints import analyse_install_failure
from envsetup.core.services.tool_install.execution.privilege import privilege_prefix
from envsetup.core.services.tool_install.execution.subprocess_runner import Runner, run_command

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_TIMEOUT = 1800
DEFAULT_UPDATE_TIMEOUT = 600
DEFAULT_CHECK_TIMEOUT = 30


def sudo_prefix(
    descriptor: PackageManagerDescriptor,
    *,
    os_family: str,
    root: bool,
    which: Callable[[str], str | None] = shutil.which,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Privilege prefix for a manager command; see ``privilege_prefix``."""
    return privilege_prefix(
        descriptor.label or descriptor.name,
        needs_root=descriptor.needs_root,
        os_family=os_family,
        root=root,
        which=which,
        keep_env=descriptor.env,
        environ=environ,
    )


class SystemPackageManager(PackageManager):
    """Data-driven adapter for a single package manager.

    Args:
        descriptor: What to run and which packages exist.
        os_family: Host OS family; detected when omitted.
        runner: Subprocess runner (swapped in tests).
        which: Binary resolver (swapped in tests).
        root: Whether the process is privileged; detected when omitted.
    """

    def __init__(
        self,
        descriptor: PackageManagerDescriptor,
        *,
        os_family: str | None = None,
        runner: Runner = run_command,
        which: Callable[[str], str | None] = shutil.which,
        root: bool | None = None,
        install_timeout: float = DEFAULT_INSTALL_TIMEOUT,
        update_timeout: float = DEFAULT_UPDATE_TIMEOUT,
        check_timeout: float = DEFAULT_CHECK_TIMEOUT,
    ):
        self._descriptor = descriptor
        self.os_family = os_family or detect_os_family()
        self._run = runner
        self._which = which
        self._root = is_root() if root is None else root
        self.install_timeout = install_timeout
        self.update_timeout = update_timeout
        self.check_timeout = check_timeout

    @property
    def descriptor(self) -> PackageManagerDescriptor:
        return self._descriptor

    @property
    def label(self) -> str:
        return self._descriptor.label or self._descriptor.name

    def is_available(self) -> bool:
        return self._which(self._descriptor.binary) is not None

    def _prefix(self) -> list[str]:
        return sudo_prefix(
            self._descriptor, os_family=self.os_family, root=self._root, which=self._which,
        )

    def install_command(self, packages: Sequence[str]) -> list[str]:
        """The argv that ``install_packages`` runs (for one batch)."""
        return self._prefix() + list(self._descriptor.install_command) + list(packages)

    # ── Index refresh ───────────────────────────────────────────

    def update_indexes(self) -> list[str]:
        if not self._descriptor.update_command:
            return []
        try:
            cmd = self._prefix() + list(self._descriptor.update_command)
        except InstallError as exc:
            return [f"Skipped {self.label} index refresh: {exc}"]

        logger.info("Refreshing %s package index", self.label)
        result = self._run(
            cmd, timeout=self.update_timeout, env_overrides=self._descriptor.env,
        )
        if result["ok"] or result.get("returncode") in self._descriptor.update_ok_codes:
            return []
        detail = (result.get("stderr") or "").strip().splitlines()
        warning = f"{self.label} index refresh failed: {result.get('error', 'unknown error')}"
        if detail:
            warning += f" ({detail[-1]})"
        logger.warning(warning)
        return [warning]

    # ── Queries ─────────────────────────────────────────────────

    def is_package_installed(self, package: str) -> bool:
        if not self._descriptor.installed_check:
            return False
        result = self._run(
            self._descriptor.installed_check_for(package), timeout=self.check_timeout,
        )
        if not result["ok"]:
            return False
        marker = self._descriptor.marker_for(package)
        if marker is None:
            return True
        return marker in (result.get("stdout") or "")

    # ── Installs ────────────────────────────────────────────────

    def install_packages(self, packages: Sequence[str]) -> dict[str, Any]:
        packages = list(packages)
        if not packages:
            return {"ok": True, "returncode": 0, "elapsed_ms": 0}

        batches = [packages] if self._descriptor.batch_install else [[p] for p in packages]
        elapsed_ms = 0
        for batch in batches:
            result = self._install_batch(batch)
            elapsed_ms += result.get("elapsed_ms", 0)
        return {"ok": True, "returncode": 0, "elapsed_ms": elapsed_ms}

    def _install_batch(self, packages: list[str]) -> dict[str, Any]:
        cmd = self.install_command(packages)
        logger.info("Installing with %s: %s", self.label, " ".join(packages))
        result = self._run(
            cmd, timeout=self.install_timeout, env_overrides=self._descriptor.env,
        )
        if result["ok"]:
            return result

        returncode = result.get("returncode")
        stderr = result.get("stderr") or result.get("stdout") or ""
        hint = analyse_install_failure(stderr, self._descriptor.hint_for(returncode))
        raise InstallError(
            f"{self.label} failed to install {' '.join(packages)}: "
            f"{result.get('error', 'unknown error')}",
            returncode=returncode,
            stderr=stderr,
            hint=hint,
        )
