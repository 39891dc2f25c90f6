"""
L4 Execution - Official installer runner.

Downloads a vendor installer (uv's ``install.sh``, NodeSource's setup
script, python.org and nodejs.org packages) into a temporary directory,
runs it, and optionally finishes with a package install through the
primary manager (NodeSource only adds a repository).
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Any, Callable

from envsetup.adapters.base import PackageManager
from envsetup.core.errors import InstallError
from envsetup.core.models.recipe import InstallerSpec
from envsetup.core.services.tool_install.detection.platform_info import (
    detect_os_family,
    is_root,
)
from envsetup.core.services.tool_install.domain.failure_hints import analyse_install_failure
from envsetup.core.services.tool_install.execution.download import Fetcher, download_file
from envsetup.core.services.tool_install.execution.privilege import privilege_prefix
from envsetup.core.services.tool_install.execution.subprocess_runner import Runner, run_command

logger = logging.getLogger(__name__)

DEFAULT_INSTALLER_TIMEOUT = 1800
DEFAULT_DOWNLOAD_TIMEOUT = 60


class OfficialInstaller:
    """Run ``InstallerSpec`` artifacts.

    Args:
        os_family: Host OS family; detected when omitted.
        runner: Subprocess runner (swapped in tests).
        fetch: Download function with ``download_file``'s signature.
        which: Binary resolver used for the ``sudo`` lookup.
        root: Whether the process is privileged; detected when omitted.
    """

    def __init__(
        self,
        *,
        os_family: str | None = None,
        runner: Runner = run_command,
        fetch: Fetcher = download_file,
        which: Callable[[str], str | None] = shutil.which,
        root: bool | None = None,
        timeout: float = DEFAULT_INSTALLER_TIMEOUT,
        download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
    ):
        self.os_family = os_family or detect_os_family()
        self._run = runner
        self._fetch = fetch
        self._which = which
        self._root = is_root() if root is None else root
        self.timeout = timeout
        self.download_timeout = download_timeout

    def command_for(self, spec: InstallerSpec, artifact: Path) -> list[str]:
        """The argv that runs a downloaded artifact, without privilege prefix."""
        if spec.kind == "executable":
            return [str(artifact), *spec.args]
        return [*spec.interpreter, str(artifact), *spec.args]

    def run(self, spec: InstallerSpec, manager: PackageManager | None = None) -> dict[str, Any]:
        """Download and execute ``spec``, then install ``then_install`` packages.

        Returns:
            ``{"ok": True, "returncode": 0, "elapsed_ms": N}``.

        Raises:
            InstallError: download failure, non-zero exit, missing sudo, or
                ``then_install`` without a primary manager.
        """
        if spec.then_install and manager is None:
            raise InstallError(
                f"Installer {spec.url} needs a package manager to install "
                f"{' '.join(spec.then_install)}",
            )

        prefix = privilege_prefix(
            spec.url,
            needs_root=spec.needs_root,
            os_family=self.os_family,
            root=self._root,
            which=self._which,
            keep_env=spec.env,
        )

        with tempfile.TemporaryDirectory(prefix="envsetup-") as tmp:
            artifact = Path(tmp) / f"installer{spec.suffix}"
            fetched = self._fetch(
                spec.url, artifact, timeout=self.download_timeout, checksum=spec.checksum,
            )
            if not fetched["ok"]:
                error = fetched.get("error", "download failed")
                raise InstallError(
                    f"Could not download {spec.url}: {error}",
                    stderr=error,
                    hint=analyse_install_failure(error),
                )

            if spec.kind == "executable":
                mode = os.stat(artifact).st_mode
                os.chmod(artifact, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

            cmd = prefix + self.command_for(spec, artifact)
            logger.info("Running official installer from %s", spec.url)
            result = self._run(cmd, timeout=self.timeout, env_overrides=spec.env, cwd=tmp)

        if not result["ok"]:
            returncode = result.get("returncode")
            stderr = result.get("stderr") or result.get("stdout") or ""
            raise InstallError(
                f"Installer {spec.url} failed: {result.get('error', 'unknown error')}",
                returncode=returncode,
                stderr=stderr,
                hint=analyse_install_failure(stderr),
            )

        elapsed_ms = result.get("elapsed_ms", 0)
        if spec.then_install:
            followup = manager.install_packages(spec.then_install)
            elapsed_ms += followup.get("elapsed_ms", 0)
        return {"ok": True, "returncode": 0, "elapsed_ms": elapsed_ms}
