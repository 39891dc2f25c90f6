"""
L4 Execution - Privilege escalation prefix.

Decides whether a command must be wrapped in ``sudo``.  Root and Windows
never get a prefix; elsewhere ``sudo`` is used when present, and its
absence is an install failure rather than a silent skip.
"""

from __future__ import annotations

import shutil
from typing import Callable, Iterable, Mapping

from envsetup.core.errors import InstallError
from envsetup.core.services.tool_install.execution.subprocess_runner import proxy_environment


def privilege_prefix(
    label: str,
    *,
    needs_root: bool,
    os_family: str,
    root: bool,
    which: Callable[[str], str | None] = shutil.which,
    keep_env: Iterable[str] = (),
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Return ``[]`` or a ``sudo`` prefix for a command run on behalf of ``label``.

    ``--preserve-env`` names the proxy variables that are set plus
    ``keep_env``, so they survive the switch to root.

    Raises:
        InstallError: root is needed and ``sudo`` is not installed.
    """
    if not needs_root or os_family == "windows" or root:
        return []
    if which("sudo") is None:
        raise InstallError(
            f"{label} needs root privileges and sudo is not installed",
            hint="Re-run as root, or install sudo and add your user to the sudoers file.",
        )
    keep = sorted(set(proxy_environment(environ)) | set(keep_env))
    if keep:
        return ["sudo", f"--preserve-env={','.join(keep)}"]
    return ["sudo"]
