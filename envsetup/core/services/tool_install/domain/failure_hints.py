"""
L1 Domain - Install failure analysis (pure).

Turns a failed command's exit status and stderr into an actionable hint,
and an exhausted requirement's attempts into the diagnostic text shown
to the user.  No I/O, no subprocess.
"""

from __future__ import annotations

import re
from typing import Iterable

from envsetup.core.models.attempt import InstallAttempt

# (pattern, hint); first match wins, checked before exit-code hints.
_STDERR_PATTERNS: list[tuple[re.Pattern, str]] = [
    (
        re.compile(r"Could not get lock|dpkg frontend lock|is another process using it", re.I),
        "Another package manager process holds the lock. Wait for it to finish and retry.",
    ),
    (
        re.compile(r"dpkg was interrupted", re.I),
        "A previous dpkg run was interrupted. Run 'sudo dpkg --configure -a' and retry.",
    ),
    (
        re.compile(
            r"Temporary failure (?:in )?(?:name )?resol(?:ution|ving)|Could not resolve host|"
            r"Failed to (?:download|fetch)|Network is unreachable|Connection timed out",
            re.I,
        ),
        "The package index or artifact could not be downloaded. Check network "
        "access and the http_proxy / https_proxy variables.",
    ),
    (
        re.compile(r"externally[- ]managed[- ]environment", re.I),
        "This Python is marked as externally managed (PEP 668); use pipx or "
        "the official installer instead of pip --user.",
    ),
    (
        re.compile(r"are you root|Permission denied|must be run as root|requires root", re.I),
        "The command needs administrative privileges. Re-run as root or "
        "install sudo.",
    ),
    (
        re.compile(
            r"Unable to locate package|No match for argument|No package .* available|"
            r"target not found|not found in package names|No such package",
            re.I,
        ),
        "The package name is not known to the configured repositories. "
        "Refresh the package index or enable an additional repository.",
    ),
]


def analyse_install_failure(
    stderr: str,
    exit_hint: str | None = None,
) -> str | None:
    """Pick the most specific hint for a failed install.

    Args:
        stderr: Tail of the failed command's stderr (or combined output).
        exit_hint: The manager's hint for the exit status, if any.

    Returns:
        A one-paragraph hint, or None when nothing is recognised.
    """
    if stderr:
        for pattern, hint in _STDERR_PATTERNS:
            if pattern.search(stderr):
                return hint
    return exit_hint


def format_diagnostic(
    label: str,
    requirement: str,
    attempts: Iterable[InstallAttempt],
    manual_hint: str = "",
) -> str:
    """Human-readable account of an exhausted requirement.

    Lists every attempt (target, exit status, reason, hint) and ends
    with the manual instructions, so the user can finish by hand.
    """
    attempts = list(attempts)
    lines = [f"Could not satisfy {label} ({requirement})."]
    if attempts:
        lines.append("Attempts:")
        for index, attempt in enumerate(attempts, start=1):
            lines.append(f"  {index}. {attempt.describe()}")
            if attempt.hint:
                lines.append(f"     hint: {attempt.hint}")
    else:
        lines.append("No automatic installation strategy was available on this system.")
    if manual_hint:
        lines.append("To install manually:")
        lines.extend(f"  {line}" for line in manual_hint.splitlines())
    return "\n".join(lines)
