"""
Error taxonomy for the resolver/installer engine.

Only programmer errors (bad requirement construction) escape to the
caller.  Everything raised while probing or installing is caught by the
planner and recorded on an ``InstallAttempt``.
"""

from __future__ import annotations


class EnvSetupError(Exception):
    """Base class for every engine error."""


class ParseError(EnvSetupError, ValueError):
    """A version string could not be parsed."""

    def __init__(self, raw: str, reason: str = "no numeric version found"):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Cannot parse version {raw!r}: {reason}")


class UnsupportedPlatform(EnvSetupError):
    """No known package manager was detected on this host."""

    def __init__(self, os_family: str, tried: list[str] | None = None):
        self.os_family = os_family
        self.tried = list(tried or [])
        tried_label = ", ".join(self.tried) if self.tried else "none"
        super().__init__(
            f"No supported package manager found for {os_family} "
            f"(tried: {tried_label})"
        )


class InstallError(EnvSetupError):
    """A package manager or installer invocation failed."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        hint: str | None = None,
    ):
        self.returncode = returncode
        self.stderr = stderr
        self.hint = hint
        super().__init__(message)


class VerificationError(EnvSetupError):
    """An install reported success but the re-probe did not satisfy the requirement."""


class Cancelled(EnvSetupError):
    """The run was cancelled by the user or the caller."""
