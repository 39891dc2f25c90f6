"""
Adapter base - the contract between the planner and package managers.

The planner only talks to package managers through this interface,
never directly to apt/dnf/brew/winget.  Unlike probes, adapters raise:
``InstallError`` carries the exit status, stderr tail and a hint, and
the planner records it on an ``InstallAttempt``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from envsetup.core.models.manager import PackageManagerDescriptor


class PackageManager(ABC):
    """Abstract base class for every package manager adapter.

    To support a new manager:
        1. Add a descriptor row to ``data/managers.py``, or
        2. Subclass PackageManager when the manager cannot be described
           by data alone.
    """

    @property
    @abstractmethod
    def descriptor(self) -> PackageManagerDescriptor:
        """Static description of the manager (commands, package names)."""

    @property
    def name(self) -> str:
        """The manager identifier (e.g. 'apt', 'brew', 'pipx')."""
        return self.descriptor.name

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the manager's binary is present.  Fast, never raises."""

    @abstractmethod
    def update_indexes(self) -> list[str]:
        """Refresh package metadata.

        Returns:
            Warnings.  A failed refresh is never fatal.
        """

    @abstractmethod
    def is_package_installed(self, package: str) -> bool:
        """Whether ``package`` is installed.  Never raises."""

    @abstractmethod
    def install_packages(self, packages: Sequence[str]) -> dict[str, Any]:
        """Install ``packages``; a single call when the manager batches.

        Returns:
            ``{"ok": True, "returncode": 0, "elapsed_ms": N}``.

        Raises:
            InstallError: non-zero exit, timeout, or missing privileges.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
