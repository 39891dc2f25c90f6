"""
Manager registry - central lookup for package manager adapters.

The registry is the single point of package manager management.  It
holds the descriptors, builds adapters, and picks the primary manager
for the host.  The planner never constructs adapters directly.
"""

from __future__ import annotations

import logging
import shutil
from typing import Any, Callable, Iterable

from envsetup.adapters.base import PackageManager
from envsetup.adapters.packages.system import SystemPackageManager
from envsetup.core.errors import UnsupportedPlatform
from envsetup.core.models.manager import PackageManagerDescriptor
from envsetup.core.services.tool_install.data.managers import DETECTION_ORDER
from envsetup.core.services.tool_install.execution.subprocess_runner import Runner, run_command
from envsetup.core.services.tool_install.resolver.recipe_resolution import load_descriptors

logger = logging.getLogger(__name__)


class ManagerRegistry:
    """Descriptors plus adapter construction and detection.

    Features:
        - Look up descriptors by name
        - Detect the primary manager for an OS family
        - List available user-space fallback managers
        - Register pre-built adapters (test doubles take precedence)
    """

    def __init__(
        self,
        descriptors: dict[str, PackageManagerDescriptor] | None = None,
        *,
        runner: Runner = run_command,
        which: Callable[[str], str | None] = shutil.which,
        detection_order: dict[str, list[str]] | None = None,
        adapter_options: dict[str, Any] | None = None,
    ):
        self._descriptors = descriptors if descriptors is not None else load_descriptors()
        self._runner = runner
        self._which = which
        self._order = detection_order if detection_order is not None else DETECTION_ORDER
        self._adapter_options = adapter_options or {}
        self._adapters: dict[str, PackageManager] = {}

    def register(self, adapter: PackageManager) -> None:
        """Register a pre-built adapter under its name."""
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing package manager adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered package manager adapter: %s", name)

    def names(self) -> list[str]:
        return sorted(set(self._descriptors) | set(self._adapters))

    def descriptor(self, name: str) -> PackageManagerDescriptor | None:
        if name in self._adapters:
            return self._adapters[name].descriptor
        return self._descriptors.get(name)

    def get(self, name: str, os_family: str | None = None) -> PackageManager | None:
        """The adapter for ``name``; None for an unknown manager."""
        if name in self._adapters:
            return self._adapters[name]
        descriptor = self._descriptors.get(name)
        if descriptor is None:
            return None
        return SystemPackageManager(
            descriptor,
            os_family=os_family,
            runner=self._runner,
            which=self._which,
            **self._adapter_options,
        )

    def detect(
        self,
        os_family: str,
        which: Callable[[str], str | None] | None = None,
    ) -> PackageManager:
        """Pick the primary manager for ``os_family``.

        Walks the fixed priority order and returns the first manager whose
        binary resolves.

        Raises:
            UnsupportedPlatform: no manager in the order resolves.
        """
        which = which or self._which
        tried: list[str] = []
        for name in self._order.get(os_family, []):
            tried.append(name)
            if name in self._adapters:
                adapter = self._adapters[name]
                if adapter.is_available():
                    logger.info("Detected package manager: %s", name)
                    return adapter
                continue
            descriptor = self._descriptors.get(name)
            if descriptor is None:
                continue
            if which(descriptor.binary):
                logger.info("Detected package manager: %s", name)
                return self.get(name, os_family)
        raise UnsupportedPlatform(os_family, tried)

    def secondary(
        self,
        names: Iterable[str],
        which: Callable[[str], str | None] | None = None,
        exclude: Iterable[str] = (),
        os_family: str | None = None,
    ) -> list[PackageManager]:
        """Available fallback managers among ``names``, in the given order.

        Unknown names are logged and skipped; so is anything in
        ``exclude`` (normally the primary manager).
        """
        which = which or self._which
        excluded = set(exclude)
        found: list[PackageManager] = []
        for name in names:
            if name in excluded:
                continue
            if name in self._adapters:
                adapter = self._adapters[name]
                if adapter.is_available():
                    found.append(adapter)
                continue
            descriptor = self._descriptors.get(name)
            if descriptor is None:
                logger.warning("Unknown fallback package manager: %s", name)
                continue
            if os_family and descriptor.os_families and os_family not in descriptor.os_families:
                continue
            if which(descriptor.binary):
                found.append(self.get(name, os_family))
        return found

    def status(self, os_family: str) -> dict[str, dict[str, Any]]:
        """Availability of every manager relevant to ``os_family``."""
        status = {}
        for name, descriptor in self._descriptors.items():
            if descriptor.os_families and os_family not in descriptor.os_families:
                continue
            status[name] = {
                "name": name,
                "label": descriptor.label or name,
                "available": self._which(descriptor.binary) is not None,
                "secondary": descriptor.secondary,
            }
        return status
