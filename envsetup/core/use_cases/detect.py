"""
Detection use case - describe the host without changing anything.

Reports the OS family and distribution, the primary package manager the
installer would use, and which user-space managers are available.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from envsetup.adapters.registry import ManagerRegistry
from envsetup.core.errors import UnsupportedPlatform
from envsetup.core.services.tool_install.detection.platform_info import detect_platform

logger = logging.getLogger(__name__)


@dataclass
class DetectResult:
    """Result of the detect use case."""

    platform: dict = field(default_factory=dict)
    primary: str | None = None
    secondaries: list[str] = field(default_factory=list)
    managers: dict[str, dict] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {
            "platform": self.platform,
            "package_manager": self.primary,
            "fallback_managers": list(self.secondaries),
            "managers": self.managers,
        }
        if self.error:
            result["error"] = self.error
        return result


def run_detect(registry: ManagerRegistry | None = None, platform: dict | None = None) -> DetectResult:
    """Detect the platform and its package managers.

    Args:
        registry: Optional pre-configured manager registry.
        platform: Optional pre-computed ``detect_platform()`` result.

    Returns:
        DetectResult; ``error`` is set when no primary manager was found.
    """
    result = DetectResult()
    result.platform = platform or detect_platform()
    family = result.platform["os_family"]
    registry = registry or ManagerRegistry()

    try:
        result.primary = registry.detect(family).name
    except UnsupportedPlatform as e:
        result.error = str(e)

    result.managers = registry.status(family)
    result.secondaries = [
        name for name, info in result.managers.items()
        if info["available"] and name != result.primary and (
            info["secondary"] or name == "brew"
        )
    ]
    return result
