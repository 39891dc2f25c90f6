"""Adapters - bindings to the host's package managers.

Public re-exports for convenient access.
"""

from envsetup.adapters.base import PackageManager
from envsetup.adapters.mock import MockPackageManager
from envsetup.adapters.packages.system import SystemPackageManager
from envsetup.adapters.registry import ManagerRegistry

__all__ = [
    "ManagerRegistry",
    "MockPackageManager",
    "PackageManager",
    "SystemPackageManager",
]
