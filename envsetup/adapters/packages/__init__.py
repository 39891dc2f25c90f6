"""Package manager adapters."""

from envsetup.adapters.packages.system import SystemPackageManager, sudo_prefix

__all__ = ["SystemPackageManager", "sudo_prefix"]
