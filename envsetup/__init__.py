"""
envsetup - detect and install a minimum-viable development toolchain.

Probes for Python, Node.js and uv, and installs whatever is missing or
too old through the host's package manager, a user-space fallback
manager, or the vendor's official installer.
"""

__version__ = "0.1.0"
