"""
L3 Detection - Host platform facts.

Read-only: OS family, distribution and architecture.  The OS family
selects which package managers are even considered during detection.
"""

from __future__ import annotations

import os
import platform
from pathlib import Path

_OS_RELEASE = Path("/etc/os-release")


def detect_os_family(system: str | None = None) -> str:
    """Map ``platform.system()`` onto ``linux`` / ``darwin`` / ``windows``.

    Anything else (FreeBSD, Cygwin, ...) is returned lower-cased; no
    package manager is registered for it, so detection will report an
    unsupported platform.
    """
    name = (system or platform.system()).lower()
    if name.startswith(("cygwin", "msys", "mingw")):
        return "windows"
    return name


def read_os_release(path: Path = _OS_RELEASE) -> dict[str, str]:
    """Parse ``/etc/os-release`` into a dict (empty if missing)."""
    data: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return data
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        data[key.strip()] = value.strip().strip('"').strip("'")
    return data


def is_root() -> bool:
    """Whether the process already has administrative privileges on POSIX."""
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def detect_platform() -> dict:
    """Summarise the host for the ``detect`` command and debug logs.

    Returns::

        {
            "os_family": "linux",
            "system": "Linux",
            "release": "6.1.0",
            "machine": "x86_64",
            "distro": {"id": "ubuntu", "name": "Ubuntu 24.04 LTS", "version": "24.04"},
            "is_root": False,
        }
    """
    family = detect_os_family()
    distro: dict[str, str | None] = {"id": None, "name": None, "version": None}
    if family == "linux":
        release = read_os_release()
        distro = {
            "id": release.get("ID"),
            "name": release.get("PRETTY_NAME") or release.get("NAME"),
            "version": release.get("VERSION_ID"),
        }
    elif family == "darwin":
        distro = {"id": "macos", "name": "macOS", "version": platform.mac_ver()[0] or None}
    elif family == "windows":
        distro = {"id": "windows", "name": "Windows", "version": platform.version() or None}

    return {
        "os_family": family,
        "system": platform.system(),
        "release": platform.release(),
        "machine": platform.machine(),
        "distro": distro,
        "is_root": is_root(),
    }
