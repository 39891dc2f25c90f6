"""
L3 Detection - ``__init__.py`` re-exports all detection functions.

These functions READ system state but never WRITE.
Subprocess calls, file reads, env var reads: all read-only.
"""

from envsetup.core.services.tool_install.detection.platform_info import (  # noqa: F401
    detect_os_family,
    detect_platform,
    is_root,
    read_os_release,
)
from envsetup.core.services.tool_install.detection.tool_probe import (  # noqa: F401
    DEFAULT_PROBE_TIMEOUT,
    ToolProbe,
    expand_dirs,
)
