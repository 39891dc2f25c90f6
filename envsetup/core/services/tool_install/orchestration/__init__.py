"""
L5 Orchestration - ``__init__.py`` re-exports top-level coordinators.

These are the entry points that external code calls.
"""

from envsetup.core.services.tool_install.orchestration.planner import (  # noqa: F401
    InstallPlanner,
)
