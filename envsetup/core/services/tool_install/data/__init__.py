"""
L0 Data - ``__init__.py`` re-exports all data tables.
"""

from envsetup.core.services.tool_install.data.managers import (  # noqa: F401
    DETECTION_ORDER,
    HOMEBREW_INSTALLER,
    MANAGER_DESCRIPTORS,
)
from envsetup.core.services.tool_install.data.recipes import (  # noqa: F401
    DEFAULT_REQUIREMENTS,
    TOOL_RECIPES,
)
