"""
Tool installation service - package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate onion layer (data → domain → resolver → detection →
execution → orchestration).  The planner is imported from
``orchestration`` directly, since it depends on the adapters.
"""

# ── L0: Data ──
from envsetup.core.services.tool_install.data.managers import (  # noqa: F401
    DETECTION_ORDER,
    HOMEBREW_INSTALLER,
    MANAGER_DESCRIPTORS,
)
from envsetup.core.services.tool_install.data.recipes import (  # noqa: F401
    DEFAULT_REQUIREMENTS,
    TOOL_RECIPES,
)

# ── L1: Domain ──
from envsetup.core.services.tool_install.domain.version_spec import (  # noqa: F401
    compare,
    extract_version,
    format_version,
    meets,
    parse,
    parse_requirement,
    satisfies,
)

# ── L2: Resolver ──
from envsetup.core.services.tool_install.resolver.recipe_resolution import (  # noqa: F401
    load_descriptors,
    load_recipes,
)

# ── L3: Detection ──
from envsetup.core.services.tool_install.detection.platform_info import (  # noqa: F401
    detect_os_family,
    detect_platform,
)
from envsetup.core.services.tool_install.detection.tool_probe import ToolProbe  # noqa: F401

# ── L4: Execution ──
from envsetup.core.services.tool_install.execution.path_reconciler import (  # noqa: F401
    PathReconciler,
)
