"""
L4 Execution - ``__init__.py`` re-exports the execution helpers.

These functions WRITE to the system: subprocess calls, downloads,
shell profile and registry edits.  ``installer`` is imported directly,
since it depends on the adapters.
"""

from envsetup.core.services.tool_install.execution.download import download_file  # noqa: F401
from envsetup.core.services.tool_install.execution.path_reconciler import (  # noqa: F401
    PathReconciler,
)
from envsetup.core.services.tool_install.execution.path_store import (  # noqa: F401
    PersistentPathStore,
    ShellProfileStore,
    WindowsRegistryStore,
    default_store,
    shell_config_line,
)
from envsetup.core.services.tool_install.execution.privilege import (  # noqa: F401
    privilege_prefix,
)
from envsetup.core.services.tool_install.execution.subprocess_runner import (  # noqa: F401
    PROXY_VARS,
    proxy_environment,
    run_command,
)
