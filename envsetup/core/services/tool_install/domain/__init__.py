"""
L1 Domain - ``__init__.py`` re-exports all pure domain functions.

These functions have NO subprocess calls, NO filesystem access,
NO network calls. Pure input→output.
"""

from envsetup.core.services.tool_install.domain.failure_hints import (  # noqa: F401
    analyse_install_failure,
    format_diagnostic,
)
from envsetup.core.services.tool_install.domain.version_spec import (  # noqa: F401
    Ordering,
    compare,
    extract_version,
    format_version,
    in_window,
    meets,
    parse,
    parse_requirement,
    parse_strict,
    satisfies,
)
