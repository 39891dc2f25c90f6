"""
L2 Resolver - ``__init__.py`` re-exports all resolver functions.

These functions transform L0 data + L1 domain logic into validated
recipes, descriptors and concrete package batches.
"""

from envsetup.core.services.tool_install.resolver.method_selection import (  # noqa: F401
    package_batches,
    render_template,
    window_versions,
)
from envsetup.core.services.tool_install.resolver.recipe_resolution import (  # noqa: F401
    build_descriptor,
    build_recipe,
    load_descriptors,
    load_recipes,
)
