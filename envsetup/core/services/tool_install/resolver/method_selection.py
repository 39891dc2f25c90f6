"""
L2 Resolver - Package selection.

Decides which package names to hand a manager for a given requirement.
Transforms recipe data + descriptor templates into concrete batches.
"""

from __future__ import annotations

import logging

from envsetup.core.models.manager import PackageManagerDescriptor
from envsetup.core.models.recipe import ToolRecipe
from envsetup.core.models.requirement import VersionRequirement
from envsetup.core.services.tool_install.domain.version_spec import in_window

logger = logging.getLogger(__name__)


def render_template(template: str, version: str | None = None) -> str | None:
    """Fill ``{ver}`` / ``{ver_nodot}`` in a package or command template.

    Returns None when the template needs a version and none was given.
    """
    if "{ver" not in template:
        return template
    if version is None:
        return None
    return template.format(ver=version, ver_nodot=version.replace(".", ""))


def window_versions(recipe: ToolRecipe, requirement: VersionRequirement) -> list[str]:
    """The recipe's preferred install versions that fit the requirement.

    Newest first.  Versions below the minimum (or above the maximum) are
    never attempted.
    """
    versions = [v for v in recipe.install_versions if in_window(v, requirement)]
    skipped = [v for v in recipe.install_versions if v not in versions]
    if skipped:
        logger.debug(
            "%s: skipping install versions outside %s: %s",
            recipe.tool.value, requirement.describe(), ", ".join(skipped),
        )
    return versions


def package_batches(
    descriptor: PackageManagerDescriptor,
    recipe: ToolRecipe,
    requirement: VersionRequirement,
) -> list[tuple[str, list[str]]]:
    """Install batches for ``descriptor``, most specific first.

    Each entry is ``(main_package, batch)`` where ``batch`` is the main
    package followed by its companions.  Versioned names are expanded for
    each in-window version (newest first), then the generic names follow.
    Empty when the manager does not carry the tool at all.
    """
    templates = descriptor.packages_for(recipe.tool)
    if not templates:
        return []

    expanded: list[tuple[str, str | None]] = []
    for ver in window_versions(recipe, requirement):
        for template in templates:
            if "{ver" in template:
                expanded.append((render_template(template, ver), ver))
    expanded.extend((t, None) for t in templates if "{ver" not in t)

    batches: list[tuple[str, list[str]]] = []
    seen: set[str] = set()
    for main, ver in expanded:
        if main in seen:
            continue
        seen.add(main)
        batch = [main]
        for template in descriptor.companions_for(recipe.tool):
            name = render_template(template, ver)
            if name is not None and name not in batch:
                batch.append(name)
        batches.append((main, batch))
    return batches
