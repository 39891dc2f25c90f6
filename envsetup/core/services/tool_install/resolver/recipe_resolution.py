"""
L2 Resolver - Recipe and descriptor construction.

Turns the L0 data tables (plus config overrides) into validated models.
Override dicts are merged key-by-key over the built-in entry, so a
config file only has to name the fields it changes.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from envsetup.core.models.manager import PackageManagerDescriptor
from envsetup.core.models.recipe import ToolRecipe
from envsetup.core.models.requirement import ToolId
from envsetup.core.services.tool_install.data.managers import MANAGER_DESCRIPTORS
from envsetup.core.services.tool_install.data.recipes import TOOL_RECIPES

logger = logging.getLogger(__name__)


def build_recipe(tool: ToolId | str, override: Mapping[str, Any] | None = None) -> ToolRecipe:
    """Build one ``ToolRecipe`` from the built-in table.

    Raises:
        KeyError: no built-in recipe for ``tool``.
        pydantic.ValidationError: the merged data is invalid.
    """
    tool = ToolId(tool)
    data = dict(TOOL_RECIPES[tool.value])
    if override:
        logger.debug("Applying recipe override for %s: %s", tool.value, sorted(override))
        data.update(override)
    data["tool"] = tool
    return ToolRecipe.model_validate(data)


def load_recipes(
    overrides: Mapping[str, Mapping[str, Any]] | None = None,
) -> dict[ToolId, ToolRecipe]:
    """Every known recipe, keyed by tool, with overrides applied."""
    overrides = overrides or {}
    unknown = set(overrides) - {t.value for t in ToolId}
    if unknown:
        raise ValueError(f"Recipe overrides for unknown tools: {', '.join(sorted(unknown))}")
    return {tool: build_recipe(tool, overrides.get(tool.value)) for tool in ToolId}


def build_descriptor(name: str) -> PackageManagerDescriptor:
    """Build one ``PackageManagerDescriptor`` by manager name.

    Raises:
        KeyError: unknown manager.
    """
    data = dict(MANAGER_DESCRIPTORS[name])
    data["name"] = name
    return PackageManagerDescriptor.model_validate(data)


def load_descriptors() -> dict[str, PackageManagerDescriptor]:
    return {name: build_descriptor(name) for name in MANAGER_DESCRIPTORS}
