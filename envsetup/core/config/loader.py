"""
Configuration loader - reads envsetup.yml into a SetupConfig.

The file is optional.  When present it is read with PyYAML, validated
against the Pydantic schema, and its requirement strings and recipe
overrides are checked up front so a typo fails before anything runs.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from envsetup.core.models.recipe import ToolRecipe
from envsetup.core.models.requirement import ToolId, VersionRequirement
from envsetup.core.models.setup_config import SetupConfig
from envsetup.core.services.tool_install.data.recipes import DEFAULT_REQUIREMENTS
from envsetup.core.services.tool_install.domain.version_spec import parse_requirement
from envsetup.core.services.tool_install.resolver.recipe_resolution import load_recipes

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "envsetup.yml"


class ConfigError(Exception):
    """Raised when configuration or requirement input is invalid."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for envsetup.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to envsetup.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None, *, search: bool = True) -> SetupConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config path; it must exist.
        search: When no path is given, look upward from the cwd.

    Returns:
        Validated SetupConfig (all defaults if no file was found).

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None and search:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return SetupConfig()

    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under an "envsetup" key or be flat
    if "envsetup" in data and isinstance(data["envsetup"], dict):
        data = data["envsetup"]

    try:
        config = SetupConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    # Fail early on bad requirement strings and recipe overrides.
    parse_requirements(config.requirements)
    build_recipes(config)

    logger.info("Loaded config from %s", path)
    return config


def parse_requirements(texts: list[str] | tuple[str, ...]) -> list[VersionRequirement]:
    """Parse requirement strings; a later entry for the same tool wins.

    Raises:
        ConfigError: malformed requirement or unknown tool.
    """
    by_tool: dict[ToolId, VersionRequirement] = {}
    for text in texts:
        try:
            requirement = parse_requirement(text)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if requirement.tool in by_tool:
            logger.warning("Requirement %r replaces an earlier one for %s", text, requirement.tool)
        by_tool[requirement.tool] = requirement
    return list(by_tool.values())


def resolve_requirements(cli: list[str] | tuple[str, ...], config: SetupConfig) -> list[VersionRequirement]:
    """Command-line requirements, else the config file's, else the defaults."""
    if cli:
        return parse_requirements(cli)
    if config.requirements:
        return parse_requirements(config.requirements)
    return parse_requirements(DEFAULT_REQUIREMENTS)


def build_recipes(config: SetupConfig) -> dict[ToolId, ToolRecipe]:
    """Built-in recipes with the config's overrides applied.

    Raises:
        ConfigError: an override names an unknown tool or field value.
    """
    try:
        return load_recipes(config.recipes)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid recipe override: {e}") from e
