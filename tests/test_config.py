"""
Tests for configuration loading - envsetup.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from envsetup.core.config.loader import (
    ConfigError,
    build_recipes,
    find_config_file,
    load_config,
    parse_requirements,
    resolve_requirements,
)
from envsetup.core.models.requirement import ToolId, Version
from envsetup.core.models.setup_config import SetupConfig


@pytest.fixture
def valid_config_yml(tmp_path: Path) -> Path:
    """Create a valid envsetup.yml in a temp directory."""
    content = textwrap.dedent("""\
        requirements:
          - python=3.11
          - node=18:22
          - uv
        persist_path: false
        timeouts:
          install: 900
          probe: 2.5
        recipes:
          uv:
            fallback_managers: [pipx]
    """)
    path = tmp_path / "envsetup.yml"
    path.write_text(content)
    return path


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "envsetup.yml"
    path.write_text(textwrap.dedent(text))
    return path


# ── Discovery ────────────────────────────────────────────────────────


class TestFindConfigFile:
    def test_in_start_dir(self, valid_config_yml: Path):
        assert find_config_file(valid_config_yml.parent) == valid_config_yml.resolve()

    def test_walks_up(self, valid_config_yml: Path):
        nested = valid_config_yml.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == valid_config_yml.resolve()

    def test_not_found(self, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert find_config_file(empty) is None


# ── Loading ──────────────────────────────────────────────────────────


class TestLoadConfig:
    def test_valid(self, valid_config_yml: Path):
        config = load_config(valid_config_yml)
        assert config.requirements == ["python=3.11", "node=18:22", "uv"]
        assert config.persist_path is False
        assert config.timeouts.install == 900
        assert config.timeouts.probe == 2.5
        assert config.timeouts.update == 600

    def test_no_file_gives_defaults(self):
        config = load_config(None, search=False)
        assert config == SetupConfig()
        assert config.persist_path is True

    def test_empty_file(self, tmp_path: Path):
        assert load_config(_write(tmp_path, "")) == SetupConfig()

    def test_wrapped_under_envsetup_key(self, tmp_path: Path):
        path = _write(tmp_path, """\
            envsetup:
              requirements: [uv]
        """)
        assert load_config(path).requirements == ["uv"]

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(_write(tmp_path, "requirements: [python=3.10\n"))

    def test_not_a_mapping(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="mapping"):
            load_config(_write(tmp_path, "- python=3.10\n"))

    def test_unknown_key(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(_write(tmp_path, "requirement: [uv]\n"))

    def test_non_positive_timeout(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(_write(tmp_path, "timeouts:\n  install: 0\n"))

    def test_bad_requirement_fails_early(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="ruby"):
            load_config(_write(tmp_path, "requirements: [ruby=3.2]\n"))

    def test_bad_recipe_override_fails_early(self, tmp_path: Path):
        path = _write(tmp_path, """\
            recipes:
              uv:
                strategies: [teleport]
        """)
        with pytest.raises(ConfigError, match="recipe override"):
            load_config(path)

    def test_malformed_installer_checksum(self, tmp_path: Path):
        path = _write(tmp_path, """\
            recipes:
              uv:
                installers:
                  - url: https://astral.sh/uv/install.sh
                    checksum: deadbeef
        """)
        with pytest.raises(ConfigError, match="checksum"):
            load_config(path)

    def test_not_utf8(self, tmp_path: Path):
        path = tmp_path / "envsetup.yml"
        path.write_bytes(b"# caf\xe9\nrequirements: [uv]\n")
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(path)

    def test_override_for_unknown_tool(self, tmp_path: Path):
        path = _write(tmp_path, """\
            recipes:
              deno:
                commands: [deno]
        """)
        with pytest.raises(ConfigError, match="deno"):
            load_config(path)


# ── Requirements ─────────────────────────────────────────────────────


class TestRequirements:
    def test_later_entry_wins(self):
        reqs = parse_requirements(["python=3.10", "uv", "python=3.12"])
        assert [r.tool for r in reqs] == [ToolId.PYTHON, ToolId.UV]
        assert reqs[0].minimum == Version(3, 12, 0)

    def test_malformed_is_config_error(self):
        with pytest.raises(ConfigError):
            parse_requirements(["python=three"])

    def test_cli_wins_over_config(self):
        config = SetupConfig(requirements=["python=3.11"])
        reqs = resolve_requirements(["uv"], config)
        assert [r.tool for r in reqs] == [ToolId.UV]

    def test_config_used_without_cli(self):
        config = SetupConfig(requirements=["node=18"])
        assert [r.tool for r in resolve_requirements([], config)] == [ToolId.NODE]

    def test_defaults(self):
        reqs = resolve_requirements([], SetupConfig())
        assert [r.describe() for r in reqs] == [
            "python >= 3.10.0",
            "node >= 16.0.0",
            "uv (any version)",
        ]


class TestBuildRecipes:
    def test_override_applied(self, valid_config_yml: Path):
        recipes = build_recipes(load_config(valid_config_yml))
        assert recipes[ToolId.UV].fallback_managers == ("pipx",)
        assert recipes[ToolId.PYTHON].fallback_managers == ("brew",)

    def test_every_tool_has_a_recipe(self):
        recipes = build_recipes(SetupConfig())
        assert set(recipes) == set(ToolId)
        for recipe in recipes.values():
            assert recipe.commands
            assert recipe.manual_hint
