"""
SetupConfig - optional project-level settings from ``envsetup.yml``.

Everything has a default, so an absent file and an empty file mean the
same thing.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Timeouts(BaseModel):
    """Seconds allowed for each kind of external command."""

    model_config = ConfigDict(extra="forbid")

    probe: float = Field(default=5.0, gt=0)
    update: float = Field(default=600.0, gt=0)
    install: float = Field(default=1800.0, gt=0)
    download: float = Field(default=60.0, gt=0)


class SetupConfig(BaseModel):
    """Validated contents of ``envsetup.yml``.

    Example::

        requirements:
          - python=3.11
          - node=18
          - uv
        persist_path: false
        timeouts:
          install: 900
        recipes:
          uv:
            fallback_managers: [pipx]
    """

    model_config = ConfigDict(extra="forbid")

    requirements: list[str] = Field(default_factory=list)
    recipes: dict[str, dict[str, Any]] = Field(default_factory=dict)
    timeouts: Timeouts = Field(default_factory=Timeouts)
    persist_path: bool = True
    bootstrap_homebrew: bool = True    # macOS without brew or port
