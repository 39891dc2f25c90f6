"""
PackageManagerDescriptor - static, data-driven description of one manager.

Adding support for a new package manager means adding a row to
``data/managers.py``, not new control flow.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from envsetup.core.models.requirement import ToolId


class PackageManagerDescriptor(BaseModel):
    """How to drive one package manager.

    Command templates are argument lists.  ``installed_check`` may contain
    a ``{pkg}`` placeholder.  Package-name templates may contain ``{ver}``
    (``3.12``) and ``{ver_nodot}`` (``312``); they are listed
    most-specific first.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str = ""
    binary: str                                   # probed during detection
    os_families: tuple[str, ...] = ()
    install_command: tuple[str, ...]
    update_command: tuple[str, ...] = ()
    update_ok_codes: tuple[int, ...] = ()       # non-zero exits that still mean success
    installed_check: tuple[str, ...] = ()
    installed_marker: str | None = None           # stdout must contain this
    needs_root: bool = False
    batch_install: bool = True
    secondary: bool = False                       # user-space, fallback only
    packages: dict[ToolId, tuple[str, ...]] = Field(default_factory=dict)
    companions: dict[ToolId, tuple[str, ...]] = Field(default_factory=dict)
    bin_dirs: tuple[str, ...] = ()
    env: dict[str, str] = Field(default_factory=dict)
    failure_hints: dict[int, str] = Field(default_factory=dict)

    def packages_for(self, tool: ToolId) -> tuple[str, ...]:
        return self.packages.get(tool, ())

    def companions_for(self, tool: ToolId) -> tuple[str, ...]:
        return self.companions.get(tool, ())

    def installed_check_for(self, package: str) -> list[str]:
        return [arg.replace("{pkg}", package) for arg in self.installed_check]

    def marker_for(self, package: str) -> str | None:
        if self.installed_marker is None:
            return None
        return self.installed_marker.replace("{pkg}", package)

    def hint_for(self, returncode: int | None) -> str | None:
        if returncode is None:
            return None
        return self.failure_hints.get(returncode)
