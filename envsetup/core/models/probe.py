"""
ProbeResult - the outcome of one read-only tool probe.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator

from envsetup.core.models.requirement import ToolId, Version


class ProbeResult(BaseModel):
    """What a probe saw for one tool.

    ``found=False`` means no candidate command resolved at all.
    ``found=True`` with ``version=None`` means a command exists but its
    version could not be determined; that is a different failure from
    "not installed".
    """

    model_config = ConfigDict(frozen=True)

    tool: ToolId
    found: bool = False
    command: str | None = None        # candidate name that resolved
    command_path: str | None = None
    version: Version | None = None
    raw_version: str | None = None    # kept for diagnostics

    @model_validator(mode="after")
    def _absent_means_empty(self) -> ProbeResult:
        if not self.found and (
            self.command_path is not None
            or self.command is not None
            or self.version is not None
        ):
            raise ValueError("a probe that found nothing cannot carry a path or version")
        return self

    @classmethod
    def absent(cls, tool: ToolId) -> ProbeResult:
        return cls(tool=tool, found=False)

    def to_dict(self) -> dict:
        return {
            "tool": self.tool.value,
            "found": self.found,
            "command": self.command,
            "command_path": self.command_path,
            "version": str(self.version) if self.version else None,
            "raw_version": self.raw_version,
        }
