"""
Test helpers - fake executables and fake subprocess runners.
"""

import stat
import sys
from pathlib import Path

import pytest

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="uses executable /bin/sh scripts",
)


def write_tool(
    directory: Path,
    name: str,
    output: str = "",
    *,
    exit_code: int = 0,
    healthy: bool = True,
    sleep: float = 0,
) -> Path:
    """Create an executable shell script that prints ``output``.

    With ``healthy=False`` any ``-m ...`` invocation (the pip health
    check) exits 1.
    """
    directory.mkdir(parents=True, exist_ok=True)
    lines = ["#!/bin/sh"]
    if not healthy:
        lines.append('if [ "$1" = "-m" ]; then exit 1; fi')
    if sleep:
        lines.append(f"exec sleep {sleep}")
    if output:
        lines.append(f"echo '{output}'")
    lines.append(f"exit {exit_code}")
    path = directory / name
    path.write_text("\n".join(lines) + "\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class FakeRunner:
    """Records commands; answers from a list of (predicate, result) rules."""

    def __init__(self, default: dict | None = None):
        self.calls: list[dict] = []
        self.rules: list[tuple] = []
        self.default = default or {"ok": True, "returncode": 0, "stdout": "", "stderr": ""}

    def on(self, fragment: str, **result) -> "FakeRunner":
        """Answer commands containing ``fragment`` with ``result``."""
        result.setdefault("stdout", "")
        result.setdefault("stderr", "")
        result.setdefault("returncode", 0 if result.get("ok", True) else 1)
        result.setdefault("ok", result["returncode"] == 0)
        self.rules.append((fragment, result))
        return self

    def __call__(self, cmd, *, timeout=120, env_overrides=None, cwd=None):
        argv = [str(part) for part in cmd]
        self.calls.append({"cmd": argv, "timeout": timeout, "env": dict(env_overrides or {})})
        line = " ".join(argv)
        for fragment, result in self.rules:
            if fragment in line:
                return dict(result)
        return dict(self.default)

    @property
    def commands(self) -> list[list[str]]:
        return [call["cmd"] for call in self.calls]
