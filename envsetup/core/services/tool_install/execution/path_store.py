"""
L4 Execution - Persistent user PATH stores.

A store survives process exit, applies to future sessions of the same
user, and never needs elevated privileges:

- POSIX: an idempotent export line in the user's shell rc file.
- Windows: ``HKCU\\Environment\\Path`` in the registry.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import sys
import time
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

# Shell type → rc file that interactive sessions read.
_PROFILE_MAP: dict[str, str] = {
    "bash": "~/.bashrc",
    "zsh": "~/.zshrc",
    "fish": "~/.config/fish/config.fish",
    "sh": "~/.profile",
    "dash": "~/.profile",
    "ash": "~/.profile",
}

_POSIX_EXPORT = re.compile(r'^\s*export\s+PATH="([^"$]+):\$PATH"\s*$')
_FISH_ADD = re.compile(r"^\s*(?:fish_add_path\s+(?:-\w+\s+)*|set\s+-gx\s+PATH\s+)(\S+)")


class PersistentPathStore(ABC):
    """Where persistent user-scope PATH entries live."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier shown in logs and reports."""

    @abstractmethod
    def read(self) -> list[str]:
        """Directories currently persisted, in order."""

    @abstractmethod
    def add(self, directory: str) -> None:
        """Persist ``directory`` so future sessions put it on PATH."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


def shell_config_line(shell_type: str, directory: str) -> str:
    """Shell-specific line that prepends ``directory`` to PATH."""
    if shell_type == "fish":
        return f"fish_add_path -g {directory}"
    return f'export PATH="{directory}:$PATH"'


class ShellProfileStore(PersistentPathStore):
    """Persist PATH entries in a shell rc file.

    Writes are idempotent and preceded by a timestamped backup of the
    existing file.
    """

    def __init__(self, profile: Path | str | None = None, shell_type: str | None = None):
        if shell_type is None:
            shell_type = os.path.basename(os.environ.get("SHELL", "/bin/sh")) or "sh"
        self.shell_type = shell_type if shell_type in _PROFILE_MAP else "sh"
        if profile is None:
            profile = os.path.expanduser(_PROFILE_MAP[self.shell_type])
        self.profile = Path(profile)

    @property
    def name(self) -> str:
        return f"shell-profile:{self.profile}"

    def read(self) -> list[str]:
        try:
            text = self.profile.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return []
        found: list[str] = []
        pattern = _FISH_ADD if self.shell_type == "fish" else _POSIX_EXPORT
        for line in text.splitlines():
            match = pattern.match(line)
            if match:
                found.append(os.path.expanduser(match.group(1)))
        return found

    def add(self, directory: str) -> None:
        line = shell_config_line(self.shell_type, directory)
        existing = ""
        if self.profile.is_file():
            existing = self.profile.read_text(encoding="utf-8", errors="replace")
            if line in existing.splitlines():
                return
            backup = self.profile.with_name(f"{self.profile.name}.backup.{int(time.time())}")
            shutil.copy2(self.profile, backup)
            logger.debug("Backed up %s to %s", self.profile, backup)
        else:
            self.profile.parent.mkdir(parents=True, exist_ok=True)

        prefix = "" if not existing or existing.endswith("\n") else "\n"
        with self.profile.open("a", encoding="utf-8") as fh:
            fh.write(f"{prefix}# Added by envsetup\n{line}\n")
        logger.info("Persisted %s to %s", directory, self.profile)


class WindowsRegistryStore(PersistentPathStore):
    """Persist PATH entries in the per-user registry environment."""

    _KEY = "Environment"
    _VALUE = "Path"

    @property
    def name(self) -> str:
        return "registry:HKCU\\Environment\\Path"

    def read(self) -> list[str]:
        import winreg

        try:
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self._KEY) as key:
                value, _ = winreg.QueryValueEx(key, self._VALUE)
        except FileNotFoundError:
            return []
        return [entry for entry in str(value).split(os.pathsep) if entry]

    def add(self, directory: str) -> None:
        import winreg

        entries = self.read()
        entries.insert(0, directory)
        with winreg.OpenKey(
            winreg.HKEY_CURRENT_USER, self._KEY, 0, winreg.KEY_SET_VALUE,
        ) as key:
            winreg.SetValueEx(
                key, self._VALUE, 0, winreg.REG_EXPAND_SZ, os.pathsep.join(entries),
            )
        logger.info("Persisted %s to the user registry PATH", directory)


def default_store() -> PersistentPathStore:
    """Pick the persistent store for this platform."""
    if sys.platform == "win32":
        return WindowsRegistryStore()
    return ShellProfileStore()
