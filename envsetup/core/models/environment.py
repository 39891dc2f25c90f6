"""
EnvironmentPathSet - the run's search paths as an explicit value.

Nothing in the engine reads ``PATH`` from the ambient environment except
``from_environ`` at startup; components receive this object instead.
Entries are only ever added.
"""

from __future__ import annotations

import logging
import os
import sys
from enum import StrEnum
from typing import Iterable, Mapping, Protocol

logger = logging.getLogger(__name__)


class _PathSource(Protocol):
    name: str

    def read(self) -> list[str]: ...


class Scope(StrEnum):
    PROCESS_ONLY = "process"
    PERSISTENT_USER = "persistent-user"


def _default_case_insensitive() -> bool:
    return sys.platform in ("win32", "darwin")


class EnvironmentPathSet:
    """Ordered, deduplicated search-path directories per scope.

    Comparison ignores trailing separators, and case on platforms whose
    default filesystem is case-insensitive.
    """

    def __init__(
        self,
        process: Iterable[str] = (),
        user: Iterable[str] = (),
        system: Iterable[str] = (),
        *,
        case_insensitive: bool | None = None,
        separator: str = os.pathsep,
    ):
        self.case_insensitive = (
            _default_case_insensitive() if case_insensitive is None else case_insensitive
        )
        self.separator = separator
        self._process = self._dedupe(process)
        self._user = self._dedupe(user)
        self._system = self._dedupe(system)

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        store: _PathSource | None = None,
        *,
        case_insensitive: bool | None = None,
    ) -> EnvironmentPathSet:
        """Read the process PATH (and the persistent user store, if any)."""
        source = os.environ if environ is None else environ
        raw = source.get("PATH", "")
        user: list[str] = []
        if store is not None:
            try:
                user = store.read()
            except (OSError, UnicodeError) as exc:
                logger.warning("Could not read persistent PATH from %s: %s", store.name, exc)
        return cls(
            [p for p in raw.split(os.pathsep) if p],
            user,
            case_insensitive=case_insensitive,
        )

    def normalize(self, directory: str) -> str:
        text = os.path.expanduser(str(directory)).strip()
        stripped = text.rstrip("/\\")
        if not stripped:
            stripped = text[:1]            # keep a bare root separator
        elif len(stripped) == 2 and stripped[1] == ":":
            stripped += "\\"               # "C:" alone means something else
        return stripped.lower() if self.case_insensitive else stripped

    def _dedupe(self, entries: Iterable[str]) -> list[str]:
        seen: set[str] = set()
        result: list[str] = []
        for entry in entries:
            if not entry:
                continue
            key = self.normalize(entry)
            if key in seen:
                continue
            seen.add(key)
            result.append(entry)
        return result

    def _entries(self, scope: Scope | str) -> list[str]:
        if Scope(scope) == Scope.PROCESS_ONLY:
            return self._process
        return self._user

    @property
    def process(self) -> list[str]:
        return list(self._process)

    @property
    def user(self) -> list[str]:
        return list(self._user)

    @property
    def system(self) -> list[str]:
        return list(self._system)

    def contains(self, directory: str, scope: Scope | str = Scope.PROCESS_ONLY) -> bool:
        key = self.normalize(directory)
        return any(self.normalize(entry) == key for entry in self._entries(scope))

    def prepend_process(self, directory: str) -> bool:
        if self.contains(directory, Scope.PROCESS_ONLY):
            return False
        self._process.insert(0, directory)
        return True

    def add_user(self, directory: str) -> bool:
        if self.contains(directory, Scope.PERSISTENT_USER):
            return False
        self._user.insert(0, directory)
        return True

    def process_path(self) -> str:
        return self.separator.join(self._process)

    def snapshot(self) -> dict[str, list[str]]:
        return {
            "process": self.process,
            "user": self.user,
            "system": self.system,
        }


