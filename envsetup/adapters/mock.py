"""
Mock package manager - test double for planner and CLI tests.

Simulates installs without touching the system.  Configurable per
package: failures with a chosen exit status, and install hooks that
create the files a real install would (e.g. an executable script in a
temporary bin directory).
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

from envsetup.adapters.base import PackageManager
from envsetup.core.errors import InstallError
from envsetup.core.models.manager import PackageManagerDescriptor
from envsetup.core.models.requirement import ToolId


class MockPackageManager(PackageManager):
    """In-memory package manager.

    By default every install succeeds and marks the packages installed.
    ``call_log`` records every operation as ``(operation, args)``.
    """

    def __init__(
        self,
        name: str = "mock",
        *,
        packages: dict[ToolId | str, Sequence[str]] | None = None,
        companions: dict[ToolId | str, Sequence[str]] | None = None,
        bin_dirs: Sequence[str] = (),
        batch_install: bool = True,
        available: bool = True,
        installed: Iterable[str] = (),
        update_warnings: Sequence[str] = (),
        descriptor: PackageManagerDescriptor | None = None,
    ):
        self._descriptor = descriptor or PackageManagerDescriptor(
            name=name,
            label=name,
            binary=name,
            install_command=(name, "install"),
            update_command=(name, "update"),
            batch_install=batch_install,
            packages={ToolId(k): tuple(v) for k, v in (packages or {}).items()},
            companions={ToolId(k): tuple(v) for k, v in (companions or {}).items()},
            bin_dirs=tuple(bin_dirs),
        )
        self._available = available
        self._installed: set[str] = set(installed)
        self._update_warnings = list(update_warnings)
        self._failures: dict[str, tuple[int, str, str | None]] = {}
        self._hooks: dict[str, Callable[[], None]] = {}
        self._call_log: list[tuple[str, tuple[str, ...]]] = []

    @property
    def descriptor(self) -> PackageManagerDescriptor:
        return self._descriptor

    @property
    def call_log(self) -> list[tuple[str, tuple[str, ...]]]:
        """Every operation this mock has received."""
        return self._call_log

    @property
    def installs(self) -> list[tuple[str, ...]]:
        """Package batches passed to ``install_packages``, in order."""
        return [args for op, args in self._call_log if op == "install"]

    @property
    def update_count(self) -> int:
        return sum(1 for op, _ in self._call_log if op == "update_indexes")

    def is_available(self) -> bool:
        return self._available

    def set_failure(
        self,
        package: str,
        returncode: int = 100,
        stderr: str = "E: Unable to locate package",
        hint: str | None = None,
    ) -> None:
        """Make any batch containing ``package`` fail."""
        self._failures[package] = (returncode, stderr, hint)

    def on_install(self, package: str, hook: Callable[[], None]) -> None:
        """Run ``hook`` after ``package`` is installed successfully."""
        self._hooks[package] = hook

    def update_indexes(self) -> list[str]:
        self._call_log.append(("update_indexes", ()))
        return list(self._update_warnings)

    def is_package_installed(self, package: str) -> bool:
        return package in self._installed

    def install_packages(self, packages: Sequence[str]) -> dict[str, Any]:
        batch = tuple(packages)
        self._call_log.append(("install", batch))
        for package in batch:
            if package in self._failures:
                returncode, stderr, hint = self._failures[package]
                raise InstallError(
                    f"{self.name} failed to install {' '.join(batch)}: "
                    f"Command failed (exit {returncode})",
                    returncode=returncode,
                    stderr=stderr,
                    hint=hint or self._descriptor.hint_for(returncode),
                )
        for package in batch:
            self._installed.add(package)
            hook = self._hooks.get(package)
            if hook is not None:
                hook()
        return {"ok": True, "returncode": 0, "elapsed_ms": 0}

    def reset(self) -> None:
        """Clear call log, failures and hooks."""
        self._call_log.clear()
        self._failures.clear()
        self._hooks.clear()
