"""
L4 Execution - PATH visibility for newly installed tools.

``PathReconciler`` makes a directory discoverable for the rest of this
run and, on request, for future sessions.  It only ever adds entries.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import MutableMapping

from envsetup.core.models.environment import EnvironmentPathSet, Scope
from envsetup.core.services.tool_install.execution.path_store import PersistentPathStore

logger = logging.getLogger(__name__)


class PathReconciler:
    """Make a directory discoverable now and, optionally, in future sessions.

    Args:
        path_set: The run's explicit search paths.
        store: Persistent user store; ``None`` disables persistent scope.
        environ: Mapping that receives the updated ``PATH`` so child
            processes see new entries (the CLI passes ``os.environ``).
    """

    def __init__(
        self,
        path_set: EnvironmentPathSet,
        *,
        store: PersistentPathStore | None = None,
        environ: MutableMapping[str, str] | None = None,
    ):
        self.path_set = path_set
        self.store = store
        self.environ = environ

    def ensure_visible(self, directory: str | Path, scope: Scope = Scope.PROCESS_ONLY) -> bool:
        """Add ``directory`` to the requested scope.

        Persistent scope implies process scope.  Process scope prepends, so
        a just-installed tool shadows stale copies later on PATH.

        Returns:
            True if any scope changed.
        """
        directory = os.path.expanduser(str(directory))
        if not Path(directory).is_dir():
            logger.warning("Not adding %s to PATH: directory does not exist", directory)
            return False

        changed = False
        if self.path_set.prepend_process(directory):
            changed = True
            if self.environ is not None:
                self.environ["PATH"] = self.path_set.process_path()
            logger.info("Added %s to PATH for this session", directory)

        if Scope(scope) == Scope.PERSISTENT_USER:
            if self.store is None:
                logger.warning(
                    "No persistent PATH store configured; %s is visible for this session only",
                    directory,
                )
            elif not self.path_set.contains(directory, Scope.PERSISTENT_USER):
                try:
                    self.store.add(directory)
                except OSError as exc:
                    logger.warning(
                        "Could not persist %s via %s: %s", directory, self.store.name, exc,
                    )
                else:
                    self.path_set.add_user(directory)
                    changed = True

        return changed
