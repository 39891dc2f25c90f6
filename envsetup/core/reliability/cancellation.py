"""
Cancellation token - cooperative stop signal for a run.

The CLI's SIGINT handler sets the token; the planner checks it between
sub-operations (before each requirement and each attempt).  A running
package-manager process is never killed: it finishes, its attempt is
recorded, and the run stops at the next check.
"""

from __future__ import annotations

import logging
import threading

from envsetup.core.errors import Cancelled

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe, set-once cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled by user") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()
            logger.warning("Cancellation requested: %s", reason)

    def raise_if_cancelled(self) -> None:
        """Raise ``Cancelled`` once the token has been set."""
        if self._event.is_set():
            raise Cancelled(self._reason)
