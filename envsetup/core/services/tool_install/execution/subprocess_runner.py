"""
L4 Execution - Core subprocess runner.

The single place where ``subprocess.run`` is called.  Every probe,
index refresh, package install and installer script goes through here,
so timeouts, output capture and environment handling live in one spot.

The runner never raises for command failures: callers get a result dict
and decide what a non-zero exit means.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
import time
from typing import Any, Callable, Mapping, Sequence

logger = logging.getLogger(__name__)

# Passed through to child processes untouched.
PROXY_VARS: tuple[str, ...] = (
    "http_proxy", "https_proxy", "no_proxy", "all_proxy",
    "HTTP_PROXY", "HTTPS_PROXY", "NO_PROXY", "ALL_PROXY",
)

_OUTPUT_TAIL = 2000

Runner = Callable[..., dict[str, Any]]


def _ignore_sigint() -> None:
    signal.signal(signal.SIGINT, signal.SIG_IGN)


# Ctrl-C in the terminal reaches the whole foreground process group.  Children
# ignore it so an in-flight install always runs to completion; the parent
# only sets the cancellation token.  SIG_IGN survives exec.
if sys.platform == "win32":
    _DETACH_SIGINT: dict[str, Any] = {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
else:
    _DETACH_SIGINT = {"preexec_fn": _ignore_sigint}


def run_command(
    cmd: Sequence[str],
    *,
    timeout: float = 120,
    env_overrides: Mapping[str, str] | None = None,
    cwd: str | None = None,
) -> dict[str, Any]:
    """Run a command, capturing combined output, bounded by ``timeout``.

    The child inherits the current environment (including any proxy
    variables) plus ``env_overrides``.

    Returns:
        ``{"ok": True, "returncode": 0, "stdout": "...", "stderr": "...",
        "elapsed_ms": N}`` on success; on failure ``ok`` is False and
        ``error`` describes what happened.  ``returncode`` is None when the
        command could not be started or timed out.
    """
    env = os.environ.copy()
    if env_overrides:
        env.update(env_overrides)

    argv = [str(part) for part in cmd]
    logger.debug("Running: %s (timeout=%ss)", " ".join(argv), timeout)
    start = time.monotonic()
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            env=env,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            **_DETACH_SIGINT,
        )
    except subprocess.TimeoutExpired:
        return {
            "ok": False,
            "returncode": None,
            "timed_out": True,
            "stdout": "",
            "stderr": "",
            "error": f"Command timed out ({timeout}s)",
            "elapsed_ms": int((time.monotonic() - start) * 1000),
        }
    except FileNotFoundError:
        return {
            "ok": False,
            "returncode": None,
            "stdout": "",
            "stderr": "",
            "error": f"Command not found: {argv[0]}",
            "elapsed_ms": int((time.monotonic() - start) * 1000),
        }
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Could not start %s: %s", argv[0], exc)
        return {
            "ok": False,
            "returncode": None,
            "stdout": "",
            "stderr": "",
            "error": str(exc),
            "elapsed_ms": int((time.monotonic() - start) * 1000),
        }

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout[-_OUTPUT_TAIL:] if result.stdout else ""
    stderr = result.stderr[-_OUTPUT_TAIL:] if result.stderr else ""

    if result.returncode == 0:
        return {
            "ok": True,
            "returncode": 0,
            "stdout": stdout,
            "stderr": stderr,
            "elapsed_ms": elapsed_ms,
        }

    return {
        "ok": False,
        "returncode": result.returncode,
        "stdout": stdout,
        "stderr": stderr,
        "error": f"Command failed (exit {result.returncode})",
        "elapsed_ms": elapsed_ms,
    }


def proxy_environment(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """The proxy variables currently set, for forwarding through ``sudo``."""
    source = os.environ if environ is None else environ
    return {name: source[name] for name in PROXY_VARS if source.get(name)}
