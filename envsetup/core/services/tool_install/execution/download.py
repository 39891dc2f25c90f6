"""
L4 Execution - Download and checksum verification.

A single HTTP GET of an installer artifact, written to disk in chunks.
Proxy variables are honoured by ``urllib`` itself.
"""

from __future__ import annotations

import hashlib
import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, Callable

from envsetup import __version__

logger = logging.getLogger(__name__)

_USER_AGENT = f"envsetup/{__version__}"

Fetcher = Callable[..., dict[str, Any]]


def _fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


def _verify_checksum(path: Path, expected: str) -> bool:
    """Verify file checksum.  Format: ``algo:hex`` (sha256, sha1, md5).

    Raises:
        ValueError: malformed ``expected`` or an unknown algorithm.
    """
    algo, sep, expected_hash = expected.partition(":")
    if not sep:
        raise ValueError("expected 'algo:hex'")
    h = hashlib.new(algo)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest() == expected_hash.lower()


def download_file(
    url: str,
    dest: Path,
    *,
    timeout: float = 60,
    checksum: str | None = None,
) -> dict[str, Any]:
    """Download ``url`` to ``dest``.

    Returns:
        ``{"ok": True, "path": "...", "size_bytes": N}`` or
        ``{"ok": False, "error": "..."}``.  Never raises for network errors.
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s", url)

    req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            total = int(resp.headers.get("Content-Length", 0) or 0)
            downloaded = 0
            last_progress = -1
            with open(dest, "wb") as f:
                while True:
                    chunk = resp.read(8192)
                    if not chunk:
                        break
                    f.write(chunk)
                    downloaded += len(chunk)
                    if total > 0:
                        pct = int(downloaded * 100 / total)
                        if pct >= last_progress + 25:
                            last_progress = pct
                            logger.debug(
                                "Download progress: %d%% (%s / %s)",
                                pct, _fmt_size(downloaded), _fmt_size(total),
                            )
    except (urllib.error.URLError, OSError, ValueError) as exc:
        dest.unlink(missing_ok=True)
        return {"ok": False, "error": f"Download failed: {exc}"}

    if checksum:
        try:
            matches = _verify_checksum(dest, checksum)
        except (ValueError, OSError) as exc:
            dest.unlink(missing_ok=True)
            return {"ok": False, "error": f"Cannot verify checksum {checksum!r}: {exc}"}
        if not matches:
            dest.unlink(missing_ok=True)
            return {"ok": False, "error": "Checksum mismatch: download corrupted"}

    logger.debug("Downloaded %s to %s", _fmt_size(downloaded), dest)
    return {"ok": True, "path": str(dest), "size_bytes": downloaded}
