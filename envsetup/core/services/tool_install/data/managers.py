"""
L0 Data - Package manager descriptors.

One entry per supported manager.  Pure data, no logic; the adapters in
``envsetup.adapters.packages`` turn an entry into commands.

Package lists are templates ordered most-specific first.  ``{ver}`` is a
dotted ``major.minor`` (``3.12``), ``{ver_nodot}`` the same without the
dot (``312``).  Templates without a placeholder are the generic names.
"""

from __future__ import annotations


MANAGER_DESCRIPTORS: dict[str, dict] = {

    # ── Linux ───────────────────────────────────────────────────

    "apt": {
        "label": "APT",
        "binary": "apt-get",
        "os_families": ["linux"],
        "install_command": ["apt-get", "install", "-y"],
        "update_command": ["apt-get", "update"],
        "installed_check": ["dpkg-query", "-W", "-f=${Status}", "{pkg}"],
        "installed_marker": "install ok installed",
        "needs_root": True,
        "env": {"DEBIAN_FRONTEND": "noninteractive"},
        "packages": {
            "python": ["python{ver}", "python3"],
            "node": ["nodejs"],
        },
        "companions": {
            "python": ["python3-pip", "python{ver}-venv", "python3-venv"],
            "node": ["npm"],
        },
        "failure_hints": {
            100: (
                "apt-get exit 100 usually means the package could not be "
                "located. Check that the universe repository (or a PPA such "
                "as deadsnakes for newer Python releases) is enabled."
            ),
        },
    },
    "dnf": {
        "label": "DNF",
        "binary": "dnf",
        "os_families": ["linux"],
        "install_command": ["dnf", "install", "-y"],
        # check-update exits 100 when updates are available
        "update_command": ["dnf", "check-update", "--assumeno"],
        "update_ok_codes": [100],
        "installed_check": ["rpm", "-q", "{pkg}"],
        "needs_root": True,
        "packages": {
            "python": ["python{ver}", "python{ver_nodot}", "python3"],
            "node": ["nodejs"],
            "uv": ["uv"],
        },
        "companions": {
            "python": ["python3-pip"],
            "node": ["npm"],
        },
        "failure_hints": {
            1: (
                "dnf exit 1 usually means no package matched or a "
                "dependency conflict. On RHEL-family systems enable "
                "AppStream/EPEL for newer Python and Node.js builds."
            ),
        },
    },
    "yum": {
        "label": "YUM",
        "binary": "yum",
        "os_families": ["linux"],
        "install_command": ["yum", "install", "-y"],
        "update_command": ["yum", "check-update"],
        "update_ok_codes": [100],
        "installed_check": ["rpm", "-q", "{pkg}"],
        "needs_root": True,
        "packages": {
            "python": ["python{ver_nodot}", "python3"],
            "node": ["nodejs"],
        },
        "companions": {
            "python": ["python3-pip"],
            "node": ["npm"],
        },
        "failure_hints": {
            1: (
                "yum exit 1 usually means no package matched. Enable EPEL "
                "or the software collections repository and retry."
            ),
        },
    },
    "pacman": {
        "label": "pacman",
        "binary": "pacman",
        "os_families": ["linux"],
        "install_command": ["pacman", "-S", "--noconfirm", "--needed"],
        "update_command": ["pacman", "-Sy"],
        "installed_check": ["pacman", "-Q", "{pkg}"],
        "needs_root": True,
        "packages": {
            "python": ["python"],
            "node": ["nodejs"],
            "uv": ["uv"],
        },
        "companions": {
            "python": ["python-pip"],
            "node": ["npm"],
        },
    },
    "zypper": {
        "label": "zypper",
        "binary": "zypper",
        "os_families": ["linux"],
        "install_command": ["zypper", "--non-interactive", "install", "--no-recommends"],
        "update_command": ["zypper", "--non-interactive", "refresh"],
        "installed_check": ["rpm", "-q", "{pkg}"],
        "needs_root": True,
        "packages": {
            "python": ["python{ver_nodot}", "python3"],
            "node": ["nodejs22", "nodejs20", "nodejs"],
        },
        "companions": {
            "python": ["python3-pip"],
            "node": ["npm"],
        },
        "failure_hints": {
            104: (
                "zypper exit 104 means the package was not found in any "
                "enabled repository. Run 'zypper search python3' to list "
                "the available names."
            ),
        },
    },
    "apk": {
        "label": "apk",
        "binary": "apk",
        "os_families": ["linux"],
        "install_command": ["apk", "add", "--no-cache"],
        "update_command": ["apk", "update"],
        "installed_check": ["apk", "info", "-e", "{pkg}"],
        "needs_root": True,
        "packages": {
            "python": ["python3"],
            "node": ["nodejs"],
            "uv": ["uv"],
        },
        "companions": {
            "python": ["py3-pip"],
            "node": ["npm"],
        },
    },

    # ── macOS (brew doubles as a Linux user-space fallback) ─────

    "brew": {
        "label": "Homebrew",
        "binary": "brew",
        "os_families": ["darwin", "linux"],
        "install_command": ["brew", "install"],
        "update_command": ["brew", "update"],
        "installed_check": ["brew", "list", "--versions", "{pkg}"],
        "needs_root": False,
        "env": {"HOMEBREW_NO_AUTO_UPDATE": "1"},
        "packages": {
            "python": ["python@{ver}", "python@3"],
            "node": ["node"],
            "uv": ["uv"],
        },
        "bin_dirs": [
            "/opt/homebrew/bin",
            "/usr/local/bin",
            "/home/linuxbrew/.linuxbrew/bin",
            "~/.linuxbrew/bin",
        ],
    },
    "port": {
        "label": "MacPorts",
        "binary": "port",
        "os_families": ["darwin"],
        "install_command": ["port", "-N", "install"],
        "update_command": ["port", "selfupdate"],
        "installed_check": ["port", "-q", "installed", "{pkg}"],
        "installed_marker": "(active)",
        "needs_root": True,
        "packages": {
            "python": ["python{ver_nodot}"],
            "node": ["nodejs22", "nodejs20", "nodejs18"],
            "uv": ["uv"],
        },
        "bin_dirs": ["/opt/local/bin"],
    },

    # ── Windows ─────────────────────────────────────────────────

    "winget": {
        "label": "winget",
        "binary": "winget",
        "os_families": ["windows"],
        "install_command": [
            "winget", "install", "--silent", "--exact",
            "--accept-package-agreements", "--accept-source-agreements",
            "--id",
        ],
        "update_command": ["winget", "source", "update"],
        "installed_check": ["winget", "list", "--exact", "--id", "{pkg}"],
        "needs_root": False,
        "batch_install": False,
        "packages": {
            "python": ["Python.Python.{ver}"],
            "node": ["OpenJS.NodeJS.LTS", "OpenJS.NodeJS"],
            "uv": ["astral-sh.uv"],
        },
        "bin_dirs": [
            "%LOCALAPPDATA%\\Microsoft\\WinGet\\Links",
            "%ProgramFiles%\\nodejs",
        ],
    },
    "choco": {
        "label": "Chocolatey",
        "binary": "choco",
        "os_families": ["windows"],
        "install_command": ["choco", "install", "-y", "--no-progress"],
        "update_command": [],
        "installed_check": ["choco", "list", "--exact", "--limit-output", "{pkg}"],
        "installed_marker": "{pkg}|",
        "needs_root": False,
        "packages": {
            "python": ["python{ver_nodot}", "python"],
            "node": ["nodejs-lts", "nodejs"],
            "uv": ["uv"],
        },
        "bin_dirs": ["%ProgramData%\\chocolatey\\bin"],
    },

    # ── User-space managers (fallback only) ─────────────────────

    "pipx": {
        "label": "pipx",
        "binary": "pipx",
        "os_families": ["linux", "darwin", "windows"],
        "install_command": ["pipx", "install"],
        "update_command": [],
        "installed_check": ["pipx", "list", "--short"],
        "installed_marker": "{pkg} ",
        "needs_root": False,
        "batch_install": False,
        "secondary": True,
        "packages": {
            "uv": ["uv"],
        },
        "bin_dirs": ["~/.local/bin"],
    },
    "pip": {
        "label": "pip --user",
        "binary": "python3",
        "os_families": ["linux", "darwin", "windows"],
        "install_command": ["python3", "-m", "pip", "install", "--user"],
        "update_command": [],
        "installed_check": ["python3", "-m", "pip", "show", "{pkg}"],
        "needs_root": False,
        "secondary": True,
        "packages": {
            "uv": ["uv"],
        },
        "bin_dirs": ["~/.local/bin"],
    },
}


# Primary manager priority per OS family; the first whose binary resolves wins.
DETECTION_ORDER: dict[str, list[str]] = {
    "linux": ["apt", "dnf", "yum", "pacman", "zypper", "apk"],
    "darwin": ["brew", "port"],
    "windows": ["winget", "choco"],
}


# Homebrew's own installer, run on macOS when no primary manager resolves.
HOMEBREW_INSTALLER: dict = {
    "url": "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh",
    "os_families": ["darwin"],
    "interpreter": ["bash"],
    "env": {"CI": "1", "NONINTERACTIVE": "1"},
    "installs_to": ["/opt/homebrew/bin", "/usr/local/bin"],
}
