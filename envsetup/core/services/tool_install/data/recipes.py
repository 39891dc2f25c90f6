"""
L0 Data - Runtime tool recipes.

One entry per tool the engine can resolve.  Pure data, no logic; the
L2 resolver turns an entry (plus any config overrides) into a
``ToolRecipe`` model.

Keys match ``ToolId`` values.
"""

from __future__ import annotations


# Prints a bare "3.12.4"; avoids "Python 3.12.4" vs stderr differences
# between old and new interpreters.
_PY_VERSION_ARGS: list[str] = [
    "-c", "import sys; print('.'.join(map(str, sys.version_info[:3])))",
]

_PYTHON_ORG = "https://www.python.org/ftp/python"
_NODE_DIST = "https://nodejs.org/dist"


TOOL_RECIPES: dict[str, dict] = {

    "python": {
        "label": "Python",
        # Versioned names first so a side-by-side install wins over an
        # older distro default that owns "python3".
        "commands": ["python{ver}", "python3", "python"],
        "install_versions": ["3.14", "3.13", "3.12", "3.11", "3.10"],
        "version_args_by_command": {"python*": _PY_VERSION_ARGS},
        "health_checks": [
            {"label": "pip", "args": ["-m", "pip", "--version"]},
            {"label": "venv", "args": ["-c", "import venv"]},
        ],
        "fallback_managers": ["brew"],
        "installers": [
            {
                "url": f"{_PYTHON_ORG}/3.12.10/python-3.12.10-amd64.exe",
                "os_families": ["windows"],
                "kind": "executable",
                "args": [
                    "/quiet", "InstallAllUsers=0", "PrependPath=1",
                    "Include_pip=1", "Include_launcher=1",
                ],
                "suffix": ".exe",
                "installs_to": [
                    "%LOCALAPPDATA%\\Programs\\Python\\Python312",
                    "%LOCALAPPDATA%\\Programs\\Python\\Python312\\Scripts",
                ],
            },
            {
                "url": f"{_PYTHON_ORG}/3.12.10/python-3.12.10-macos11.pkg",
                "os_families": ["darwin"],
                "interpreter": ["installer", "-pkg"],
                "args": ["-target", "/"],
                "suffix": ".pkg",
                "installs_to": ["/Library/Frameworks/Python.framework/Versions/3.12/bin"],
                "needs_root": True,
            },
        ],
        "manual_hint": (
            "Install Python 3.10 or newer with your system package manager:\n"
            "  Debian/Ubuntu:  sudo apt-get install python3 python3-pip python3-venv\n"
            "                  (newer releases: sudo add-apt-repository ppa:deadsnakes/ppa)\n"
            "  Fedora/RHEL:    sudo dnf install python3.12 python3-pip\n"
            "  Arch:           sudo pacman -S python python-pip\n"
            "  openSUSE:       sudo zypper install python312 python3-pip\n"
            "  Alpine:         sudo apk add python3 py3-pip\n"
            "  macOS:          brew install python@3.12\n"
            "  Windows:        winget install Python.Python.3.12\n"
            "or download an installer from https://www.python.org/downloads/"
        ),
    },

    "node": {
        "label": "Node.js",
        "commands": ["node", "nodejs"],
        "fallback_managers": ["brew"],
        "installers": [
            # NodeSource adds its repository, then the distro manager installs.
            {
                "url": "https://deb.nodesource.com/setup_lts.x",
                "os_families": ["linux"],
                "interpreter": ["bash"],
                "managers": ["apt"],
                "then_install": ["nodejs"],
                "needs_root": True,
            },
            {
                "url": "https://rpm.nodesource.com/setup_lts.x",
                "os_families": ["linux"],
                "interpreter": ["bash"],
                "managers": ["dnf", "yum"],
                "then_install": ["nodejs"],
                "needs_root": True,
            },
            {
                "url": f"{_NODE_DIST}/v22.15.0/node-v22.15.0.pkg",
                "os_families": ["darwin"],
                "interpreter": ["installer", "-pkg"],
                "args": ["-target", "/"],
                "suffix": ".pkg",
                "installs_to": ["/usr/local/bin"],
                "needs_root": True,
            },
            {
                "url": f"{_NODE_DIST}/v22.15.0/node-v22.15.0-x64.msi",
                "os_families": ["windows"],
                "interpreter": ["msiexec", "/i"],
                "args": ["/qn", "/norestart"],
                "suffix": ".msi",
                "installs_to": ["%ProgramFiles%\\nodejs"],
            },
        ],
        "manual_hint": (
            "Install Node.js 16 or newer:\n"
            "  Debian/Ubuntu:  curl -fsSL https://deb.nodesource.com/setup_lts.x | sudo -E bash -\n"
            "                  sudo apt-get install -y nodejs\n"
            "  Fedora/RHEL:    curl -fsSL https://rpm.nodesource.com/setup_lts.x | sudo bash -\n"
            "                  sudo dnf install -y nodejs\n"
            "  Arch:           sudo pacman -S nodejs npm\n"
            "  Alpine:         sudo apk add nodejs npm\n"
            "  macOS:          brew install node\n"
            "  Windows:        winget install OpenJS.NodeJS.LTS\n"
            "or download an installer from https://nodejs.org/en/download"
        ),
    },

    "uv": {
        "label": "uv",
        "commands": ["uv"],
        # The official installer writes here without touching PATH.
        "extra_dirs": ["$XDG_BIN_HOME", "~/.local/bin", "~/.cargo/bin"],
        "fallback_managers": ["pipx", "pip", "brew"],
        "installers": [
            {
                "url": "https://astral.sh/uv/install.sh",
                "os_families": ["linux", "darwin"],
                "interpreter": ["sh"],
                "suffix": ".sh",
                "env": {"UV_NO_MODIFY_PATH": "1"},
                "installs_to": ["~/.local/bin", "~/.cargo/bin"],
            },
            {
                "url": "https://astral.sh/uv/install.ps1",
                "os_families": ["windows"],
                "interpreter": [
                    "powershell", "-NoProfile", "-ExecutionPolicy", "Bypass", "-File",
                ],
                "suffix": ".ps1",
                "env": {"UV_NO_MODIFY_PATH": "1"},
                "installs_to": ["~/.local/bin"],
            },
        ],
        "manual_hint": (
            "Install uv with the official installer:\n"
            "  curl -LsSf https://astral.sh/uv/install.sh | sh\n"
            "  (Windows) powershell -ExecutionPolicy ByPass -c \"irm https://astral.sh/uv/install.ps1 | iex\"\n"
            "or with a Python package manager: pipx install uv / pip install --user uv\n"
            "then make sure ~/.local/bin is on your PATH."
        ),
    },
}


# Used when neither the command line nor the config file names any
# requirement.
DEFAULT_REQUIREMENTS: list[str] = ["python=3.10", "node=16.0", "uv"]
