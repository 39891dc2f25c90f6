"""
Tests for the run's search-path model, PATH reconciliation, and the
shell-profile store.
"""

import os

from envsetup.core.models.environment import EnvironmentPathSet, Scope
from envsetup.core.services.tool_install.execution.path_reconciler import PathReconciler
from envsetup.core.services.tool_install.execution.path_store import (
    PersistentPathStore,
    ShellProfileStore,
    shell_config_line,
)


class MemoryStore(PersistentPathStore):
    """Persistent store kept in a list."""

    def __init__(self, entries=(), fail=False, unreadable=None):
        self.entries = list(entries)
        self.fail = fail
        self.unreadable = unreadable

    @property
    def name(self):
        return "memory"

    def read(self):
        if self.unreadable is not None:
            raise self.unreadable
        return list(self.entries)

    def add(self, directory):
        if self.fail:
            raise OSError("read-only profile")
        self.entries.insert(0, directory)


# ── EnvironmentPathSet ───────────────────────────────────────────────


class TestEnvironmentPathSet:
    def test_trailing_separator_ignored(self):
        paths = EnvironmentPathSet(["/usr/local/bin/"], case_insensitive=False)
        assert paths.contains("/usr/local/bin")

    def test_case_sensitive(self):
        paths = EnvironmentPathSet(["/opt/Tools"], case_insensitive=False)
        assert not paths.contains("/opt/tools")

    def test_case_insensitive(self):
        paths = EnvironmentPathSet(["C:\\Tools\\"], case_insensitive=True, separator=";")
        assert paths.contains("c:\\tools")

    def test_drive_root_kept(self):
        paths = EnvironmentPathSet(case_insensitive=True)
        assert paths.normalize("C:\\") == "c:\\"

    def test_duplicates_dropped(self):
        paths = EnvironmentPathSet(["/a", "/b", "/a/"], case_insensitive=False)
        assert paths.process == ["/a", "/b"]

    def test_prepend_only_once(self):
        paths = EnvironmentPathSet(["/usr/bin"], case_insensitive=False)
        assert paths.prepend_process("/opt/uv/bin")
        assert not paths.prepend_process("/opt/uv/bin/")
        assert paths.process == ["/opt/uv/bin", "/usr/bin"]

    def test_scopes_are_independent(self):
        paths = EnvironmentPathSet(["/usr/bin"], case_insensitive=False)
        paths.add_user("/home/u/.local/bin")
        assert paths.contains("/home/u/.local/bin", Scope.PERSISTENT_USER)
        assert not paths.contains("/home/u/.local/bin", Scope.PROCESS_ONLY)

    def test_from_environ(self):
        store = MemoryStore(["/home/u/.local/bin"])
        raw = os.pathsep.join(["/usr/local/bin", "/usr/bin"])
        paths = EnvironmentPathSet.from_environ({"PATH": raw}, store, case_insensitive=False)
        assert paths.process == ["/usr/local/bin", "/usr/bin"]
        assert paths.user == ["/home/u/.local/bin"]

    def test_from_environ_with_undecodable_store(self):
        store = MemoryStore(unreadable=UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid byte"))
        paths = EnvironmentPathSet.from_environ({"PATH": "/usr/bin"}, store, case_insensitive=False)
        assert paths.process == ["/usr/bin"]
        assert paths.user == []

    def test_snapshot(self):
        paths = EnvironmentPathSet(["/usr/bin"], ["/home/u/bin"], case_insensitive=False)
        assert paths.snapshot() == {
            "process": ["/usr/bin"], "user": ["/home/u/bin"], "system": [],
        }


# ── PathReconciler ───────────────────────────────────────────────────


class TestPathReconciler:
    def test_process_scope(self, tmp_path):
        target = tmp_path / "bin"
        target.mkdir()
        paths = EnvironmentPathSet(["/usr/bin"], case_insensitive=False)
        environ = {"PATH": "/usr/bin"}
        store = MemoryStore()
        reconciler = PathReconciler(paths, store=store, environ=environ)

        assert reconciler.ensure_visible(str(target))
        assert paths.process[0] == str(target)
        assert environ["PATH"].split(paths.separator)[0] == str(target)
        assert store.entries == []

    def test_idempotent(self, tmp_path):
        target = tmp_path / "bin"
        target.mkdir()
        paths = EnvironmentPathSet(case_insensitive=False)
        store = MemoryStore()
        reconciler = PathReconciler(paths, store=store)

        assert reconciler.ensure_visible(target, Scope.PERSISTENT_USER)
        assert not reconciler.ensure_visible(target, Scope.PERSISTENT_USER)
        assert store.entries == [str(target)]
        assert paths.process == [str(target)]

    def test_persistent_implies_process(self, tmp_path):
        target = tmp_path / "bin"
        target.mkdir()
        paths = EnvironmentPathSet(case_insensitive=False)
        PathReconciler(paths, store=MemoryStore()).ensure_visible(target, Scope.PERSISTENT_USER)
        assert paths.contains(str(target), Scope.PROCESS_ONLY)
        assert paths.contains(str(target), Scope.PERSISTENT_USER)

    def test_already_persisted_not_rewritten(self, tmp_path):
        target = tmp_path / "bin"
        target.mkdir()
        store = MemoryStore([str(target)])
        paths = EnvironmentPathSet(user=store.read(), case_insensitive=False)
        PathReconciler(paths, store=store).ensure_visible(target, Scope.PERSISTENT_USER)
        assert store.entries == [str(target)]

    def test_missing_directory(self, tmp_path):
        paths = EnvironmentPathSet(case_insensitive=False)
        reconciler = PathReconciler(paths, store=MemoryStore())
        assert not reconciler.ensure_visible(tmp_path / "nope", Scope.PERSISTENT_USER)
        assert paths.process == []

    def test_without_store_stays_process_only(self, tmp_path):
        target = tmp_path / "bin"
        target.mkdir()
        paths = EnvironmentPathSet(case_insensitive=False)
        assert PathReconciler(paths).ensure_visible(target, Scope.PERSISTENT_USER)
        assert paths.user == []

    def test_store_failure_is_not_fatal(self, tmp_path):
        target = tmp_path / "bin"
        target.mkdir()
        paths = EnvironmentPathSet(case_insensitive=False)
        reconciler = PathReconciler(paths, store=MemoryStore(fail=True))
        assert reconciler.ensure_visible(target, Scope.PERSISTENT_USER)
        assert paths.user == []


# ── ShellProfileStore ────────────────────────────────────────────────


class TestShellProfileStore:
    def test_line_formats(self):
        assert shell_config_line("bash", "/opt/bin") == 'export PATH="/opt/bin:$PATH"'
        assert shell_config_line("fish", "/opt/bin") == "fish_add_path -g /opt/bin"

    def test_add_creates_profile(self, tmp_path):
        profile = tmp_path / ".bashrc"
        store = ShellProfileStore(profile, "bash")
        store.add("/home/u/.local/bin")
        assert profile.read_text() == (
            '# Added by envsetup\nexport PATH="/home/u/.local/bin:$PATH"\n'
        )
        assert store.read() == ["/home/u/.local/bin"]

    def test_add_is_idempotent(self, tmp_path):
        profile = tmp_path / ".zshrc"
        store = ShellProfileStore(profile, "zsh")
        store.add("/opt/bin")
        store.add("/opt/bin")
        assert profile.read_text().count('export PATH="/opt/bin:$PATH"') == 1

    def test_backup_before_modifying(self, tmp_path):
        profile = tmp_path / ".bashrc"
        profile.write_text("alias ll='ls -l'")
        ShellProfileStore(profile, "bash").add("/opt/bin")
        backups = list(tmp_path.glob(".bashrc.backup.*"))
        assert len(backups) == 1
        assert backups[0].read_text() == "alias ll='ls -l'"
        assert profile.read_text().startswith("alias ll='ls -l'\n# Added by envsetup\n")

    def test_fish(self, tmp_path):
        profile = tmp_path / "fish" / "config.fish"
        store = ShellProfileStore(profile, "fish")
        store.add("/opt/bin")
        assert store.read() == ["/opt/bin"]

    def test_read_ignores_other_lines(self, tmp_path):
        profile = tmp_path / ".profile"
        profile.write_text(
            'export PATH="$HOME/bin:$PATH"\n'
            'export EDITOR=vim\n'
            'export PATH="/opt/node/bin:$PATH"\n'
        )
        assert ShellProfileStore(profile, "sh").read() == ["/opt/node/bin"]

    def test_non_utf8_profile(self, tmp_path):
        profile = tmp_path / ".bashrc"
        original = b"# caf\xe9\nexport PATH=\"/opt/node/bin:$PATH\"\n"
        profile.write_bytes(original)
        store = ShellProfileStore(profile, "bash")

        assert store.read() == ["/opt/node/bin"]
        store.add("/opt/bin")
        assert profile.read_bytes().startswith(original)
        assert store.read() == ["/opt/node/bin", "/opt/bin"]

    def test_read_missing_profile(self, tmp_path):
        assert ShellProfileStore(tmp_path / "missing", "bash").read() == []

    def test_unknown_shell_uses_sh_profile(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        store = ShellProfileStore(shell_type="tcsh")
        assert store.shell_type == "sh"
        assert store.profile == tmp_path / ".profile"
