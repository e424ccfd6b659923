"""
Tests for child command resolution.

sys.executable is pointed at a fake interpreter inside tmp_path so the
tests control exactly which companion tools exist next to it.
"""

import logging
import os
import sys

import pytest

from mcp_aggregator import resolver
from mcp_aggregator.resolver import resolve_command


# ── Fixtures ─────────────────────────────────────────────────

def _make_executable(path):
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def fake_runtime(tmp_path, monkeypatch):
    """A fake interpreter in its own bin directory."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    python = _make_executable(bin_dir / "python3")
    monkeypatch.setattr(sys, "executable", str(python))
    monkeypatch.setattr(resolver, "IS_WINDOWS", False)
    return bin_dir


# ── Tests ───────────────────────────────────────────────────

class TestResolveCommand:
    def test_runtime_names_use_current_interpreter(self, fake_runtime):
        expected = str(fake_runtime / "python3")
        assert resolve_command("python") == expected
        assert resolve_command("python3") == expected

    def test_versioned_runtime_name(self, fake_runtime):
        name = f"python{sys.version_info.major}.{sys.version_info.minor}"
        assert resolve_command(name) == str(fake_runtime / "python3")

    def test_absolute_path_untouched(self, fake_runtime, tmp_path):
        other = str(tmp_path / "elsewhere" / "python")
        assert resolve_command(other) == other

    def test_absolute_path_of_companion_untouched(self, fake_runtime):
        _make_executable(fake_runtime / "pip")
        assert resolve_command("/usr/local/bin/pip") == "/usr/local/bin/pip"

    def test_companion_found_next_to_runtime(self, fake_runtime):
        pip = _make_executable(fake_runtime / "pip")
        uvx = _make_executable(fake_runtime / "uvx")
        assert resolve_command("pip") == str(pip)
        assert resolve_command("uvx") == str(uvx)

    def test_companion_missing_falls_back_to_name(self, fake_runtime):
        assert resolve_command("uv") == "uv"

    def test_companion_not_executable_falls_back(self, fake_runtime):
        (fake_runtime / "pip3").write_text("not executable")
        (fake_runtime / "pip3").chmod(0o644)
        if os.access(fake_runtime / "pip3", os.X_OK):
            pytest.skip("running with privileges that ignore the executable bit")
        assert resolve_command("pip3") == "pip3"

    def test_windows_exe_fallback(self, fake_runtime, monkeypatch):
        monkeypatch.setattr(resolver, "IS_WINDOWS", True)
        exe = _make_executable(fake_runtime / "pip.exe")
        assert resolve_command("pip") == str(exe)

    def test_windows_prefers_bare_name(self, fake_runtime, monkeypatch):
        monkeypatch.setattr(resolver, "IS_WINDOWS", True)
        bare = _make_executable(fake_runtime / "uv")
        _make_executable(fake_runtime / "uv.exe")
        assert resolve_command("uv") == str(bare)

    def test_windows_base_install_scripts_dir(self, fake_runtime, monkeypatch):
        monkeypatch.setattr(resolver, "IS_WINDOWS", True)
        scripts = fake_runtime / "Scripts"
        scripts.mkdir()
        exe = _make_executable(scripts / "pip.exe")
        assert resolve_command("pip") == str(exe)

    def test_windows_runtime_dir_wins_over_scripts(self, fake_runtime, monkeypatch):
        monkeypatch.setattr(resolver, "IS_WINDOWS", True)
        (fake_runtime / "Scripts").mkdir()
        _make_executable(fake_runtime / "Scripts" / "uv.exe")
        beside = _make_executable(fake_runtime / "uv.exe")
        assert resolve_command("uv") == str(beside)

    def test_scripts_dir_ignored_off_windows(self, fake_runtime):
        (fake_runtime / "Scripts").mkdir()
        _make_executable(fake_runtime / "Scripts" / "pip")
        assert resolve_command("pip") == "pip"

    def test_exe_suffix_ignored_off_windows(self, fake_runtime):
        _make_executable(fake_runtime / "pip.exe")
        assert resolve_command("pip") == "pip"

    @pytest.mark.parametrize("command", ["node", "npx", "uvicorn", "./server.sh", "docker", "Python"])
    def test_other_commands_pass_through(self, fake_runtime, command):
        assert resolve_command(command) == command

    def test_no_runtime_path(self, monkeypatch):
        monkeypatch.setattr(sys, "executable", "")
        assert resolve_command("python") == "python"

    @pytest.mark.parametrize("command", ["python", "python3", "pip", "uv", "node", "/bin/sh", "rel/path"])
    def test_idempotent(self, fake_runtime, command):
        _make_executable(fake_runtime / "pip")
        once = resolve_command(command)
        assert resolve_command(once) == once

    def test_logs_only_on_substitution(self, fake_runtime, caplog):
        with caplog.at_level(logging.INFO, logger="mcp_aggregator.resolver"):
            resolve_command("node")
            assert caplog.records == []

            resolve_command("python")
        assert len(caplog.records) == 1
        assert "'python'" in caplog.records[0].getMessage()
