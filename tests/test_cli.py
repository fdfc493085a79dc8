"""Tests for the varset command-line interface."""

import json
import logging
import sys
from pathlib import Path

import pytest
import yaml

from cli.main import build_parser, main
from core import PermissionStore, ProfileStore
from core.constants import MAX_VARIABLE_VALUE_LENGTH, ExitCode


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def project(home_dir: Path, monkeypatch) -> Path:
    """A project directory under home, used as the working directory."""
    path = home_dir / "project"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def run(settings):
    """Run the CLI with the test settings."""

    def _run(*argv: str) -> int:
        return main(list(argv), settings=settings)

    return _run


class TestParser:
    """Tests for argument parsing."""

    def test_exec_keeps_command_options(self):
        """Options after the command belong to the command."""
        args = build_parser().parse_args(["exec", ".", "ls", "-la", "--color"])
        assert args.directory == "."
        assert args.cmd == "ls"
        assert args.args == ["-la", "--color"]

    def test_export_format_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["export", "--format", "toml"])

    def test_no_command_prints_help(self, run, capsys):
        assert run() == ExitCode.SUCCESS
        assert "usage: varset" in capsys.readouterr().out


class TestAllowDeny:
    """Tests for allow, deny and prune."""

    def test_allow_defaults_to_cwd(self, run, project, settings, capsys):
        (project / ".envrc").write_text("A=1")

        assert run("allow") == ExitCode.SUCCESS

        assert f"✓ Allowed: {project / '.envrc'}" in capsys.readouterr().out
        assert PermissionStore(settings).is_allowed(project / ".envrc")

    def test_deny(self, run, project, settings, capsys):
        envrc = project / ".envrc"
        envrc.write_text("A=1")
        run("allow", str(envrc))

        assert run("deny", str(envrc)) == ExitCode.SUCCESS

        assert "✗ Denied:" in capsys.readouterr().out
        assert not PermissionStore(settings).is_allowed(envrc)

    def test_traversal_exit_code(self, run, project, capsys):
        assert run("allow", "../.envrc") == ExitCode.SECURITY_ERROR
        assert "Error: Path traversal attempt detected" in capsys.readouterr().err

    def test_prune(self, run, project, capsys):
        envrc = project / ".envrc"
        envrc.write_text("A=1")
        run("allow")
        envrc.unlink()

        run("prune")
        run("prune")

        out = capsys.readouterr().out
        assert "Pruned 1 stale entries" in out
        assert "No stale entries to prune" in out


class TestReloadExport:
    """Tests for reload and export."""

    @pytest.fixture
    def allowed(self, run, home_dir, project):
        (home_dir / ".envrc").write_text("OUTER=home\nSHARED=outer")
        (project / ".envrc").write_text("SHARED=inner\nQUOTED=\"it's here\"\nPATH=/evil")
        run("allow", str(home_dir / ".envrc"))
        run("allow", str(project / ".envrc"))

    def test_reload(self, run, allowed, capsys):
        capsys.readouterr()
        assert run("reload") == ExitCode.SUCCESS

        lines = capsys.readouterr().out.splitlines()
        assert "export OUTER='home'" in lines
        assert "export SHARED='inner'" in lines
        assert "export QUOTED='it'\\''s here'" in lines
        assert not any("PATH" in line for line in lines)

    def test_export_json(self, run, allowed, capsys):
        capsys.readouterr()
        run("export", "--format", "json")
        assert json.loads(capsys.readouterr().out) == {
            "OUTER": "home",
            "SHARED": "inner",
            "QUOTED": "it's here",
        }

    def test_export_yaml(self, run, allowed, capsys):
        capsys.readouterr()
        run("export", "--format", "yaml")
        assert yaml.safe_load(capsys.readouterr().out)["SHARED"] == "inner"

    def test_export_dotenv_default(self, run, allowed, capsys):
        capsys.readouterr()
        run("export")
        assert "OUTER=home\n" in capsys.readouterr().out

    def test_reload_rejects_oversized_value(self, run, project, capsys):
        """A value too long to export aborts reload without printing exports."""
        (project / ".envrc").write_text("BIG=" + "x" * (MAX_VARIABLE_VALUE_LENGTH + 1))
        run("allow")
        capsys.readouterr()

        assert run("reload") == ExitCode.VALIDATION_ERROR

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Variable value too long" in captured.err

    def test_reload_nothing_allowed(self, run, project, capsys):
        (project / ".envrc").write_text("A=1")
        assert run("reload") == ExitCode.SUCCESS
        assert capsys.readouterr().out == ""


class TestExec:
    """Tests for exec."""

    def test_exec_uses_only_target_directory(self, run, home_dir, project, capfd):
        (home_dir / ".envrc").write_text("PARENT=1")
        (project / ".envrc").write_text("GREETING=hello")
        run("allow", str(home_dir / ".envrc"))
        run("allow", str(project / ".envrc"))
        capfd.readouterr()

        code = run(
            "exec", str(project), sys.executable, "-c",
            "import os; print(os.environ.get('GREETING'), os.environ.get('PARENT'))",
        )

        assert code == 0
        assert capfd.readouterr().out.strip() == "hello None"

    def test_exec_exit_status(self, run, project):
        assert run("exec", str(project), sys.executable, "-c", "raise SystemExit(7)") == 7

    def test_exec_unknown_command(self, run, project, capsys):
        assert run("exec", str(project), "no-such-command-varset") == ExitCode.COMMAND_NOT_FOUND
        assert "Command not found: no-such-command-varset" in capsys.readouterr().err

    def test_exec_not_executable(self, run, project, capsys, monkeypatch):
        """A command the system refuses to run exits with 126."""

        def refuse(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr("cli.commands.subprocess.run", refuse)

        assert run("exec", str(project), sys.executable) == ExitCode.PERMISSION_ERROR
        assert "Error: Cannot execute" in capsys.readouterr().err

    def test_exec_missing_directory(self, run, project):
        assert run("exec", str(project / "missing"), sys.executable) == ExitCode.VALIDATION_ERROR


class TestUse:
    """Tests for profile selection."""

    def test_set_show_clear(self, run, project, settings, capsys):
        (project / ".envrc.dev").write_text("X=dev")

        assert run("use", "dev") == ExitCode.SUCCESS
        assert ProfileStore(settings).get_active(project) == "dev"
        run("use")
        run("use", "--clear")
        run("use")

        out = capsys.readouterr().out
        assert "✓ Active profile set to 'dev'" in out
        assert "Active profile: dev" in out
        assert "✓ Active profile cleared" in out
        assert out.rstrip().endswith("No active profile")

    def test_invalid_profile(self, run, project, capsys):
        assert run("use", "bad.name") == ExitCode.VALIDATION_ERROR
        assert "Invalid profile name" in capsys.readouterr().err

    def test_profile_applied_on_reload(self, run, project, capsys):
        (project / ".envrc").write_text("X=base")
        (project / ".envrc.dev").write_text("X=dev")
        run("allow")
        run("allow", str(project / ".envrc.dev"))
        run("use", "dev")
        capsys.readouterr()

        run("reload")

        assert capsys.readouterr().out == "export X='dev'\n"


class TestDiffImport:
    """Tests for diff and import."""

    def test_diff_files(self, run, project, capsys):
        (project / "a.env").write_text("A=1\nB=2")
        (project / "b.env").write_text("A=1\nB=3\nC=4")

        assert run("diff", "a.env", "b.env") == ExitCode.SUCCESS

        out = capsys.readouterr().out
        assert "+ C=\"4\"" in out
        assert "~ B" in out
        assert "1 added" in out
        assert "1 modified" in out

    def test_diff_colors_on_terminal(self, run, project, capsys, monkeypatch):
        """On a terminal the diff body keeps its ANSI colors."""
        (project / "a.env").write_text("X=1")
        (project / "b.env").write_text("X=2")
        monkeypatch.setattr(sys.stdout, "isatty", lambda: True)

        assert run("diff", "a.env", "b.env") == ExitCode.SUCCESS

        out = capsys.readouterr().out
        assert "\x1b[33m\x1b[1mModified variables:\x1b[0m" in out
        assert "\x1b[33m~ X\x1b[0m" in out
        assert "\x1b[33m  1 modified\x1b[0m" in out

    def test_diff_needs_two_files(self, run, project):
        assert run("diff", "a.env") == ExitCode.VALIDATION_ERROR

    def test_diff_preview(self, run, project, capsys):
        child = project / "child"
        child.mkdir()
        (child / ".envrc").write_text("CHILD=1")
        run("allow", str(child / ".envrc"))
        capsys.readouterr()

        assert run("diff", "--preview", str(child)) == ExitCode.SUCCESS
        assert "+ CHILD=\"1\"" in capsys.readouterr().out

    def test_import_merges(self, run, project, capsys):
        (project / "source.env").write_text("NEW=value with spaces\nSHARED=from_source")
        (project / ".envrc").write_text("OLD=1\nSHARED=from_target")

        assert run("import", "source.env") == ExitCode.SUCCESS

        assert "Imported 2 variables" in capsys.readouterr().out
        content = (project / ".envrc").read_text()
        assert content == 'OLD=1\nSHARED=from_source\nNEW="value with spaces"\n'

    def test_import_missing_source(self, run, project, capsys):
        assert run("import", "missing.env") == ExitCode.VALIDATION_ERROR
        assert "File not found" in capsys.readouterr().err


class TestListAndMisc:
    """Tests for list, hook, edit and version."""

    def test_list_empty(self, run, project, capsys):
        run("list")
        assert "No .envrc files tracked yet." in capsys.readouterr().out

    def test_list_groups(self, run, home_dir, project, capsys):
        (project / ".envrc").write_text("B=2\nA=1")
        denied = home_dir / "denied"
        denied.mkdir()
        (denied / ".envrc").write_text("X=1")
        gone = home_dir / "gone"
        gone.mkdir()
        (gone / ".envrc").write_text("Y=1")
        run("allow")
        run("deny", str(denied / ".envrc"))
        run("allow", str(gone / ".envrc"))
        (gone / ".envrc").unlink()
        capsys.readouterr()

        run("status")

        out = capsys.readouterr().out
        assert "~/project/.envrc (✓ allowed, 2 variables)" in out
        assert "    - A\n    - B" in out
        assert "~/denied/.envrc (✗ denied)" in out
        assert "~/gone/.envrc (file not found)" in out
        assert "Summary: 1 active, 1 denied, 1 missing (2 total variables loaded)" in out

    def test_hook(self, run, capsys):
        assert run("hook", "zsh") == ExitCode.SUCCESS
        assert "__varset_precmd" in capsys.readouterr().out

    def test_version(self, run, capsys):
        run("version")
        assert capsys.readouterr().out.startswith("varset ")

    def test_edit_creates_private_file(self, run, project, monkeypatch):
        monkeypatch.setenv("EDITOR", "true")

        assert run("edit") == 0

        envrc = project / ".envrc"
        assert envrc.exists()
        assert envrc.stat().st_mode & 0o777 == 0o600

    def test_edit_with_unexecutable_editor(self, run, project, monkeypatch, capsys):
        editor = project / "editor"
        editor.write_text("#!/bin/sh\n")
        editor.chmod(0o644)
        monkeypatch.setenv("EDITOR", str(editor))

        assert run("edit") == ExitCode.PERMISSION_ERROR
        assert "Cannot execute" in capsys.readouterr().err
