"""
Tests for the command dispatcher and the CLI entry point.
"""

import io
import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from click.testing import CliRunner
from rich.console import Console

from explorer import explorer
from explorer_core.config import ExplorerConfig
from explorer_core.session import Session
from explorer_ops.dispatcher import (
    CommandDispatcher,
    parse_command,
    permission_style,
)
from explorer_ops.file_ops import Outcome


def feed(lines, prompts=None):
    """Build a read_line callable that replays lines, then hits EOF."""
    remaining = iter(lines)

    def read_line(prompt):
        if prompts is not None:
            prompts.append(prompt)
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError

    return read_line


@pytest.fixture
def root(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def session(root):
    return Session.open(ExplorerConfig(audit_log=None), root=root)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def dispatcher(session, output):
    console = Console(file=output, width=200, color_system=None)
    return CommandDispatcher(session, console=console)


class TestParseCommand:
    """Test input tokenizing."""

    def test_pads_missing_tokens(self):
        assert parse_command("ls") == ("ls", "", "")

    def test_drops_extra_tokens(self):
        assert parse_command("cp a b c d") == ("cp", "a", "b")

    def test_collapses_whitespace(self):
        assert parse_command("  chmod\ta.txt    755  ") == ("chmod", "a.txt", "755")

    def test_blank_line(self):
        assert parse_command("   ") == ("", "", "")


class TestPermissionStyle:
    """Test the listing color rule."""

    def test_directory(self):
        assert permission_style("drwxr-xr-x") == "blue"

    def test_writable_anywhere(self):
        assert permission_style("-r---r---rw-") == "green"

    def test_read_only(self):
        assert permission_style("-r---r---r--") == "yellow"


class TestDispatch:
    """Test individual commands through the dispatcher."""

    def test_unknown_command(self, dispatcher, output):
        assert dispatcher.execute("frobnicate x") is True
        assert "Unknown command." in output.getvalue()

    def test_cd_is_not_implemented(self, dispatcher):
        assert dispatcher.dispatch("cd", "docs").outcome is Outcome.UNKNOWN_COMMAND

    def test_exit_stops(self, dispatcher):
        assert dispatcher.execute("exit") is False

    def test_blank_line_prints_nothing(self, dispatcher, output):
        assert dispatcher.execute("") is True
        assert output.getvalue() == ""

    def test_help(self, dispatcher, output):
        dispatcher.execute("help")
        text = output.getvalue()
        assert "Available Commands" in text
        assert "chmod <file> <perm>" in text

    def test_ls_renders_permission_and_name(self, dispatcher, root, output):
        (root / "notes.txt").write_text("x")
        dispatcher.execute("mkdir docs")
        dispatcher.execute("ls")

        lines = output.getvalue().splitlines()
        assert "drwxr-xr-x  docs" in lines
        assert "-rw-r--r--  notes.txt" in lines

    def test_names_are_not_markup(self, dispatcher, output):
        dispatcher.execute("mkdir [bold]x")
        assert "Directory created: [bold]x" in output.getvalue()

    def test_docs_scenario(self, dispatcher, output):
        dispatcher.execute("mkdir docs")
        dispatcher.execute("chmod docs 700")
        dispatcher.execute("perm docs")

        assert output.getvalue().splitlines()[-1] == "docs: drwx--------"


class TestSudo:
    """Test the one-shot sudo override."""

    def test_sudo_mode_false_after_every_command(self, dispatcher, session):
        for line in ["sudo", "ls", "bogus", "", "sudo", "help"]:
            dispatcher.execute(line)
            assert session.sudo_mode is False

    def test_sudo_covers_next_command(self, dispatcher, session, root, output):
        (root / "locked.txt").write_text("x")
        dispatcher.execute("chmod locked.txt 444")

        dispatcher.execute("del locked.txt")
        assert "Permission denied." in output.getvalue()

        dispatcher.execute("sudo")
        assert "Sudo mode active (for one command)." in output.getvalue()
        dispatcher.execute("del locked.txt")

        assert not (root / "locked.txt").exists()
        assert "locked.txt" not in session.store

    def test_sudo_only_covers_one_command(self, dispatcher, root):
        for name in ("a.txt", "b.txt"):
            (root / name).write_text("x")
            dispatcher.execute(f"chmod {name} 444")

        dispatcher.execute("sudo")
        dispatcher.execute("del a.txt")
        dispatcher.execute("del b.txt")

        assert not (root / "a.txt").exists()
        assert (root / "b.txt").exists()

    def test_unknown_command_consumes_sudo(self, dispatcher, root):
        (root / "a.txt").write_text("x")
        dispatcher.execute("chmod a.txt 444")

        dispatcher.execute("sudo")
        dispatcher.execute("oops")
        dispatcher.execute("del a.txt")

        assert (root / "a.txt").exists()

    def test_blank_line_keeps_grant(self, dispatcher, root):
        (root / "a.txt").write_text("x")
        dispatcher.execute("chmod a.txt 444")

        dispatcher.execute("sudo")
        dispatcher.execute("")
        dispatcher.execute("del a.txt")

        assert not (root / "a.txt").exists()

    def test_sudo_copy_without_read(self, dispatcher, session, root):
        (root / "src.txt").write_text("secret")
        dispatcher.execute("chmod src.txt 333")

        dispatcher.execute("cp src.txt dest.txt")
        assert not (root / "dest.txt").exists()
        assert "dest.txt" not in session.store

        dispatcher.execute("sudo")
        dispatcher.execute("cp src.txt dest.txt")
        assert (root / "dest.txt").read_text() == "secret"


class TestRunLoop:
    """Test the interactive loop."""

    def test_prompt_and_banner(self, dispatcher, root, output):
        prompts = []
        dispatcher.run(feed(["exit"], prompts))

        assert prompts == ["user@explorer work $ "]
        text = output.getvalue()
        assert "FILE EXPLORER" in text
        assert f"Current Directory: {root.resolve()}" in text
        assert text.rstrip().endswith("Exiting. Goodbye!")

    def test_stops_at_exit(self, dispatcher, root):
        prompts = []
        dispatcher.run(feed(["mkdir a", "exit", "mkdir b"], prompts))

        assert len(prompts) == 2
        assert (root / "a").is_dir()
        assert not (root / "b").exists()

    def test_end_of_input_exits(self, dispatcher, root, output):
        dispatcher.run(feed(["mkdir a"]))

        assert (root / "a").is_dir()
        assert "Exiting. Goodbye!" in output.getvalue()

    def test_store_write_failure_keeps_loop_running(self, dispatcher, root, output):
        (root / ".permissions.txt").mkdir()

        dispatcher.run(feed(["mkdir docs", "ls"]))

        text = output.getvalue()
        assert "Failed to create directory." in text
        assert "drwxr-xr-x  docs" in text.splitlines()
        assert "Exiting. Goodbye!" in text

    def test_audit_failure_warns_once_and_continues(self, root, tmp_path, output):
        log_dir = tmp_path / "log-is-a-dir"
        log_dir.mkdir()
        session = Session.open(ExplorerConfig(audit_log=str(log_dir)), root=root)
        console = Console(file=output, width=200, color_system=None)

        CommandDispatcher(session, console=console).run(feed(["ls", "mkdir docs"]))

        text = output.getvalue()
        assert text.count("Audit logging disabled:") == 1
        assert "Directory created: docs" in text
        assert "Exiting. Goodbye!" in text

    def test_store_persists_across_sessions(self, dispatcher, root):
        dispatcher.run(feed(["mkdir docs", "chmod docs 755"]))

        fresh = Session.open(ExplorerConfig(audit_log=None), root=root)
        assert fresh.store.get("docs") == "drwx-r-x-r-x"


class TestCli:
    """Test the click entry point."""

    @pytest.fixture
    def config_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(f"""explorer:
  user: tester
  audit_log: {tmp_path / "audit.jsonl"}
""")
        return str(path)

    def test_shell_runs_in_cwd(self, tmp_path, config_file):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(
                explorer,
                ["--config", config_file],
                input="mkdir docs\nperm docs\nexit\n",
            )

            assert result.exit_code == 0
            assert "tester@explorer" in result.output
            assert "docs: drwxr-xr-x" in result.output
            assert Path("docs").is_dir()
            assert Path(".permissions.txt").read_text() == "docs drwxr-xr-x\n"

    def test_failures_still_exit_zero(self, tmp_path, config_file):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(
                explorer,
                ["--config", config_file, "shell"],
                input="rmdir ghost\nbogus\n",
            )

            assert result.exit_code == 0
            assert "Not found." in result.output
            assert "Unknown command." in result.output

    def test_audit_lists_denials(self, tmp_path, config_file):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            Path("a.txt").write_text("x")
            runner.invoke(
                explorer,
                ["--config", config_file],
                input="chmod a.txt 444\ndel a.txt\nexit\n",
            )

            result = runner.invoke(explorer, ["--config", config_file, "audit", "--denied"])

            assert result.exit_code == 0
            assert "Delete file: a.txt" in result.output

    def test_audit_export_json(self, tmp_path, config_file):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            runner.invoke(explorer, ["--config", config_file], input="mkdir docs\n")

            result = runner.invoke(
                explorer, ["--config", config_file, "audit", "--export", "json"]
            )

            assert result.exit_code == 0
            assert '"action_type": "create"' in result.output

    def test_audit_filters_by_action(self, tmp_path, config_file):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            runner.invoke(
                explorer, ["--config", config_file], input="mkdir docs\nperm docs\n"
            )

            result = runner.invoke(
                explorer, ["--config", config_file, "audit", "--action", "read"]
            )

            assert result.exit_code == 0
            assert "Show permission: docs" in result.output
            assert "Create directory: docs" not in result.output

    def test_version(self):
        result = CliRunner().invoke(explorer, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
