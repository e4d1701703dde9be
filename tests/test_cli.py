"""CLI tests: every command and flag through Click's CliRunner."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from cigraph import __version__
from cigraph.cli import main
from cigraph.io_utils import write_text


@pytest.fixture
def cli_runner():
    """Click CliRunner for invoking the CLI in-process."""
    return CliRunner()


@pytest.fixture
def aliases_file(tmp_path: Path) -> Path:
    path = tmp_path / "aliases.yml"
    write_text(
        path,
        """\
required:
  - variant: windows
    task: comp.*
broken:
  - variant: "(["
    task: compile
""",
    )
    return path


# ── Main entry and help ────────────────────────────────────────────────


class TestCliHelpAndVersion:
    def test_help(self, cli_runner):
        r = cli_runner.invoke(main, ["-h"])
        assert r.exit_code == 0
        assert "pairs" in r.output
        assert "variants-with-task" in r.output

    def test_version(self, cli_runner):
        r = cli_runner.invoke(main, ["--version"])
        assert r.exit_code == 0
        assert __version__ in r.output


# ── pairs ──────────────────────────────────────────────────────────────


class TestPairsCommand:
    def test_explicit_pair(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["pairs", str(project_file), "-b", "windows", "-t", "compile"])
        assert r.exit_code == 0, r.output
        assert r.output.strip().splitlines() == ["windows/compile"]

    def test_display_tasks_listed(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["pairs", str(project_file), "-b", "ubuntu1604", "-t", "test"])
        assert r.exit_code == 0, r.output
        lines = r.output.strip().splitlines()
        assert "ubuntu1604/lint" not in lines
        assert "ubuntu1604/compile" in lines
        assert lines[-2:] == ["# display tasks", "ubuntu1604/checks"]

    def test_empty_request_warns(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["pairs", str(project_file)])
        assert r.exit_code == 0
        assert "Nothing to run" in r.output

    def test_alias(self, cli_runner, project_file, aliases_file):
        r = cli_runner.invoke(
            main, ["pairs", str(project_file), "--alias", "required", "--aliases", str(aliases_file)]
        )
        assert r.exit_code == 0, r.output
        assert "windows/compile" in r.output.splitlines()

    def test_alias_needs_file(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["pairs", str(project_file), "--alias", "required"])
        assert r.exit_code == 2
        assert "--aliases" in r.output

    def test_broken_alias_is_ignored(self, cli_runner, project_file, aliases_file):
        r = cli_runner.invoke(
            main,
            ["pairs", str(project_file), "-b", "windows", "-t", "lint", "--alias", "broken", "--aliases", str(aliases_file)],
        )
        assert r.exit_code == 0
        assert "windows/lint" in r.output

    def test_broken_alias_fails_when_strict(self, cli_runner, project_file, aliases_file):
        r = cli_runner.invoke(
            main,
            ["--strict-aliases", "pairs", str(project_file), "--alias", "broken", "--aliases", str(aliases_file)],
        )
        assert r.exit_code == 1
        assert "Error compiling regex" in r.output

    def test_table_output(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["pairs", str(project_file), "-b", "windows", "-t", "all", "--table"])
        assert r.exit_code == 0, r.output
        assert "Execution tasks" in r.output
        assert "Resolved 1 task pair(s) and 0 display pair(s)" in r.output

    def test_invalid_project(self, cli_runner, tmp_path):
        path = tmp_path / "bad.yml"
        write_text(path, "tasks: [{name: a}]\nbuildvariants:\n  - name: v\n    tasks: [ghost]\n")
        r = cli_runner.invoke(main, ["pairs", str(path), "-b", "all", "-t", "all"])
        assert r.exit_code == 1
        assert "ghost" in r.output

    def test_missing_project_file(self, cli_runner, tmp_path):
        r = cli_runner.invoke(main, ["pairs", str(tmp_path / "nope.yml")])
        assert r.exit_code == 2


# ── ids ────────────────────────────────────────────────────────────────


class TestIdsCommand:
    BASE = ["--revision", "abc123", "--version-id", "v1", "--created-at", "2024-01-02T03:04:05"]

    def test_full_table(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["ids", str(project_file), *self.BASE])
        assert r.exit_code == 0, r.output
        lines = r.output.splitlines()
        assert "ubuntu1604/compile\tproj_ubuntu1604_compile_abc123_24_01_02_03_04_05" in lines
        assert "legacy/compile\tproj_legacy_compile_abc123_24_01_02_03_04_05" in lines
        assert "# display tasks" in lines
        assert "ubuntu1604/checks\tproj_ubuntu1604_display_checks_abc123_24_01_02_03_04_05" in lines

    def test_patch_request(self, cli_runner, project_file):
        r = cli_runner.invoke(
            main,
            ["ids", str(project_file), *self.BASE, "--requester", "patch_request", "-b", "windows", "-t", "compile"],
        )
        assert r.exit_code == 0, r.output
        assert r.output.strip().splitlines() == [
            "windows/compile\tproj_windows_compile_patch_abc123_v1_24_01_02_03_04_05"
        ]

    def test_table_output(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["ids", str(project_file), *self.BASE, "--table"])
        assert r.exit_code == 0, r.output
        assert "Task ids for version v1 (requester gitter_request)" in r.output
        assert "Display task ids" in r.output

    def test_missing_revision(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["ids", str(project_file), "--version-id", "v1", "--created-at", "2024-01-02"])
        assert r.exit_code == 2


# ── variants-with-task ─────────────────────────────────────────────────


class TestVariantsWithTask:
    def test_group_member(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["variants-with-task", str(project_file), "tg_one"])
        assert r.exit_code == 0
        assert r.output.strip().splitlines() == ["ubuntu1604"]

    def test_sorted(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["variants-with-task", str(project_file), "compile"])
        assert r.output.strip().splitlines() == ["legacy", "ubuntu1604", "windows"]

    def test_unknown_task(self, cli_runner, project_file):
        r = cli_runner.invoke(main, ["variants-with-task", str(project_file), "nope"])
        assert r.exit_code == 1
        assert "No build variant carries task 'nope'." in r.output
