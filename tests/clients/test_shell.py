"""Tests for subprocess execution and the git wrapper."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from scaffoldkit.clients.git import Git
from scaffoldkit.clients.shell import run_command
from scaffoldkit.errors import CommandError


class TestRunCommand:
    """Tests for run_command against real subprocesses."""

    def test_captures_stdout(self, tmp_path: Path):
        result = asyncio.run(
            run_command([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        )

        assert result.returncode == 0
        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_streams_stdin_from_file(self, tmp_path: Path):
        archive = tmp_path / "seed.archive"
        archive.write_text("seed data")

        result = asyncio.run(
            run_command(
                [sys.executable, "-c", "import sys; print(sys.stdin.read().upper())"],
                stdin_path=archive,
            )
        )

        assert result.stdout.strip() == "SEED DATA"

    def test_non_zero_exit_raises(self):
        with pytest.raises(CommandError) as exc_info:
            asyncio.run(
                run_command(
                    [sys.executable, "-c", "import sys; sys.stderr.write('bad ref'); sys.exit(3)"]
                )
            )

        assert exc_info.value.returncode == 3
        assert exc_info.value.stderr == "bad ref"
        assert exc_info.value.argv[0] == sys.executable


class TestGit:
    """Tests for Git command mapping."""

    def test_commands_run_in_work_tree(self, tmp_path: Path, recording_runner):
        runner = recording_runner
        git = Git(tmp_path, runner)

        async def scenario() -> None:
            await git.init()
            await git.commit("-m", "chore: initial commit")
            await git.push("--set-upstream", "origin", "main")

        asyncio.run(scenario())

        assert runner.argvs == [
            ["git", "init"],
            ["git", "commit", "-m", "chore: initial commit"],
            ["git", "push", "--set-upstream", "origin", "main"],
        ]
        assert {call["cwd"] for call in runner.calls} == {tmp_path}
