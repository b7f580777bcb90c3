"""Git commands bound to a working tree.

Each method maps to one ``git <command>`` invocation in ``cwd``.
"""

from __future__ import annotations

from pathlib import Path

from scaffoldkit.clients.shell import CommandResult, CommandRunner, run_command


class Git:
    def __init__(self, cwd: str | Path, runner: CommandRunner = run_command) -> None:
        self.cwd = Path(cwd)
        self.runner = runner

    async def _git(self, command: str, *args: str) -> CommandResult:
        return await self.runner(["git", command, *args], cwd=self.cwd)

    async def init(self, *args: str) -> CommandResult:
        return await self._git("init", *args)

    async def add(self, *args: str) -> CommandResult:
        return await self._git("add", *args)

    async def commit(self, *args: str) -> CommandResult:
        return await self._git("commit", *args)

    async def branch(self, *args: str) -> CommandResult:
        return await self._git("branch", *args)

    async def checkout(self, *args: str) -> CommandResult:
        return await self._git("checkout", *args)

    async def remote(self, *args: str) -> CommandResult:
        return await self._git("remote", *args)

    async def push(self, *args: str) -> CommandResult:
        return await self._git("push", *args)
