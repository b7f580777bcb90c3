"""Async subprocess execution for local steps (git, docker, direnv)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from scaffoldkit.errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):
    def __call__(
        self,
        argv: Sequence[str],
        *,
        cwd: str | Path | None = None,
        stdin_path: str | Path | None = None,
    ) -> Awaitable[CommandResult]: ...


async def run_command(
    argv: Sequence[str],
    *,
    cwd: str | Path | None = None,
    stdin_path: str | Path | None = None,
) -> CommandResult:
    """Run a command and wait for it.

    Args:
        argv: Program and arguments.
        cwd: Working directory.
        stdin_path: File streamed to the command's stdin.

    Returns:
        CommandResult with decoded output.

    Raises:
        CommandError: If the command exits non-zero.
    """
    logger.debug(f"Running: {' '.join(argv)} (cwd={cwd})")

    stdin = open(stdin_path, "rb") if stdin_path is not None else asyncio.subprocess.DEVNULL
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            stdin=stdin,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
    finally:
        if stdin_path is not None:
            stdin.close()

    result = CommandResult(
        argv=tuple(argv),
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    if result.returncode != 0:
        raise CommandError(argv, returncode=result.returncode, stderr=result.stderr.strip())
    return result
