"""Command runner for external tools.

Defines the CommandRunner interface and implementations:
- SubprocessRunner: Production runner using subprocess.run
- Tests provide a scripted runner that records argv instead of executing
"""

from __future__ import annotations

import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from loguru import logger

from pubtracker_setup.errors import CommandError, ToolNotFoundError

if TYPE_CHECKING:
    from pathlib import Path


class OutputMode(StrEnum):
    """What happens to a child process's standard streams."""

    INHERIT = "inherit"  # User sees output and can answer prompts
    CAPTURE = "capture"  # stdout and stderr combined into CommandResult.output
    DISCARD = "discard"  # Only the exit code matters


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    args: tuple[str, ...]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(ABC):
    """Abstract base class for running external commands.

    Commands are argv lists; no shell is involved, so arguments are
    passed through verbatim.
    """

    @abstractmethod
    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        mode: OutputMode = OutputMode.INHERIT,
    ) -> CommandResult:
        """Run a command and wait for it to finish.

        Args:
            args: Program and arguments.
            cwd: Working directory for the child process.
            mode: How to wire the child's standard streams.

        Returns:
            CommandResult. A non-zero exit is not an exception here.

        Raises:
            ToolNotFoundError: If the program is not on PATH.
        """
        ...

    def check(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        mode: OutputMode = OutputMode.INHERIT,
    ) -> CommandResult:
        """Run a command and raise CommandError on a non-zero exit."""
        result = self.run(args, cwd=cwd, mode=mode)
        if not result.ok:
            raise CommandError(list(result.args), result.returncode, result.output)
        return result


class SubprocessRunner(CommandRunner):
    """Runs commands as child processes of the wizard."""

    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        mode: OutputMode = OutputMode.INHERIT,
    ) -> CommandResult:
        # Resolves npm.cmd / clasp.cmd shims on Windows
        executable = shutil.which(args[0]) or args[0]
        argv = [executable, *args[1:]]

        if mode == OutputMode.CAPTURE:
            stdout, stderr = subprocess.PIPE, subprocess.STDOUT
        elif mode == OutputMode.DISCARD:
            stdout, stderr = subprocess.DEVNULL, subprocess.DEVNULL
        else:
            stdout, stderr = None, None

        logger.debug("Running {} (cwd={}, mode={})", " ".join(args), cwd, mode)
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                stdout=stdout,
                stderr=stderr,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(list(args)) from e

        logger.debug("{} exited with {}", args[0], completed.returncode)
        return CommandResult(
            args=tuple(args),
            returncode=completed.returncode,
            output=completed.stdout or "",
        )
