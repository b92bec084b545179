"""Exceptions raised by the setup wizard.

Every fatal condition derives from SetupError. A user declining a
decision point is not an error and raises SetupCancelled instead.
"""

from __future__ import annotations


class SetupError(Exception):
    """Base exception for fatal setup errors."""

    exit_code = 1


class CommandError(SetupError):
    """Raised when a required external command exits non-zero."""

    def __init__(self, command: list[str], returncode: int, output: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        message = f"Command failed with exit code {returncode}: {' '.join(command)}"
        if output.strip():
            message = f"{message}\n{output.strip()}"
        super().__init__(message)


class InstallError(CommandError):
    """Raised when the local `npm install` fails. Exits with npm's own code."""

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.returncode or 1


class ToolNotFoundError(CommandError):
    """Raised when an executable is not on PATH."""

    def __init__(self, command: list[str]) -> None:
        super().__init__(command, 127, f"{command[0]}: command not found")


class IdentifierNotFound(SetupError):
    """Raised when a new project was created but no script ID was recovered."""


class BindingError(SetupError):
    """Raised when .clasp.json exists but cannot be parsed."""


class SetupCancelled(Exception):  # noqa: N818
    """Raised when the user declines to continue. Exits with code 0."""

    def __init__(self, message: str = "Setup cancelled.") -> None:
        super().__init__(message)
        self.message = message
